"""
Toast 通知

Errors and action outcomes reach the user as short toasts with a
human-readable message. There is no error taxonomy beyond the variant.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Toast:
    title: str
    description: Optional[str] = None
    variant: ToastVariant = ToastVariant.DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == ToastVariant.DESTRUCTIVE


class Notifier:
    """Collects toasts and forwards them to an optional sink (e.g. the CLI renderer)."""

    def __init__(
        self,
        sink: Optional[Callable[[Toast], None]] = None,
        history_size: int = 50,
    ) -> None:
        self._sink = sink
        self._history: Deque[Toast] = deque(maxlen=history_size)

    def toast(
        self,
        title: str,
        description: Optional[str] = None,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> Toast:
        item = Toast(title=title, description=description, variant=variant)
        self._history.append(item)
        if item.is_error:
            logger.warning("[Toast] %s: %s", title, description)
        else:
            logger.info("[Toast] %s: %s", title, description)
        if self._sink:
            self._sink(item)
        return item

    def info(self, title: str, description: Optional[str] = None) -> Toast:
        return self.toast(title, description)

    def error(self, title: str, description: Optional[str] = None) -> Toast:
        return self.toast(title, description, ToastVariant.DESTRUCTIVE)

    @property
    def history(self) -> List[Toast]:
        return list(self._history)

    @property
    def last(self) -> Optional[Toast]:
        return self._history[-1] if self._history else None
