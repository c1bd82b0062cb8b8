"""Combat feedback package."""

from .effects import EffectDispatcher
from .reconciler import DeltaReconciler, ReconcilerPhase, diff_snapshots, is_crit_line
from .session import CombatSession
from .submitter import ActionSubmitter

__all__ = [
    "ActionSubmitter",
    "CombatSession",
    "DeltaReconciler",
    "EffectDispatcher",
    "ReconcilerPhase",
    "diff_snapshots",
    "is_crit_line",
]
