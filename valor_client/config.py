"""
配置管理模块
"""
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# 加载环境变量
load_dotenv()


class Settings(BaseModel):
    """客户端配置"""

    # API 配置
    api_base_url: str = os.getenv("VALOR_API_BASE_URL", "http://localhost:5000")
    request_timeout_seconds: float = float(os.getenv("VALOR_REQUEST_TIMEOUT_SECONDS", "10"))

    # 轮询间隔（秒）
    combat_poll_seconds: float = float(os.getenv("VALOR_COMBAT_POLL_SECONDS", "3"))
    auction_poll_seconds: float = float(os.getenv("VALOR_AUCTION_POLL_SECONDS", "10"))
    world_time_poll_seconds: float = float(os.getenv("VALOR_WORLD_TIME_POLL_SECONDS", "15"))
    energy_poll_seconds: float = float(os.getenv("VALOR_ENERGY_POLL_SECONDS", "30"))

    # 战斗视觉效果时长（秒）
    floating_number_ttl_seconds: float = 1.2
    shake_seconds: float = 0.5
    crit_flash_seconds: float = 0.3
    hit_spark_seconds: float = 0.4
    finish_reveal_delay_seconds: float = 0.8
    combat_end_delay_seconds: float = 4.0

    # 天气效果
    lightning_check_seconds: float = 4.0
    lightning_chance: float = 0.3
    lightning_flash_seconds: float = 0.15

    # 黑市倒计时刷新间隔
    black_market_tick_seconds: float = 1.0

    # NPC 塔自动战斗
    auto_fight_delay_seconds: float = float(os.getenv("VALOR_AUTO_FIGHT_DELAY_SECONDS", "0.3"))
    auto_fight_default_count: int = int(os.getenv("VALOR_AUTO_FIGHT_DEFAULT_COUNT", "10"))

    # 日志
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = os.getenv(
        "VALOR_LOG_LEVEL", "INFO"
    ).upper()

    model_config = ConfigDict(case_sensitive=False)


# 全局配置实例
settings = Settings()


def validate_config() -> bool:
    """
    验证配置是否完整

    Returns:
        bool: 配置是否有效
    """
    if not settings.api_base_url:
        print("警告: 未设置 VALOR_API_BASE_URL")
        return False

    if not settings.api_base_url.startswith(("http://", "https://")):
        print(f"警告: API 地址格式无效: {settings.api_base_url}")
        return False

    if settings.combat_poll_seconds <= 0:
        print("警告: VALOR_COMBAT_POLL_SECONDS 必须大于 0")
        return False

    return True
