"""
配置模块
=======

包含系统常量定义和配置管理功能。
"""

from .constants import *
from .settings import *

__all__ = [
    # 常量
    "DEFAULT_BAUDRATE",
    "DEFAULT_TIMEOUT",
    "STANDARD_BAUDRATES",
    "LINE_QUEUE_SIZE",
    "MAX_HISTORY_LINES",
    # 配置
    "SerialConfig",
]
