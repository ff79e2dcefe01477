"""
路径处理工具模块
================

提供跨平台的用户配置目录定位。
"""

import os
import sys
from pathlib import Path
from typing import Optional


def user_config_dir(app_name: str, create: bool = True) -> Path:
    """
    获取应用的用户配置目录

    - Windows: %APPDATA%/<app_name>
    - macOS: ~/Library/Application Support/<app_name>
    - 其他: $XDG_CONFIG_HOME/<app_name>，未设置时为 ~/.config/<app_name>

    Args:
        app_name: 应用目录名
        create: 目录不存在时是否创建

    Returns:
        配置目录路径

    Raises:
        OSError: 无法确定或创建配置目录
    """
    base: Optional[str]
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA")
        if not base:
            raise OSError("未设置 APPDATA 环境变量")
    elif sys.platform == "darwin":
        base = str(Path.home() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")

    config_dir = Path(base) / app_name
    if create:
        config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir
