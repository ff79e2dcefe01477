"""
核心模块
========

包含行分帧、读线程、串口连接管理和行历史等核心功能。
"""

from .channel import Channel, ChannelClosed
from .connection_manager import ConnectionManager, ReaderState
from .errors import (
    MonitorError,
    SerialConnectionError,
    DeviceFault,
    ExportIOError,
    HeaderParseError,
    TemplateStoreError,
)
from .line_framer import LineFramer, extract_lines
from .line_history import LineHistory, format_line
from .reader_task import ReaderTask, SerialLine

__all__ = [
    "Channel",
    "ChannelClosed",
    "ConnectionManager",
    "ReaderState",
    "MonitorError",
    "SerialConnectionError",
    "DeviceFault",
    "ExportIOError",
    "HeaderParseError",
    "TemplateStoreError",
    "LineFramer",
    "extract_lines",
    "LineHistory",
    "format_line",
    "ReaderTask",
    "SerialLine",
]
