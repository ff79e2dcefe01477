"""
串口监视工具
============

持续读取串口字节流，按行拆分并记录时间戳，可把历史数据导出为CSV。

主要功能：
- 串口连接管理（同一时刻最多一个读线程）
- 后台读取与行分帧
- 按时间范围过滤的CSV导出
- 自定义表头与表头模板
"""

__version__ = "1.0.0"
__description__ = "串口行数据监视与CSV导出工具"

# 导出主要类
from .core.connection_manager import ConnectionManager
from .core.line_history import LineHistory
from .core.reader_task import SerialLine
from .export.csv_exporter import ExportOptions, export_csv

__all__ = [
    "ConnectionManager",
    "LineHistory",
    "SerialLine",
    "ExportOptions",
    "export_csv",
]
