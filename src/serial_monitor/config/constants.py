"""
系统常量定义
============

定义串口监视、行分帧和CSV导出使用的各种常量。
"""

from typing import Final, Tuple

# 串口配置默认值
DEFAULT_BAUDRATE: Final[int] = 9600  # 默认波特率
DEFAULT_TIMEOUT: Final[float] = 0.1  # 单次读取超时时间(秒)
READ_CHUNK_SIZE: Final[int] = 1024  # 单次读取最大字节数

# 常用波特率列表
STANDARD_BAUDRATES: Final[Tuple[int, ...]] = (
    300, 1200, 2400, 4800, 9600, 19200,
    38400, 57600, 74880, 115200, 230400,
    250000, 500000, 1000000, 2000000,
)

# 行分帧
LINE_TERMINATOR: Final[bytes] = b"\n"  # 行结束符
CARRIAGE_RETURN: Final[bytes] = b"\r"  # 行尾可选的回车符
DEFAULT_ENCODING: Final[str] = "utf-8"  # 行文本编码

# 读线程与通道
LINE_QUEUE_SIZE: Final[int] = 256  # 行通道容量
ERROR_QUEUE_SIZE: Final[int] = 1  # 错误通道容量(单槽)
SEND_POLL_INTERVAL: Final[float] = 0.05  # 通道满时检查停止信号的间隔(秒)
STOP_TIMEOUT: Final[float] = 2.0  # 等待读线程退出的超时，超时后强制关闭串口(秒)

# 历史记录
MAX_HISTORY_LINES: Final[int] = 10000  # 最多保留的行数

# 时间格式
EXPORT_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S.%f"  # 导出时截断到毫秒
DISPLAY_TIMESTAMP_FORMAT: Final[str] = "%H:%M:%S.%f"  # 显示时截断到毫秒
CLOCK_TIME_FORMAT: Final[str] = "%H:%M:%S"  # 时间范围输入格式

# CSV默认表头
TIMESTAMP_HEADER: Final[Tuple[str, ...]] = ("Timestamp", "Data")
DATA_HEADER: Final[Tuple[str, ...]] = ("Data",)
DEFAULT_EXPORT_FILENAME: Final[str] = "serial_data.csv"

# 模板存储
APP_CONFIG_DIR_NAME: Final[str] = "serial-monitor"  # 用户配置目录下的应用目录
TEMPLATES_FILE_NAME: Final[str] = "templates.json"  # 表头模板文件
