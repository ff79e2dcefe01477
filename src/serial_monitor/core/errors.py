"""
异常定义
========

串口监视器的错误分类。
"""


class MonitorError(Exception):
    """串口监视器异常基类"""


class SerialConnectionError(MonitorError):
    """打开串口失败，需要用户更换设置后重试"""

    def __init__(self, port: str, baudrate: int, reason: str):
        super().__init__(f"无法打开串口 {port} (波特率 {baudrate}): {reason}")
        self.port = port
        self.baudrate = baudrate


class DeviceFault(MonitorError):
    """连接期间读取串口失败（非停止引起），当前连接不可再用"""


class ExportIOError(MonitorError):
    """CSV文件创建、写入或刷新失败"""


class HeaderParseError(MonitorError):
    """自定义表头来源缺失或格式错误，导出在写入前中止"""


class TemplateStoreError(MonitorError):
    """表头模板文件读取或保存失败"""
