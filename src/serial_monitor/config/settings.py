"""
配置管理
========

提供串口连接配置类。
"""

from dataclasses import dataclass
import serial

from .constants import DEFAULT_BAUDRATE, DEFAULT_TIMEOUT


@dataclass
class SerialConfig:
    """串口配置类，帧格式固定为 8N1，只有端口和波特率可变"""

    port: str  # 串口号
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    bytesize: int = serial.EIGHTBITS  # 数据位
    parity: str = serial.PARITY_NONE  # 校验位
    stopbits: float = serial.STOPBITS_ONE  # 停止位
    timeout: float = DEFAULT_TIMEOUT  # 读取超时时间

    def __post_init__(self):
        """参数验证"""
        if not self.port:
            raise ValueError("port不能为空")
        if self.baudrate <= 0:
            raise ValueError("baudrate必须大于0")
        if self.timeout <= 0:
            raise ValueError("timeout必须大于0")

    def to_serial_kwargs(self) -> dict:
        """转换为serial.Serial的参数字典"""
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "timeout": self.timeout,
        }
