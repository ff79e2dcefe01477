"""
读线程模块
==========

后台读取串口数据，分帧成带时间戳的文本行后投递到通道。
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import serial

from ..config.constants import READ_CHUNK_SIZE, SEND_POLL_INTERVAL
from ..utils.logger import get_logger
from .channel import Channel
from .errors import DeviceFault
from .line_framer import LineFramer

logger = get_logger(__name__)


@dataclass(frozen=True)
class SerialLine:
    """从串口接收到的一行数据"""

    timestamp: datetime
    data: str


class ReaderTask:
    """
    读线程任务

    在整个生命周期内借用串口对象进行读取，但从不关闭串口。
    每次循环先检查停止信号，再做一次带超时的读取；每行发送前都会
    再检查停止信号，通道满时不会无限阻塞停止流程。
    退出时（无论原因）关闭行通道和错误通道，并设置完成信号。
    """

    def __init__(
        self,
        port: serial.Serial,
        lines: Channel[SerialLine],
        errors: Channel[DeviceFault],
        stop_event: threading.Event,
        done_event: threading.Event,
        framer: Optional[LineFramer] = None,
        chunk_size: int = READ_CHUNK_SIZE,
        poll_interval: float = SEND_POLL_INTERVAL,
    ):
        """
        初始化读线程任务

        Args:
            port: 已打开的串口对象（借用，不负责关闭）
            lines: 行数据输出通道
            errors: 单槽错误通道
            stop_event: 停止信号
            done_event: 完成信号，退出时设置
            framer: 行分帧器，None时使用默认配置
            chunk_size: 单次读取最大字节数
            poll_interval: 通道满时检查停止信号的间隔(秒)
        """
        self.port = port
        self.lines = lines
        self.errors = errors
        self.stop_event = stop_event
        self.done_event = done_event
        self.framer = framer or LineFramer()
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval

        # 统计信息
        self.lines_emitted = 0
        self.bytes_read = 0

    def run(self) -> None:
        """读线程主循环"""
        logger.debug("读线程开始运行")
        try:
            self._read_loop()
        finally:
            self.framer.reset()
            self.lines.close()
            self.errors.close()
            self.done_event.set()
            logger.debug(
                f"读线程已结束，共读取 {self.bytes_read} 字节，{self.lines_emitted} 行"
            )

    def _read_loop(self) -> None:
        while not self.stop_event.is_set():
            try:
                data = self._read_chunk()
            except (serial.SerialException, OSError) as e:
                if self.stop_event.is_set():
                    # 串口被所有者关闭引起的错误，属于正常停止
                    logger.debug(f"停止过程中读取中断: {e}")
                    return

                fault = DeviceFault(f"串口读取失败: {e}")
                fault.__cause__ = e
                logger.error(str(fault))
                self.errors.send(fault)
                return
            except TypeError as e:
                # POSIX 下串口被强制关闭后 pyserial 以 fd=None 调用 ioctl/select
                if not self.stop_event.is_set():
                    raise
                logger.debug(f"停止过程中串口已被关闭: {e}")
                return

            if not data:
                continue  # 超时且无数据

            self.bytes_read += len(data)
            for text in self.framer.feed(data):
                line = SerialLine(timestamp=datetime.now(), data=text)
                if not self.lines.send(
                    line, cancel=self.stop_event, poll_interval=self.poll_interval
                ):
                    return
                self.lines_emitted += 1

    def _read_chunk(self) -> bytes:
        """
        读取一块数据：至少等待1字节（受串口超时限制），有积压时一次读完

        Returns:
            读取到的数据，超时返回空bytes
        """
        waiting = self.port.in_waiting
        return self.port.read(max(1, min(waiting, self.chunk_size)))
