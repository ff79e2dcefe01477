"""
行历史记录模块
==============

消费读线程的行通道，保留最近的若干行供显示和导出。
"""

import threading
from collections import deque
from typing import Callable, Deque, List, Optional

from ..config.constants import DISPLAY_TIMESTAMP_FORMAT, MAX_HISTORY_LINES
from ..utils.logger import get_logger
from .channel import Channel
from .errors import DeviceFault
from .reader_task import SerialLine

logger = get_logger(__name__)


def format_line(line: SerialLine, show_timestamp: bool = False) -> str:
    """
    格式化一行用于显示

    Args:
        line: 串口行
        show_timestamp: 是否在行首显示 [HH:MM:SS.mmm]

    Returns:
        显示文本
    """
    if show_timestamp:
        stamp = line.timestamp.strftime(DISPLAY_TIMESTAMP_FORMAT)[:-3]
        return f"[{stamp}] {line.data}"
    return line.data


class LineHistory:
    """有界行历史，超出容量时丢弃最早的行"""

    def __init__(self, max_lines: int = MAX_HISTORY_LINES):
        if max_lines <= 0:
            raise ValueError("max_lines必须大于0")
        self.max_lines = max_lines
        self._lines: Deque[SerialLine] = deque(maxlen=max_lines)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def append(self, line: SerialLine) -> None:
        with self._lock:
            self._lines.append(line)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def snapshot(self) -> List[SerialLine]:
        """返回当前历史的副本（导出时使用，不受后续追加影响）"""
        with self._lock:
            return list(self._lines)

    def consume(
        self,
        lines: Channel[SerialLine],
        errors: Channel[DeviceFault],
        on_line: Optional[Callable[[SerialLine], None]] = None,
        on_error: Optional[Callable[[DeviceFault], None]] = None,
    ) -> Optional[DeviceFault]:
        """
        按顺序消费行通道直到其关闭，然后检查错误通道

        Args:
            lines: 行通道
            errors: 错误通道
            on_line: 每收到一行时的回调
            on_error: 读线程因设备故障退出时的回调

        Returns:
            设备故障；正常停止时返回None
        """
        for line in lines:
            self.append(line)
            if on_line is not None:
                on_line(line)

        fault = errors.try_receive()
        if fault is None:
            logger.debug("行通道已关闭（正常停止）")
            return None

        logger.error(f"读线程因设备故障退出: {fault}")
        if on_error is not None:
            on_error(fault)
        return fault

    def start_consumer(
        self,
        lines: Channel[SerialLine],
        errors: Channel[DeviceFault],
        on_line: Optional[Callable[[SerialLine], None]] = None,
        on_error: Optional[Callable[[DeviceFault], None]] = None,
    ) -> threading.Thread:
        """在后台线程中运行 consume，返回已启动的线程"""
        thread = threading.Thread(
            target=self.consume,
            args=(lines, errors, on_line, on_error),
            name="serial-consumer",
            daemon=True,
        )
        thread.start()
        return thread
