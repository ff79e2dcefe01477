"""
串口连接管理模块
================

管理串口的打开、关闭和切换，并保证每个串口对象最多只有一个读线程。
"""

import enum
import threading
from typing import Dict, List, Optional, Tuple

import serial
from serial.tools import list_ports

from ..config.constants import (
    DEFAULT_BAUDRATE,
    ERROR_QUEUE_SIZE,
    LINE_QUEUE_SIZE,
    STOP_TIMEOUT,
)
from ..config.settings import SerialConfig
from ..utils.logger import get_logger
from .channel import Channel
from .errors import DeviceFault, SerialConnectionError
from .line_framer import LineFramer
from .reader_task import ReaderTask, SerialLine

logger = get_logger(__name__)


class ReaderState(enum.Enum):
    """读线程状态"""

    IDLE = "idle"  # 没有读线程
    RUNNING = "running"  # 读线程运行中
    STOPPING = "stopping"  # 已请求停止，正在等待读线程退出


class ConnectionManager:
    """
    串口连接管理器

    所有状态变化（connect/disconnect/start_reading/停止读线程）都在同一个
    条件变量下串行执行。停止读线程时会暂时释放锁等待读线程退出，期间
    状态为 STOPPING：start_reading 把它当作 RUNNING 处理，connect 和
    disconnect 会等到 IDLE 之后再继续。

    读线程因设备故障自行退出后，下一次调用管理器（包括查询状态）时
    关闭串口并回到 IDLE，连接保持断开。
    """

    def __init__(
        self,
        line_queue_size: int = LINE_QUEUE_SIZE,
        stop_timeout: float = STOP_TIMEOUT,
        max_pending: Optional[int] = None,
    ):
        """
        初始化连接管理器

        Args:
            line_queue_size: 行通道容量
            stop_timeout: 等待读线程退出的超时(秒)，超时后关闭串口强制中断读取
            max_pending: 未完成行的最大字节数，None表示不限制
        """
        self.line_queue_size = line_queue_size
        self.stop_timeout = stop_timeout
        self.max_pending = max_pending

        self._cond = threading.Condition(threading.Lock())
        self._port: Optional[serial.Serial] = None
        self._config: Optional[SerialConfig] = None
        self._state = ReaderState.IDLE
        self._stop_event: Optional[threading.Event] = None
        self._done_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port_name(self) -> Optional[str]:
        """当前（或最后一次）连接的串口号"""
        with self._cond:
            return self._config.port if self._config else None

    @property
    def baudrate(self) -> int:
        """当前（或最后一次）连接的波特率"""
        with self._cond:
            return self._config.baudrate if self._config else DEFAULT_BAUDRATE

    @property
    def state(self) -> ReaderState:
        """读线程状态"""
        with self._cond:
            self._release_faulted_reader()
            return self._state

    @property
    def is_connected(self) -> bool:
        """是否持有串口对象（与读线程是否运行无关）"""
        with self._cond:
            self._release_faulted_reader()
            return self._port is not None

    @property
    def is_reading(self) -> bool:
        """读线程是否仍在运行（出错退出后为False）"""
        with self._cond:
            self._release_faulted_reader()
            return (
                self._state is not ReaderState.IDLE
                and self._done_event is not None
                and not self._done_event.is_set()
            )

    def connect(self, port_name: str, baudrate: int = DEFAULT_BAUDRATE) -> None:
        """
        打开串口（8N1，短读取超时）

        已有的读线程会先停止，已有的串口会先关闭。

        Args:
            port_name: 串口号
            baudrate: 波特率

        Raises:
            SerialConnectionError: 打开串口失败，管理器保持断开状态
        """
        with self._cond:
            self._stop_reader()
            self._close_port()

            try:
                config = SerialConfig(port=port_name, baudrate=baudrate)
                self._port = serial.Serial(**config.to_serial_kwargs())
            except (serial.SerialException, ValueError) as e:
                logger.error(f"打开串口失败: {e}")
                raise SerialConnectionError(port_name, baudrate, str(e)) from e

            self._config = config
            logger.info(f"成功打开串口 {port_name}，波特率 {baudrate}")

    def disconnect(self) -> None:
        """停止读线程并关闭串口；已断开时调用无副作用"""
        with self._cond:
            self._stop_reader()
            self._close_port()

    def start_reading(self) -> Tuple[Channel[SerialLine], Channel[DeviceFault]]:
        """
        启动读线程

        Returns:
            (行通道, 错误通道)。如果读线程已在运行（或正在停止），返回一对
            已关闭的空通道，不会启动第二个读线程。

        Raises:
            SerialConnectionError: 串口未打开
        """
        with self._cond:
            self._release_faulted_reader()
            if self._state is not ReaderState.IDLE:
                logger.warning("读线程已经在运行")
                return Channel.closed_channel(), Channel.closed_channel()

            if self._port is None:
                raise SerialConnectionError(
                    self._config.port if self._config else "",
                    self._config.baudrate if self._config else DEFAULT_BAUDRATE,
                    "串口未打开",
                )

            lines: Channel[SerialLine] = Channel(maxsize=self.line_queue_size)
            errors: Channel[DeviceFault] = Channel(maxsize=ERROR_QUEUE_SIZE)
            self._stop_event = threading.Event()
            self._done_event = threading.Event()

            task = ReaderTask(
                port=self._port,
                lines=lines,
                errors=errors,
                stop_event=self._stop_event,
                done_event=self._done_event,
                framer=LineFramer(max_pending=self.max_pending),
            )
            self._thread = threading.Thread(
                target=task.run, name="serial-reader", daemon=True
            )
            self._state = ReaderState.RUNNING
            self._thread.start()

            logger.info("读线程已启动")
            return lines, errors

    def _release_faulted_reader(self) -> None:
        """
        读线程未收到停止信号却已结束（设备故障），关闭串口并回到 IDLE，
        调用时必须持有锁
        """
        if (
            self._state is not ReaderState.RUNNING
            or not self._done_event.is_set()
            or self._stop_event.is_set()
        ):
            return

        logger.info("读线程因设备故障退出，关闭串口")
        self._thread = None
        self._state = ReaderState.IDLE
        self._close_port()
        self._cond.notify_all()

    def _stop_reader(self) -> None:
        """
        停止读线程并等待其退出，调用时必须持有锁

        等待期间释放锁，状态保持 STOPPING，直到读线程退出后才回到 IDLE。
        """
        # 其他调用者正在停止读线程，等它完成
        self._cond.wait_for(lambda: self._state is not ReaderState.STOPPING)

        if self._state is ReaderState.IDLE:
            return

        logger.info("正在停止读线程...")
        stop_event = self._stop_event
        done_event = self._done_event
        port = self._port
        self._state = ReaderState.STOPPING
        stop_event.set()

        self._cond.release()
        try:
            if not done_event.wait(self.stop_timeout):
                logger.warning(
                    f"读线程未在{self.stop_timeout}秒内结束，关闭串口以中断读取"
                )
                self._force_close(port)
                done_event.wait()
        finally:
            self._cond.acquire()

        self._thread = None
        self._state = ReaderState.IDLE
        self._cond.notify_all()
        logger.info("读线程已停止")

    @staticmethod
    def _force_close(port: Optional[serial.Serial]) -> None:
        """先取消进行中的读取，再关闭串口"""
        if port is None:
            return
        try:
            port.cancel_read()
            port.close()
        except (serial.SerialException, OSError) as e:
            logger.error(f"强制关闭串口失败: {e}")

    def _close_port(self) -> None:
        """关闭并清除串口对象，调用时必须持有锁"""
        if self._port is None:
            return
        try:
            self._port.close()
            logger.info(f"已关闭串口 {self._config.port if self._config else ''}")
        except (serial.SerialException, OSError) as e:
            logger.error(f"关闭串口失败: {e}")
        finally:
            self._port = None

    @staticmethod
    def list_available_ports() -> List[Dict[str, str]]:
        """
        获取系统可用的串口列表

        Returns:
            串口信息列表，每个元素包含device、description等字段；失败时为空
        """
        try:
            ports = []
            for port_info in list_ports.comports():
                ports.append({
                    'device': port_info.device,
                    'description': port_info.description or '未知设备',
                    'hwid': port_info.hwid or '未知硬件ID'
                })
            return ports
        except Exception as e:
            logger.error(f"获取串口列表失败: {e}")
            return []

    @staticmethod
    def available_ports() -> List[str]:
        """获取系统可用的串口号列表，失败时为空"""
        return [port['device'] for port in ConnectionManager.list_available_ports()]

    def __enter__(self):
        """支持with语句"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.disconnect()
