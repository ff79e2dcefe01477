"""
通道模块
========

有界、可关闭的线程安全队列，用于读线程向调用方投递行数据和错误。
"""

import queue
import threading
from collections import deque
from typing import Deque, Generic, Iterator, Optional, TypeVar

from ..config.constants import SEND_POLL_INTERVAL

_T = TypeVar("_T")


class ChannelClosed(Exception):
    """通道已关闭且数据已取完"""


class Channel(Generic[_T]):
    """
    有界可关闭通道

    - send 在通道满时阻塞，直到有空位、通道关闭或取消信号被设置
    - receive 在通道关闭且数据取完后抛出 ChannelClosed
    - 迭代通道会按发送顺序取出所有数据，直到通道关闭
    """

    def __init__(self, maxsize: int = 0):
        """
        初始化通道

        Args:
            maxsize: 通道容量，0表示不限制
        """
        self.maxsize = maxsize
        self._items: Deque[_T] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @classmethod
    def closed_channel(cls) -> "Channel[_T]":
        """创建一个已关闭的空通道"""
        channel: Channel[_T] = cls()
        channel.close()
        return channel

    @property
    def closed(self) -> bool:
        """通道是否已关闭"""
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def _full(self) -> bool:
        return 0 < self.maxsize <= len(self._items)

    def send(
        self,
        item: _T,
        cancel: Optional[threading.Event] = None,
        poll_interval: float = SEND_POLL_INTERVAL,
    ) -> bool:
        """
        发送数据

        Args:
            item: 要发送的数据
            cancel: 取消信号，发送前检查一次，通道满时每隔 poll_interval 再检查
            poll_interval: 检查取消信号的间隔(秒)

        Returns:
            发送成功返回True；被取消或通道已关闭返回False
        """
        with self._cond:
            while not self._closed and self._full():
                if cancel is not None and cancel.is_set():
                    return False
                self._cond.wait(poll_interval if cancel is not None else None)

            if self._closed or (cancel is not None and cancel.is_set()):
                return False

            self._items.append(item)
            self._cond.notify_all()
            return True

    def receive(self, timeout: Optional[float] = None) -> _T:
        """
        接收数据

        Args:
            timeout: 超时时间(秒)，None表示阻塞等待

        Returns:
            最早发送的数据

        Raises:
            queue.Empty: 超时且没有数据
            ChannelClosed: 通道已关闭且没有剩余数据
        """
        with self._cond:
            if not self._cond.wait_for(
                lambda: self._items or self._closed, timeout=timeout
            ):
                raise queue.Empty

            if not self._items:
                raise ChannelClosed

            item = self._items.popleft()
            self._cond.notify_all()
            return item

    def try_receive(self) -> Optional[_T]:
        """非阻塞接收，没有数据时返回None"""
        try:
            return self.receive(timeout=0)
        except (queue.Empty, ChannelClosed):
            return None

    def close(self) -> None:
        """关闭通道，已发送的数据仍可被取出；重复关闭无副作用"""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[_T]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return
