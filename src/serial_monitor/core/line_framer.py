"""
行分帧模块
==========

将串口读到的字节流拼接成以换行符结尾的文本行。
"""

from typing import List, Optional

from ..config.constants import LINE_TERMINATOR, CARRIAGE_RETURN, DEFAULT_ENCODING
from ..utils.logger import get_logger

logger = get_logger(__name__)


def extract_lines(buffer: bytearray, chunk: bytes) -> List[bytes]:
    """
    把新数据追加到缓冲区，并取出其中所有完整的行

    行以 ``\\n`` 结尾，行尾的一个 ``\\r`` 会被去掉；没有结束符的剩余数据
    保留在缓冲区中，等待后续数据补全。

    Args:
        buffer: 累积缓冲区，会被原地修改
        chunk: 新读到的数据

    Returns:
        完整行列表（不含行结束符），可能为空

    Examples:
        >>> buf = bytearray()
        >>> extract_lines(buf, b"a\\r\\nb")
        [b'a']
        >>> bytes(buf)
        b'b'
    """
    buffer += chunk
    lines: List[bytes] = []

    while True:
        idx = buffer.find(LINE_TERMINATOR)
        if idx < 0:
            break

        line = bytes(buffer[:idx])
        if line.endswith(CARRIAGE_RETURN):
            line = line[:-1]
        del buffer[:idx + 1]
        lines.append(line)

    return lines


class LineFramer:
    """行分帧器，持有跨读取调用的未完成行"""

    def __init__(
        self,
        encoding: str = DEFAULT_ENCODING,
        max_pending: Optional[int] = None,
    ):
        """
        初始化行分帧器

        Args:
            encoding: 行文本编码，无法解码的字节以替换字符表示
            max_pending: 未完成行的最大字节数，None表示不限制；
                超出时整段丢弃未完成的数据
        """
        if max_pending is not None and max_pending <= 0:
            raise ValueError("max_pending必须大于0")

        self.encoding = encoding
        self.max_pending = max_pending
        self._buffer = bytearray()

        # 统计信息
        self.dropped_bytes = 0

    @property
    def pending(self) -> bytes:
        """缓冲区中尚未形成完整行的数据"""
        return bytes(self._buffer)

    def feed(self, chunk: bytes) -> List[str]:
        """
        输入新数据，返回其中所有完整的文本行

        Args:
            chunk: 新读到的数据

        Returns:
            完整文本行列表
        """
        raw_lines = extract_lines(self._buffer, chunk)

        if self.max_pending is not None and len(self._buffer) > self.max_pending:
            logger.warning(
                f"未完成行超过 {self.max_pending} 字节，丢弃 {len(self._buffer)} 字节"
            )
            self.dropped_bytes += len(self._buffer)
            self._buffer.clear()

        return [line.decode(self.encoding, errors="replace") for line in raw_lines]

    def reset(self) -> None:
        """丢弃未完成的数据（连接关闭时调用，不作为一行输出）"""
        if self._buffer:
            logger.debug(f"丢弃未完成的行数据 {len(self._buffer)} 字节")
        self._buffer.clear()
