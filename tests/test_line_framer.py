"""
行分帧测试
==========

测试字节流拼接成文本行的逻辑。
"""

import pytest

from serial_monitor.core.line_framer import LineFramer, extract_lines


class TestExtractLines:
    """测试 extract_lines 函数"""

    def test_crlf_line(self):
        """CRLF结尾的行去掉\\r\\n，缓冲区清空"""
        buffer = bytearray()
        lines = extract_lines(buffer, b"data\r\n")

        assert lines == [b"data"]
        assert buffer == bytearray()

    def test_lf_line(self):
        """只有\\n结尾的行"""
        buffer = bytearray()
        assert extract_lines(buffer, b"hello\n") == [b"hello"]
        assert len(buffer) == 0

    def test_no_terminator_keeps_bytes(self):
        """没有结束符时不输出任何行，保留全部数据"""
        buffer = bytearray()
        lines = extract_lines(buffer, b"partial data")

        assert lines == []
        assert bytes(buffer) == b"partial data"

    def test_multiple_lines_in_one_chunk(self):
        """一次读取包含多行"""
        buffer = bytearray()
        lines = extract_lines(buffer, b"a,1\r\nb,2\nc")

        assert lines == [b"a,1", b"b,2"]
        assert bytes(buffer) == b"c"

    def test_line_split_across_chunks(self):
        """一行分多次到达"""
        buffer = bytearray()
        assert extract_lines(buffer, b"tem") == []
        assert extract_lines(buffer, b"p=21.5\r") == []
        assert extract_lines(buffer, b"\n") == [b"temp=21.5"]
        assert len(buffer) == 0

    def test_empty_lines(self):
        """空行也作为一行输出"""
        buffer = bytearray()
        assert extract_lines(buffer, b"\r\n\n") == [b"", b""]

    def test_only_one_trailing_cr_removed(self):
        """只去掉一个行尾\\r，行中间的\\r保留"""
        buffer = bytearray()
        assert extract_lines(buffer, b"a\rb\r\r\n") == [b"a\rb\r"]


class TestLineFramer:
    """测试 LineFramer 类"""

    def test_feed_decodes_lines(self):
        framer = LineFramer()
        assert framer.feed(b"\xe6\xb8\xa9\xe5\xba\xa6,21\r\n") == ["温度,21"]

    def test_invalid_bytes_replaced(self):
        """无法解码的字节用替换字符表示，不抛异常"""
        framer = LineFramer()
        assert framer.feed(b"\xff\xfeok\n") == ["\ufffd\ufffdok"]

    def test_pending_and_reset(self):
        """reset 丢弃未完成的行，不输出"""
        framer = LineFramer()
        framer.feed(b"line1\nhalf")
        assert framer.pending == b"half"

        framer.reset()
        assert framer.pending == b""
        assert framer.feed(b"\n") == [""]

    def test_unbounded_by_default(self):
        """默认不限制未完成行长度"""
        framer = LineFramer()
        framer.feed(b"x" * 100000)
        assert len(framer.pending) == 100000
        assert framer.dropped_bytes == 0

    def test_max_pending_discards_overflow(self):
        """设置上限后，超出的未完成数据整段丢弃"""
        framer = LineFramer(max_pending=8)

        assert framer.feed(b"ok\n0123456789") == ["ok"]
        assert framer.pending == b""
        assert framer.dropped_bytes == 10

        # 丢弃后继续正常分帧
        assert framer.feed(b"next\n") == ["next"]

    def test_invalid_max_pending(self):
        with pytest.raises(ValueError):
            LineFramer(max_pending=0)


if __name__ == "__main__":
    pytest.main([__file__])
