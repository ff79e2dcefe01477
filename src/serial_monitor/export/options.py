"""
导出选项构建
============

把用户输入的时间范围文本和表头来源转换为 ExportOptions。
"""

import enum
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from ..config.constants import CLOCK_TIME_FORMAT
from .csv_exporter import ExportOptions, parse_custom_header


class HeaderSource(enum.Enum):
    """表头来源"""

    NONE = "none"  # 使用默认表头
    TEMPLATE = "template"  # 已保存的模板
    PASTE = "paste"  # 粘贴的文本
    FILE = "file"  # 只有一行CSV的表头文件


def parse_clock_time(text: str, now: datetime) -> datetime:
    """
    把 HH:MM:SS 解析为当天的时间

    Args:
        text: 时间文本
        now: 当前时间，提供日期部分

    Returns:
        当天对应时刻

    Raises:
        ValueError: 格式不是 HH:MM:SS
    """
    try:
        clock = datetime.strptime(text.strip(), CLOCK_TIME_FORMAT)
    except ValueError as e:
        raise ValueError(f"时间格式无效（应为 HH:MM:SS）: {text}") from e

    return now.replace(
        hour=clock.hour, minute=clock.minute, second=clock.second, microsecond=0
    )


def resolve_custom_header(
    source: HeaderSource, value: Optional[str] = None
) -> Optional[List[str]]:
    """
    按表头来源得到自定义表头

    Args:
        source: 表头来源
        value: 模板文本、粘贴文本或表头文件路径

    Returns:
        表头字段；未选择任何内容时返回None

    Raises:
        HeaderParseError: 表头文件无法读取或为空
    """
    if source is HeaderSource.NONE or not value:
        return None

    if source is HeaderSource.TEMPLATE:
        return value.split(",")

    if source is HeaderSource.PASTE:
        text = value.strip()
        if not text:
            return None
        return [field.strip() for field in text.split(",")]

    return parse_custom_header(value)


def build_export_options(
    file_path: Union[str, Path],
    include_timestamps: bool = False,
    filter_by_time: bool = False,
    start_text: str = "",
    end_text: str = "",
    header_source: HeaderSource = HeaderSource.NONE,
    header_value: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ExportOptions:
    """
    构建导出选项

    未填写开始时间时不限制下界；未填写结束时间时以构建时刻为结束时间。

    Raises:
        ValueError: 时间格式无效
        HeaderParseError: 表头文件无法读取或为空
    """
    options = ExportOptions(
        file_path=file_path,
        include_timestamps=include_timestamps,
        filter_by_time=filter_by_time,
    )

    if filter_by_time:
        now = now or datetime.now()
        if start_text.strip():
            options.start_time = parse_clock_time(start_text, now)
        if end_text.strip():
            options.end_time = parse_clock_time(end_text, now)
        else:
            options.end_time = now

    options.custom_header = resolve_custom_header(header_source, header_value)
    return options
