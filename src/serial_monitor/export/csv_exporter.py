"""
CSV导出模块
===========

将行历史快照按时间范围过滤后写入CSV文件。

数据字段按逗号直接拆分（不识别引号），包含逗号的字段无法原样保留。
"""

import csv
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from ..config.constants import (
    DATA_HEADER,
    EXPORT_TIMESTAMP_FORMAT,
    TIMESTAMP_HEADER,
)
from ..core.errors import ExportIOError, HeaderParseError
from ..core.reader_task import SerialLine
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ExportOptions:
    """CSV导出选项"""

    file_path: Union[str, Path]  # 目标文件
    include_timestamps: bool = False  # 是否在每行前加时间戳字段
    filter_by_time: bool = False  # 是否按时间范围过滤
    start_time: datetime = datetime.min  # 起始时间(含)
    end_time: datetime = datetime.max  # 结束时间(含)
    custom_header: Optional[List[str]] = None  # 自定义表头，优先于默认表头


def resolve_header(options: ExportOptions) -> List[str]:
    """
    确定表头：自定义表头 > Timestamp,Data > Data

    自定义表头原样写出，与 include_timestamps 无关。
    """
    if options.custom_header:
        return list(options.custom_header)
    if options.include_timestamps:
        return list(TIMESTAMP_HEADER)
    return list(DATA_HEADER)


def in_time_range(line: SerialLine, options: ExportOptions) -> bool:
    """判断行是否在导出的时间范围内（两端都包含）"""
    if not options.filter_by_time:
        return True
    return options.start_time <= line.timestamp <= options.end_time


def format_timestamp(timestamp: datetime) -> str:
    """格式化为毫秒精度的本地时间"""
    return timestamp.strftime(EXPORT_TIMESTAMP_FORMAT)[:-3]


def format_record(line: SerialLine, include_timestamps: bool) -> List[str]:
    """
    把一行数据拆分成CSV记录

    Args:
        line: 串口行
        include_timestamps: 是否在最前面加时间戳字段

    Returns:
        字段列表
    """
    fields = line.data.split(",")
    if include_timestamps:
        return [format_timestamp(line.timestamp)] + fields
    return fields


def export_csv(lines: Iterable[SerialLine], options: ExportOptions) -> int:
    """
    导出CSV文件

    失败时不会删除已写入的部分文件。

    Args:
        lines: 按时间顺序排列的行快照
        options: 导出选项

    Returns:
        写入的数据行数（不含表头）

    Raises:
        ExportIOError: 文件创建、写入或刷新失败
    """
    path = Path(options.file_path)
    written = 0

    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(resolve_header(options))

            for line in lines:
                if not in_time_range(line, options):
                    continue
                writer.writerow(format_record(line, options.include_timestamps))
                written += 1

            f.flush()
    except OSError as e:
        logger.error(f"导出CSV失败: {e}")
        raise ExportIOError(f"导出CSV失败 {path}: {e}") from e

    logger.info(f"已导出 {written} 行到 {path}")
    return written


def parse_custom_header(file_path: Union[str, Path]) -> List[str]:
    """
    读取只包含一行CSV的表头文件

    Args:
        file_path: 表头文件路径

    Returns:
        表头字段（第一条记录，原样使用）

    Raises:
        HeaderParseError: 文件无法读取或不包含任何记录
    """
    path = Path(file_path)
    try:
        with open(path, "r", newline="", encoding="utf-8-sig") as f:
            # 空行不算记录
            record: Optional[Sequence[str]] = next(
                (row for row in csv.reader(f) if row), None
            )
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise HeaderParseError(f"读取表头文件失败 {path}: {e}") from e

    if not record:
        raise HeaderParseError(f"表头文件为空: {path}")

    return list(record)
