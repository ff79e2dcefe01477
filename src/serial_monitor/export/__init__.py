"""
导出模块
========

包含CSV导出、导出选项构建和表头模板存储。
"""

from .csv_exporter import ExportOptions, export_csv, parse_custom_header
from .options import HeaderSource, build_export_options, parse_clock_time
from .templates import TemplateStore

__all__ = [
    "ExportOptions",
    "export_csv",
    "parse_custom_header",
    "HeaderSource",
    "build_export_options",
    "parse_clock_time",
    "TemplateStore",
]
