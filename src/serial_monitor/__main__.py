#!/usr/bin/env python3
"""
串口监视工具 - 模块CLI入口
==========================

支持通过 python -m serial_monitor 调用
"""

import sys
import argparse
import logging
from pathlib import Path

from . import __version__
from .cli.monitor import ExportRequest, MonitorCLI
from .config.constants import DEFAULT_BAUDRATE, DEFAULT_EXPORT_FILENAME, MAX_HISTORY_LINES
from .core.errors import TemplateStoreError
from .export.options import HeaderSource
from .export.templates import TemplateStore
from .utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

PROGRAM_NAME = "串口监视工具"


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="serial-monitor",
        description=f"{PROGRAM_NAME} v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例：
  # 列出可用串口
  python -m serial_monitor ports

  # 监视串口，Ctrl+C 停止后导出带时间戳的CSV
  python -m serial_monitor monitor --port COM3 --baudrate 115200 --export data.csv --export-timestamps

  # 只导出 10:00:00 之后的数据，使用已保存的第1个表头模板
  python -m serial_monitor monitor --port /dev/ttyUSB0 --export data.csv --start 10:00:00 --header-template 1

  # 保存表头模板
  python -m serial_monitor templates add "Time,Temp,Humidity"
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"{PROGRAM_NAME} v{__version__}"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="日志级别（默认WARNING）",
    )
    parser.add_argument("--log-file", help="日志文件路径")

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    # 列出串口
    subparsers.add_parser("ports", help="列出可用串口")

    # 监视串口
    monitor_parser = subparsers.add_parser("monitor", help="监视串口并可导出CSV")
    monitor_parser.add_argument("--port", required=True, help="串口号（如 COM3, /dev/ttyUSB0）")
    monitor_parser.add_argument(
        "--baudrate", type=int, default=DEFAULT_BAUDRATE, help=f"波特率（默认{DEFAULT_BAUDRATE}）"
    )
    monitor_parser.add_argument("--timestamps", action="store_true", help="显示时显示时间戳")
    monitor_parser.add_argument(
        "--max-lines", type=int, default=MAX_HISTORY_LINES, help=f"保留的最大行数（默认{MAX_HISTORY_LINES}）"
    )

    export_group = monitor_parser.add_argument_group("CSV导出")
    export_group.add_argument(
        "--export", nargs="?", const=DEFAULT_EXPORT_FILENAME, metavar="FILE",
        help=f"停止后导出到CSV文件（省略文件名时为 {DEFAULT_EXPORT_FILENAME}）",
    )
    export_group.add_argument("--export-timestamps", action="store_true", help="导出时包含时间戳字段")
    export_group.add_argument("--start", default="", metavar="HH:MM:SS", help="导出起始时间（含）")
    export_group.add_argument("--end", default="", metavar="HH:MM:SS", help="导出结束时间（含），默认导出时刻")

    header_group = export_group.add_mutually_exclusive_group()
    header_group.add_argument("--header-template", metavar="N|TEXT", help="已保存模板的序号或原文")
    header_group.add_argument("--header-text", metavar="TEXT", help="逗号分隔的表头")
    header_group.add_argument("--header-file", metavar="FILE", help="只包含一行CSV的表头文件")

    # 表头模板
    templates_parser = subparsers.add_parser("templates", help="管理CSV表头模板")
    templates_sub = templates_parser.add_subparsers(dest="action", help="模板操作")
    templates_sub.add_parser("list", help="列出模板")
    add_parser = templates_sub.add_parser("add", help="保存模板")
    add_parser.add_argument("text", help="逗号分隔的表头，如 Time,Temp,Humidity")
    delete_parser = templates_sub.add_parser("delete", help="删除模板")
    delete_parser.add_argument("selector", help="模板序号或原文")

    return parser


def build_export_request(args, store: TemplateStore):
    """根据命令行参数构建导出请求，未指定 --export 时返回None"""
    if not args.export:
        return None

    source, value = HeaderSource.NONE, None
    if args.header_template:
        source = HeaderSource.TEMPLATE
        value = MonitorCLI.resolve_template(store, args.header_template)
    elif args.header_text:
        source, value = HeaderSource.PASTE, args.header_text
    elif args.header_file:
        source, value = HeaderSource.FILE, args.header_file

    return ExportRequest(
        file_path=Path(args.export),
        include_timestamps=args.export_timestamps,
        start_text=args.start,
        end_text=args.end,
        header_source=source,
        header_value=value,
    )


def run_templates(args, store: TemplateStore) -> bool:
    """执行模板子命令"""
    if args.action == "add":
        return MonitorCLI.add_template(store, args.text)
    if args.action == "delete":
        return MonitorCLI.delete_template(store, args.selector)
    return MonitorCLI.list_templates(store)


def main():
    """主函数"""
    try:
        parser = create_parser()
        args = parser.parse_args()

        configure_logging(getattr(logging, args.log_level), args.log_file)

        if not args.command:
            parser.print_help()
            return

        store = TemplateStore()

        if args.command == "ports":
            MonitorCLI.show_available_ports()
            return

        if args.command == "templates":
            sys.exit(0 if run_templates(args, store) else 1)

        if args.command == "monitor":
            try:
                export = build_export_request(args, store)
            except (ValueError, TemplateStoreError) as e:
                print(f"❌ {e}")
                sys.exit(1)

            success = MonitorCLI.monitor(
                port=args.port,
                baudrate=args.baudrate,
                show_timestamp=args.timestamps,
                max_lines=args.max_lines,
                export=export,
            )
            sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 用户中断程序，退出")
        sys.exit(1)
    except Exception as e:
        logger.error(f"程序异常: {e}")
        print(f"\n💥 程序异常: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
