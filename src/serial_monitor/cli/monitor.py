"""
串口监视命令行接口
==================

连接串口、实时打印接收到的行，停止后可把历史导出为CSV；并提供表头模板管理。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..config.constants import MAX_HISTORY_LINES, STANDARD_BAUDRATES
from ..core.connection_manager import ConnectionManager
from ..core.errors import (
    ExportIOError,
    HeaderParseError,
    SerialConnectionError,
    TemplateStoreError,
)
from ..core.line_history import LineHistory, format_line
from ..export.csv_exporter import ExportOptions, export_csv
from ..export.options import HeaderSource, build_export_options
from ..export.templates import TemplateStore
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ExportRequest:
    """命令行传入的导出参数"""

    file_path: Path
    include_timestamps: bool = False
    start_text: str = ""
    end_text: str = ""
    header_source: HeaderSource = HeaderSource.NONE
    header_value: Optional[str] = None

    @property
    def filter_by_time(self) -> bool:
        return bool(self.start_text.strip() or self.end_text.strip())

    def build(self) -> ExportOptions:
        """构建导出选项，结束时间为空时取当前时刻"""
        return build_export_options(
            file_path=self.file_path,
            include_timestamps=self.include_timestamps,
            filter_by_time=self.filter_by_time,
            start_text=self.start_text,
            end_text=self.end_text,
            header_source=self.header_source,
            header_value=self.header_value,
        )


class MonitorCLI:
    """串口监视命令行接口"""

    @staticmethod
    def show_available_ports() -> None:
        """显示可用的串口"""
        ports = ConnectionManager.list_available_ports()

        if not ports:
            print("没有找到可用的串口。")
            return

        print("可用的串口：")
        for port in ports:
            print(f"  {port['device']} - {port['description']}")

    @staticmethod
    def resolve_template(store: TemplateStore, selector: str) -> str:
        """
        按序号（从1开始）或原文选择已保存的模板

        Raises:
            ValueError: 模板不存在
        """
        templates = store.load()
        if selector.isdigit():
            index = int(selector) - 1
            if 0 <= index < len(templates):
                return templates[index]
            raise ValueError(f"模板序号超出范围: {selector}（共 {len(templates)} 个）")
        if selector in templates:
            return selector
        raise ValueError(f"模板不存在: {selector}")

    @staticmethod
    def monitor(
        port: str,
        baudrate: int,
        show_timestamp: bool = False,
        max_lines: int = MAX_HISTORY_LINES,
        export: Optional[ExportRequest] = None,
        manager: Optional[ConnectionManager] = None,
    ) -> bool:
        """
        监视串口直到用户中断或设备故障，然后按需导出

        Returns:
            没有设备故障且导出成功返回True
        """
        if baudrate not in STANDARD_BAUDRATES:
            logger.warning(f"非标准波特率: {baudrate}")

        # 先校验导出参数，避免监视结束后才发现错误
        if export is not None:
            try:
                export.build()
            except (ValueError, HeaderParseError) as e:
                print(f"❌ 导出参数无效: {e}")
                return False

        manager = manager or ConnectionManager()
        history = LineHistory(max_lines=max_lines)

        try:
            manager.connect(port, baudrate)
        except SerialConnectionError as e:
            print(f"❌ {e}")
            return False

        lines, errors = manager.start_reading()
        print(f"✅ 已连接 {port} @ {baudrate}，按 Ctrl+C 停止")

        fault = None
        try:
            fault = history.consume(
                lines,
                errors,
                on_line=lambda line: print(format_line(line, show_timestamp), flush=True),
            )
        except KeyboardInterrupt:
            print("\n用户中断监视")
        finally:
            manager.disconnect()

        if fault is not None:
            print(f"❌ 串口错误: {fault}")

        print(f"共接收 {len(history)} 行")

        if export is None:
            return fault is None

        ok, count = MonitorCLI.export_history(history, export)
        if ok:
            print(f"✅ 已导出 {count} 行到 {export.file_path}")
        return ok and fault is None

    @staticmethod
    def export_history(history: LineHistory, export: ExportRequest) -> Tuple[bool, int]:
        """
        导出行历史快照

        Returns:
            (是否成功, 写入的数据行数)
        """
        snapshot = history.snapshot()
        if not snapshot:
            print("没有可导出的数据。")
            return True, 0

        try:
            options = export.build()
            count = export_csv(snapshot, options)
        except (ValueError, HeaderParseError, ExportIOError) as e:
            print(f"❌ 导出失败: {e}")
            return False, 0

        return True, count

    @staticmethod
    def list_templates(store: TemplateStore) -> bool:
        """列出已保存的表头模板"""
        try:
            templates = store.load()
        except TemplateStoreError as e:
            print(f"❌ {e}")
            return False

        if not templates:
            print("没有已保存的模板。")
            return True

        print("已保存的模板：")
        for i, template in enumerate(templates, 1):
            print(f"  {i}. {template}")
        return True

    @staticmethod
    def add_template(store: TemplateStore, text: str) -> bool:
        """保存新的表头模板"""
        try:
            added = store.add(text)
        except TemplateStoreError as e:
            print(f"❌ {e}")
            return False

        if not added:
            print("模板为空或已存在。")
            return False

        print("✅ 模板已保存")
        return True

    @staticmethod
    def delete_template(store: TemplateStore, selector: str) -> bool:
        """按序号或原文删除表头模板"""
        try:
            template = MonitorCLI.resolve_template(store, selector)
            store.remove(template)
        except (ValueError, TemplateStoreError) as e:
            print(f"❌ {e}")
            return False

        print(f"✅ 已删除模板: {template}")
        return True
