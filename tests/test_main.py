#!/usr/bin/env python3
"""
命令行入口测试
==============

测试参数解析、导出请求构建、模板命令和监视流程。
"""

import csv
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import serial

from serial_monitor.__main__ import build_export_request, create_parser, main, run_templates
from serial_monitor.cli.monitor import ExportRequest, MonitorCLI
from serial_monitor.core.channel import Channel
from serial_monitor.core.connection_manager import ConnectionManager
from serial_monitor.core.errors import DeviceFault, SerialConnectionError
from serial_monitor.core.reader_task import SerialLine
from serial_monitor.export.options import HeaderSource
from serial_monitor.export.templates import TemplateStore
from tests.fake_port import FakeSerialPort


@pytest.fixture
def store(tmp_path):
    return TemplateStore(config_dir=tmp_path / "cfg")


def make_manager(lines_data, fault=None):
    """创建返回预置通道的模拟连接管理器"""
    lines, errors = Channel(), Channel(maxsize=1)
    for i, data in enumerate(lines_data):
        lines.send(SerialLine(timestamp=datetime(2024, 5, 17, 10, 0, i), data=data))
    if fault is not None:
        errors.send(fault)
    lines.close()
    errors.close()

    manager = MagicMock(spec=ConnectionManager)
    manager.start_reading.return_value = (lines, errors)
    return manager


class TestCreateParser:
    """测试参数解析"""

    def test_monitor_defaults(self):
        args = create_parser().parse_args(["monitor", "--port", "COM3"])

        assert args.command == "monitor"
        assert args.port == "COM3"
        assert args.baudrate == 9600
        assert args.timestamps is False
        assert args.export is None

    def test_monitor_export_options(self):
        args = create_parser().parse_args([
            "monitor", "--port", "/dev/ttyUSB0", "--baudrate", "115200",
            "--export", "out.csv", "--export-timestamps",
            "--start", "10:00:00", "--end", "11:00:00", "--header-text", "A,B",
        ])

        assert args.baudrate == 115200
        assert args.export == "out.csv"
        assert args.export_timestamps is True
        assert args.start == "10:00:00"
        assert args.header_text == "A,B"

    def test_export_default_filename(self):
        """--export 不带文件名时使用默认文件名"""
        args = create_parser().parse_args(["monitor", "--port", "COM1", "--export"])
        assert args.export == "serial_data.csv"

    def test_header_sources_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([
                "monitor", "--port", "COM1", "--header-text", "A", "--header-file", "h.csv",
            ])

    def test_templates_add(self):
        args = create_parser().parse_args(["templates", "add", "Time,Temp"])
        assert args.action == "add"
        assert args.text == "Time,Temp"


class TestBuildExportRequest:
    """测试导出请求构建"""

    def test_no_export(self, store):
        args = create_parser().parse_args(["monitor", "--port", "COM1"])
        assert build_export_request(args, store) is None

    def test_template_by_index(self, store):
        store.save(["Time,Temp", "A,B,C"])
        args = create_parser().parse_args([
            "monitor", "--port", "COM1", "--export", "o.csv", "--header-template", "2",
        ])

        request = build_export_request(args, store)

        assert request.header_source is HeaderSource.TEMPLATE
        assert request.header_value == "A,B,C"
        assert request.file_path == Path("o.csv")

    def test_unknown_template(self, store):
        args = create_parser().parse_args([
            "monitor", "--port", "COM1", "--export", "o.csv", "--header-template", "5",
        ])
        with pytest.raises(ValueError):
            build_export_request(args, store)

    def test_filter_enabled_by_range(self):
        assert ExportRequest(Path("o.csv")).filter_by_time is False
        assert ExportRequest(Path("o.csv"), end_text="12:00:00").filter_by_time is True


class TestTemplatesCommand:
    """测试模板子命令"""

    def test_add_list_delete(self, store, capsys):
        parser = create_parser()

        assert run_templates(parser.parse_args(["templates", "add", "X,Y"]), store) is True
        assert run_templates(parser.parse_args(["templates", "add", "X,Y"]), store) is False
        assert run_templates(parser.parse_args(["templates", "list"]), store) is True
        assert "1. X,Y" in capsys.readouterr().out

        assert run_templates(parser.parse_args(["templates", "delete", "1"]), store) is True
        assert store.load() == []

    def test_delete_missing(self, store):
        args = create_parser().parse_args(["templates", "delete", "nope"])
        assert run_templates(args, store) is False


class TestMonitor:
    """测试监视流程"""

    def test_monitor_prints_and_exports(self, tmp_path, capsys):
        manager = make_manager(["1,2", "3,4"])
        path = tmp_path / "out.csv"

        ok = MonitorCLI.monitor(
            port="COM1",
            baudrate=9600,
            export=ExportRequest(file_path=path, include_timestamps=True),
            manager=manager,
        )

        assert ok is True
        manager.connect.assert_called_once_with("COM1", 9600)
        manager.disconnect.assert_called_once()
        out = capsys.readouterr().out
        assert "1,2" in out and "3,4" in out

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows == [
            ["Timestamp", "Data"],
            ["2024-05-17 10:00:00.000", "1", "2"],
            ["2024-05-17 10:00:01.000", "3", "4"],
        ]

    def test_monitor_device_fault(self, capsys):
        manager = make_manager(["only"], fault=DeviceFault("unplugged"))

        ok = MonitorCLI.monitor(port="COM1", baudrate=9600, manager=manager)

        assert ok is False
        manager.disconnect.assert_called_once()
        assert "unplugged" in capsys.readouterr().out

    def test_monitor_connect_failure(self, capsys):
        manager = MagicMock(spec=ConnectionManager)
        manager.connect.side_effect = SerialConnectionError("COM1", 9600, "busy")

        assert MonitorCLI.monitor(port="COM1", baudrate=9600, manager=manager) is False
        manager.start_reading.assert_not_called()

    def test_invalid_export_checked_before_connect(self, tmp_path):
        manager = MagicMock(spec=ConnectionManager)
        request = ExportRequest(file_path=tmp_path / "o.csv", start_text="bad")

        assert MonitorCLI.monitor(port="COM1", baudrate=9600, export=request, manager=manager) is False
        manager.connect.assert_not_called()

    @patch('serial.Serial')
    def test_monitor_with_real_manager(self, mock_serial_class, tmp_path):
        """使用真实的连接管理器，设备故障结束监视后仍导出已收到的行"""
        mock_serial_class.return_value = FakeSerialPort(
            [b"a,1\r\nb,2\r\n", serial.SerialException("gone")]
        )
        path = tmp_path / "out.csv"

        ok = MonitorCLI.monitor(
            port="COM1", baudrate=9600, export=ExportRequest(file_path=path)
        )

        assert ok is False
        with open(path, newline="", encoding="utf-8") as f:
            assert list(csv.reader(f)) == [["Data"], ["a", "1"], ["b", "2"]]


class TestMain:
    """测试主函数"""

    @pytest.fixture(autouse=True)
    def keep_logging(self):
        """避免日志处理器绑定到 capsys 的临时输出"""
        with patch("serial_monitor.__main__.configure_logging"):
            yield

    def test_no_command_prints_help(self, capsys):
        with patch("sys.argv", ["serial-monitor"]):
            main()
        assert "serial-monitor" in capsys.readouterr().out

    @patch("serial.tools.list_ports.comports", return_value=[])
    def test_ports_command(self, mock_comports, capsys):
        with patch("sys.argv", ["serial-monitor", "ports"]):
            main()
        assert "没有找到可用的串口" in capsys.readouterr().out

    def test_templates_exit_code(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.setenv("APPDATA", str(tmp_path))
        with patch("sys.argv", ["serial-monitor", "templates", "list"]):
            with patch("serial_monitor.utils.path_utils.Path.home", return_value=tmp_path):
                with pytest.raises(SystemExit) as exc_info:
                    main()
        assert exc_info.value.code == 0


if __name__ == "__main__":
    pytest.main([__file__])
