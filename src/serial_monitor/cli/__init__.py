"""
命令行接口模块
==============
"""

from .monitor import MonitorCLI, ExportRequest

__all__ = ["MonitorCLI", "ExportRequest"]
