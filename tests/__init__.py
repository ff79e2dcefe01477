"""
测试模块
========

串口监视工具的单元测试，串口硬件由 tests.fake_port 和 unittest.mock 模拟。
"""

# 为了支持直接运行单个测试文件，确保项目源码包可被导入
from pathlib import Path
import sys

SRC_DIR = Path(__file__).parent.parent.resolve() / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))
