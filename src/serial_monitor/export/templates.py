"""
表头模板存储
============

把用户保存的CSV表头模板（逗号连接的字段列表）保存在用户配置目录下的JSON文件中。
"""

import json
from pathlib import Path
from typing import List, Optional, Union

from ..config.constants import APP_CONFIG_DIR_NAME, TEMPLATES_FILE_NAME
from ..core.errors import TemplateStoreError
from ..utils.logger import get_logger
from ..utils.path_utils import user_config_dir

logger = get_logger(__name__)


class TemplateStore:
    """表头模板存储"""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        初始化模板存储

        Args:
            config_dir: 配置目录，None时使用用户配置目录
        """
        self._config_dir = Path(config_dir) if config_dir is not None else None

    @property
    def path(self) -> Path:
        """模板文件路径"""
        try:
            config_dir = self._config_dir or user_config_dir(APP_CONFIG_DIR_NAME)
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TemplateStoreError(f"无法创建配置目录: {e}") from e
        return config_dir / TEMPLATES_FILE_NAME

    def load(self) -> List[str]:
        """
        读取已保存的模板

        Returns:
            模板列表；文件不存在时返回空列表

        Raises:
            TemplateStoreError: 文件无法读取或内容不是字符串列表
        """
        path = self.path
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise TemplateStoreError(f"读取模板失败: {e}") from e

        try:
            templates = json.loads(text)
        except json.JSONDecodeError as e:
            raise TemplateStoreError(f"解析模板失败: {e}") from e

        if not isinstance(templates, list) or not all(
            isinstance(t, str) for t in templates
        ):
            raise TemplateStoreError(f"模板文件格式错误: {path}")

        return templates

    def save(self, templates: List[str]) -> None:
        """
        保存模板（覆盖整个列表）

        Raises:
            TemplateStoreError: 写入失败
        """
        path = self.path
        try:
            path.write_text(
                json.dumps(list(templates), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise TemplateStoreError(f"保存模板失败: {e}") from e
        logger.debug(f"已保存 {len(templates)} 个模板到 {path}")

    def add(self, template: str) -> bool:
        """
        添加模板

        Returns:
            添加成功返回True；空文本或已存在时返回False
        """
        text = template.strip()
        if not text:
            return False

        templates = self.load()
        if text in templates:
            logger.info(f"模板已存在: {text}")
            return False

        templates.append(text)
        self.save(templates)
        return True

    def remove(self, template: str) -> bool:
        """
        删除模板

        Returns:
            删除成功返回True；模板不存在时返回False
        """
        templates = self.load()
        if template not in templates:
            return False

        templates.remove(template)
        self.save(templates)
        return True
