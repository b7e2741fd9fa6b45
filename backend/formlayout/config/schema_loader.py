"""
表单加载器 - 读取表单 YAML 文件

职责：
- 读取并解析 YAML（JSON 作为 YAML 子集同样支持）
- 文件不存在 / 语法错误 / 根节点不是映射 -> SchemaParseError（致命）
- 校验失败 -> SchemaValidationError（携带全部问题）

使用方式：
    schema = SchemaLoader.load("forms/registration.yaml")
    source = load_schema_source("forms/registration.yaml")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..interfaces import SchemaParseError, SchemaValidationError
from ..models import FormSchema
from ..schema.validator import SchemaValidator

logger = logging.getLogger(__name__)


class SchemaLoader:
    """表单加载器（不缓存：每次生成都是独立运行）"""

    @staticmethod
    def parse_text(text: str, source: str = "<string>") -> dict[str, Any]:
        """解析 YAML 文本为原始映射"""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SchemaParseError(f"表单解析失败 {source}: {e}") from e

        if not isinstance(data, dict):
            raise SchemaParseError(f"表单根节点必须是映射: {source}")
        return data

    @classmethod
    def read_source(cls, schema_path: str | Path) -> dict[str, Any]:
        """读取表单文件为原始映射"""
        path = Path(schema_path)
        if not path.exists():
            raise SchemaParseError(f"表单文件不存在: {path}")

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaParseError(f"表单文件读取失败 {path}: {e}") from e

        logger.debug(f"读取表单文件: {path}")
        return cls.parse_text(text, source=str(path))

    @classmethod
    def load(cls, schema_path: str | Path) -> FormSchema:
        """读取并校验表单"""
        source = cls.read_source(schema_path)
        report = SchemaValidator().validate(source)
        if not report.valid:
            raise SchemaValidationError(report.issues)
        return report.schema


# 便捷函数
def load_schema_source(schema_path: str | Path) -> dict[str, Any]:
    """读取表单原始映射"""
    return SchemaLoader.read_source(schema_path)


def load_schema(schema_path: str | Path) -> FormSchema:
    """读取并校验表单"""
    return SchemaLoader.load(schema_path)
