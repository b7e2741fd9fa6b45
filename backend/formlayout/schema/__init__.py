"""
Schema 层 - 规范化与校验

子模块：
- normalizer: 表格展开、派生字段名、字段收集
- validator: 分类校验（结构 / 唯一性 / 页码 / 条件引用 / 计算公式）
"""

from .normalizer import (
    DeclaredField,
    all_form_fields,
    collect_declared_fields,
    derive_cell_name,
    expand_table,
)
from .validator import (
    SchemaValidator,
    ValidationIssue,
    ValidationReport,
    form_json_schema,
    validate_schema,
)

__all__ = [
    "DeclaredField",
    "all_form_fields",
    "collect_declared_fields",
    "derive_cell_name",
    "expand_table",
    "SchemaValidator",
    "ValidationIssue",
    "ValidationReport",
    "form_json_schema",
    "validate_schema",
]
