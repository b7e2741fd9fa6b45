"""
表单功能模块 - 计算字段、条件显示、字段值校验

这些模块消费 schema 但不参与排版，输出为数值/状态与浏览器端脚本。
"""

from .calculations import (
    FUNCTION_KEYWORDS,
    calculate_all,
    calculate_values,
    dependency_order,
    format_value,
    formula_references,
    generate_calculation_script,
)
from .conditionals import (
    FieldStates,
    evaluate_conditionals,
    evaluate_trigger,
    generate_conditional_script,
)
from .field_validation import (
    VALIDATION_PATTERNS,
    FieldError,
    FieldValidationResult,
    validate_all_fields,
    validate_field,
)
from .formula import evaluate_formula, parse, tokenize

__all__ = [
    "FUNCTION_KEYWORDS",
    "calculate_all",
    "calculate_values",
    "dependency_order",
    "format_value",
    "formula_references",
    "generate_calculation_script",
    "FieldStates",
    "evaluate_conditionals",
    "evaluate_trigger",
    "generate_conditional_script",
    "VALIDATION_PATTERNS",
    "FieldError",
    "FieldValidationResult",
    "validate_all_fields",
    "validate_field",
    "evaluate_formula",
    "parse",
    "tokenize",
]
