"""
字段值校验 - 校验用户填写的字段值

职责：
1. 单字段校验：required / pattern / minLength / maxLength / min / max
2. 跨字段规则：if "age < 18" then "error: ..."
3. 内置模式（email / phone / url / date ...）

注意：这里校验的是“填写的值”，与 schema 结构校验（schema/validator.py）无关。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from ..models import FormField, FormSchema, ValidationRule
from ..schema.normalizer import all_form_fields

logger = logging.getLogger(__name__)

VALIDATION_PATTERNS: dict[str, re.Pattern[str]] = {
    "email": re.compile(r"^[\w.-]+@[\w.-]+\.\w+$"),
    "phone": re.compile(r"^\+?[\d\s()-]{10,}$"),
    "url": re.compile(r"^https?://[\w.-]+\.\w+"),
    "date": re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    "time": re.compile(r"^\d{2}:\d{2}(:\d{2})?$"),
    "zipCode": re.compile(r"^\d{5}(-\d{4})?$"),
    "ssn": re.compile(r"^\d{3}-\d{2}-\d{4}$"),
    "creditCard": re.compile(r"^\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}$"),
    "alphanumeric": re.compile(r"^[a-zA-Z0-9]+$"),
    "alpha": re.compile(r"^[a-zA-Z]+$"),
    "numeric": re.compile(r"^\d+$"),
    "decimal": re.compile(r"^\d+\.?\d*$"),
}

_RULE_CONDITION_RE = re.compile(r"^(\w+)\s*(<=|>=|==|!=|<|>)\s*(.+)$")
_RULE_ACTION_RE = re.compile(r"^(error|warning|info):\s*(.+)$")


@dataclass(frozen=True)
class FieldError:
    """字段值错误"""
    field: str
    message: str
    rule: str


@dataclass
class FieldValidationResult:
    errors: list[FieldError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def get_validation_pattern(name: str) -> re.Pattern[str] | None:
    """获取内置模式"""
    return VALIDATION_PATTERNS.get(name)


def _compile_pattern(pattern: str) -> re.Pattern[str] | None:
    builtin = get_validation_pattern(pattern)
    if builtin is not None:
        return builtin
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning(f"无效的校验正则 {pattern!r}: {e}")
        return None


def _to_float(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def _value_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def validate_field(field_def: FormField, value: Any) -> list[FieldError]:
    """校验单个字段值"""
    errors: list[FieldError] = []
    name = field_def.name
    display = field_def.label or name

    empty = value is None or value == "" or value is False
    if field_def.required and empty:
        errors.append(FieldError(name, f"{display} is required", "required"))
        return errors
    if value is None or value == "":
        return errors

    text = _value_text(value)
    constraints = field_def.constraints()

    pattern = constraints.get("pattern")
    if pattern:
        compiled = _compile_pattern(pattern)
        if compiled is not None and not compiled.search(text):
            message = (field_def.validation.message if field_def.validation else None) or f"{display} is invalid"
            errors.append(FieldError(name, message, "pattern"))

    min_length = constraints.get("min_length")
    if min_length is not None and len(text) < min_length:
        errors.append(FieldError(name, f"{display} must be at least {min_length} characters", "minLength"))

    max_length = constraints.get("max_length")
    if max_length is not None and len(text) > max_length:
        errors.append(FieldError(name, f"{display} must be at most {max_length} characters", "maxLength"))

    number = _to_float(text)
    minimum = constraints.get("min")
    if minimum is not None and number is not None and number < minimum:
        errors.append(FieldError(name, f"{display} must be at least {_fmt(minimum)}", "min"))

    maximum = constraints.get("max")
    if maximum is not None and number is not None and number > maximum:
        errors.append(FieldError(name, f"{display} must be at most {_fmt(maximum)}", "max"))

    return errors


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def evaluate_validation_rule(rule: ValidationRule, values: Mapping[str, Any]) -> list[FieldError]:
    """求值一条跨字段规则（只有 error 级别产生错误）"""
    condition = _RULE_CONDITION_RE.match(rule.if_.strip())
    if condition is None:
        logger.warning(f"无效的校验规则条件: {rule.if_}")
        return []

    field_name, op, compare_raw = condition.groups()
    compare_text = compare_raw.strip()
    if compare_text == "today()":
        compare_text = date.today().isoformat()

    actual = values.get(field_name)
    actual_num = _to_float(_value_text(actual))
    compare_num = _to_float(compare_text)

    if op in ("<", "<=", ">", ">="):
        if actual_num is None or compare_num is None:
            met = False
        elif op == "<":
            met = actual_num < compare_num
        elif op == "<=":
            met = actual_num <= compare_num
        elif op == ">":
            met = actual_num > compare_num
        else:
            met = actual_num >= compare_num
    elif op == "==":
        met = _value_text(actual) == compare_text
    else:
        met = _value_text(actual) != compare_text

    if not met:
        return []

    action = _RULE_ACTION_RE.match(rule.then.strip())
    if action is None:
        logger.warning(f"无效的校验规则动作: {rule.then}")
        return []
    severity, message = action.groups()
    if severity != "error":
        logger.info(f"校验规则 {severity}: {message.strip()}")
        return []
    return [FieldError(field_name, message.strip(), "custom")]


def validate_all_fields(schema: FormSchema, values: Mapping[str, Any]) -> FieldValidationResult:
    """校验全表字段值 + 跨字段规则"""
    result = FieldValidationResult()
    for field_def in all_form_fields(schema):
        result.errors.extend(validate_field(field_def, values.get(field_def.name)))

    if schema.validation is not None:
        for rule in schema.validation.rules:
            result.errors.extend(evaluate_validation_rule(rule, values))

    return result
