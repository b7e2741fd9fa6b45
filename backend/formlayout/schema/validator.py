"""
Schema 校验器 - 结构与引用完整性检查

检查分类（按顺序执行；某一类出错即停止，同类错误全部收集）：
1. 结构：pydantic 模型校验 + 结构约束（单选选项数、定位模式、表格生成条件）
2. 字段名唯一（含表格派生字段名）、计算字段名唯一
3. 字段页码 <= form.pages（仅绝对模式）
4. 条件规则引用的字段存在
5. 计算公式：未知标识符仅告警；循环依赖报错

校验器从不因用户输入抛异常；YAML 解析失败由加载器单独抛 SchemaParseError。

测试要点：
- test_structural_error_paths: 结构错误路径
- test_radio_requires_two_options: 单选字段选项不足
- test_duplicate_derived_names: 表格派生字段名重复
- test_stop_on_first_class: 前一类出错不执行后续检查
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from ..features.calculations import dependency_order, formula_references
from ..interfaces import CalculationCycleError
from ..models import FieldContent, FormSchema, TableContent
from .normalizer import collect_declared_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """校验问题"""
    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass
class ValidationReport:
    """校验报告"""
    issues: list[ValidationIssue] = field(default_factory=list)
    schema: FormSchema | None = None
    failed_check: str | None = None

    @property
    def valid(self) -> bool:
        return not self.issues and self.schema is not None


def _loc_to_path(loc: tuple[Any, ...]) -> str:
    return "/" + "/".join(str(part) for part in loc)


class SchemaValidator:
    """Schema 校验器"""

    def __init__(self):
        self._checks: list[tuple[str, Callable[[FormSchema], list[ValidationIssue]]]] = [
            ("structure", self._check_structure),
            ("uniqueness", self._check_unique_names),
            ("pages", self._check_pages),
            ("conditionals", self._check_conditionals),
            ("calculations", self._check_calculations),
        ]

    def validate(self, source: Mapping[str, Any] | FormSchema) -> ValidationReport:
        """校验原始映射或已构造的 FormSchema"""
        if isinstance(source, FormSchema):
            schema = source
        else:
            try:
                schema = FormSchema.model_validate(dict(source))
            except ValidationError as e:
                issues = [
                    ValidationIssue(_loc_to_path(err["loc"]), err["msg"]) for err in e.errors()
                ]
                logger.info(f"表单结构校验失败: {len(issues)} 个问题")
                return ValidationReport(issues=issues, failed_check="structure")

        for name, check in self._checks:
            issues = check(schema)
            if issues:
                logger.info(f"表单校验失败 [{name}]: {len(issues)} 个问题")
                return ValidationReport(issues=issues, failed_check=name)

        return ValidationReport(schema=schema)

    # ------------------------------------------------------------------
    # 1. 结构约束
    # ------------------------------------------------------------------

    def _check_structure(self, schema: FormSchema) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for i, f in enumerate(schema.fields):
            if f.type == "radio" and len(f.options) < 2:
                issues.append(
                    ValidationIssue(
                        f"/fields/{i}/options",
                        f"单选字段 '{f.name}' 至少需要 2 个选项（当前 {len(f.options)} 个）",
                    )
                )

        for i, element in enumerate(schema.content):
            if isinstance(element, FieldContent) and element.field_type == "radio" and len(element.options) < 2:
                issues.append(
                    ValidationIssue(
                        f"/content/{i}/options",
                        f"单选字段 '{element.field_name}' 至少需要 2 个选项（当前 {len(element.options)} 个）",
                    )
                )
            if isinstance(element, TableContent) and element.row_count and not element.field_prefix:
                issues.append(
                    ValidationIssue(f"/content/{i}/fieldPrefix", "使用 rowCount 生成行时必须提供 fieldPrefix")
                )

        issues.extend(self._check_positioning(schema))
        return issues

    def _check_positioning(self, schema: FormSchema) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if schema.is_absolute:
            for i, element in enumerate(schema.content):
                position = element.position
                if element.page is None or position is None or position.x is None or position.y is None:
                    issues.append(
                        ValidationIssue(f"/content/{i}", "绝对定位模式下内容元素必须提供 page 与 position(x, y)")
                    )
            for i, f in enumerate(schema.fields):
                if f.position is None:
                    issues.append(ValidationIssue(f"/fields/{i}/position", f"绝对定位模式下字段 '{f.name}' 必须提供 position"))
        else:
            for i, element in enumerate(schema.content):
                if element.has_explicit_position:
                    issues.append(
                        ValidationIssue(f"/content/{i}", "流式模式下内容元素不能指定 page 或 position")
                    )
            for i, f in enumerate(schema.fields):
                if f.position is not None:
                    issues.append(ValidationIssue(f"/fields/{i}/position", f"流式模式下字段 '{f.name}' 不能指定 position"))
        return issues

    # ------------------------------------------------------------------
    # 2. 唯一性
    # ------------------------------------------------------------------

    def _check_unique_names(self, schema: FormSchema) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        first_seen: dict[str, str] = {}
        for declared in collect_declared_fields(schema):
            if declared.name in first_seen:
                issues.append(
                    ValidationIssue(
                        declared.path,
                        f"字段名重复: '{declared.name}'（首次出现于 {first_seen[declared.name]}）",
                    )
                )
            else:
                first_seen[declared.name] = declared.path

        calc_seen: set[str] = set()
        for i, calc in enumerate(schema.calculations):
            if calc.name in calc_seen:
                issues.append(ValidationIssue(f"/calculations/{i}/name", f"计算字段名重复: '{calc.name}'"))
            calc_seen.add(calc.name)

        return issues

    # ------------------------------------------------------------------
    # 3. 页码
    # ------------------------------------------------------------------

    def _check_pages(self, schema: FormSchema) -> list[ValidationIssue]:
        if not schema.is_absolute or schema.form.pages is None:
            return []

        pages = schema.form.pages
        issues: list[ValidationIssue] = []
        for i, f in enumerate(schema.fields):
            if f.page > pages:
                issues.append(
                    ValidationIssue(f"/fields/{i}/page", f"字段 '{f.name}' 的页码 {f.page} 超出表单页数 {pages}")
                )
        for i, element in enumerate(schema.content):
            if element.page is not None and element.page > pages:
                issues.append(
                    ValidationIssue(f"/content/{i}/page", f"内容元素页码 {element.page} 超出表单页数 {pages}")
                )
        return issues

    # ------------------------------------------------------------------
    # 4. 条件规则引用
    # ------------------------------------------------------------------

    def _known_names(self, schema: FormSchema) -> set[str]:
        names = {declared.name for declared in collect_declared_fields(schema)}
        names.update(calc.name for calc in schema.calculations)
        return names

    def _check_conditionals(self, schema: FormSchema) -> list[ValidationIssue]:
        known = self._known_names(schema)
        issues: list[ValidationIssue] = []

        for i, rule in enumerate(schema.conditional_fields):
            base = f"/conditionalFields/{i}"
            if rule.trigger.field not in known:
                issues.append(
                    ValidationIssue(f"{base}/trigger/field", f"触发字段 '{rule.trigger.field}' 不存在")
                )
            for key in ("show", "hide", "enable", "disable"):
                for j, name in enumerate(getattr(rule, key)):
                    if name not in known:
                        issues.append(ValidationIssue(f"{base}/{key}/{j}", f"{key} 引用的字段 '{name}' 不存在"))
        return issues

    # ------------------------------------------------------------------
    # 5. 计算公式
    # ------------------------------------------------------------------

    def _check_calculations(self, schema: FormSchema) -> list[ValidationIssue]:
        if not schema.calculations:
            return []

        known = self._known_names(schema)
        for calc in schema.calculations:
            unknown = [ref for ref in formula_references(calc.formula) if ref not in known]
            if unknown:
                # 未知标识符不报错，只记录告警
                logger.warning(f"计算字段 {calc.name} 的公式引用了未知名称: {', '.join(unknown)}")

        try:
            dependency_order(schema.calculations)
        except CalculationCycleError as e:
            return [ValidationIssue("/calculations", str(e))]
        return []


def validate_schema(source: Mapping[str, Any] | FormSchema) -> ValidationReport:
    """便捷函数"""
    return SchemaValidator().validate(source)


def form_json_schema() -> dict[str, Any]:
    """导出表单结构描述（JSON Schema）"""
    return FormSchema.model_json_schema(by_alias=True)


