"""
表单 Schema 模型 - 表单 YAML 的结构化表示

职责：
1. 定义内容元素（标题/段落/分隔线/间距/表格/独立字段/提示框）的封闭联合类型
2. 定义表单字段、选项、校验约束、计算字段、条件规则
3. 选项规范化（字符串选项 -> {value, label}）

约定：
- YAML 中使用 camelCase 键（fieldName / labelPosition / rowCount），模型属性为 snake_case
- 未知键一律忽略；未知内容类型（type）校验失败

测试要点：
- test_normalize_options_idempotent: 选项规范化幂等
- test_content_discriminator: 内容类型按 type 分派
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

FieldType = Literal["text", "textarea", "checkbox", "radio", "dropdown", "signature"]
LabelPosition = Literal["above", "left", "right", "none"]
PositioningMode = Literal["absolute", "flow"]
AdmonitionVariant = Literal["warning", "note", "info", "tip", "danger"]
ConditionOperator = Literal[
    "equals", "notEquals", "contains", "greaterThan", "lessThan", "isEmpty", "isNotEmpty"
]
CalculationFormat = Literal["number", "currency", "percentage", "text"]


class SchemaModel(BaseModel):
    """Schema 模型基类（camelCase 别名，允许按属性名构造）"""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


# ============================================================================
# 字段
# ============================================================================

class FieldOption(SchemaModel):
    """选项（规范化后总是 value + label）"""
    value: str
    label: str


def normalize_option(option: Any) -> FieldOption:
    """单个选项规范化"""
    if isinstance(option, FieldOption):
        return FieldOption(value=option.value, label=option.label)
    if isinstance(option, dict):
        value = option.get("value", option.get("label"))
        if value is None:
            raise ValueError("选项缺少 value")
        label = option.get("label", value)
        return FieldOption(value=str(value), label=str(label))
    if isinstance(option, bool):
        text = "true" if option else "false"
        return FieldOption(value=text, label=text)
    if isinstance(option, (str, int, float)):
        return FieldOption(value=str(option), label=str(option))
    raise ValueError(f"无法识别的选项: {option!r}")


def normalize_options(options: Any) -> list[FieldOption]:
    """
    选项列表规范化

    - None -> []
    - "A" -> {value: "A", label: "A"}
    - {value: "a"} -> {value: "a", label: "a"}

    对自身输出再次调用结果不变。
    """
    if options is None:
        return []
    if not isinstance(options, (list, tuple)):
        raise ValueError("options 必须是列表")
    return [normalize_option(opt) for opt in options]


class FieldPosition(SchemaModel):
    """字段位置（绝对模式必填；宽高可省略，由策略给默认值）"""
    x: float
    y: float
    width: float | None = Field(None, gt=0)
    height: float | None = Field(None, gt=0)


class FieldValidation(SchemaModel):
    """字段值校验约束"""
    pattern: str | None = Field(None, description="正则或内置模式名(email/phone/...)")
    message: str | None = None
    min: float | None = None
    max: float | None = None
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)


class FormField(SchemaModel):
    """表单字段（规范化后）"""
    name: str = Field(..., min_length=1, description="全表唯一字段名")
    type: FieldType
    label: str = ""
    page: int = Field(1, ge=1)
    required: bool = False
    placeholder: str | None = None
    default: str | bool | float | None = None

    # 约束
    max_length: int | None = Field(None, ge=0)
    min_length: int | None = Field(None, ge=0)
    min: float | None = None
    max: float | None = None
    multiline: bool = False
    lines: int | None = Field(None, ge=1, description="多行文本行数")
    validation: FieldValidation | None = None

    options: list[FieldOption] = Field(default_factory=list)
    position: FieldPosition | None = None

    # 样式覆盖
    font_size: float | None = Field(None, gt=0)
    font_color: str | None = None
    background_color: str | None = None
    border_color: str | None = None

    read_only: bool = False
    hidden: bool = False
    label_position: LabelPosition | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: Any) -> list[FieldOption]:
        return normalize_options(value)

    @property
    def pattern(self) -> str | None:
        return self.validation.pattern if self.validation else None

    def constraints(self) -> dict[str, Any]:
        """收集约束（原样透传给渲染器）"""
        result: dict[str, Any] = {}
        for key in ("max_length", "min_length", "min", "max"):
            value = getattr(self, key)
            if value is None and self.validation is not None:
                value = getattr(self.validation, key)
            if value is not None:
                result[key] = value
        if self.pattern:
            result["pattern"] = self.pattern
        if self.multiline or self.type == "textarea":
            result["multiline"] = True
        return result


# ============================================================================
# 内容元素
# ============================================================================

class ContentPosition(SchemaModel):
    """内容位置（仅绝对模式）"""
    x: float | None = None
    y: float | None = None


class ContentBase(SchemaModel):
    """内容元素公共部分"""
    page: int | None = Field(None, ge=1)
    position: ContentPosition | None = None

    @property
    def has_explicit_position(self) -> bool:
        return self.page is not None or self.position is not None


class HeadingContent(ContentBase):
    """标题"""
    type: Literal["heading"] = "heading"
    level: int = Field(1, ge=1, le=6)
    text: str


class ParagraphContent(ContentBase):
    """段落"""
    type: Literal["paragraph"] = "paragraph"
    text: str
    max_width: float | None = Field(None, gt=0)
    font_size: float | None = Field(None, gt=0)


class RuleContent(ContentBase):
    """分隔线"""
    type: Literal["rule"] = "rule"


class SpacerContent(ContentBase):
    """垂直间距"""
    type: Literal["spacer"] = "spacer"
    height: float = Field(..., ge=0)


class AdmonitionContent(ContentBase):
    """提示框"""
    type: Literal["admonition"] = "admonition"
    variant: AdmonitionVariant = "note"
    title: str = ""
    text: str


class TableColumn(SchemaModel):
    """表格列"""
    label: str = ""
    width: float = Field(..., gt=0)
    cell_type: Literal["text", "dropdown", "checkbox", "label"] | None = None
    field_suffix: str | None = None
    options: list[FieldOption] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: Any) -> list[FieldOption]:
        return normalize_options(value)


class TableCellLabel(SchemaModel):
    """静态文本单元格"""
    type: Literal["label"] = "label"
    value: str = ""


class TableCellField(SchemaModel):
    """字段单元格"""
    type: Literal["text", "dropdown", "checkbox"]
    field_name: str = Field(..., min_length=1)
    options: list[FieldOption] = Field(default_factory=list)
    default: str | bool | float | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: Any) -> list[FieldOption]:
        return normalize_options(value)


TableCell = Annotated[Union[TableCellLabel, TableCellField], Field(discriminator="type")]


class TableRow(SchemaModel):
    """表格行（完整 cells 或紧凑 values 二选一）"""
    cells: list[TableCell] | None = None
    values: list[str | bool | float] | None = None


class TableContent(ContentBase):
    """表格"""
    type: Literal["table"] = "table"
    label: str | None = None
    columns: list[TableColumn] = Field(..., min_length=1)
    field_prefix: str | None = None
    row_count: int | None = Field(None, ge=0)
    rows: list[TableRow] | None = None
    row_height: float | None = Field(None, gt=0)
    header_height: float | None = Field(None, gt=0)
    show_borders: bool = True

    @property
    def total_width(self) -> float:
        return sum(col.width for col in self.columns)


class FieldContent(ContentBase):
    """流式独立字段"""
    type: Literal["field"] = "field"
    field_type: FieldType
    field_name: str = Field(..., min_length=1)
    label: str = ""
    label_position: LabelPosition = "above"
    label_width: float | None = Field(None, gt=0)
    width: float | None = Field(None, gt=0)
    height: float | None = Field(None, gt=0)
    lines: int | None = Field(None, ge=1)
    options: list[FieldOption] = Field(default_factory=list)
    default: str | bool | float | None = None
    placeholder: str | None = None
    required: bool = False
    read_only: bool = False
    max_length: int | None = Field(None, ge=0)
    validation: FieldValidation | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: Any) -> list[FieldOption]:
        return normalize_options(value)

    def to_form_field(self) -> FormField:
        """转换为规范字段（供字段策略使用）"""
        return FormField(
            name=self.field_name,
            type=self.field_type,
            label=self.label,
            required=self.required,
            placeholder=self.placeholder,
            default=self.default,
            max_length=self.max_length,
            lines=self.lines,
            validation=self.validation,
            options=self.options,
            read_only=self.read_only,
            label_position=self.label_position,
        )


ContentElement = Annotated[
    Union[
        HeadingContent,
        ParagraphContent,
        RuleContent,
        SpacerContent,
        AdmonitionContent,
        TableContent,
        FieldContent,
    ],
    Field(discriminator="type"),
]


# ============================================================================
# 计算 / 条件 / 校验规则
# ============================================================================

class CalculatedField(SchemaModel):
    """计算字段"""
    name: str = Field(..., min_length=1)
    formula: str
    format: CalculationFormat = "number"
    decimals: int = Field(2, ge=0)


class ConditionalTrigger(SchemaModel):
    """条件触发器"""
    field: str
    value: str | bool | float | list[str] | None = None
    operator: ConditionOperator = "equals"


class ConditionalField(SchemaModel):
    """条件显示规则"""
    trigger: ConditionalTrigger
    show: list[str] = Field(default_factory=list)
    hide: list[str] = Field(default_factory=list)
    enable: list[str] = Field(default_factory=list)
    disable: list[str] = Field(default_factory=list)


class ValidationRule(SchemaModel):
    """跨字段校验规则（if: "age < 18", then: "error: ..."）"""
    if_: str = Field(..., alias="if")
    then: str


class ValidationSection(SchemaModel):
    rules: list[ValidationRule] = Field(default_factory=list)


# ============================================================================
# 根
# ============================================================================

class FormMetadata(SchemaModel):
    """表单元数据"""
    id: str = Field(..., min_length=1)
    title: str
    version: str | None = None
    pages: int | None = Field(None, ge=1)
    author: str | None = None
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    positioning: PositioningMode = "flow"
    stylesheet: str | None = Field(None, description="样式覆盖 YAML 路径")


class FormSchema(SchemaModel):
    """表单 Schema 根"""
    form: FormMetadata
    content: list[ContentElement] = Field(default_factory=list)
    fields: list[FormField] = Field(default_factory=list)
    calculations: list[CalculatedField] = Field(default_factory=list)
    conditional_fields: list[ConditionalField] = Field(default_factory=list)
    validation: ValidationSection | None = None

    @property
    def is_absolute(self) -> bool:
        return self.form.positioning == "absolute"

    @property
    def page_count(self) -> int:
        return self.form.pages or 1

    def field_contents(self) -> list[FieldContent]:
        return [el for el in self.content if isinstance(el, FieldContent)]

    def tables(self) -> list[TableContent]:
        return [el for el in self.content if isinstance(el, TableContent)]
