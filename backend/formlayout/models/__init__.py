"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- FormSchema: 表单 schema（内容元素 + 字段 + 计算/条件规则）
- ResolvedStylesheet: 解析后的样式表
- PageGeometry / Rect: 页面几何
- LayoutResult: 排版结果（放置记录列表）
- Job: 生成任务状态与生命周期
"""

from .geometry import PAGE_SIZES, Margins, PageGeometry, Rect
from .job import Job, JobArtifacts, JobProgress, JobStatus
from .layout import (
    ContentPlacement,
    FieldPlacement,
    LayoutResult,
    OptionWidget,
    PlacedCell,
    PlacedLine,
    PlacementRecord,
    WidgetStyle,
)
from .schema import (
    AdmonitionContent,
    CalculatedField,
    ConditionalField,
    ConditionalTrigger,
    ContentElement,
    FieldContent,
    FieldOption,
    FieldPosition,
    FieldValidation,
    FormField,
    FormMetadata,
    FormSchema,
    HeadingContent,
    ParagraphContent,
    RuleContent,
    SpacerContent,
    TableCellField,
    TableCellLabel,
    TableColumn,
    TableContent,
    TableRow,
    ValidationRule,
    normalize_options,
)
from .stylesheet import (
    FieldBoxStyle,
    ResolvedStylesheet,
    TableStyle,
    TextStyle,
)

__all__ = [
    "PAGE_SIZES",
    "Margins",
    "PageGeometry",
    "Rect",
    "Job",
    "JobArtifacts",
    "JobProgress",
    "JobStatus",
    "ContentPlacement",
    "FieldPlacement",
    "LayoutResult",
    "OptionWidget",
    "PlacedCell",
    "PlacedLine",
    "PlacementRecord",
    "WidgetStyle",
    "AdmonitionContent",
    "CalculatedField",
    "ConditionalField",
    "ConditionalTrigger",
    "ContentElement",
    "FieldContent",
    "FieldOption",
    "FieldPosition",
    "FieldValidation",
    "FormField",
    "FormMetadata",
    "FormSchema",
    "HeadingContent",
    "ParagraphContent",
    "RuleContent",
    "SpacerContent",
    "TableCellField",
    "TableCellLabel",
    "TableColumn",
    "TableContent",
    "TableRow",
    "ValidationRule",
    "normalize_options",
    "FieldBoxStyle",
    "ResolvedStylesheet",
    "TableStyle",
    "TextStyle",
]
