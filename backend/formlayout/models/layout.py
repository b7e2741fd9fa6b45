"""
排版结果模型 - 放置记录（排版引擎的唯一输出）

放置记录分两类：
- ContentPlacement: 内容元素（标题/段落/分隔线/提示框/表格表头与行...）
- FieldPlacement: 表单字段控件

每条记录都携带绝对页码（从0开始）与矩形，渲染器（PDF/HTML/DOCX）只消费这些记录。
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from .geometry import PageGeometry, Rect
from .schema import FieldOption, FieldType, LabelPosition
from .stylesheet import ResolvedStylesheet

ContentKind = Literal[
    "title",
    "heading",
    "paragraph",
    "rule",
    "spacer",
    "admonition",
    "table_label",
    "table_header",
    "table_row",
]


class PlacedLine(BaseModel):
    """已定位的一行文本（baseline 为基线 y）"""
    text: str
    x: float
    baseline: float
    font_size: float


class PlacedCell(BaseModel):
    """表格单元格（表头或静态文本）"""
    column_index: int
    rect: Rect
    text: str = ""


class ContentPlacement(BaseModel):
    """内容放置记录"""
    record_type: Literal["content"] = "content"
    kind: ContentKind
    page_index: int = Field(..., ge=0)
    rect: Rect
    text: str | None = None
    lines: list[PlacedLine] = Field(default_factory=list)
    level: int | None = None
    variant: str | None = None
    title: str | None = None
    cells: list[PlacedCell] = Field(default_factory=list)
    row_index: int | None = Field(None, description="表格行序号（从0开始）")
    repeated: bool = Field(False, description="续页重复的表头")
    continued: bool = Field(False, description="跨页延续的片段")
    show_borders: bool = True


class WidgetStyle(BaseModel):
    """控件最终样式（渲染器直接使用）"""
    font_family: str
    font_size: float
    color: str
    background_color: str
    border_color: str
    border_width: float


class OptionWidget(BaseModel):
    """单选组中的单个按钮"""
    value: str
    label: str
    rect: Rect
    label_rect: Rect | None = None


class FieldPlacement(BaseModel):
    """字段放置记录"""
    record_type: Literal["field"] = "field"
    field_name: str
    field_type: FieldType
    page_index: int = Field(..., ge=0)
    rect: Rect
    label: str = ""
    label_position: LabelPosition = "none"
    label_rect: Rect | None = None
    options: list[FieldOption] = Field(default_factory=list)
    widgets: list[OptionWidget] = Field(default_factory=list)
    default_value: str | bool | float | None = None
    placeholder: str | None = None
    constraints: dict[str, Any] = Field(default_factory=dict)
    required: bool = False
    read_only: bool = False
    hidden: bool = False
    style: WidgetStyle
    style_override: dict[str, Any] = Field(default_factory=dict, description="与默认样式不同的键")


PlacementRecord = Annotated[
    Union[ContentPlacement, FieldPlacement],
    Field(discriminator="record_type"),
]


class LayoutResult(BaseModel):
    """一次排版的完整结果"""
    form_id: str
    title: str
    version: str | None = None
    page_count: int = Field(..., ge=1)
    geometry: PageGeometry
    stylesheet: ResolvedStylesheet
    placements: list[PlacementRecord] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def field_placements(self) -> list[FieldPlacement]:
        return [p for p in self.placements if isinstance(p, FieldPlacement)]

    def content_placements(self) -> list[ContentPlacement]:
        return [p for p in self.placements if isinstance(p, ContentPlacement)]

    def for_page(self, page_index: int) -> list[PlacementRecord]:
        return [p for p in self.placements if p.page_index == page_index]

    def get_field(self, name: str) -> FieldPlacement | None:
        for placement in self.field_placements():
            if placement.field_name == name:
                return placement
        return None

    def to_dict(self, include_stylesheet: bool = False) -> dict[str, Any]:
        """导出为可序列化字典"""
        exclude = None if include_stylesheet else {"stylesheet"}
        return self.model_dump(mode="json", exclude=exclude)

    def to_json(self, include_stylesheet: bool = False) -> str:
        return json.dumps(self.to_dict(include_stylesheet), ensure_ascii=False, indent=2)
