"""
样式表模型 - 完整解析后的样式表（排版期间只读）

每个字段都必填：样式表总是由内置令牌与用户覆盖合并而来（见 styles/resolver.py），
因此排版代码无需处理缺省值。
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from .geometry import PAGE_SIZES, Margins, PageGeometry


class StyleModel(BaseModel):
    """样式模型基类（冻结，禁止未知键）"""

    model_config = {"extra": "forbid", "frozen": True}


class PageStyle(StyleModel):
    """页面"""
    size: str
    width: float | None = Field(None, gt=0)
    height: float | None = Field(None, gt=0)
    margins: Margins

    @model_validator(mode="after")
    def _check_size(self) -> PageStyle:
        # 显式宽高优先；否则纸张名称必须已知
        if (self.width is None or self.height is None) and self.size.lower() not in PAGE_SIZES:
            raise ValueError(f"未知纸张尺寸: {self.size}（可选: {', '.join(PAGE_SIZES)}）")
        return self

    def geometry(self) -> PageGeometry:
        """转换为页面几何"""
        if self.width is not None and self.height is not None:
            width, height = self.width, self.height
        else:
            width, height = PAGE_SIZES[self.size.lower()]
        return PageGeometry(width=width, height=height, margins=self.margins)


class TextStyle(StyleModel):
    """文本块（标题/段落）"""
    font_family: str
    font_size: float = Field(..., gt=0)
    color: str
    line_height: float = Field(..., gt=0)
    margin_top: float = Field(..., ge=0)
    margin_bottom: float = Field(..., ge=0)

    @property
    def line_advance(self) -> float:
        return self.font_size * self.line_height


class ParagraphStyle(TextStyle):
    max_width: float | None = Field(None, gt=0)


class HeadingStyles(StyleModel):
    h1: TextStyle
    h2: TextStyle
    h3: TextStyle
    h4: TextStyle
    h5: TextStyle
    h6: TextStyle

    def for_level(self, level: int) -> TextStyle:
        level = max(1, min(6, level))
        return getattr(self, f"h{level}")


class RuleStyle(StyleModel):
    thickness: float = Field(..., ge=0)
    color: str
    margin_top: float = Field(..., ge=0)
    margin_bottom: float = Field(..., ge=0)


class AdmonitionVariantStyle(StyleModel):
    background_color: str
    border_color: str
    title_color: str
    content_color: str


class AdmonitionStyle(StyleModel):
    border_width: float = Field(..., ge=0)
    padding: float = Field(..., ge=0)
    title_font_family: str
    title_font_size: float = Field(..., gt=0)
    title_gap: float = Field(..., ge=0)
    content_font_family: str
    content_font_size: float = Field(..., gt=0)
    content_line_height: float = Field(..., gt=0)
    margin_top: float = Field(..., ge=0)
    margin_bottom: float = Field(..., ge=0)
    variants: dict[str, AdmonitionVariantStyle]


class FieldBoxStyle(StyleModel):
    """字段控件公共样式"""
    font_family: str
    font_size: float = Field(..., gt=0)
    color: str
    background_color: str
    border_color: str
    border_width: float = Field(..., ge=0)


class TextFieldStyle(FieldBoxStyle):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    padding: float = Field(..., ge=0)


class TextareaFieldStyle(FieldBoxStyle):
    width: float = Field(..., gt=0)
    padding: float = Field(..., ge=0)
    line_height: float = Field(..., gt=0)
    lines: int = Field(..., ge=1)


class ToggleFieldStyle(FieldBoxStyle):
    """复选框/单选框"""
    size: float = Field(..., gt=0)
    spacing: float = Field(..., ge=0)


class DropdownFieldStyle(FieldBoxStyle):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class SignatureFieldStyle(FieldBoxStyle):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    required_border_color: str
    required_border_width: float = Field(..., ge=0)


class LabelStyle(StyleModel):
    font_family: str
    font_size: float = Field(..., gt=0)
    color: str
    margin_bottom: float = Field(..., ge=0)
    width: float = Field(..., gt=0)
    gap: float = Field(..., ge=0)


class FieldStyles(StyleModel):
    text: TextFieldStyle
    textarea: TextareaFieldStyle
    checkbox: ToggleFieldStyle
    radio: ToggleFieldStyle
    dropdown: DropdownFieldStyle
    signature: SignatureFieldStyle
    label: LabelStyle
    margin_top: float = Field(..., ge=0)
    margin_bottom: float = Field(..., ge=0)


class TableStyle(StyleModel):
    header_background_color: str
    header_text_color: str
    header_font_family: str
    header_font_size: float = Field(..., gt=0)
    header_height: float = Field(..., gt=0)
    row_height: float = Field(..., gt=0)
    border_color: str
    border_width: float = Field(..., ge=0)
    cell_padding: float = Field(..., ge=0)
    cell_font_family: str
    cell_font_size: float = Field(..., gt=0)
    cell_text_color: str
    margin_top: float = Field(..., ge=0)
    margin_bottom: float = Field(..., ge=0)


class BandStyle(StyleModel):
    """页眉/页脚"""
    font_family: str
    font_size: float = Field(..., gt=0)
    color: str
    offset: float = Field(..., ge=0, description="距页面上/下边缘的距离")


class ResolvedStylesheet(StyleModel):
    """解析后的完整样式表"""
    page: PageStyle
    headings: HeadingStyles
    paragraph: ParagraphStyle
    rule: RuleStyle
    admonition: AdmonitionStyle
    fields: FieldStyles
    table: TableStyle
    header: BandStyle
    footer: BandStyle
