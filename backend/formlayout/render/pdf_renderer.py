"""
PDF渲染器 - 排版结果 -> 可填写 PDF

职责：
1. 按页绘制内容记录（文本、分隔线、提示框、表格）
2. 字段记录生成 AcroForm 控件（textfield / checkbox / radio / choice）
3. 页眉（标题 + Page i of n）与页脚（版本号）

依赖：
- reportlab: canvas 绘制与 AcroForm

渲染器只消费放置记录，不做任何排版计算。

测试要点：
- test_render_creates_pdf: 生成文件且为 PDF
- test_render_all_field_types: 六种字段均可渲染
- test_render_empty_dropdown: 空选项下拉框可渲染
"""

from __future__ import annotations

import logging
from pathlib import Path

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from ..interfaces import IRenderer, RenderError
from ..models import (
    ContentPlacement,
    FieldPlacement,
    LayoutResult,
    ResolvedStylesheet,
)

logger = logging.getLogger(__name__)

# 未设置 maxLength 时的文本框上限
DEFAULT_MAXLEN = 10000


def _hex(value: str | None, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except ValueError:
        return default


def _field_flags(placement: FieldPlacement, *extra: str) -> str:
    flags = list(extra)
    if placement.read_only:
        flags.append("readOnly")
    if placement.required:
        flags.append("required")
    return " ".join(flags)


def _annotation_flags(placement: FieldPlacement) -> str:
    return "print hidden" if placement.hidden else "print"


def _text_value(value) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class PdfRenderer(IRenderer):
    """PDF渲染器实现"""

    def __init__(self, draw_header: bool = True, draw_footer: bool = True):
        self.draw_header = draw_header
        self.draw_footer = draw_footer

    def render(self, result: LayoutResult, output_path: Path) -> Path:
        output_path = Path(output_path)
        geometry = result.geometry
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            canv = canvas.Canvas(str(output_path), pagesize=(geometry.width, geometry.height))
            canv.setTitle(result.title)
            for page_index in range(result.page_count):
                if self.draw_header:
                    self._draw_header(canv, result, page_index)
                for placement in result.for_page(page_index):
                    if isinstance(placement, FieldPlacement):
                        self._draw_field(canv, placement, result.stylesheet)
                    else:
                        self._draw_content(canv, placement, result.stylesheet)
                if self.draw_footer:
                    self._draw_footer(canv, result)
                canv.showPage()
            canv.save()
        except (OSError, ValueError, KeyError) as e:
            raise RenderError(f"PDF渲染失败 {output_path}: {e}") from e

        logger.info(f"PDF已生成: {output_path} ({result.page_count} 页)")
        return output_path

    # ------------------------------------------------------------------
    # 页眉 / 页脚
    # ------------------------------------------------------------------

    def _draw_header(self, canv: canvas.Canvas, result: LayoutResult, page_index: int) -> None:
        style = result.stylesheet.header
        geometry = result.geometry
        y = geometry.height - style.offset
        canv.setFont(style.font_family, style.font_size)
        canv.setFillColor(_hex(style.color))
        canv.drawString(geometry.margins.left, y, result.title)
        canv.drawRightString(
            geometry.width - geometry.margins.right,
            y,
            f"Page {page_index + 1} of {result.page_count}",
        )

    def _draw_footer(self, canv: canvas.Canvas, result: LayoutResult) -> None:
        if not result.version:
            return
        style = result.stylesheet.footer
        canv.setFont(style.font_family, style.font_size)
        canv.setFillColor(_hex(style.color))
        canv.drawCentredString(result.geometry.width / 2, style.offset, f"Version {result.version}")

    # ------------------------------------------------------------------
    # 内容
    # ------------------------------------------------------------------

    def _draw_content(
        self,
        canv: canvas.Canvas,
        placement: ContentPlacement,
        stylesheet: ResolvedStylesheet,
    ) -> None:
        kind = placement.kind
        if kind in ("title", "heading"):
            style = stylesheet.headings.for_level(placement.level or 1)
            self._draw_lines(canv, placement, style.font_family, style.color)
        elif kind == "paragraph":
            style = stylesheet.paragraph
            self._draw_lines(canv, placement, style.font_family, style.color)
        elif kind == "table_label":
            style = stylesheet.fields.label
            self._draw_lines(canv, placement, style.font_family, style.color)
        elif kind == "rule":
            self._draw_rule(canv, placement, stylesheet)
        elif kind == "admonition":
            self._draw_admonition(canv, placement, stylesheet)
        elif kind == "table_header":
            self._draw_table_header(canv, placement, stylesheet)
        elif kind == "table_row":
            self._draw_table_row(canv, placement, stylesheet)
        # spacer 不绘制

    def _draw_lines(self, canv: canvas.Canvas, placement: ContentPlacement, font: str, color: str) -> None:
        canv.setFillColor(_hex(color))
        for line in placement.lines:
            canv.setFont(font, line.font_size)
            canv.drawString(line.x, line.baseline, line.text)

    def _draw_rule(self, canv: canvas.Canvas, placement: ContentPlacement, stylesheet: ResolvedStylesheet) -> None:
        style = stylesheet.rule
        rect = placement.rect
        y = rect.y + rect.height / 2
        canv.setStrokeColor(_hex(style.color))
        canv.setLineWidth(style.thickness)
        canv.line(rect.x, y, rect.right, y)

    def _draw_admonition(
        self,
        canv: canvas.Canvas,
        placement: ContentPlacement,
        stylesheet: ResolvedStylesheet,
    ) -> None:
        style = stylesheet.admonition
        variant = style.variants.get(placement.variant or "note") or style.variants["note"]
        rect = placement.rect

        canv.setFillColor(_hex(variant.background_color))
        canv.rect(rect.x, rect.y, rect.width, rect.height, stroke=0, fill=1)
        canv.setFillColor(_hex(variant.border_color))
        canv.rect(rect.x, rect.y, style.border_width, rect.height, stroke=0, fill=1)

        title_x = rect.x + style.border_width + style.padding
        title_baseline = rect.top - style.padding - style.title_font_size
        canv.setFont(style.title_font_family, style.title_font_size)
        canv.setFillColor(_hex(variant.title_color))
        canv.drawString(title_x, title_baseline, placement.title or "")

        canv.setFillColor(_hex(variant.content_color))
        for line in placement.lines:
            canv.setFont(style.content_font_family, line.font_size)
            canv.drawString(line.x, line.baseline, line.text)

    def _draw_table_header(
        self,
        canv: canvas.Canvas,
        placement: ContentPlacement,
        stylesheet: ResolvedStylesheet,
    ) -> None:
        style = stylesheet.table
        rect = placement.rect
        canv.setFillColor(_hex(style.header_background_color))
        canv.rect(rect.x, rect.y, rect.width, rect.height, stroke=0, fill=1)

        canv.setFont(style.header_font_family, style.header_font_size)
        canv.setFillColor(_hex(style.header_text_color))
        for cell in placement.cells:
            baseline = cell.rect.y + (cell.rect.height - style.header_font_size) / 2 + 2
            canv.drawCentredString(cell.rect.x + cell.rect.width / 2, baseline, cell.text)

        if placement.show_borders:
            self._draw_cell_borders(canv, placement, stylesheet)

    def _draw_table_row(
        self,
        canv: canvas.Canvas,
        placement: ContentPlacement,
        stylesheet: ResolvedStylesheet,
    ) -> None:
        style = stylesheet.table
        canv.setFont(style.cell_font_family, style.cell_font_size)
        canv.setFillColor(_hex(style.cell_text_color))
        for cell in placement.cells:
            if not cell.text:
                continue
            baseline = cell.rect.y + (cell.rect.height - style.cell_font_size) / 2 + 2
            canv.drawString(cell.rect.x + style.cell_padding, baseline, cell.text)

        if placement.show_borders:
            self._draw_cell_borders(canv, placement, stylesheet)

    def _draw_cell_borders(
        self,
        canv: canvas.Canvas,
        placement: ContentPlacement,
        stylesheet: ResolvedStylesheet,
    ) -> None:
        style = stylesheet.table
        canv.setStrokeColor(_hex(style.border_color))
        canv.setLineWidth(style.border_width)
        for cell in placement.cells:
            canv.rect(cell.rect.x, cell.rect.y, cell.rect.width, cell.rect.height, stroke=1, fill=0)

    # ------------------------------------------------------------------
    # 字段
    # ------------------------------------------------------------------

    def _draw_field(
        self,
        canv: canvas.Canvas,
        placement: FieldPlacement,
        stylesheet: ResolvedStylesheet,
    ) -> None:
        if placement.label and placement.label_rect is not None:
            label_style = stylesheet.fields.label
            canv.setFont(label_style.font_family, label_style.font_size)
            canv.setFillColor(_hex(label_style.color))
            canv.drawString(placement.label_rect.x, placement.label_rect.y, placement.label)

        field_type = placement.field_type
        if field_type in ("text", "textarea", "signature"):
            self._draw_text_field(canv, placement)
        elif field_type == "checkbox":
            self._draw_checkbox(canv, placement)
        elif field_type == "radio":
            self._draw_radio_group(canv, placement)
        elif field_type == "dropdown":
            self._draw_dropdown(canv, placement)
        else:
            raise RenderError(f"不支持的字段类型: {field_type}")

    def _common_kwargs(self, placement: FieldPlacement) -> dict:
        style = placement.style
        return {
            "borderColor": _hex(style.border_color),
            "fillColor": _hex(style.background_color, colors.white),
            "textColor": _hex(style.color),
            "borderWidth": style.border_width,
            "forceBorder": True,
            "annotationFlags": _annotation_flags(placement),
        }

    def _draw_text_field(self, canv: canvas.Canvas, placement: FieldPlacement) -> None:
        rect = placement.rect
        style = placement.style
        multiline = bool(placement.constraints.get("multiline"))
        font_size = style.font_size if multiline else min(style.font_size, max(rect.height - 4, 1))
        canv.acroForm.textfield(
            name=placement.field_name,
            tooltip=placement.label or placement.placeholder or placement.field_name,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            fontName=style.font_family,
            fontSize=font_size,
            value=_text_value(placement.default_value),
            maxlen=placement.constraints.get("max_length") or DEFAULT_MAXLEN,
            fieldFlags=_field_flags(placement, "multiline") if multiline else _field_flags(placement),
            **self._common_kwargs(placement),
        )

    def _draw_checkbox(self, canv: canvas.Canvas, placement: FieldPlacement) -> None:
        rect = placement.rect
        canv.acroForm.checkbox(
            name=placement.field_name,
            tooltip=placement.label or placement.field_name,
            x=rect.x,
            y=rect.y,
            size=min(rect.width, rect.height),
            checked=placement.default_value is True,
            buttonStyle="check",
            fieldFlags=_field_flags(placement),
            **self._common_kwargs(placement),
        )

    def _draw_radio_group(self, canv: canvas.Canvas, placement: FieldPlacement) -> None:
        style = placement.style
        default = _text_value(placement.default_value)
        for widget in placement.widgets:
            canv.acroForm.radio(
                name=placement.field_name,
                tooltip=widget.label,
                value=widget.value,
                selected=widget.value == default,
                x=widget.rect.x,
                y=widget.rect.y,
                size=widget.rect.width,
                buttonStyle="circle",
                shape="circle",
                fieldFlags=_field_flags(placement, "noToggleToOff", "radio"),
                **self._common_kwargs(placement),
            )
            if widget.label_rect is not None:
                canv.setFont(style.font_family, style.font_size)
                canv.setFillColor(_hex(style.color))
                canv.drawString(widget.label_rect.x, widget.label_rect.y + 2, widget.label)

    def _draw_dropdown(self, canv: canvas.Canvas, placement: FieldPlacement) -> None:
        rect = placement.rect
        style = placement.style
        labels = [option.label for option in placement.options]
        if not labels:
            # 空选项：保留一个空格占位项（reportlab 要求 value 非空）
            labels = [" "]

        default = _text_value(placement.default_value)
        value = labels[0]
        for option in placement.options:
            if default in (option.value, option.label):
                value = option.label
                break

        canv.acroForm.choice(
            name=placement.field_name,
            tooltip=placement.label or placement.field_name,
            options=labels,
            value=value,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            fontName=style.font_family,
            fontSize=min(style.font_size, max(rect.height - 4, 1)),
            fieldFlags=_field_flags(placement, "combo"),
            **self._common_kwargs(placement),
        )
