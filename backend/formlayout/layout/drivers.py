"""
内容放置驱动 - 标题/段落/分隔线/留白/提示框/独立字段

每个驱动接收 (上下文, 元素, 样式表)，返回该元素产生的放置记录，
并以副作用推进游标。分页判断总在绘制之前完成。

间距：
- 元素上下外边距来自样式表对应分区（margin_top / margin_bottom）
- 外边距只在页内留白（ctx.skip），不会把留白带到下一页

测试要点：
- test_paragraph_stack_cursor: 三段两行段落后游标 y≈619.2
- test_paragraphs_overflow: 50 段单行段落至少 2 页
- test_paragraph_split_across_pages: 段落跨页拆成多段记录
- test_field_label_above / test_field_label_left: 独立字段标签布局
- test_dispatch_exhaustive: 每种内容类型都有驱动
"""

from __future__ import annotations

import logging

from ..interfaces import IContentDriver, LayoutPreconditionError
from ..models import (
    AdmonitionContent,
    ContentPlacement,
    FieldContent,
    FieldPlacement,
    FormField,
    HeadingContent,
    ParagraphContent,
    PlacedLine,
    PlacementRecord,
    Rect,
    ResolvedStylesheet,
    RuleContent,
    SpacerContent,
)
from .engine import EPS, LayoutContext
from .fields import default_field_size, place_field
from .tables import TableDriver
from .text_metrics import wrap_text

logger = logging.getLogger(__name__)

ADMONITION_PREFIXES = {
    "warning": "Warning",
    "note": "Note",
    "info": "Info",
    "tip": "Tip",
    "danger": "Danger",
}


def flow_lines(
    ctx: LayoutContext,
    lines: list[str],
    font_size: float,
    line_advance: float,
    width: float,
    kind: str,
    text: str,
    level: int | None = None,
) -> list[ContentPlacement]:
    """
    逐行排布文本，每行推进 line_advance

    某行在当前页放不下时先换页；每一页上的连续行合并为一条记录，
    第二页起的记录标记 continued=True。
    """
    placements: list[ContentPlacement] = []
    segment: list[PlacedLine] = []
    segment_top = ctx.y
    segment_page = ctx.page_index

    def flush() -> None:
        if not segment:
            return
        bottom = max(segment_top - len(segment) * line_advance, ctx.bottom)
        placements.append(
            ContentPlacement(
                kind=kind,
                page_index=segment_page,
                rect=Rect(x=segment[0].x, y=bottom, width=width, height=segment_top - bottom),
                text=text,
                lines=list(segment),
                level=level,
                continued=bool(placements),
            )
        )
        segment.clear()

    for line in lines:
        if line_advance > ctx.remaining_height() + EPS and not ctx.at_page_top:
            flush()
            ctx.force_next_page()
            segment_top = ctx.y
            segment_page = ctx.page_index
        segment.append(PlacedLine(text=line, x=ctx.x, baseline=ctx.y - font_size, font_size=font_size))
        ctx.advance(line_advance)
        if ctx.page_index != segment_page:
            # 单行高于整页时，游标已被推到后续页
            flush()
            segment_top = ctx.y
            segment_page = ctx.page_index

    flush()
    return placements


class HeadingDriver(IContentDriver):
    """标题（整体不跨页）"""

    def place(self, ctx, element: HeadingContent, stylesheet):
        style = stylesheet.headings.for_level(element.level)
        lines = wrap_text(element.text, style.font_size, ctx.width, ctx.measurer)
        ctx.ensure_space(style.margin_top + len(lines) * style.line_advance)
        ctx.skip(style.margin_top)
        records = flow_lines(
            ctx, lines, style.font_size, style.line_advance, ctx.width,
            kind="heading", text=element.text, level=element.level,
        )
        ctx.skip(style.margin_bottom)
        return records


class ParagraphDriver(IContentDriver):
    """段落（可跨页）"""

    def place(self, ctx, element: ParagraphContent, stylesheet):
        style = stylesheet.paragraph
        font_size = element.font_size or style.font_size
        line_advance = font_size * style.line_height
        max_width = min(element.max_width or style.max_width or ctx.width, ctx.width)
        lines = wrap_text(element.text, font_size, max_width, ctx.measurer)

        ctx.ensure_space(style.margin_top + line_advance)
        ctx.skip(style.margin_top)
        records = flow_lines(ctx, lines, font_size, line_advance, max_width, kind="paragraph", text=element.text)
        ctx.skip(style.margin_bottom)
        return records


class RuleDriver(IContentDriver):
    """分隔线"""

    def place(self, ctx, element: RuleContent, stylesheet):
        style = stylesheet.rule
        ctx.ensure_space(style.margin_top + style.thickness)
        ctx.skip(style.margin_top)
        rect = Rect(x=ctx.x, y=ctx.y - style.thickness, width=ctx.width, height=style.thickness)
        record = ContentPlacement(kind="rule", page_index=ctx.page_index, rect=rect)
        ctx.advance(style.thickness)
        ctx.skip(style.margin_bottom)
        return [record]


class SpacerDriver(IContentDriver):
    """留白（不绘制）"""

    def place(self, ctx, element: SpacerContent, stylesheet):
        top = ctx.y
        bottom = max(top - element.height, ctx.bottom)
        record = ContentPlacement(
            kind="spacer",
            page_index=ctx.page_index,
            rect=Rect(x=ctx.x, y=bottom, width=ctx.width, height=top - bottom),
        )
        ctx.advance(element.height)
        return [record]


class AdmonitionDriver(IContentDriver):
    """提示框：左侧色条 + 标题 + 正文"""

    def place(self, ctx, element: AdmonitionContent, stylesheet):
        style = stylesheet.admonition
        inner_width = ctx.width - 2 * style.padding - style.border_width
        lines = wrap_text(element.text, style.content_font_size, inner_width, ctx.measurer)

        line_advance = style.content_font_size * style.content_line_height
        content_height = (len(lines) - 1) * line_advance + style.content_font_size if lines else 0.0
        total = style.padding * 2 + style.title_font_size + style.title_gap + content_height

        ctx.ensure_space(style.margin_top + total)
        ctx.skip(style.margin_top)

        top = ctx.y
        text_x = ctx.x + style.border_width + style.padding
        title_baseline = top - style.padding - style.title_font_size
        baseline = title_baseline - style.title_gap - style.content_font_size
        placed: list[PlacedLine] = []
        for line in lines:
            placed.append(PlacedLine(text=line, x=text_x, baseline=baseline, font_size=style.content_font_size))
            baseline -= line_advance

        prefix = ADMONITION_PREFIXES.get(element.variant, "Note")
        record = ContentPlacement(
            kind="admonition",
            page_index=ctx.page_index,
            rect=Rect(x=ctx.x, y=top - total, width=ctx.width, height=total),
            text=element.text,
            title=f"{prefix}: {element.title}" if element.title else prefix,
            variant=element.variant,
            lines=placed,
        )
        ctx.advance(total)
        ctx.skip(style.margin_bottom)
        return [record]


def standalone_field_height(field: FormField, stylesheet: ResolvedStylesheet, height: float | None = None) -> float:
    """独立字段控件高度：显式 > 多行/单选默认 > 与表格单元格字段一致"""
    if height:
        return height
    if field.type in ("textarea", "radio", "signature"):
        return default_field_size(field, stylesheet)[1]
    table = stylesheet.table
    return table.row_height - table.cell_padding * 2


def place_standalone_field(
    ctx: LayoutContext,
    field: FormField,
    stylesheet: ResolvedStylesheet,
    width: float | None = None,
    height: float | None = None,
    label_width: float | None = None,
) -> list[PlacementRecord]:
    """
    放置独立字段（标签 + 控件）

    标签位置：
    - above: 标签行高 = 标签字号 + 间距，控件在其下方
    - left / right: 标签占 label_width（默认120），与控件垂直居中
    - none: 仅控件

    先整体预留空间，标签与控件都确定后游标只推进一次。
    """
    fields_style = stylesheet.fields
    label_style = fields_style.label
    position = field.label_position or "above"
    if not field.label:
        position = "none"

    field_height = standalone_field_height(field, stylesheet, height)
    label_w = label_width or label_style.width

    if position == "above":
        label_height = label_style.font_size + label_style.gap
        total = label_height + field_height
        field_width = width or ctx.width
    elif position in ("left", "right"):
        label_height = 0.0
        total = max(field_height, label_style.font_size)
        field_width = width or max(ctx.width - label_w, 0.0)
    else:
        label_height = 0.0
        total = field_height
        field_width = width or ctx.width

    ctx.ensure_space(fields_style.margin_top + total)
    ctx.skip(fields_style.margin_top)

    top = ctx.y
    x = ctx.x
    field_y = top - label_height - field_height
    field_x = x + label_w if position == "left" else x

    if field.type == "checkbox":
        size = min(field_height, fields_style.checkbox.size)
        rect = Rect(x=field_x, y=field_y + (field_height - size) / 2, width=size, height=size)
    else:
        rect = Rect(x=field_x, y=field_y, width=field_width, height=field_height)

    placement: FieldPlacement = place_field(field, rect, ctx.page_index, stylesheet)

    label_rect = None
    if position == "above":
        label_rect = Rect(x=x, y=top - label_style.font_size, width=field_width, height=label_style.font_size)
    elif position == "left":
        label_rect = Rect(
            x=x,
            y=field_y + (field_height - label_style.font_size) / 2,
            width=label_w - label_style.gap,
            height=label_style.font_size,
        )
    elif position == "right":
        label_rect = Rect(
            x=placement.rect.right + label_style.gap,
            y=field_y + (field_height - label_style.font_size) / 2,
            width=label_w - label_style.gap,
            height=label_style.font_size,
        )

    placement.label_position = position
    placement.label_rect = label_rect

    ctx.advance(total)
    ctx.skip(fields_style.margin_bottom)
    return [placement]


class FieldDriver(IContentDriver):
    """独立字段元素"""

    def place(self, ctx, element: FieldContent, stylesheet):
        return place_standalone_field(
            ctx,
            element.to_form_field(),
            stylesheet,
            width=element.width,
            height=element.height,
            label_width=element.label_width,
        )


CONTENT_DRIVERS: dict[str, IContentDriver] = {
    "heading": HeadingDriver(),
    "paragraph": ParagraphDriver(),
    "rule": RuleDriver(),
    "spacer": SpacerDriver(),
    "admonition": AdmonitionDriver(),
    "table": TableDriver(),
    "field": FieldDriver(),
}


def place_content(ctx: LayoutContext, element, stylesheet: ResolvedStylesheet) -> list[PlacementRecord]:
    """按内容类型分派到驱动"""
    driver = CONTENT_DRIVERS.get(element.type)
    if driver is None:
        raise LayoutPreconditionError(f"没有对应的内容驱动: {element.type}")
    return driver.place(ctx, element, stylesheet)
