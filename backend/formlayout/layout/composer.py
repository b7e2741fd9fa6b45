"""
排版编排器 - schema + 样式表 + 页面几何 -> LayoutResult

两种定位模式：
- flow: 内容元素按顺序经驱动流式放置，随后顶层 fields 作为独立字段继续流式放置；
  没有内容元素时先输出表单标题
- absolute: 预分配 form.pages 页；内容元素跳转到显式页码/坐标后放置，
  字段使用显式矩形（position.y 为控件下沿）

测试要点：
- test_flow_compose: 流式排版
- test_flow_title_when_no_content: 无内容时输出标题
- test_absolute_compose: 绝对定位排版与页数
"""

from __future__ import annotations

import logging

from ..interfaces import ITextMeasurer
from ..models import (
    ContentPlacement,
    FormField,
    FormSchema,
    LayoutResult,
    PageGeometry,
    PlacedLine,
    PlacementRecord,
    Rect,
    ResolvedStylesheet,
)
from .drivers import place_content, place_standalone_field
from .engine import LayoutContext, LayoutEngine
from .fields import default_field_size, place_field
from .text_metrics import wrap_text

logger = logging.getLogger(__name__)


class FormComposer:
    """排版编排器"""

    def __init__(self, measurer: ITextMeasurer | None = None):
        self.engine = LayoutEngine(measurer)

    def compose(
        self,
        schema: FormSchema,
        stylesheet: ResolvedStylesheet,
        geometry: PageGeometry | None = None,
    ) -> LayoutResult:
        """
        执行排版

        Args:
            schema: 已通过校验的表单
            stylesheet: 解析后的样式表
            geometry: 页面几何（None 时取样式表 page 分区）

        Returns:
            LayoutResult
        """
        geometry = geometry or stylesheet.page.geometry()
        ctx = self.engine.initialize(schema.page_count if schema.is_absolute else 1, geometry)

        if schema.is_absolute:
            placements = self._compose_absolute(ctx, schema, stylesheet)
        else:
            placements = self._compose_flow(ctx, schema, stylesheet)

        logger.info(
            f"排版完成: {schema.form.id} 共 {ctx.page_count} 页，"
            f"{len(placements)} 条放置记录"
        )
        return LayoutResult(
            form_id=schema.form.id,
            title=schema.form.title,
            version=schema.form.version,
            page_count=ctx.page_count,
            geometry=geometry,
            stylesheet=stylesheet,
            placements=placements,
            warnings=list(ctx.warnings),
        )

    # ------------------------------------------------------------------
    # 流式
    # ------------------------------------------------------------------

    def _compose_flow(
        self,
        ctx: LayoutContext,
        schema: FormSchema,
        stylesheet: ResolvedStylesheet,
    ) -> list[PlacementRecord]:
        placements: list[PlacementRecord] = []

        if not schema.content:
            placements.extend(self._title(ctx, schema, stylesheet))

        for element in schema.content:
            placements.extend(place_content(ctx, element, stylesheet))

        for field in schema.fields:
            width, _ = default_field_size(field, stylesheet)
            placements.extend(place_standalone_field(ctx, field, stylesheet, width=width))

        return placements

    def _title(
        self,
        ctx: LayoutContext,
        schema: FormSchema,
        stylesheet: ResolvedStylesheet,
    ) -> list[PlacementRecord]:
        """表单标题（一级标题样式）"""
        style = stylesheet.headings.h1
        lines = wrap_text(schema.form.title, style.font_size, ctx.width, ctx.measurer)
        height = len(lines) * style.line_advance
        top = ctx.y
        placed = [
            PlacedLine(
                text=line,
                x=ctx.x,
                baseline=top - style.font_size - i * style.line_advance,
                font_size=style.font_size,
            )
            for i, line in enumerate(lines)
        ]
        record = ContentPlacement(
            kind="title",
            page_index=ctx.page_index,
            rect=Rect(x=ctx.x, y=top - height, width=ctx.width, height=height),
            text=schema.form.title,
            level=1,
            lines=placed,
        )
        ctx.advance(height)
        ctx.skip(style.margin_bottom)
        return [record]

    # ------------------------------------------------------------------
    # 绝对定位
    # ------------------------------------------------------------------

    def _compose_absolute(
        self,
        ctx: LayoutContext,
        schema: FormSchema,
        stylesheet: ResolvedStylesheet,
    ) -> list[PlacementRecord]:
        placements: list[PlacementRecord] = []

        for element in schema.content:
            position = element.position
            ctx.move_to((element.page or 1) - 1, position.x, position.y)
            placements.extend(place_content(ctx, element, stylesheet))

        for field in schema.fields:
            rect = self._absolute_rect(field, stylesheet)
            page_index = field.page - 1
            # 页码超出预分配页数时按需补页
            ctx.move_to(page_index, ctx.x, ctx.y)
            placements.append(place_field(field, rect, page_index, stylesheet, vertical=True))

        return placements

    def _absolute_rect(self, field: FormField, stylesheet: ResolvedStylesheet) -> Rect:
        position = field.position
        width, height = default_field_size(field, stylesheet, vertical=True)
        width = position.width or width
        height = position.height or height
        y = position.y
        if field.type == "radio" and not position.height:
            # 首个选项落在 position.y，其余选项向下排布
            y = position.y - (height - stylesheet.fields.radio.size)
        return Rect(x=position.x, y=y, width=width, height=height)


def compose_form(
    schema: FormSchema,
    stylesheet: ResolvedStylesheet,
    geometry: PageGeometry | None = None,
) -> LayoutResult:
    """便捷函数"""
    return FormComposer().compose(schema, stylesheet, geometry)
