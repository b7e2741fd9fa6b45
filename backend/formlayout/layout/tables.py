"""
表格驱动 - 表头、数据行与单元格字段

职责：
1. 展开表格定义（rowCount 生成行 / values 紧凑写法）
2. 逐行放置；某行放不下时换页，并在新页顶部重复表头（repeated=True）
3. 单元格字段交给字段策略：矩形 = 列区域内缩 cellPadding，复选框在单元格内居中
4. 列宽总和超过内容区宽度时按比例缩放（记录告警）

测试要点：
- test_table_header_repeat: 跨页重复表头
- test_table_row_order: 行顺序保持
- test_table_cell_rect: 单元格字段矩形
- test_table_scaled_columns: 超宽表格按比例缩放
"""

from __future__ import annotations

import logging

from ..interfaces import IContentDriver
from ..models import (
    ContentPlacement,
    PlacedCell,
    PlacedLine,
    PlacementRecord,
    Rect,
    ResolvedStylesheet,
    TableCellField,
    TableContent,
)
from ..schema.normalizer import cell_to_form_field, expand_table
from .engine import EPS, LayoutContext
from .fields import place_field

logger = logging.getLogger(__name__)


def column_widths(ctx: LayoutContext, table: TableContent) -> list[float]:
    """列宽（超出内容区时按比例缩放）"""
    widths = [col.width for col in table.columns]
    total = sum(widths)
    if total <= ctx.width + EPS:
        return widths

    scale = ctx.width / total
    message = f"表格列宽总和 {total:.1f} 超出内容区宽度 {ctx.width:.1f}，按比例缩放"
    logger.warning(message)
    ctx.warnings.append(message)
    return [w * scale for w in widths]


class TableDriver(IContentDriver):
    """表格驱动"""

    def place(
        self,
        ctx: LayoutContext,
        element: TableContent,
        stylesheet: ResolvedStylesheet,
    ) -> list[PlacementRecord]:
        style = stylesheet.table
        label_style = stylesheet.fields.label
        rows = expand_table(element)
        widths = column_widths(ctx, element)
        row_height = element.row_height or style.row_height
        header_height = element.header_height or style.header_height
        label_height = label_style.font_size + label_style.gap if element.label else 0.0

        # 标签 + 表头 + 首行必须在同一页
        first_row = row_height if rows else 0.0
        ctx.ensure_space(style.margin_top + label_height + header_height + first_row)
        ctx.skip(style.margin_top)

        records: list[PlacementRecord] = []
        x = ctx.x
        total_width = sum(widths)

        if element.label:
            top = ctx.y
            records.append(
                ContentPlacement(
                    kind="table_label",
                    page_index=ctx.page_index,
                    rect=Rect(x=x, y=top - label_height, width=total_width, height=label_height),
                    text=element.label,
                    lines=[
                        PlacedLine(
                            text=element.label,
                            x=x,
                            baseline=top - label_style.font_size,
                            font_size=label_style.font_size,
                        )
                    ],
                )
            )
            ctx.advance(label_height)

        records.append(self._header(ctx, element, x, widths, header_height, repeated=False))

        for row_index, cells in enumerate(rows):
            if row_height > ctx.remaining_height() + EPS:
                ctx.force_next_page()
                records.append(self._header(ctx, element, ctx.x, widths, header_height, repeated=True))
                x = ctx.x
            records.extend(
                self._row(ctx, element, x, widths, row_height, row_index, cells, stylesheet)
            )

        ctx.skip(style.margin_bottom)
        logger.debug(f"表格放置完成: {len(element.columns)} 列 {len(rows)} 行")
        return records

    def _header(
        self,
        ctx: LayoutContext,
        table: TableContent,
        x: float,
        widths: list[float],
        height: float,
        repeated: bool,
    ) -> ContentPlacement:
        top = ctx.y
        bottom = top - height
        cells: list[PlacedCell] = []
        col_x = x
        for c, (column, width) in enumerate(zip(table.columns, widths)):
            cells.append(
                PlacedCell(
                    column_index=c,
                    rect=Rect(x=col_x, y=bottom, width=width, height=height),
                    text=column.label,
                )
            )
            col_x += width

        placement = ContentPlacement(
            kind="table_header",
            page_index=ctx.page_index,
            rect=Rect(x=x, y=bottom, width=sum(widths), height=height),
            cells=cells,
            repeated=repeated,
            show_borders=table.show_borders,
        )
        ctx.advance(height)
        return placement

    def _row(
        self,
        ctx: LayoutContext,
        table: TableContent,
        x: float,
        widths: list[float],
        height: float,
        row_index: int,
        cells: list,
        stylesheet: ResolvedStylesheet,
    ) -> list[PlacementRecord]:
        style = stylesheet.table
        pad = style.cell_padding
        top = ctx.y
        bottom = top - height
        page_index = ctx.page_index

        placed_cells: list[PlacedCell] = []
        fields: list[PlacementRecord] = []
        col_x = x
        for c, (cell, width) in enumerate(zip(cells, widths)):
            placed_cells.append(
                PlacedCell(
                    column_index=c,
                    rect=Rect(x=col_x, y=bottom, width=width, height=height),
                    text=cell.value if cell.type == "label" else "",
                )
            )
            if isinstance(cell, TableCellField):
                inner = Rect(
                    x=col_x + pad,
                    y=bottom + pad,
                    width=max(0.0, width - 2 * pad),
                    height=max(0.0, height - 2 * pad),
                )
                fields.append(self._cell_field(cell, inner, page_index, stylesheet))
            col_x += width

        row = ContentPlacement(
            kind="table_row",
            page_index=page_index,
            rect=Rect(x=x, y=bottom, width=sum(widths), height=height),
            cells=placed_cells,
            row_index=row_index,
            show_borders=table.show_borders,
        )
        ctx.advance(height)
        return [row, *fields]

    def _cell_field(
        self,
        cell: TableCellField,
        inner: Rect,
        page_index: int,
        stylesheet: ResolvedStylesheet,
    ):
        field = cell_to_form_field(cell)
        if cell.type == "checkbox":
            size = max(0.0, min(inner.height - 2, stylesheet.fields.checkbox.size))
            inner = Rect(
                x=inner.x + (inner.width - size) / 2,
                y=inner.y + (inner.height - size) / 2,
                width=size,
                height=size,
            )
        return place_field(field, inner, page_index, stylesheet)
