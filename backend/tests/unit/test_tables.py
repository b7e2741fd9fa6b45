"""
表格驱动单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_tables.py -v
"""

import pytest

from formlayout.layout import LayoutContext, TableDriver, column_widths
from formlayout.models import ContentPlacement, FieldPlacement, ResolvedStylesheet, TableContent


def _table(**kwargs) -> TableContent:
    return TableContent.model_validate({"type": "table", **kwargs})


ORDER_COLUMNS = [
    {"label": "Item", "width": 200, "fieldSuffix": "item"},
    {"label": "Size", "width": 120, "fieldSuffix": "size", "cellType": "dropdown", "options": ["S", "M"]},
    {"label": "Gift", "width": 60, "fieldSuffix": "gift", "cellType": "checkbox"},
]


def _contents(records, kind):
    return [r for r in records if isinstance(r, ContentPlacement) and r.kind == kind]


class TestTableLayout:
    """表格布局测试"""

    def test_label_header_rows(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试标签、表头与行的顺序和位置"""
        table = _table(label="Order", fieldPrefix="o", rowCount=2, columns=ORDER_COLUMNS)
        records = TableDriver().place(ctx, table, stylesheet)

        kinds = [r.kind if isinstance(r, ContentPlacement) else r.field_type for r in records]
        assert kinds == [
            "table_label", "table_header",
            "table_row", "text", "dropdown", "checkbox",
            "table_row", "text", "dropdown", "checkbox",
        ]

        header = _contents(records, "table_header")[0]
        # 段前 12，标签 11 + 4
        assert header.rect.top == pytest.approx(720 - 12 - 15)
        assert [c.text for c in header.cells] == ["Item", "Size", "Gift"]
        assert header.repeated is False
        # 段后 12
        assert ctx.y == pytest.approx(720 - 12 - 15 - 24 - 44 - 12)

    def test_table_cell_rect(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试单元格字段矩形 = 列区域内缩 cellPadding"""
        table = _table(fieldPrefix="o", rowCount=1, columns=ORDER_COLUMNS)
        records = TableDriver().place(ctx, table, stylesheet)
        row = _contents(records, "table_row")[0]
        fields = {r.field_name: r for r in records if isinstance(r, FieldPlacement)}

        text = fields["o_item_1"].rect
        assert text.x == pytest.approx(row.rect.x + 3)
        assert text.y == pytest.approx(row.rect.y + 3)
        assert text.width == pytest.approx(194)
        assert text.height == pytest.approx(16)

        assert fields["o_size_1"].options[1].value == "M"

    def test_checkbox_centred(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试复选框在单元格内居中"""
        table = _table(fieldPrefix="o", rowCount=1, columns=ORDER_COLUMNS)
        records = TableDriver().place(ctx, table, stylesheet)
        row = _contents(records, "table_row")[0]
        box = next(r for r in records if isinstance(r, FieldPlacement) and r.field_type == "checkbox").rect

        cell = row.cells[2].rect
        assert box.width == box.height == 12
        assert box.x + box.width / 2 == pytest.approx(cell.x + cell.width / 2)
        assert box.y + box.height / 2 == pytest.approx(cell.y + cell.height / 2)

    def test_static_cells(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试静态文本单元格"""
        table = _table(
            columns=[{"label": "Item", "width": 150, "cellType": "label"}, {"label": "Amount", "width": 100}],
            rows=[{"values": ["Rent", "rent"]}, {"values": ["Food", "food"]}],
        )
        records = TableDriver().place(ctx, table, stylesheet)
        rows = _contents(records, "table_row")
        assert [r.cells[0].text for r in rows] == ["Rent", "Food"]
        assert [r.cells[1].text for r in rows] == ["", ""]
        assert [r.field_name for r in records if isinstance(r, FieldPlacement)] == ["rent", "food"]


class TestTablePaging:
    """表格跨页测试"""

    def test_table_header_repeat(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试跨页重复表头"""
        table = _table(fieldPrefix="r", rowCount=40, columns=[{"label": "Name", "width": 200}])
        records = TableDriver().place(ctx, table, stylesheet)

        headers = _contents(records, "table_header")
        assert len(headers) == 2
        assert headers[1].repeated is True
        assert headers[1].page_index == 1
        assert headers[1].rect.top == pytest.approx(720)

        rows = _contents(records, "table_row")
        # 首页：708 - 24 = 684，(684 - 72) / 22 -> 27 行
        assert [r.page_index for r in rows].count(0) == 27
        assert rows[27].rect.top == pytest.approx(720 - 24)

    def test_table_row_order(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试行顺序保持"""
        table = _table(fieldPrefix="r", rowCount=40, columns=[{"label": "Name", "width": 200}])
        records = TableDriver().place(ctx, table, stylesheet)
        rows = _contents(records, "table_row")
        assert [r.row_index for r in rows] == list(range(40))
        names = [r.field_name for r in records if isinstance(r, FieldPlacement)]
        assert names == [f"r_col0_{i}" for i in range(1, 41)]

    def test_start_on_new_page_when_first_row_missing(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试表头与首行放不下时整体换页"""
        ctx.advance(600)
        table = _table(fieldPrefix="r", rowCount=1, columns=[{"label": "Name", "width": 200}])
        records = TableDriver().place(ctx, table, stylesheet)
        assert all(r.page_index == 1 for r in records)
        assert _contents(records, "table_header")[0].repeated is False


class TestColumnWidths:
    """列宽测试"""

    def test_fits(self, ctx: LayoutContext):
        """测试不超宽时保持原值"""
        table = _table(columns=[{"width": 100}, {"width": 200}])
        assert column_widths(ctx, table) == [100, 200]
        assert ctx.warnings == []

    def test_table_scaled_columns(self, ctx: LayoutContext, stylesheet: ResolvedStylesheet):
        """测试超宽表格按比例缩放"""
        table = _table(fieldPrefix="w", rowCount=1, columns=[{"label": "A", "width": 300}, {"label": "B", "width": 300}])
        records = TableDriver().place(ctx, table, stylesheet)
        header = _contents(records, "table_header")[0]
        assert header.rect.width == pytest.approx(468)
        assert header.cells[0].rect.width == pytest.approx(234)
        assert len(ctx.warnings) == 1
