"""
排版编排器单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_composer.py -v
"""

import pytest

from formlayout.layout import FormComposer, compose_form
from formlayout.models import (
    ContentPlacement,
    FieldPlacement,
    FormSchema,
    Margins,
    PageGeometry,
    ResolvedStylesheet,
)


class TestFlowCompose:
    """流式排版测试"""

    def test_flow_compose(self, flow_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试流式排版"""
        result = FormComposer().compose(flow_schema, stylesheet)
        assert result.form_id == "registration"
        assert result.title == "Event Registration"
        assert result.version == "1.2"
        assert result.geometry.width == 612

        names = [p.field_name for p in result.field_placements()]
        assert names[:2] == ["full_name", "email"]
        assert names[-3:] == ["quantity", "price", "signature"]
        assert len(names) == 15

        first = result.content_placements()[0]
        assert first.kind == "heading"
        assert first.page_index == 0

    def test_placements_in_bounds(self, flow_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试所有记录落在内容区内"""
        result = compose_form(flow_schema, stylesheet)
        area = result.geometry.content_area
        for placement in result.placements:
            assert 0 <= placement.page_index < result.page_count
            assert placement.rect.y >= area.y - 1e-6
            assert placement.rect.top <= area.top + 1e-6

    def test_page_order_monotonic(self, flow_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试流式记录页码单调不减"""
        result = compose_form(flow_schema, stylesheet)
        pages = [p.page_index for p in result.placements]
        assert pages == sorted(pages)

    def test_top_level_fields_default_width(self, flow_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试顶层字段使用类型默认宽度"""
        result = compose_form(flow_schema, stylesheet)
        assert result.get_field("quantity").rect.width == 200
        assert result.get_field("signature").rect.height == 50
        assert result.get_field("signature").label_position == "above"

    def test_flow_title_when_no_content(self, stylesheet: ResolvedStylesheet):
        """测试无内容时输出标题"""
        schema = FormSchema.model_validate(
            {"form": {"id": "a", "title": "Contact"}, "fields": [{"name": "email", "type": "text", "label": "Email"}]}
        )
        result = compose_form(schema, stylesheet)
        title = result.placements[0]
        assert isinstance(title, ContentPlacement)
        assert title.kind == "title"
        assert title.text == "Contact"
        assert isinstance(result.placements[1], FieldPlacement)

    def test_no_title_with_content(self, flow_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试有内容时不输出标题"""
        result = compose_form(flow_schema, stylesheet)
        assert all(p.kind != "title" for p in result.content_placements())

    def test_custom_geometry(self, flow_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试调用方提供页面几何"""
        geometry = PageGeometry(width=400, height=400, margins=Margins.uniform(20))
        result = compose_form(flow_schema, stylesheet, geometry)
        assert result.geometry == geometry
        assert result.page_count > compose_form(flow_schema, stylesheet).page_count

    def test_warnings_propagate(self, stylesheet: ResolvedStylesheet):
        """测试排版告警进入结果"""
        schema = FormSchema.model_validate(
            {
                "form": {"id": "a", "title": "A"},
                "content": [{"type": "table", "columns": [{"label": "Wide", "width": 900}], "rows": []}],
            }
        )
        result = compose_form(schema, stylesheet)
        assert len(result.warnings) == 1

    def test_deterministic(self, flow_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试相同输入结果一致"""
        assert compose_form(flow_schema, stylesheet) == compose_form(flow_schema, stylesheet)


class TestAbsoluteCompose:
    """绝对定位排版测试"""

    def test_absolute_compose(self, absolute_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试绝对定位排版与页数"""
        result = compose_form(absolute_schema, stylesheet)
        assert result.page_count == 2

        heading = result.content_placements()[0]
        assert heading.page_index == 0
        assert heading.rect.x == 72
        paragraph = result.content_placements()[1]
        assert paragraph.page_index == 1
        assert paragraph.rect.top == pytest.approx(700)

    def test_field_rects(self, absolute_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试字段显式矩形"""
        result = compose_form(absolute_schema, stylesheet)
        name = result.get_field("name")
        assert name.page_index == 0
        assert (name.rect.x, name.rect.y, name.rect.width, name.rect.height) == (72, 600, 300, 20)

        agree = result.get_field("agree")
        assert agree.page_index == 1
        assert (agree.rect.width, agree.rect.height) == (12, 12)

    def test_radio_first_option_at_position(self, absolute_schema: FormSchema, stylesheet: ResolvedStylesheet):
        """测试竖排单选组首个选项落在 position.y"""
        status = compose_form(absolute_schema, stylesheet).get_field("status")
        assert status.widgets[0].rect.y == pytest.approx(400)
        assert status.widgets[1].rect.y == pytest.approx(376)
        assert status.widgets[2].rect.y == pytest.approx(352)

    def test_content_above_area_clamped(self, stylesheet: ResolvedStylesheet):
        """测试落在页眉区的内容收回到内容区并告警"""
        schema = FormSchema.model_validate(
            {
                "form": {"id": "a", "title": "A", "positioning": "absolute"},
                "content": [
                    {"type": "paragraph", "text": "In the header band", "page": 1, "position": {"x": 72, "y": 770}},
                ],
            }
        )
        result = compose_form(schema, stylesheet)
        paragraph = result.placements[0]
        assert paragraph.rect.top <= 720 + 1e-6
        assert any("y=770.0" in w for w in result.warnings)

    def test_pages_grow_without_declared_count(self, stylesheet: ResolvedStylesheet):
        """测试未声明页数时按字段页码补页"""
        schema = FormSchema.model_validate(
            {
                "form": {"id": "a", "title": "A", "positioning": "absolute"},
                "fields": [{"name": "late", "type": "text", "page": 3, "position": {"x": 72, "y": 100}}],
            }
        )
        result = compose_form(schema, stylesheet)
        assert result.page_count == 3
        assert result.get_field("late").page_index == 2
