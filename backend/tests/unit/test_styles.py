"""
样式表解析单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_styles.py -v
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from formlayout.interfaces import StylesheetError
from formlayout.models import ResolvedStylesheet
from formlayout.styles import (
    DEFAULT_TOKENS,
    StylesheetResolver,
    deep_merge,
    load_stylesheet,
    normalize_keys,
    resolve_stylesheet,
)


class TestDefaultStylesheet:
    """内置令牌测试"""

    def test_default_values(self, stylesheet: ResolvedStylesheet):
        """测试默认令牌完整"""
        assert stylesheet.paragraph.font_size == 12
        assert stylesheet.paragraph.line_height == 1.5
        assert stylesheet.headings.h1.font_size == 20
        assert stylesheet.fields.text.width == 200
        assert stylesheet.table.row_height == 22
        assert set(stylesheet.admonition.variants) == {"warning", "note", "info", "tip", "danger"}

    def test_default_geometry(self, stylesheet: ResolvedStylesheet):
        """测试默认页面几何"""
        geometry = stylesheet.page.geometry()
        assert (geometry.width, geometry.height) == (612.0, 792.0)
        assert geometry.margins.left == 72

    def test_frozen(self, stylesheet: ResolvedStylesheet):
        """测试样式表只读"""
        with pytest.raises(ValidationError):
            stylesheet.paragraph.font_size = 99


class TestResolver:
    """覆盖合并测试"""

    def test_partial_override(self):
        """测试部分覆盖 + 继承"""
        ss = StylesheetResolver().resolve({"paragraph": {"fontSize": 10, "lineHeight": 1.4}})
        assert ss.paragraph.font_size == 10
        assert ss.paragraph.line_height == 1.4
        assert ss.paragraph.margin_bottom == 12
        assert ss.headings.h2.font_size == 16

    def test_heading_keys_preserved(self):
        """测试 h1..h6 键名不被拆分"""
        ss = resolve_stylesheet({"headings": {"h1": {"fontSize": 30}}})
        assert ss.headings.h1.font_size == 30

    def test_unknown_key_rejected(self):
        """测试未知键报错"""
        with pytest.raises(StylesheetError) as exc_info:
            StylesheetResolver().resolve({"paragraph": {"fontSzie": 10}})
        assert "font_szie" in str(exc_info.value)

    def test_invalid_value_rejected(self):
        """测试非法取值报错"""
        with pytest.raises(StylesheetError):
            StylesheetResolver().resolve({"table": {"rowHeight": -1}})

    def test_margins_shorthand(self):
        """测试页边距数字简写"""
        ss = StylesheetResolver().resolve({"page": {"size": "a4", "margins": 36}})
        geometry = ss.page.geometry()
        assert geometry.width == 595.28
        assert geometry.margins.top == 36
        assert geometry.margins.right == 36

    def test_custom_page_size(self):
        """测试自定义宽高优先于纸张名"""
        ss = StylesheetResolver().resolve({"page": {"width": 400, "height": 600}})
        geometry = ss.page.geometry()
        assert (geometry.width, geometry.height) == (400, 600)

    def test_unknown_page_size_rejected(self):
        """测试未知纸张名在解析阶段报错"""
        with pytest.raises(StylesheetError) as exc_info:
            StylesheetResolver().resolve({"page": {"size": "a5"}})
        assert "a5" in str(exc_info.value)

    def test_unknown_page_size_with_explicit_dimensions(self):
        """测试给出宽高时纸张名不做限制"""
        ss = StylesheetResolver().resolve({"page": {"size": "card", "width": 300, "height": 200}})
        assert ss.page.geometry().width == 300

    def test_no_override_is_cached_default(self):
        """测试无覆盖时返回缓存的默认样式表"""
        assert resolve_stylesheet() is resolve_stylesheet({})


class TestOverrideFiles:
    """覆盖文件测试"""

    def test_resolve_file(self, temp_dir: Path):
        """测试读取覆盖文件"""
        path = temp_dir / "compact.yaml"
        path.write_text("paragraph:\n  marginBottom: 4\nfields:\n  text:\n    height: 18\n", encoding="utf-8")
        ss = load_stylesheet(path)
        assert ss.paragraph.margin_bottom == 4
        assert ss.fields.text.height == 18

    def test_missing_file(self, temp_dir: Path):
        """测试文件不存在"""
        with pytest.raises(StylesheetError):
            load_stylesheet(temp_dir / "missing.yaml")

    def test_non_mapping_root(self, temp_dir: Path):
        """测试根节点不是映射"""
        path = temp_dir / "bad.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(StylesheetError):
            StylesheetResolver().resolve_file(path)


class TestHelpers:
    """工具函数测试"""

    def test_normalize_keys(self):
        """测试 camelCase -> snake_case"""
        assert normalize_keys({"headerBackgroundColor": "#fff", "h1": {"lineHeight": 1}}) == {
            "header_background_color": "#fff",
            "h1": {"line_height": 1},
        }

    def test_deep_merge_does_not_mutate(self):
        """测试深度合并不修改输入"""
        base = {"a": {"b": 1, "c": 2}}
        merged = deep_merge(base, {"a": {"b": 5}})
        assert merged == {"a": {"b": 5, "c": 2}}
        assert base == {"a": {"b": 1, "c": 2}}

    def test_tokens_untouched_by_resolve(self):
        """测试解析不修改内置令牌"""
        StylesheetResolver().resolve({"paragraph": {"fontSize": 8}})
        assert DEFAULT_TOKENS["paragraph"]["font_size"] == 12
