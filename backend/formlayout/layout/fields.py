"""
字段放置策略 - 每种字段类型一个策略

策略只计算控件几何与元数据，不修改排版上下文。
矩形以左下角为锚点；宽或高为0时使用该类型的默认尺寸。

默认尺寸：
- text: 200 x 20
- textarea: 宽400，高 = 行数(默认4) * 字号 * 行高 + 2 * 内边距
- checkbox / radio: 边长12；单选组每个选项一个控件（流式/表格横排，绝对定位竖排，间距24）
- dropdown: 150 x 20，选项可为空
- signature: 200 x 50；必填签名通过 style_override 加粗并改用深红边框

测试要点：
- test_text_constraints_passthrough: 约束原样透传
- test_textarea_height_from_lines: 多行高度计算
- test_radio_widgets: 单选组控件排布
- test_empty_dropdown: 空选项下拉框
- test_required_signature_override: 必填签名样式覆盖
"""

from __future__ import annotations

import logging

from ..interfaces import IFieldStrategy
from ..models import (
    FieldBoxStyle,
    FieldPlacement,
    FormField,
    OptionWidget,
    Rect,
    ResolvedStylesheet,
    WidgetStyle,
)

logger = logging.getLogger(__name__)

RADIO_LABEL_WIDTH = 80.0
RADIO_LABEL_GAP = 4.0


def _widget_style(field: FormField, box: FieldBoxStyle) -> tuple[WidgetStyle, dict]:
    """基础样式 + 字段级覆盖，返回 (最终样式, 与默认不同的键)"""
    override: dict = {}
    if field.font_size is not None:
        override["font_size"] = field.font_size
    if field.font_color is not None:
        override["color"] = field.font_color
    if field.background_color is not None:
        override["background_color"] = field.background_color
    if field.border_color is not None:
        override["border_color"] = field.border_color

    base = {
        "font_family": box.font_family,
        "font_size": box.font_size,
        "color": box.color,
        "background_color": box.background_color,
        "border_color": box.border_color,
        "border_width": box.border_width,
    }
    return WidgetStyle(**{**base, **override}), override


class BaseFieldStrategy(IFieldStrategy):
    """策略基类：处理默认尺寸、样式与公共元数据"""

    field_type: str = ""

    def box_style(self, stylesheet: ResolvedStylesheet) -> FieldBoxStyle:
        return getattr(stylesheet.fields, self.field_type)

    def default_size(self, field: FormField, stylesheet: ResolvedStylesheet) -> tuple[float, float]:
        raise NotImplementedError

    def resolve_rect(self, field: FormField, rect: Rect, stylesheet: ResolvedStylesheet) -> Rect:
        if rect.width > 0 and rect.height > 0:
            return rect
        width, height = self.default_size(field, stylesheet)
        return Rect(
            x=rect.x,
            y=rect.y,
            width=rect.width if rect.width > 0 else width,
            height=rect.height if rect.height > 0 else height,
        )

    def place(
        self,
        field: FormField,
        rect: Rect,
        page_index: int,
        stylesheet: ResolvedStylesheet,
    ) -> FieldPlacement:
        resolved = self.resolve_rect(field, rect, stylesheet)
        style, override = _widget_style(field, self.box_style(stylesheet))
        placement = FieldPlacement(
            field_name=field.name,
            field_type=field.type,
            page_index=page_index,
            rect=resolved,
            label=field.label,
            options=list(field.options),
            default_value=field.default,
            placeholder=field.placeholder,
            constraints=field.constraints(),
            required=field.required,
            read_only=field.read_only,
            hidden=field.hidden,
            style=style,
            style_override=override,
        )
        return self.finish(field, placement, stylesheet)

    def finish(
        self,
        field: FormField,
        placement: FieldPlacement,
        stylesheet: ResolvedStylesheet,
    ) -> FieldPlacement:
        """类型特有的后处理（默认不变）"""
        return placement


class TextFieldStrategy(BaseFieldStrategy):
    field_type = "text"

    def default_size(self, field, stylesheet):
        style = stylesheet.fields.text
        return style.width, style.height


class TextareaFieldStrategy(BaseFieldStrategy):
    field_type = "textarea"

    def default_size(self, field, stylesheet):
        style = stylesheet.fields.textarea
        lines = field.lines or style.lines
        font_size = field.font_size or style.font_size
        return style.width, lines * font_size * style.line_height + 2 * style.padding


class CheckboxFieldStrategy(BaseFieldStrategy):
    field_type = "checkbox"

    def default_size(self, field, stylesheet):
        size = stylesheet.fields.checkbox.size
        return size, size


class RadioFieldStrategy(BaseFieldStrategy):
    """
    单选组

    控件自组矩形左上角开始排布：横排时每个选项占 size + spacing + 80，
    竖排时每个选项下移 spacing。
    """

    field_type = "radio"

    def __init__(self, vertical: bool = False):
        self.vertical = vertical

    def default_size(self, field, stylesheet):
        style = stylesheet.fields.radio
        count = max(1, len(field.options))
        if self.vertical:
            return style.size + RADIO_LABEL_GAP + RADIO_LABEL_WIDTH, style.size + (count - 1) * style.spacing
        pitch = style.size + style.spacing + RADIO_LABEL_WIDTH
        return (count - 1) * pitch + style.size + RADIO_LABEL_GAP + RADIO_LABEL_WIDTH, style.size

    def finish(self, field, placement, stylesheet):
        style = stylesheet.fields.radio
        rect = placement.rect
        size = min(style.size, rect.height)
        pitch = style.size + style.spacing + RADIO_LABEL_WIDTH

        widgets: list[OptionWidget] = []
        for i, option in enumerate(field.options):
            if self.vertical:
                x = rect.x
                y = rect.top - size - i * style.spacing
            else:
                x = rect.x + i * pitch
                y = rect.top - (rect.height + size) / 2
            widgets.append(
                OptionWidget(
                    value=option.value,
                    label=option.label,
                    rect=Rect(x=x, y=y, width=size, height=size),
                    label_rect=Rect(
                        x=x + size + RADIO_LABEL_GAP,
                        y=y,
                        width=RADIO_LABEL_WIDTH,
                        height=size,
                    ),
                )
            )
        placement.widgets = widgets
        return placement


class DropdownFieldStrategy(BaseFieldStrategy):
    field_type = "dropdown"

    def default_size(self, field, stylesheet):
        style = stylesheet.fields.dropdown
        return style.width, style.height

    def finish(self, field, placement, stylesheet):
        if not field.options:
            logger.warning(f"下拉字段 {field.name} 没有选项，将生成空下拉框")
        return placement


class SignatureFieldStrategy(BaseFieldStrategy):
    field_type = "signature"

    def default_size(self, field, stylesheet):
        style = stylesheet.fields.signature
        return style.width, style.height

    def finish(self, field, placement, stylesheet):
        if not field.required:
            return placement
        style = stylesheet.fields.signature
        override = {
            **placement.style_override,
            "border_color": style.required_border_color,
            "border_width": style.required_border_width,
        }
        placement.style = placement.style.model_copy(
            update={"border_color": style.required_border_color, "border_width": style.required_border_width}
        )
        placement.style_override = override
        return placement


STRATEGIES: dict[str, BaseFieldStrategy] = {
    "text": TextFieldStrategy(),
    "textarea": TextareaFieldStrategy(),
    "checkbox": CheckboxFieldStrategy(),
    "radio": RadioFieldStrategy(),
    "dropdown": DropdownFieldStrategy(),
    "signature": SignatureFieldStrategy(),
}

_VERTICAL_RADIO = RadioFieldStrategy(vertical=True)


def get_strategy(field_type: str, vertical: bool = False) -> BaseFieldStrategy:
    """按字段类型取策略"""
    if field_type == "radio" and vertical:
        return _VERTICAL_RADIO
    return STRATEGIES[field_type]


def default_field_size(field: FormField, stylesheet: ResolvedStylesheet, vertical: bool = False) -> tuple[float, float]:
    """字段默认尺寸"""
    return get_strategy(field.type, vertical).default_size(field, stylesheet)


def place_field(
    field: FormField,
    rect: Rect,
    page_index: int,
    stylesheet: ResolvedStylesheet,
    vertical: bool = False,
) -> FieldPlacement:
    """便捷函数：按字段类型分派到策略"""
    return get_strategy(field.type, vertical).place(field, rect, page_index, stylesheet)
