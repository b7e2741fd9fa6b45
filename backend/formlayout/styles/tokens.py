"""
样式令牌 - 内置默认样式

所有尺寸单位为 pt。字体名使用 PDF 标准 14 字体名称。
DEFAULT_TOKENS 的结构与 ResolvedStylesheet 一一对应（snake_case 键）。
"""

from __future__ import annotations

from typing import Any

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_MONO = "Courier"

FONT_SIZES = {
    "xs": 9,
    "sm": 10,
    "base": 11,
    "md": 12,
    "lg": 14,
    "xl": 16,
    "2xl": 18,
    "3xl": 20,
}

LINE_HEIGHTS = {
    "tight": 1.2,
    "normal": 1.4,
    "relaxed": 1.5,
}

COLORS = {
    "black": "#000000",
    "white": "#ffffff",
    "gray_100": "#f5f5f5",
    "gray_200": "#f0f0f0",
    "gray_400": "#cccccc",
    "gray_500": "#999999",
    "gray_600": "#767676",
    "gray_700": "#666666",
    "gray_800": "#555555",
    "gray_900": "#333333",
    "primary_light": "#e7f3ff",
    "error_dark": "#721c24",
}


def _heading(font_size: float, margin_top: float, margin_bottom: float) -> dict[str, Any]:
    return {
        "font_family": FONT_BOLD,
        "font_size": font_size,
        "color": COLORS["black"],
        "line_height": LINE_HEIGHTS["tight"],
        "margin_top": margin_top,
        "margin_bottom": margin_bottom,
    }


def _field_box(font_size: float) -> dict[str, Any]:
    return {
        "font_family": FONT_REGULAR,
        "font_size": font_size,
        "color": COLORS["black"],
        "background_color": COLORS["primary_light"],
        "border_color": COLORS["gray_600"],
        "border_width": 1,
    }


DEFAULT_TOKENS: dict[str, Any] = {
    "page": {
        "size": "letter",
        "width": None,
        "height": None,
        "margins": {"top": 72, "right": 72, "bottom": 72, "left": 72},
    },
    "headings": {
        "h1": _heading(FONT_SIZES["3xl"], 0, 18),
        "h2": _heading(FONT_SIZES["xl"], 24, 12),
        "h3": _heading(FONT_SIZES["lg"], 18, 12),
        "h4": _heading(FONT_SIZES["md"], 12, 12),
        "h5": _heading(FONT_SIZES["base"], 12, 12),
        "h6": _heading(FONT_SIZES["base"], 12, 12),
    },
    "paragraph": {
        "font_family": FONT_REGULAR,
        "font_size": FONT_SIZES["md"],
        "color": COLORS["gray_800"],
        "line_height": LINE_HEIGHTS["relaxed"],
        "margin_top": 0,
        "margin_bottom": 12,
        "max_width": 468,
    },
    "rule": {
        "thickness": 1,
        "color": COLORS["gray_400"],
        "margin_top": 18,
        "margin_bottom": 18,
    },
    "admonition": {
        "border_width": 4,
        "padding": 9,
        "title_font_family": FONT_BOLD,
        "title_font_size": FONT_SIZES["md"],
        "title_gap": 4,
        "content_font_family": FONT_REGULAR,
        "content_font_size": FONT_SIZES["base"],
        "content_line_height": LINE_HEIGHTS["normal"],
        "margin_top": 12,
        "margin_bottom": 12,
        "variants": {
            "warning": {
                "background_color": "#fef3cd",
                "border_color": "#856404",
                "title_color": "#664d03",
                "content_color": "#664d03",
            },
            "note": {
                "background_color": "#f0f0f0",
                "border_color": "#666666",
                "title_color": "#333333",
                "content_color": "#333333",
            },
            "info": {
                "background_color": "#d1ecf1",
                "border_color": "#0c5460",
                "title_color": "#0c5460",
                "content_color": "#0c5460",
            },
            "tip": {
                "background_color": "#d4edda",
                "border_color": "#155724",
                "title_color": "#1e7e34",
                "content_color": "#1e7e34",
            },
            "danger": {
                "background_color": "#f8d7da",
                "border_color": "#721c24",
                "title_color": "#c82333",
                "content_color": "#c82333",
            },
        },
    },
    "fields": {
        "text": {**_field_box(FONT_SIZES["sm"]), "width": 200, "height": 20, "padding": 6},
        "textarea": {
            **_field_box(FONT_SIZES["sm"]),
            "width": 400,
            "padding": 6,
            "line_height": LINE_HEIGHTS["normal"],
            "lines": 4,
        },
        "checkbox": {**_field_box(FONT_SIZES["sm"]), "size": 12, "spacing": 24},
        "radio": {**_field_box(FONT_SIZES["sm"]), "size": 12, "spacing": 24},
        "dropdown": {**_field_box(FONT_SIZES["sm"]), "width": 150, "height": 20},
        "signature": {
            **_field_box(FONT_SIZES["lg"]),
            "width": 200,
            "height": 50,
            "required_border_color": COLORS["error_dark"],
            "required_border_width": 2,
        },
        "label": {
            "font_family": FONT_REGULAR,
            "font_size": FONT_SIZES["base"],
            "color": COLORS["gray_900"],
            "margin_bottom": 6,
            "width": 120,
            "gap": 4,
        },
        "margin_top": 8,
        "margin_bottom": 12,
    },
    "table": {
        "header_background_color": COLORS["gray_200"],
        "header_text_color": COLORS["black"],
        "header_font_family": FONT_BOLD,
        "header_font_size": FONT_SIZES["sm"],
        "header_height": 24,
        "row_height": 22,
        "border_color": COLORS["gray_500"],
        "border_width": 1,
        "cell_padding": 3,
        "cell_font_family": FONT_REGULAR,
        "cell_font_size": FONT_SIZES["sm"],
        "cell_text_color": COLORS["gray_900"],
        "margin_top": 12,
        "margin_bottom": 12,
    },
    "header": {
        "font_family": FONT_REGULAR,
        "font_size": FONT_SIZES["sm"],
        "color": COLORS["gray_700"],
        "offset": 30,
    },
    "footer": {
        "font_family": FONT_REGULAR,
        "font_size": FONT_SIZES["xs"],
        "color": COLORS["gray_700"],
        "offset": 30,
    },
}
