"""
排版层 - 游标分页引擎、内容驱动、字段策略与编排器

排版只依赖已校验的 FormSchema、解析后的样式表与调用方给定的页面几何，
输出 LayoutResult（放置记录列表），不做任何 I/O。
"""

from .composer import FormComposer, compose_form
from .drivers import CONTENT_DRIVERS, place_content, place_standalone_field
from .engine import EPS, LayoutContext, LayoutEngine, PageHandle, PageState, initialize
from .fields import STRATEGIES, default_field_size, get_strategy, place_field
from .tables import TableDriver, column_widths
from .text_metrics import AverageWidthMeasurer, estimate_width, wrap_text

__all__ = [
    "FormComposer",
    "compose_form",
    "CONTENT_DRIVERS",
    "place_content",
    "place_standalone_field",
    "EPS",
    "LayoutContext",
    "LayoutEngine",
    "PageHandle",
    "PageState",
    "initialize",
    "STRATEGIES",
    "default_field_size",
    "get_strategy",
    "place_field",
    "TableDriver",
    "column_widths",
    "AverageWidthMeasurer",
    "estimate_width",
    "wrap_text",
]
