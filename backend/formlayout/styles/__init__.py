"""
样式层 - 内置令牌与样式表解析
"""

from .resolver import (
    StylesheetResolver,
    deep_merge,
    default_stylesheet,
    load_stylesheet,
    normalize_keys,
    read_overrides,
    resolve_stylesheet,
)
from .tokens import DEFAULT_TOKENS

__all__ = [
    "DEFAULT_TOKENS",
    "StylesheetResolver",
    "deep_merge",
    "default_stylesheet",
    "load_stylesheet",
    "normalize_keys",
    "read_overrides",
    "resolve_stylesheet",
]
