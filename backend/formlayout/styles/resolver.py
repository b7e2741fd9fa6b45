"""
样式表解析器 - 内置令牌 + 用户覆盖 -> 完整样式表

职责：
1. 读取样式覆盖 YAML（camelCase / snake_case 键均可）
2. 深度合并到内置令牌上（缺失键继承默认值）
3. 校验为 ResolvedStylesheet（未知键报错，避免拼写错误被静默忽略）

使用方式：
    stylesheet = StylesheetResolver().resolve({"paragraph": {"fontSize": 12}})
    stylesheet = load_stylesheet("styles/compact.yaml")

测试要点：
- test_default_stylesheet: 默认令牌完整
- test_partial_override: 部分覆盖 + 继承
- test_unknown_key_rejected: 未知键报错
"""

from __future__ import annotations

import copy
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from ..interfaces import StylesheetError
from ..models import ResolvedStylesheet
from .tokens import DEFAULT_TOKENS

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_key(key: str) -> str:
    """fontSize -> font_size（h1 / 2xl 保持不变）"""
    return _CAMEL_RE.sub(r"_\1", key).lower()


def normalize_keys(data: Any) -> Any:
    """递归把映射键转换为 snake_case"""
    if isinstance(data, Mapping):
        return {to_snake_key(str(k)): normalize_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [normalize_keys(v) for v in data]
    return data


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """深度合并（返回新字典，不修改输入）"""
    result = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _expand_shorthands(overrides: dict[str, Any]) -> dict[str, Any]:
    """page.margins 写成单个数字时展开为四边"""
    page = overrides.get("page")
    if isinstance(page, dict) and isinstance(page.get("margins"), (int, float)):
        value = page["margins"]
        page["margins"] = {"top": value, "right": value, "bottom": value, "left": value}
    return overrides


class StylesheetResolver:
    """样式表解析器"""

    def __init__(self, tokens: Mapping[str, Any] | None = None):
        self.tokens = tokens or DEFAULT_TOKENS

    def resolve(self, overrides: Mapping[str, Any] | None = None) -> ResolvedStylesheet:
        """合并覆盖并校验"""
        normalized = _expand_shorthands(normalize_keys(overrides or {}))
        merged = deep_merge(self.tokens, normalized)
        try:
            return ResolvedStylesheet.model_validate(merged)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise StylesheetError(f"样式表无效: {problems}") from e

    def resolve_file(self, stylesheet_path: str | Path) -> ResolvedStylesheet:
        """读取样式覆盖文件并解析"""
        return self.resolve(read_overrides(stylesheet_path))


def read_overrides(stylesheet_path: str | Path) -> dict[str, Any]:
    """读取样式覆盖文件为原始映射"""
    path = Path(stylesheet_path)
    if not path.exists():
        raise StylesheetError(f"样式表文件不存在: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise StylesheetError(f"样式表解析失败 {path}: {e}") from e

    if not isinstance(data, dict):
        raise StylesheetError(f"样式表根节点必须是映射: {path}")

    logger.debug(f"读取样式覆盖: {path}")
    return data


@lru_cache(maxsize=1)
def default_stylesheet() -> ResolvedStylesheet:
    """内置默认样式表（缓存）"""
    return StylesheetResolver().resolve()


def resolve_stylesheet(overrides: Mapping[str, Any] | None = None) -> ResolvedStylesheet:
    """便捷函数：无覆盖时返回缓存的默认样式表"""
    if not overrides:
        return default_stylesheet()
    return StylesheetResolver().resolve(overrides)


def load_stylesheet(stylesheet_path: str | Path | None = None) -> ResolvedStylesheet:
    """便捷函数：None 表示使用默认样式表"""
    if stylesheet_path is None:
        return default_stylesheet()
    return StylesheetResolver().resolve_file(stylesheet_path)
