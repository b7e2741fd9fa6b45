"""
放置记录导出 - LayoutResult -> JSON

供 HTML/DOCX 等外部渲染器消费；字段与页码均为绝对值（页码从0开始）。
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..interfaces import ExportError
from ..models import LayoutResult

logger = logging.getLogger(__name__)


class PlacementExporter:
    """放置记录导出器"""

    def __init__(self, include_stylesheet: bool = False):
        self.include_stylesheet = include_stylesheet

    def export(self, result: LayoutResult, output_path: Path) -> Path:
        """写出 JSON 文件"""
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(result.to_json(self.include_stylesheet), encoding="utf-8")
        except OSError as e:
            raise ExportError(f"放置记录写出失败 {output_path}: {e}") from e

        logger.info(f"放置记录已导出: {output_path} ({len(result.placements)} 条)")
        return output_path


def write_script(script: str, output_path: Path) -> Path:
    """写出浏览器端脚本（计算字段 + 条件显示）"""
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(script, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"脚本写出失败 {output_path}: {e}") from e
    return output_path
