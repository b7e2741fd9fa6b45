"""
渲染层 - 消费 LayoutResult 输出具体格式
"""

from .pdf_renderer import PdfRenderer
from .placement_export import PlacementExporter, write_script

__all__ = [
    "PdfRenderer",
    "PlacementExporter",
    "write_script",
]
