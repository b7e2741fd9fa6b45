"""
几何模型 - 矩形、页边距与页面几何

坐标约定（与 PDF 一致）：
- 原点在页面左下角，y 向上增长
- Rect.x / Rect.y 为矩形左下角
- 内容区 = 页面去掉四边页边距后的矩形
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# 标准纸张尺寸（pt）
PAGE_SIZES: dict[str, tuple[float, float]] = {
    "letter": (612.0, 792.0),
    "a4": (595.28, 841.89),
    "legal": (612.0, 1008.0),
    "tabloid": (792.0, 1224.0),
}


class Rect(BaseModel):
    """矩形（左下角 + 宽高）"""
    x: float
    y: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    def contains_y(self, y: float, eps: float = 1e-6) -> bool:
        """判断 y 是否落在 [y, top] 内"""
        return self.y - eps <= y <= self.top + eps


class Margins(BaseModel):
    """页边距"""
    top: float = Field(72.0, ge=0)
    right: float = Field(72.0, ge=0)
    bottom: float = Field(72.0, ge=0)
    left: float = Field(72.0, ge=0)

    @classmethod
    def uniform(cls, value: float) -> Margins:
        return cls(top=value, right=value, bottom=value, left=value)


class PageGeometry(BaseModel):
    """页面几何（由调用方在排版前提供）"""
    width: float
    height: float
    margins: Margins = Field(default_factory=Margins)

    @classmethod
    def from_size(cls, size: str = "letter", margin: float = 72.0) -> PageGeometry:
        """按标准纸张名构造"""
        key = size.lower()
        if key not in PAGE_SIZES:
            raise ValueError(f"未知纸张尺寸: {size}")
        width, height = PAGE_SIZES[key]
        return cls(width=width, height=height, margins=Margins.uniform(margin))

    @property
    def content_area(self) -> Rect:
        """内容区矩形"""
        return Rect(
            x=self.margins.left,
            y=self.margins.bottom,
            width=self.width - self.margins.left - self.margins.right,
            height=self.height - self.margins.top - self.margins.bottom,
        )
