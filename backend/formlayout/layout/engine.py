"""
排版引擎 - 游标与分页器

职责：
1. 初始化页面与游标（游标位于内容区左上角）
2. 推进游标（越过底边时自动换页，超高元素的溢出延续到后续页）
3. 强制换页 / 空间预留 / 绝对定位跳转
4. 页数单调不减

坐标约定见 models/geometry.py：原点左下角，游标 y 自顶向下递减。

测试要点：
- test_initialize_preconditions: 非法页数/几何报 LayoutPreconditionError
- test_advance_exact_fit: 恰好填满不换页
- test_advance_overflow_one_page: 超出任意量恰好新增一页
- test_advance_taller_than_page: 超高元素跨多页
- test_page_count_monotonic: 页数不减
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..interfaces import ITextMeasurer, LayoutPreconditionError
from ..models import PageGeometry, Rect
from .text_metrics import DEFAULT_MEASURER

logger = logging.getLogger(__name__)

EPS = 1e-6


class PageState(str, Enum):
    """页面状态"""
    PENDING = "pending"      # 已分配，尚未写入
    ACTIVE = "active"        # 游标所在页
    ARCHIVED = "archived"    # 游标已离开


@dataclass
class PageHandle:
    """页面句柄"""
    index: int
    state: PageState = PageState.PENDING


@dataclass
class LayoutContext:
    """
    排版上下文（单次排版独占，显式传递，不跨线程共享）

    Attributes:
        geometry: 页面几何
        pages: 已分配页面
        page_index: 游标所在页（从0开始）
        x / y: 游标位置（y 为当前可写区域的上沿）
        measurer: 文本宽度估算
        warnings: 排版告警（退化但合法的输入）
    """
    geometry: PageGeometry
    pages: list[PageHandle] = field(default_factory=list)
    page_index: int = 0
    x: float = 0.0
    y: float = 0.0
    measurer: ITextMeasurer = DEFAULT_MEASURER
    warnings: list[str] = field(default_factory=list)

    # ------------------------------------------------------------------
    # 内容区边界
    # ------------------------------------------------------------------

    @property
    def content_area(self) -> Rect:
        return self.geometry.content_area

    @property
    def top(self) -> float:
        return self.content_area.top

    @property
    def bottom(self) -> float:
        return self.content_area.y

    @property
    def left(self) -> float:
        return self.content_area.x

    @property
    def width(self) -> float:
        return self.content_area.width

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def at_page_top(self) -> bool:
        return abs(self.y - self.top) <= EPS

    def remaining_height(self) -> float:
        """当前页剩余可用高度"""
        return max(0.0, self.y - self.bottom)

    def current_page_handle(self) -> PageHandle:
        """游标所在页"""
        return self.pages[self.page_index]

    # ------------------------------------------------------------------
    # 游标移动
    # ------------------------------------------------------------------

    def advance(self, distance: float) -> None:
        """
        游标下移 distance

        放得下则直接下移；否则换到下一页（已存在或新分配）顶部再下移。
        若元素比整页还高，溢出部分继续延续到后续页。
        """
        if distance < 0:
            raise LayoutPreconditionError(f"推进距离不能为负: {distance}")

        if self.y - distance >= self.bottom - EPS:
            self.y = max(self.y - distance, self.bottom)
            return

        if not self.at_page_top:
            self._next_page()

        y = self.top - distance
        while y < self.bottom - EPS:
            overflow = self.bottom - y
            self._next_page()
            y = self.top - overflow
        self.y = max(y, self.bottom)

    def skip(self, distance: float) -> None:
        """页内留白：剩余空间不足时停在底边，留白不带到下一页"""
        if distance < 0:
            raise LayoutPreconditionError(f"留白不能为负: {distance}")
        self.y = max(self.y - distance, self.bottom)

    def force_next_page(self) -> None:
        """无条件换页"""
        self._next_page()

    def ensure_space(self, height: float) -> bool:
        """
        预留空间：不在页顶且放不下时先换页

        Returns:
            是否发生了换页
        """
        if height < 0:
            raise LayoutPreconditionError(f"预留高度不能为负: {height}")
        if self.at_page_top or height <= self.remaining_height() + EPS:
            return False
        self._next_page()
        return True

    def move_to(self, page_index: int, x: float, y: float) -> None:
        """绝对定位跳转（按需分配页面，y 收回到内容区内）"""
        if page_index < 0:
            raise LayoutPreconditionError(f"页码不能为负: {page_index}")
        self._allocate_until(page_index)
        self._activate(page_index)
        clamped = min(max(y, self.bottom), self.top)
        if abs(clamped - y) > EPS:
            message = f"第 {page_index + 1} 页定位 y={y:.1f} 超出内容区 [{self.bottom:.1f}, {self.top:.1f}]，已收回到 {clamped:.1f}"
            logger.warning(message)
            self.warnings.append(message)
        self.x = x
        self.y = clamped

    def _next_page(self) -> None:
        target = self.page_index + 1
        self._allocate_until(target)
        self._activate(target)
        self.x = self.left
        self.y = self.top
        logger.debug(f"换页: 第 {target + 1} 页")

    def _allocate_until(self, page_index: int) -> None:
        while len(self.pages) <= page_index:
            self.pages.append(PageHandle(index=len(self.pages)))

    def _activate(self, page_index: int) -> None:
        current = self.pages[self.page_index]
        if current.index != page_index and current.state == PageState.ACTIVE:
            current.state = PageState.ARCHIVED
        self.pages[page_index].state = PageState.ACTIVE
        self.page_index = page_index


def initialize(
    page_count: int,
    geometry: PageGeometry,
    measurer: ITextMeasurer | None = None,
) -> LayoutContext:
    """
    创建排版上下文

    Raises:
        LayoutPreconditionError: 页数 < 1、页面尺寸非正或页边距吃掉整个内容区
    """
    if page_count < 1:
        raise LayoutPreconditionError(f"页数必须 >= 1: {page_count}")
    if geometry.width <= 0 or geometry.height <= 0:
        raise LayoutPreconditionError(f"页面尺寸必须为正: {geometry.width} x {geometry.height}")
    area = geometry.content_area
    if area.width <= 0 or area.height <= 0:
        raise LayoutPreconditionError("页边距过大，内容区为空")

    ctx = LayoutContext(
        geometry=geometry,
        pages=[PageHandle(index=i) for i in range(page_count)],
        measurer=measurer or DEFAULT_MEASURER,
    )
    ctx.pages[0].state = PageState.ACTIVE
    ctx.x = area.x
    ctx.y = area.top
    return ctx


class LayoutEngine:
    """排版引擎（无状态，状态全部在 LayoutContext 中）"""

    def __init__(self, measurer: ITextMeasurer | None = None):
        self.measurer = measurer or DEFAULT_MEASURER

    def initialize(self, page_count: int, geometry: PageGeometry) -> LayoutContext:
        return initialize(page_count, geometry, self.measurer)
