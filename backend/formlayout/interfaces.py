"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from formlayout.interfaces import IFieldStrategy

    class MyTextStrategy(IFieldStrategy):
        def place(self, field, rect, page_index, stylesheet) -> FieldPlacement:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .layout.engine import LayoutContext
    from .models import (
        FieldPlacement,
        FormField,
        Job,
        LayoutResult,
        PlacementRecord,
        Rect,
        ResolvedStylesheet,
    )


# ============================================================================
# 排版模块接口
# ============================================================================

class ITextMeasurer(ABC):
    """文本宽度估算接口 - 可替换为真实字体度量实现"""

    @abstractmethod
    def estimate_width(self, text: str, font_size: float) -> float:
        """
        估算文本宽度（pt）

        Args:
            text: 文本
            font_size: 字号

        Returns:
            宽度（pt）
        """
        ...


class IContentDriver(ABC):
    """内容放置驱动接口 - 每种内容元素一个实现"""

    @abstractmethod
    def place(
        self,
        ctx: LayoutContext,
        element: Any,
        stylesheet: ResolvedStylesheet,
    ) -> list[PlacementRecord]:
        """
        放置单个内容元素

        流程：
        1. 根据样式计算元素所需高度
        2. 放置前判断是否需要分页（先判断再绘制，避免裁切）
        3. 推进游标

        Args:
            ctx: 排版上下文（会被修改）
            element: 内容元素
            stylesheet: 解析后的样式表

        Returns:
            该元素产生的放置记录（按顺序）
        """
        ...


class IFieldStrategy(ABC):
    """字段放置策略接口 - 每种字段类型一个实现，不修改排版上下文"""

    @abstractmethod
    def place(
        self,
        field: FormField,
        rect: Rect,
        page_index: int,
        stylesheet: ResolvedStylesheet,
    ) -> FieldPlacement:
        """
        计算字段控件几何与元数据

        Args:
            field: 规范化后的字段定义
            rect: 目标矩形（宽高为0时使用默认尺寸）
            page_index: 页码（从0开始）
            stylesheet: 解析后的样式表

        Returns:
            字段放置记录
        """
        ...


# ============================================================================
# 渲染模块接口
# ============================================================================

class IRenderer(ABC):
    """渲染器接口 - 消费排版结果输出具体格式"""

    @abstractmethod
    def render(self, result: LayoutResult, output_path: Path) -> Path:
        """
        渲染排版结果

        Args:
            result: 排版结果
            output_path: 输出文件路径

        Returns:
            生成的文件路径

        Raises:
            RenderError: 渲染失败
        """
        ...


# ============================================================================
# 流水线与任务管理接口
# ============================================================================

class IJobManager(ABC):
    """任务管理器接口"""

    @abstractmethod
    def create_job(self, schema_path: Path, **kwargs: Any) -> Job:
        """创建任务"""
        ...

    @abstractmethod
    def get_job(self, job_id: str) -> Job | None:
        """获取任务"""
        ...

    @abstractmethod
    def update_job(self, job: Job) -> None:
        """更新任务状态"""
        ...

    @abstractmethod
    def cancel_job(self, job_id: str) -> bool:
        """取消任务"""
        ...


class IPackager(ABC):
    """打包器接口"""

    @abstractmethod
    def package(self, job: Job) -> Path:
        """
        打包交付产物

        Args:
            job: 任务对象

        Returns:
            package.zip 路径
        """
        ...

    @abstractmethod
    def generate_manifest(self, job: Job) -> Path:
        """
        生成manifest.json

        Args:
            job: 任务对象

        Returns:
            manifest.json 路径
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class FormLayoutError(Exception):
    """基础异常"""
    pass


class SchemaParseError(FormLayoutError):
    """表单文件读取/解析错误（致命，排版前中止）"""
    pass


class SchemaValidationError(FormLayoutError):
    """表单校验失败（携带全部问题）"""

    def __init__(self, issues: list[Any]):
        self.issues = list(issues)
        lines = [f"{issue.path}: {issue.message}" for issue in self.issues]
        super().__init__("表单校验失败:\n" + "\n".join(lines))


class StylesheetError(FormLayoutError):
    """样式表错误"""
    pass


class LayoutPreconditionError(FormLayoutError, ValueError):
    """排版前置条件违反（编程错误，不是用户输入错误）"""
    pass


class CalculationError(FormLayoutError):
    """计算字段错误"""
    pass


class FormulaSyntaxError(CalculationError):
    """公式语法错误"""
    pass


class CalculationCycleError(CalculationError):
    """计算字段循环依赖"""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__("计算字段存在循环依赖: " + " -> ".join(self.cycle))


class RenderError(FormLayoutError):
    """渲染错误"""
    pass


class ExportError(FormLayoutError):
    """导出错误"""
    pass
