"""
流水线阶段定义

职责：
1. 定义各阶段的名称与进度区间

测试要点：
- test_stage_order: 阶段顺序
- test_stage_progress_ranges: 进度区间连续
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StageEnum(str, Enum):
    """流水线阶段枚举"""
    LOAD_SCHEMA = "LOAD_SCHEMA"
    VALIDATE_SCHEMA = "VALIDATE_SCHEMA"
    RESOLVE_STYLES = "RESOLVE_STYLES"
    LAYOUT = "LAYOUT"
    RENDER_PDF = "RENDER_PDF"
    EXPORT_ARTIFACTS = "EXPORT_ARTIFACTS"
    PACKAGE = "PACKAGE"


@dataclass
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点


# 表单生成流水线各阶段配置
FORM_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.LOAD_SCHEMA.value, 0, 10),
    PipelineStage(StageEnum.VALIDATE_SCHEMA.value, 10, 20),
    PipelineStage(StageEnum.RESOLVE_STYLES.value, 20, 30),
    PipelineStage(StageEnum.LAYOUT.value, 30, 60),
    PipelineStage(StageEnum.RENDER_PDF.value, 60, 85),
    PipelineStage(StageEnum.EXPORT_ARTIFACTS.value, 85, 95),
    PipelineStage(StageEnum.PACKAGE.value, 95, 100),
]
