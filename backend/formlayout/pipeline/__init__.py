"""
流水线模块 - 任务编排与执行

子模块：
- stages: 流水线各阶段定义
- executor: 流水线执行器（单任务 / 批量）
- job_manager: 任务管理
- packager: 打包与manifest生成
"""

from .executor import PipelineExecutor
from .job_manager import JobManager
from .packager import Packager
from .stages import FORM_STAGES, PipelineStage, StageEnum

__all__ = [
    "FORM_STAGES",
    "PipelineStage",
    "StageEnum",
    "PipelineExecutor",
    "JobManager",
    "Packager",
]
