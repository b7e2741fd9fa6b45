"""
任务模型 - 定义生成任务的状态与生命周期

一个任务 = 一份表单 schema 的一次完整生成（加载 -> 校验 -> 排版 -> 渲染 -> 导出）
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """任务状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobArtifacts(BaseModel):
    """任务产物路径"""
    pdf: Path | None = None
    placements_json: Path | None = None
    scripts_js: Path | None = None
    manifest_json: Path | None = None
    package_zip: Path | None = None


class JobProgress(BaseModel):
    """任务进度"""
    stage: str = "INIT"
    percent: int = 0
    message: str = ""
    details: dict[str, Any] = Field(default_factory=dict)


class Job(BaseModel):
    """任务实体"""
    job_id: str = Field(..., description="UUID")

    # 输入
    schema_path: Path
    stylesheet_path: Path | None = None
    options: dict[str, Any] = Field(default_factory=dict)

    # 状态
    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress = Field(default_factory=JobProgress)

    # 产物
    artifacts: JobArtifacts = Field(default_factory=JobArtifacts)
    form_id: str | None = None
    page_count: int | None = None

    # 结果
    flags: list[str] = Field(default_factory=list, description="告警标记")
    errors: list[str] = Field(default_factory=list, description="错误信息")
    validation_issues: list[dict[str, str]] = Field(default_factory=list, description="校验问题")

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    # 工作目录（运行时设置）
    work_dir: Path | None = None

    model_config = {"arbitrary_types_allowed": True}

    def mark_running(self, stage: str = "LOAD_SCHEMA") -> None:
        """标记为运行中"""
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now()
        self.progress.stage = stage

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = JobStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.progress.percent = 100

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = JobStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)
