"""
任务管理器 - 任务创建/查询/更新

职责：
1. 创建任务并分配ID
2. 任务状态持久化（<output_dir>/jobs/<job_id>/job.json）
3. 任务查询

测试要点：
- test_create_job: 创建任务
- test_get_job: 获取任务（缓存 / 磁盘）
- test_update_job: 更新任务
- test_cancel_job: 取消任务
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..interfaces import IJobManager
from ..models import Job, JobStatus

logger = logging.getLogger(__name__)


class JobManager(IJobManager):
    """任务管理器实现"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self._jobs: dict[str, Job] = {}  # 内存缓存

    def create_job(
        self,
        schema_path: Path,
        stylesheet_path: Path | None = None,
        options: dict[str, Any] | None = None,
    ) -> Job:
        """创建任务"""
        job_id = str(uuid.uuid4())

        job = Job(
            job_id=job_id,
            schema_path=Path(schema_path),
            stylesheet_path=Path(stylesheet_path) if stylesheet_path else None,
            options=options or {},
        )

        self._jobs[job_id] = job
        self._persist_job(job)

        logger.debug(f"创建任务: {job_id} ({schema_path})")
        return job

    def get_job(self, job_id: str) -> Job | None:
        """获取任务"""
        if job_id in self._jobs:
            return self._jobs[job_id]

        job = self._load_job(job_id)
        if job:
            self._jobs[job_id] = job

        return job

    def update_job(self, job: Job) -> None:
        """更新任务状态"""
        self._jobs[job.job_id] = job
        self._persist_job(job)

    def cancel_job(self, job_id: str) -> bool:
        """取消任务（仅排队中/运行中可取消）"""
        job = self.get_job(job_id)
        if not job:
            return False

        if job.status in [JobStatus.QUEUED, JobStatus.RUNNING]:
            job.status = JobStatus.CANCELLED
            self.update_job(job)
            return True

        return False

    def list_jobs(
        self,
        status: JobStatus | None = None,
        limit: int = 100,
    ) -> list[Job]:
        """列出任务"""
        jobs = list(self._jobs.values())

        if status:
            jobs = [j for j in jobs if j.status == status]

        # 按创建时间降序
        jobs.sort(key=lambda j: j.created_at, reverse=True)

        return jobs[:limit]

    def _persist_job(self, job: Job) -> None:
        """持久化任务"""
        job_dir = self.config.get_job_dir(job.job_id)
        job_dir.mkdir(parents=True, exist_ok=True)

        job_file = job_dir / "job.json"
        with open(job_file, "w", encoding="utf-8") as f:
            json.dump(job.model_dump(mode="json"), f, ensure_ascii=False, indent=2, default=str)

    def _load_job(self, job_id: str) -> Job | None:
        """从磁盘加载任务（文件损坏时返回 None）"""
        job_file = self.config.get_job_dir(job_id) / "job.json"

        if not job_file.exists():
            return None

        try:
            with open(job_file, encoding="utf-8") as f:
                data = json.load(f)
            return Job(**data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"任务文件无法读取 {job_file}: {e}")
            return None
