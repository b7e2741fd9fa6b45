"""
打包器 - 生成交付包和manifest

职责：
1. 生成 manifest.json（输入、产物、告警、时间戳）
2. 把 PDF / 放置记录 / 脚本与 manifest 打包为 package.zip

测试要点：
- test_manifest_structure: manifest结构
- test_package_zip: ZIP打包
- test_missing_work_dir: 未设置工作目录报错
"""

from __future__ import annotations

import json
import logging
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

from ..interfaces import IPackager

if TYPE_CHECKING:
    from ..models import Job

logger = logging.getLogger(__name__)

MANIFEST_SCHEMA_VERSION = "1.0"


def _path_str(path: Path | None) -> str | None:
    return str(path) if path else None


class Packager(IPackager):
    """打包器实现"""

    def package(self, job: Job) -> Path:
        """打包交付产物"""
        if not job.work_dir:
            raise ValueError("Job work_dir not set")

        zip_path = job.work_dir / "package.zip"
        artifacts = [
            job.artifacts.pdf,
            job.artifacts.placements_json,
            job.artifacts.scripts_js,
        ]

        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            for artifact in artifacts:
                if artifact and artifact.exists():
                    zf.write(artifact, artifact.name)

            manifest_path = job.work_dir / "manifest.json"
            if manifest_path.exists():
                zf.write(manifest_path, "manifest.json")

        logger.info(f"[{job.job_id}] 已打包: {zip_path}")
        return zip_path

    def generate_manifest(self, job: Job) -> Path:
        """生成manifest.json"""
        if not job.work_dir:
            raise ValueError("Job work_dir not set")

        manifest = {
            "schema_version": MANIFEST_SCHEMA_VERSION,
            "job_id": job.job_id,
            "form_id": job.form_id,
            "page_count": job.page_count,

            "inputs": {
                "schema": str(job.schema_path),
                "stylesheet": _path_str(job.stylesheet_path),
                "options": job.options,
            },

            "artifacts": {
                "pdf": _path_str(job.artifacts.pdf),
                "placements_json": _path_str(job.artifacts.placements_json),
                "scripts_js": _path_str(job.artifacts.scripts_js),
                "package_zip": _path_str(job.artifacts.package_zip),
            },

            "flags": job.flags,
            "errors": job.errors,

            "timestamps": {
                "created_at": job.created_at.isoformat() if job.created_at else None,
                "started_at": job.started_at.isoformat() if job.started_at else None,
                "finished_at": job.finished_at.isoformat() if job.finished_at else None,
            },
        }

        manifest_path = job.work_dir / "manifest.json"
        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, ensure_ascii=False, indent=2, default=str)

        return manifest_path
