"""
流水线单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_pipeline.py -v
"""

import json
import zipfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from formlayout.config import RuntimeConfig
from formlayout.interfaces import SchemaValidationError, StylesheetError
from formlayout.models import Job, JobStatus
from formlayout.pipeline import FORM_STAGES, JobManager, Packager, PipelineExecutor, StageEnum


class TestStages:
    """阶段定义测试"""

    def test_stage_order(self):
        """测试阶段顺序"""
        assert [s.name for s in FORM_STAGES] == [s.value for s in StageEnum]

    def test_stage_progress_ranges(self):
        """测试进度区间连续"""
        assert FORM_STAGES[0].progress_start == 0
        assert FORM_STAGES[-1].progress_end == 100
        for prev, nxt in zip(FORM_STAGES, FORM_STAGES[1:]):
            assert prev.progress_end == nxt.progress_start


class TestPipelineExecutor:
    """流水线执行测试"""

    def test_execute_full_pipeline(self, runtime_config: RuntimeConfig, write_yaml, flow_source):
        """测试完整流水线执行"""
        manager = JobManager(runtime_config)
        job = manager.create_job(write_yaml(flow_source))

        PipelineExecutor(runtime_config).execute(job)

        assert job.status == JobStatus.SUCCEEDED
        assert job.form_id == "registration"
        assert job.page_count == 1
        assert job.progress.percent == 100
        assert job.artifacts.pdf.name == "registration.pdf"
        assert job.artifacts.pdf.read_bytes().startswith(b"%PDF")
        assert job.artifacts.placements_json.exists()
        assert "listen(" in job.artifacts.scripts_js.read_text(encoding="utf-8")
        assert job.artifacts.package_zip is None

        manifest = json.loads(job.artifacts.manifest_json.read_text(encoding="utf-8"))
        assert manifest["form_id"] == "registration"
        assert manifest["artifacts"]["pdf"] == str(job.artifacts.pdf)

    def test_progress_tracking(self, runtime_config: RuntimeConfig, write_yaml, flow_source):
        """测试进度持久化到 job.json"""
        job = JobManager(runtime_config).create_job(write_yaml(flow_source))
        PipelineExecutor(runtime_config).execute(job)

        reloaded = JobManager(runtime_config).get_job(job.job_id)
        assert reloaded.status == JobStatus.SUCCEEDED
        assert reloaded.progress.stage == StageEnum.PACKAGE.value
        assert reloaded.progress.details["page_count"] == 1

    def test_validation_failure(self, runtime_config: RuntimeConfig, write_yaml):
        """测试校验失败记录问题并标记失败"""
        job = JobManager(runtime_config).create_job(write_yaml({"form": {"id": "broken"}}))

        with pytest.raises(SchemaValidationError):
            PipelineExecutor(runtime_config).execute(job)

        assert job.status == JobStatus.FAILED
        assert "阶段失败:VALIDATE_SCHEMA" in job.flags
        assert job.validation_issues
        assert job.errors
        assert job.artifacts.pdf is None

    def test_stylesheet_override(self, runtime_config: RuntimeConfig, write_yaml, flow_source):
        """测试任务指定样式覆盖文件"""
        style = write_yaml({"page": {"size": "a4", "margins": 36}}, "style.yaml")
        job = JobManager(runtime_config).create_job(write_yaml(flow_source), stylesheet_path=style)
        PipelineExecutor(runtime_config).execute(job)

        data = json.loads(job.artifacts.placements_json.read_text(encoding="utf-8"))
        assert data["geometry"]["width"] == pytest.approx(595.28)
        assert data["geometry"]["margins"]["left"] == 36

    def test_form_declared_stylesheet(self, runtime_config: RuntimeConfig, write_yaml, flow_source):
        """测试表单声明的样式表（相对表单文件目录）"""
        write_yaml({"page": {"size": "legal"}}, "legal.yaml")
        flow_source["form"]["stylesheet"] = "legal.yaml"
        job = JobManager(runtime_config).create_job(write_yaml(flow_source))
        PipelineExecutor(runtime_config).execute(job)

        data = json.loads(job.artifacts.placements_json.read_text(encoding="utf-8"))
        assert data["geometry"]["height"] == 1008

    def test_missing_stylesheet_fails(self, runtime_config: RuntimeConfig, write_yaml, flow_source, temp_dir: Path):
        """测试样式文件缺失"""
        job = JobManager(runtime_config).create_job(
            write_yaml(flow_source), stylesheet_path=temp_dir / "missing.yaml"
        )
        with pytest.raises(StylesheetError):
            PipelineExecutor(runtime_config).execute(job)
        assert "阶段失败:RESOLVE_STYLES" in job.flags

    def test_custom_output_dir_and_zip(self, runtime_config: RuntimeConfig, write_yaml, flow_source, temp_dir: Path):
        """测试自定义输出目录与打包"""
        out = temp_dir / "custom"
        job = JobManager(runtime_config).create_job(
            write_yaml(flow_source), options={"output_dir": str(out), "package_zip": True}
        )
        PipelineExecutor(runtime_config).execute(job)

        assert job.artifacts.pdf == out / "registration.pdf"
        with zipfile.ZipFile(job.artifacts.package_zip) as zf:
            names = set(zf.namelist())
        assert {"registration.pdf", "registration.placements.json", "registration.js", "manifest.json"} <= names

    def test_disabled_exports(self, runtime_config: RuntimeConfig, write_yaml, flow_source):
        """测试关闭放置记录与脚本导出"""
        runtime_config.output.write_placements_json = False
        runtime_config.output.write_scripts = False
        job = JobManager(runtime_config).create_job(write_yaml(flow_source))
        PipelineExecutor(runtime_config).execute(job)

        assert job.artifacts.placements_json is None
        assert job.artifacts.scripts_js is None
        assert job.artifacts.pdf.exists()

    def test_empty_dropdown_generates(self, runtime_config: RuntimeConfig, write_yaml):
        """测试无选项下拉框的表单生成成功"""
        source = {
            "form": {"id": "picker", "title": "Picker"},
            "content": [{"type": "field", "fieldType": "dropdown", "fieldName": "pick", "label": "Pick one"}],
        }
        job = JobManager(runtime_config).create_job(write_yaml(source))

        PipelineExecutor(runtime_config).run_batch([job])

        assert job.status == JobStatus.SUCCEEDED
        assert job.errors == []
        data = json.loads(job.artifacts.placements_json.read_text(encoding="utf-8"))
        pick = next(p for p in data["placements"] if p.get("field_name") == "pick")
        assert pick["options"] == []

    def test_run_batch(self, runtime_config: RuntimeConfig, write_yaml, flow_source, absolute_source):
        """测试批量并发生成（单个失败不影响其他任务）"""
        manager = JobManager(runtime_config)
        jobs = [
            manager.create_job(write_yaml(flow_source, "a.yaml")),
            manager.create_job(write_yaml({"form": {"title": "no id"}}, "b.yaml")),
            manager.create_job(write_yaml(absolute_source, "c.yaml")),
        ]

        results = PipelineExecutor(runtime_config).run_batch(jobs)

        assert [j.status for j in results] == [JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.SUCCEEDED]
        assert results[2].page_count == 2


class TestJobManager:
    """任务管理测试"""

    def test_create_job(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试创建任务"""
        manager = JobManager(runtime_config)
        job = manager.create_job(temp_dir / "form.yaml", options={"package_zip": True})
        assert job.status == JobStatus.QUEUED
        assert (runtime_config.get_job_dir(job.job_id) / "job.json").exists()

    def test_get_job(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试获取任务（缓存 / 磁盘）"""
        job = JobManager(runtime_config).create_job(temp_dir / "form.yaml")
        fresh = JobManager(runtime_config)
        loaded = fresh.get_job(job.job_id)
        assert loaded.job_id == job.job_id
        assert fresh.get_job(job.job_id) is loaded
        assert fresh.get_job("missing") is None

    def test_corrupt_job_file(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试任务文件损坏"""
        job = JobManager(runtime_config).create_job(temp_dir / "form.yaml")
        (runtime_config.get_job_dir(job.job_id) / "job.json").write_text("{", encoding="utf-8")
        assert JobManager(runtime_config).get_job(job.job_id) is None

    def test_update_job(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试更新任务"""
        manager = JobManager(runtime_config)
        job = manager.create_job(temp_dir / "form.yaml")
        job.add_flag("排版告警:x")
        manager.update_job(job)
        assert JobManager(runtime_config).get_job(job.job_id).flags == ["排版告警:x"]

    def test_cancel_job(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试取消任务"""
        manager = JobManager(runtime_config)
        job = manager.create_job(temp_dir / "form.yaml")
        assert manager.cancel_job(job.job_id) is True
        assert job.status == JobStatus.CANCELLED
        assert manager.cancel_job(job.job_id) is False
        assert manager.cancel_job("missing") is False

    def test_list_jobs(self, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试按创建时间降序与状态过滤"""
        manager = JobManager(runtime_config)
        older = manager.create_job(temp_dir / "a.yaml")
        newer = manager.create_job(temp_dir / "b.yaml")
        older.created_at = datetime.now() - timedelta(hours=1)
        manager.cancel_job(newer.job_id)

        assert [j.job_id for j in manager.list_jobs()] == [newer.job_id, older.job_id]
        assert manager.list_jobs(status=JobStatus.QUEUED) == [older]
        assert len(manager.list_jobs(limit=1)) == 1


class TestPackager:
    """打包测试"""

    def test_manifest_structure(self, temp_job: Job):
        """测试manifest结构"""
        temp_job.form_id = "registration"
        temp_job.add_flag("排版告警:x")
        path = Packager().generate_manifest(temp_job)
        manifest = json.loads(path.read_text(encoding="utf-8"))
        assert manifest["schema_version"] == "1.0"
        assert manifest["job_id"] == temp_job.job_id
        assert manifest["inputs"]["stylesheet"] is None
        assert manifest["artifacts"]["pdf"] is None
        assert manifest["flags"] == ["排版告警:x"]
        assert manifest["timestamps"]["started_at"] is None

    def test_package_zip(self, temp_job: Job):
        """测试ZIP打包（缺失的产物跳过）"""
        pdf = temp_job.work_dir / "form.pdf"
        pdf.write_bytes(b"%PDF-1.4")
        temp_job.artifacts.pdf = pdf
        temp_job.artifacts.scripts_js = temp_job.work_dir / "missing.js"

        packager = Packager()
        packager.generate_manifest(temp_job)
        zip_path = packager.package(temp_job)

        with zipfile.ZipFile(zip_path) as zf:
            assert sorted(zf.namelist()) == ["form.pdf", "manifest.json"]

    def test_missing_work_dir(self, temp_dir: Path):
        """测试未设置工作目录报错"""
        job = Job(job_id="x", schema_path=temp_dir / "form.yaml")
        with pytest.raises(ValueError):
            Packager().package(job)
        with pytest.raises(ValueError):
            Packager().generate_manifest(job)
