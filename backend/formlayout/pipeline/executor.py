"""
流水线执行器 - 编排各阶段执行

职责：
1. 按顺序执行各阶段（加载 -> 校验 -> 样式 -> 排版 -> 渲染 -> 导出 -> 打包）
2. 更新任务进度并持久化 job.json
3. 处理错误：阶段失败记录 flag 后向上抛出，任务标记失败
4. 批量生成：多个任务在线程池中并发执行，每个任务独占排版上下文

测试要点：
- test_execute_full_pipeline: 完整流水线执行
- test_validation_failure: 校验失败记录问题并标记失败
- test_progress_tracking: 进度跟踪
- test_run_batch: 批量并发生成
"""

from __future__ import annotations

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..config import RuntimeConfig, get_config, load_schema_source
from ..features import generate_calculation_script, generate_conditional_script
from ..interfaces import SchemaValidationError
from ..layout import FormComposer
from ..render import PdfRenderer, PlacementExporter, write_script
from ..schema import SchemaValidator
from ..styles import StylesheetResolver, deep_merge, normalize_keys, read_overrides
from .packager import Packager
from .stages import FORM_STAGES, StageEnum

if TYPE_CHECKING:
    from ..models import Job

logger = logging.getLogger(__name__)


class PipelineExecutor:
    """流水线执行器"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self._last_progress_write = 0.0
        self._progress_interval_sec = 2.0

        self.validator = SchemaValidator()
        self.style_resolver = StylesheetResolver()
        self.composer = FormComposer()
        self.renderer = PdfRenderer()
        self.exporter = PlacementExporter()
        self.packager = Packager()

    def execute(self, job: Job) -> None:
        """执行流水线"""
        job.mark_running()
        self._update_progress(job, message="任务开始", force=True)

        try:
            # 设置工作目录
            job.work_dir = self.config.get_job_dir(job.job_id)
            job.work_dir.mkdir(parents=True, exist_ok=True)

            # 阶段间中间数据
            context: dict[str, Any] = {}

            for stage in FORM_STAGES:
                self._execute_stage(job, stage, context)

            job.mark_succeeded()
            self._update_progress(job, message="任务完成", force=True)

        except Exception as e:
            logger.exception(f"流水线执行失败: {job.job_id}")
            job.mark_failed(str(e))
            self._update_progress(job, message=f"任务失败: {e}", force=True)
            raise

    def run_batch(self, jobs: list[Job]) -> list[Job]:
        """
        批量执行（线程池，大小取 concurrency.max_workers）

        单个任务失败不影响其他任务，失败信息记录在各自的 Job 上。
        """
        max_workers = max(1, self.config.concurrency.max_workers)
        logger.info(f"批量生成: {len(jobs)} 个任务，并发 {max_workers}")

        def _run(job: Job) -> Job:
            try:
                self.execute(job)
            except Exception as e:
                logger.warning(f"[{job.job_id}] 批量任务失败: {e}")
            return job

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(_run, jobs))

    def _execute_stage(self, job: Job, stage, context: dict[str, Any]) -> None:
        """执行单个阶段"""
        job.progress.stage = stage.name
        job.progress.percent = stage.progress_start
        logger.info(f"[{job.job_id}] 开始阶段: {stage.name}")
        self._update_progress(job, message=f"开始阶段: {stage.name}", force=True)

        try:
            if stage.name == StageEnum.LOAD_SCHEMA.value:
                self._stage_load_schema(job, context)

            elif stage.name == StageEnum.VALIDATE_SCHEMA.value:
                self._stage_validate(job, context)

            elif stage.name == StageEnum.RESOLVE_STYLES.value:
                self._stage_resolve_styles(job, context)

            elif stage.name == StageEnum.LAYOUT.value:
                self._stage_layout(job, context)

            elif stage.name == StageEnum.RENDER_PDF.value:
                self._stage_render(job, context)

            elif stage.name == StageEnum.EXPORT_ARTIFACTS.value:
                self._stage_export(job, context)

            elif stage.name == StageEnum.PACKAGE.value:
                self._stage_package(job, context)

        except Exception as e:
            logger.error(f"[{job.job_id}] 阶段失败 {stage.name}: {e}")
            job.add_flag(f"阶段失败:{stage.name}")
            raise

        job.progress.percent = stage.progress_end
        self._update_progress(job, message=f"完成阶段: {stage.name}", force=True)

    def _stage_load_schema(self, job: Job, context: dict[str, Any]) -> None:
        """读取表单文件"""
        context["source"] = load_schema_source(job.schema_path)

    def _stage_validate(self, job: Job, context: dict[str, Any]) -> None:
        """校验表单"""
        report = self.validator.validate(context["source"])
        if not report.valid:
            job.validation_issues = [issue.to_dict() for issue in report.issues]
            raise SchemaValidationError(report.issues)

        schema = report.schema
        context["schema"] = schema
        job.form_id = schema.form.id
        self._update_progress(job, details={"form_id": schema.form.id})

    def _stage_resolve_styles(self, job: Job, context: dict[str, Any]) -> None:
        """解析样式表（运行期页面配置 < 样式覆盖文件）"""
        page = self.config.page
        overrides: dict[str, Any] = {
            "page": {
                "size": page.size,
                "margins": {"top": page.margin, "right": page.margin, "bottom": page.margin, "left": page.margin},
            }
        }

        stylesheet_path = self._stylesheet_path(job, context)
        if stylesheet_path is not None:
            overrides = deep_merge(overrides, normalize_keys(read_overrides(stylesheet_path)))
            logger.info(f"[{job.job_id}] 使用样式覆盖: {stylesheet_path}")

        stylesheet = self.style_resolver.resolve(overrides)
        context["stylesheet"] = stylesheet
        context["geometry"] = stylesheet.page.geometry()

    def _stylesheet_path(self, job: Job, context: dict[str, Any]) -> Path | None:
        if job.stylesheet_path is not None:
            return Path(job.stylesheet_path)
        declared = context["schema"].form.stylesheet
        if not declared:
            return None
        path = Path(declared)
        if not path.is_absolute():
            # 相对路径以表单文件所在目录为基准
            path = Path(job.schema_path).parent / path
        return path

    def _stage_layout(self, job: Job, context: dict[str, Any]) -> None:
        """排版"""
        result = self.composer.compose(context["schema"], context["stylesheet"], context["geometry"])
        context["layout"] = result
        job.page_count = result.page_count
        for warning in result.warnings:
            job.add_flag(f"排版告警:{warning}")
        self._update_progress(
            job,
            details={"page_count": result.page_count, "placements": len(result.placements)},
        )

    def _stage_render(self, job: Job, context: dict[str, Any]) -> None:
        """渲染PDF"""
        result = context["layout"]
        output_dir = self._output_dir(job)
        job.artifacts.pdf = self.renderer.render(result, output_dir / f"{result.form_id}.pdf")

    def _stage_export(self, job: Job, context: dict[str, Any]) -> None:
        """导出放置记录与浏览器端脚本"""
        result = context["layout"]
        schema = context["schema"]
        output_dir = self._output_dir(job)

        if self.config.output.write_placements_json:
            job.artifacts.placements_json = self.exporter.export(
                result, output_dir / f"{result.form_id}.placements.json"
            )

        if self.config.output.write_scripts:
            scripts = [generate_calculation_script(schema), generate_conditional_script(schema)]
            script = "\n\n".join(s for s in scripts if s)
            if script:
                job.artifacts.scripts_js = write_script(script, output_dir / f"{result.form_id}.js")

    def _stage_package(self, job: Job, context: dict[str, Any]) -> None:
        """生成manifest，按需打包"""
        self._update_progress(job, message="打包中")
        job.artifacts.manifest_json = self.packager.generate_manifest(job)
        if self.config.output.package_zip or job.options.get("package_zip"):
            job.artifacts.package_zip = self.packager.package(job)

    def _output_dir(self, job: Job) -> Path:
        custom = job.options.get("output_dir")
        output_dir = Path(custom) if custom else job.work_dir / "output"
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    def _update_progress(
        self,
        job: Job,
        *,
        message: str | None = None,
        details: dict[str, int | str | float] | None = None,
        force: bool = False,
    ) -> None:
        if message is not None:
            job.progress.message = message
        if details:
            job.progress.details.update(details)
        now = time.time()
        if force or (now - self._last_progress_write) >= self._progress_interval_sec:
            self._persist_job(job)
            self._last_progress_write = now

    def _persist_job(self, job: Job) -> None:
        job_dir = self.config.get_job_dir(job.job_id)
        job_dir.mkdir(parents=True, exist_ok=True)
        job_file = job_dir / "job.json"
        with open(job_file, "w", encoding="utf-8") as f:
            json.dump(job.model_dump(mode="json"), f, ensure_ascii=False, indent=2, default=str)
