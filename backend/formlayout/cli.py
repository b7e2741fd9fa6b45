"""
命令行入口

    formlayout generate forms/a.yaml forms/b.yaml --out build/
    formlayout validate forms/a.yaml
    formlayout layout forms/a.yaml > placements.json
    formlayout schema-json

退出码：0 成功；1 解析/校验失败或任一任务失败。
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import RuntimeConfig, get_config, load_schema, load_schema_source, reload_config, setup_logging
from .interfaces import FormLayoutError
from .layout import compose_form
from .models import JobStatus
from .pipeline import JobManager, PipelineExecutor
from .render import PlacementExporter
from .schema import form_json_schema, validate_schema
from .styles import load_stylesheet


def _runtime_config(config_path: str) -> RuntimeConfig:
    config = reload_config(config_path) if config_path else get_config()
    setup_logging(config.logging)
    return config


def _cmd_generate(args: argparse.Namespace) -> int:
    config = _runtime_config(args.config)
    config.ensure_dirs()

    options: dict = {"package_zip": args.zip}
    if args.out:
        options["output_dir"] = args.out

    manager = JobManager(config)
    jobs = [
        manager.create_job(Path(schema), stylesheet_path=args.stylesheet or None, options=options)
        for schema in args.schemas
    ]

    # 失败记录在各自的 Job 上，逐个汇报
    PipelineExecutor(config).run_batch(jobs)

    failed = 0
    for job in jobs:
        manager.update_job(job)
        if job.status == JobStatus.SUCCEEDED:
            print(f"OK: {job.schema_path} -> {job.artifacts.pdf} ({job.page_count} pages)")
            for flag in job.flags:
                print(f"  WARN: {flag}")
        else:
            failed += 1
            print(f"FAILED: {job.schema_path}", file=sys.stderr)
            for issue in job.validation_issues:
                print(f"  {issue['path']}: {issue['message']}", file=sys.stderr)
            if not job.validation_issues:
                for error in job.errors:
                    print(f"  {error}", file=sys.stderr)

    return 1 if failed else 0


def _cmd_validate(args: argparse.Namespace) -> int:
    setup_logging(get_config().logging)
    try:
        source = load_schema_source(args.schema)
    except FormLayoutError as e:
        print(str(e), file=sys.stderr)
        return 1

    report = validate_schema(source)
    if not report.valid:
        print(f"INVALID ({report.failed_check}): {args.schema}", file=sys.stderr)
        for issue in report.issues:
            print(f"  {issue.path}: {issue.message}", file=sys.stderr)
        return 1

    print(f"VALID: {args.schema} ({report.schema.form.id})")
    return 0


def _cmd_layout(args: argparse.Namespace) -> int:
    setup_logging(get_config().logging)
    try:
        form = load_schema(args.schema)
        result = compose_form(form, load_stylesheet(args.stylesheet or None))
        if args.output:
            PlacementExporter(args.include_stylesheet).export(result, Path(args.output))
            print(f"{result.page_count} pages, {len(result.placements)} placements -> {args.output}")
            return 0
    except FormLayoutError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(result.to_json(args.include_stylesheet))
    return 0


def _cmd_schema_json(args: argparse.Namespace) -> int:
    print(json.dumps(form_json_schema(), ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formlayout",
        description="Form layout engine: schema -> paginated fillable PDF.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="生成 PDF（可批量）")
    gen.add_argument("schemas", nargs="+", help="表单 YAML 文件")
    gen.add_argument("--stylesheet", "-s", default="", help="样式覆盖 YAML")
    gen.add_argument("--out", "-o", default="", help="输出目录（默认：任务工作目录/output）")
    gen.add_argument("--zip", action="store_true", help="同时生成 package.zip")
    gen.add_argument("--config", default="", help="运行期配置 YAML")
    gen.set_defaults(func=_cmd_generate)

    val = sub.add_parser("validate", help="校验表单")
    val.add_argument("schema", help="表单 YAML 文件")
    val.set_defaults(func=_cmd_validate)

    lay = sub.add_parser("layout", help="输出放置记录 JSON")
    lay.add_argument("schema", help="表单 YAML 文件")
    lay.add_argument("--stylesheet", "-s", default="", help="样式覆盖 YAML")
    lay.add_argument("--include-stylesheet", action="store_true", help="JSON 中包含解析后的样式表")
    lay.add_argument("--output", "-o", default="", help="写入文件而不是标准输出")
    lay.set_defaults(func=_cmd_layout)

    sch = sub.add_parser("schema-json", help="输出表单 JSON Schema")
    sch.set_defaults(func=_cmd_schema_json)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
