"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(stylesheet, letter_geometry):
        ctx = initialize(1, letter_geometry)
"""

from __future__ import annotations

import tempfile
import uuid
from pathlib import Path
from typing import Any, Generator

import pytest
import yaml

from formlayout.config import RuntimeConfig
from formlayout.layout import LayoutContext, initialize
from formlayout.models import FormSchema, Job, PageGeometry, ResolvedStylesheet
from formlayout.styles import default_stylesheet


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（输出到临时目录）"""
    config = RuntimeConfig()
    config.output.output_dir = temp_dir / "storage"
    return config


@pytest.fixture(scope="session")
def stylesheet() -> ResolvedStylesheet:
    """内置默认样式表"""
    return default_stylesheet()


# ============================================================================
# 几何 / 排版上下文 Fixtures
# ============================================================================

@pytest.fixture
def letter_geometry() -> PageGeometry:
    """Letter 纸张，四边 72pt（内容区 y ∈ [72, 720]）"""
    return PageGeometry.from_size("letter", 72)


@pytest.fixture
def ctx(letter_geometry: PageGeometry) -> LayoutContext:
    """单页排版上下文"""
    return initialize(1, letter_geometry)


# ============================================================================
# 表单 Fixtures
# ============================================================================

@pytest.fixture
def flow_source() -> dict[str, Any]:
    """流式表单原始映射（覆盖各内容类型）"""
    return {
        "form": {
            "id": "registration",
            "title": "Event Registration",
            "version": "1.2",
        },
        "content": [
            {"type": "heading", "level": 1, "text": "Event Registration"},
            {"type": "paragraph", "text": "Please fill in every required field."},
            {"type": "admonition", "variant": "warning", "title": "Deadline", "text": "Submit by Friday."},
            {"type": "field", "fieldType": "text", "fieldName": "full_name", "label": "Full name", "required": True},
            {"type": "field", "fieldType": "text", "fieldName": "email", "label": "Email",
             "validation": {"pattern": "email"}},
            {"type": "rule"},
            {
                "type": "table",
                "label": "Attendees",
                "fieldPrefix": "att",
                "rowCount": 3,
                "columns": [
                    {"label": "Name", "width": 200, "fieldSuffix": "name"},
                    {"label": "Meal", "width": 120, "fieldSuffix": "meal", "cellType": "dropdown",
                     "options": ["Veg", "Fish"]},
                    {"label": "Paid", "width": 60, "fieldSuffix": "paid", "cellType": "checkbox"},
                ],
            },
            {"type": "spacer", "height": 10},
            {"type": "field", "fieldType": "radio", "fieldName": "ticket", "label": "Ticket",
             "options": ["Standard", "VIP"]},
        ],
        "fields": [
            {"name": "quantity", "type": "text", "label": "Quantity", "min": 1, "max": 10},
            {"name": "price", "type": "text", "label": "Price"},
            {"name": "signature", "type": "signature", "label": "Signature", "required": True},
        ],
        "calculations": [
            {"name": "subtotal", "formula": "quantity * price", "format": "currency"},
            {"name": "total", "formula": "subtotal * 1.1", "format": "currency"},
        ],
        "conditionalFields": [
            {"trigger": {"field": "ticket", "value": "VIP"}, "show": ["price"]},
        ],
    }


@pytest.fixture
def flow_schema(flow_source: dict[str, Any]) -> FormSchema:
    return FormSchema.model_validate(flow_source)


@pytest.fixture
def absolute_source() -> dict[str, Any]:
    """绝对定位表单原始映射"""
    return {
        "form": {
            "id": "w9-lite",
            "title": "Taxpayer Form",
            "pages": 2,
            "positioning": "absolute",
        },
        "content": [
            {"type": "heading", "level": 2, "text": "Part I", "page": 1, "position": {"x": 72, "y": 720}},
            {"type": "paragraph", "text": "Certification", "page": 2, "position": {"x": 72, "y": 700}},
        ],
        "fields": [
            {"name": "name", "type": "text", "page": 1, "position": {"x": 72, "y": 600, "width": 300}},
            {"name": "agree", "type": "checkbox", "page": 2, "position": {"x": 72, "y": 500}},
            {"name": "status", "type": "radio", "page": 2, "options": ["Single", "Married", "Other"],
             "position": {"x": 72, "y": 400}},
        ],
    }


@pytest.fixture
def absolute_schema(absolute_source: dict[str, Any]) -> FormSchema:
    return FormSchema.model_validate(absolute_source)


@pytest.fixture
def write_yaml(temp_dir: Path):
    """把映射写成 YAML 文件，返回路径"""

    def _write(data: dict[str, Any], name: str = "form.yaml") -> Path:
        path = temp_dir / name
        path.write_text(yaml.safe_dump(data, allow_unicode=True, sort_keys=False), encoding="utf-8")
        return path

    return _write


# ============================================================================
# Job Fixtures
# ============================================================================

@pytest.fixture
def temp_job(temp_dir: Path) -> Job:
    """临时任务（工作目录位于临时目录）"""
    job = Job(
        job_id=str(uuid.uuid4()),
        schema_path=temp_dir / "form.yaml",
    )
    job.work_dir = temp_dir / "job"
    job.work_dir.mkdir()
    return job


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
