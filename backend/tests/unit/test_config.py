"""
配置加载单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_config.py -v
"""

import logging
from pathlib import Path

import pytest

from formlayout.config import RuntimeConfig, SchemaLoader, load_schema, setup_logging
from formlayout.config.runtime_config import LoggingConfig
from formlayout.interfaces import SchemaParseError, SchemaValidationError


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self):
        """测试默认配置"""
        config = RuntimeConfig()
        assert config.concurrency.max_workers == 2
        assert config.page.size == "letter"
        assert config.page.margin == 72.0
        assert config.output.write_placements_json is True

    def test_get_job_dir(self, runtime_config: RuntimeConfig):
        """测试获取任务目录"""
        job_dir = runtime_config.get_job_dir("test-job-id")
        assert job_dir == runtime_config.output.output_dir / "jobs" / "test-job-id"

    def test_from_yaml_default_syntax(self, temp_dir: Path):
        """测试 {default: x} 写法与相对路径解析"""
        path = temp_dir / "formlayout.yaml"
        path.write_text(
            "runtime_options:\n"
            "  output:\n"
            "    output_dir: {default: out}\n"
            "    package_zip: true\n"
            "  page:\n"
            "    size: {default: a4}\n"
            "  concurrency:\n"
            "    max_workers: {default: 4}\n",
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(path)
        assert config.page.size == "a4"
        assert config.concurrency.max_workers == 4
        assert config.output.package_zip is True
        assert config.output.output_dir == (temp_dir / "out").resolve()

    def test_from_yaml_missing_file(self, temp_dir: Path):
        """测试配置文件不存在时使用默认值"""
        config = RuntimeConfig.from_yaml(temp_dir / "missing.yaml")
        assert config.page.size == "letter"

    def test_ensure_dirs(self, runtime_config: RuntimeConfig):
        """测试创建输出目录"""
        runtime_config.ensure_dirs()
        assert (runtime_config.output.output_dir / "jobs").is_dir()


class TestSchemaLoader:
    """表单加载器测试"""

    def test_parse_text(self):
        """测试解析 YAML 文本"""
        data = SchemaLoader.parse_text("form:\n  id: a\n  title: A\n")
        assert data["form"]["id"] == "a"

    def test_parse_invalid_yaml(self):
        """测试语法错误 -> SchemaParseError"""
        with pytest.raises(SchemaParseError):
            SchemaLoader.parse_text("form: [unclosed")

    def test_parse_non_mapping_root(self):
        """测试根节点不是映射"""
        with pytest.raises(SchemaParseError):
            SchemaLoader.parse_text("- a\n- b\n")

    def test_missing_file(self, temp_dir: Path):
        """测试文件不存在"""
        with pytest.raises(SchemaParseError):
            SchemaLoader.read_source(temp_dir / "nope.yaml")

    def test_load_valid(self, write_yaml, flow_source):
        """测试读取并校验"""
        schema = load_schema(write_yaml(flow_source))
        assert schema.form.id == "registration"

    def test_load_invalid_raises_with_issues(self, write_yaml):
        """测试校验失败携带全部问题"""
        path = write_yaml({"form": {"id": "x", "title": "X"}, "fields": [
            {"name": "a", "type": "text"},
            {"name": "a", "type": "text"},
        ]})
        with pytest.raises(SchemaValidationError) as exc_info:
            load_schema(path)
        assert exc_info.value.issues[0].path == "/fields/1/name"


class TestLogging:
    """日志初始化测试"""

    def test_setup_logging_level(self):
        """测试日志级别与处理器"""
        logger = setup_logging(LoggingConfig(log_level="DEBUG"), force=True)
        assert logger.name == "formlayout"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_setup_logging_file(self, temp_dir: Path):
        """测试写入日志文件"""
        log_file = temp_dir / "logs" / "formlayout.log"
        logger = setup_logging(LoggingConfig(log_to_file=True, log_file=log_file), force=True)
        assert len(logger.handlers) == 2
        assert log_file.parent.is_dir()
        for handler in list(logger.handlers):
            handler.close()
        setup_logging(LoggingConfig(), force=True)
