"""
命令行单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_cli.py -v
"""

import json
from pathlib import Path

import pytest

from formlayout.cli import build_parser, main


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """命令内 reload_config 改写的全局配置在测试后还原"""
    monkeypatch.setattr("formlayout.config.runtime_config._config", None)


@pytest.fixture
def config_file(write_yaml) -> Path:
    return write_yaml({"runtime_options": {"output": {"output_dir": {"default": "storage"}}}}, "runtime.yaml")


class TestParser:
    def test_command_required(self):
        """测试缺少子命令"""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestValidate:
    """validate 命令测试"""

    def test_valid(self, write_yaml, flow_source, capsys):
        """测试合法表单"""
        assert main(["validate", str(write_yaml(flow_source))]) == 0
        out = capsys.readouterr().out
        assert "VALID" in out
        assert "registration" in out

    def test_invalid(self, write_yaml, flow_source, capsys):
        """测试非法表单退出码为1"""
        flow_source["fields"].append({"name": "quantity", "type": "text"})
        assert main(["validate", str(write_yaml(flow_source))]) == 1
        assert "INVALID (uniqueness)" in capsys.readouterr().err

    def test_missing_file(self, temp_dir: Path):
        """测试文件不存在"""
        assert main(["validate", str(temp_dir / "none.yaml")]) == 1


class TestLayout:
    """layout 命令测试"""

    def test_layout_stdout(self, write_yaml, flow_source, capsys):
        """测试输出放置记录到标准输出"""
        assert main(["layout", str(write_yaml(flow_source))]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["form_id"] == "registration"
        assert "stylesheet" not in data

    def test_layout_to_file(self, write_yaml, flow_source, temp_dir: Path):
        """测试写出放置记录文件"""
        out = temp_dir / "placements.json"
        assert main(["layout", str(write_yaml(flow_source)), "--include-stylesheet", "--output", str(out)]) == 0
        assert "stylesheet" in json.loads(out.read_text(encoding="utf-8"))

    def test_layout_invalid(self, write_yaml):
        """测试非法表单"""
        assert main(["layout", str(write_yaml({"form": {"id": "x"}}))]) == 1

    def test_layout_unknown_page_size(self, write_yaml, flow_source, capsys):
        """测试样式表纸张名未知时退出码为1"""
        style = write_yaml({"page": {"size": "a5"}}, "style.yaml")
        assert main(["layout", str(write_yaml(flow_source)), "--stylesheet", str(style)]) == 1
        assert "a5" in capsys.readouterr().err


class TestGenerate:
    """generate 命令测试"""

    def test_generate(self, write_yaml, flow_source, absolute_source, config_file: Path, temp_dir: Path, capsys):
        """测试批量生成"""
        out = temp_dir / "build"
        code = main(
            [
                "generate",
                str(write_yaml(flow_source, "a.yaml")),
                str(write_yaml(absolute_source, "b.yaml")),
                "--out",
                str(out),
                "--config",
                str(config_file),
            ]
        )
        assert code == 0
        assert capsys.readouterr().out.count("OK:") == 2
        assert (out / "registration.pdf").exists()
        assert (out / "w9-lite.pdf").exists()
        assert (temp_dir / "storage" / "jobs").is_dir()

    def test_generate_failure(self, write_yaml, config_file: Path, capsys):
        """测试失败任务退出码为1并输出问题"""
        code = main(["generate", str(write_yaml({"form": {"id": "x"}})), "--config", str(config_file)])
        assert code == 1
        err = capsys.readouterr().err
        assert "FAILED" in err
        assert "/form/title" in err


class TestSchemaJson:
    def test_schema_json(self, capsys):
        """测试输出 JSON Schema"""
        assert main(["schema-json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["title"] == "FormSchema"
