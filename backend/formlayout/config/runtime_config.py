"""
运行期配置 - 读取 config/formlayout.yaml

职责：
- 加载输出/页面/并发/日志等运行参数
- 提供环境变量覆盖机制（FORMLAYOUT_ 前缀，嵌套用 __）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

DEFAULT_CONFIG_PATH = Path("config/formlayout.yaml")


class OutputConfig(BaseModel):
    """输出配置"""

    output_dir: Path = Path("storage")
    write_placements_json: bool = True
    write_scripts: bool = True
    package_zip: bool = False


class PageConfig(BaseModel):
    """默认页面（样式表未指定页面时使用）"""

    size: str = "letter"
    margin: float = 72.0


class ConcurrencyConfig(BaseModel):
    """并发配置"""

    max_workers: int = 2


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: Path = Path("logs/formlayout.log")
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 3


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # 基础路径
    base_dir: Path = Path(".")

    # 各子配置
    output: OutputConfig = Field(default_factory=OutputConfig)
    page: PageConfig = Field(default_factory=PageConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "FORMLAYOUT_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            base_dir=path.parent,
            output=OutputConfig(**cls._extract(runtime_opts, "output")),
            page=PageConfig(**cls._extract(runtime_opts, "page")),
            concurrency=ConcurrencyConfig(**cls._extract(runtime_opts, "concurrency")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（支持 {default: x} 写法）"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if not self.output.output_dir.is_absolute():
            self.output.output_dir = (base_dir / self.output.output_dir).resolve()
        if not self.logging.log_file.is_absolute():
            self.logging.log_file = (base_dir / self.logging.log_file).resolve()

    def get_job_dir(self, job_id: str) -> Path:
        """获取任务工作目录"""
        return self.output.output_dir / "jobs" / job_id

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.output.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output.output_dir / "jobs").mkdir(exist_ok=True)


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
