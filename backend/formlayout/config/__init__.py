"""
配置层 - 运行期配置、日志与表单加载

职责：
- 加载 config/formlayout.yaml（运行期参数，可被环境变量覆盖）
- 初始化日志处理器
- 读取表单 YAML
"""

from .logging_setup import setup_logging
from .runtime_config import RuntimeConfig, get_config, reload_config
from .schema_loader import SchemaLoader, load_schema, load_schema_source

__all__ = [
    "SchemaLoader",
    "load_schema",
    "load_schema_source",
    "RuntimeConfig",
    "get_config",
    "reload_config",
    "setup_logging",
]
