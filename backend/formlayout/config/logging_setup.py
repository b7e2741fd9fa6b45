"""
日志配置 - 统一初始化根日志处理器

各模块仍使用 logging.getLogger(__name__)，这里只负责一次性挂载处理器。
"""

from __future__ import annotations

import logging
import logging.handlers

from .runtime_config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def setup_logging(config: LoggingConfig | None = None, force: bool = False) -> logging.Logger:
    """
    初始化 formlayout 日志

    Args:
        config: 日志配置（None 时使用默认值）
        force: 已初始化时是否重新挂载处理器

    Returns:
        formlayout 包级 logger
    """
    global _configured
    config = config or LoggingConfig()
    logger = logging.getLogger("formlayout")

    if _configured and not force:
        return logger

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console)

    if config.log_to_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    _configured = True
    return logger
