"""日志模块

使用示例:
    from orgdraft.log import setup_logger, get_logger, draft_log

    setup_logger("orgdraft", level="DEBUG")
    logger = get_logger()
    draft_log(3).info("change saved")
"""

from .logger import (
    setup_logger,
    setup_logger_from_config,
    create_formatter,
    MicrosecondFormatter,
    DraftContextFilter,
    DEFAULT_LOG_FORMAT,
    ROOT_LOGGER_NAME,
    draft_logger,
    draft_log,
    logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "setup_logger_from_config",
    "create_formatter",
    "MicrosecondFormatter",
    "DraftContextFilter",
    "DEFAULT_LOG_FORMAT",
    "ROOT_LOGGER_NAME",
    "draft_logger",
    "draft_log",
    "logger",
    "get_logger",
]
