"""
草稿引擎日志

所有日志器都挂在 "orgdraft" 之下，草稿相关的日志记录会带上 draft_id，
格式中的 %(draft_id)s 对没有草稿上下文的记录显示为 "-"。

使用示例:
    from orgdraft.log import setup_logger, get_logger, draft_log

    setup_logger("orgdraft", level="DEBUG", log_file="logs/orgdraft.log")

    logger = get_logger()              # 当前模块名
    draft_log(12).info("published")    # ... [draft=12] published
"""

import inspect
import logging
import os
from datetime import datetime
from typing import Any, Optional

ROOT_LOGGER_NAME = "orgdraft"

# 默认日志格式
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - [draft=%(draft_id)s] %(message)s"


class MicrosecondFormatter(logging.Formatter):
    """时间戳精确到微秒"""

    def formatTime(self, record, datefmt=None):
        created = datetime.fromtimestamp(record.created)
        return created.strftime(datefmt or "%Y-%m-%d %H:%M:%S") + f".{created.microsecond:06d}"


class DraftContextFilter(logging.Filter):
    """为缺少 draft_id 的记录补上占位值"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "draft_id"):
            record.draft_id = "-"
        return True


def create_formatter(
    log_format: Optional[str] = None,
    datefmt: Optional[str] = None,
    use_microseconds: bool = True,
) -> logging.Formatter:
    formatter_class = MicrosecondFormatter if use_microseconds else logging.Formatter
    return formatter_class(fmt=log_format or DEFAULT_LOG_FORMAT, datefmt=datefmt)


def _make_handler(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.addFilter(DraftContextFilter())
    return handler


def setup_logger(
    name: Optional[str] = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    console: bool = True,
    use_microseconds: bool = True,
    propagate: bool = True,
) -> logging.Logger:
    """配置日志器，已有的处理器会被替换

    Args:
        name: 日志器名称，为空时配置 root logger
        level: DEBUG / INFO / WARNING / ERROR / CRITICAL
        log_file: 日志文件路径，目录不存在时自动创建
        log_format: 日志格式，默认带 draft_id
        console: 是否输出到标准错误
        use_microseconds: 时间戳是否精确到微秒
        propagate: 是否继续传给父日志器
    """
    target = logging.getLogger(name) if name else logging.getLogger()
    target.setLevel(logging.getLevelName(level.upper()) if isinstance(level, str) else level)
    target.propagate = propagate

    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()

    formatter = create_formatter(log_format, use_microseconds=use_microseconds)
    if console:
        target.addHandler(_make_handler(logging.StreamHandler(), formatter))
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        target.addHandler(_make_handler(logging.FileHandler(log_file, encoding="utf-8"), formatter))
    return target


def setup_logger_from_config(config: Any, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """按 LoggingSettings 配置包日志器

    使用示例:
        from orgdraft.config import LoggingSettings

        setup_logger_from_config(LoggingSettings(level="DEBUG"))
    """
    return setup_logger(
        name=name,
        level=config.level,
        log_file=config.file_path or None,
        console=config.enable_console,
        propagate=False,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取日志器

    不传名称时使用调用方模块的 __name__；
    不含点号的简写挂到 orgdraft 下，例如 "draft" -> "orgdraft.draft"。
    """
    if name is None:
        caller = inspect.currentframe().f_back
        name = caller.f_globals.get("__name__", ROOT_LOGGER_NAME) if caller else ROOT_LOGGER_NAME
    elif "." not in name and name != ROOT_LOGGER_NAME:
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


# 草稿生命周期日志器
draft_logger = get_logger("draft")

logger = logging.getLogger(ROOT_LOGGER_NAME)


def draft_log(draft_id: Any) -> logging.LoggerAdapter:
    """带 draft_id 上下文的草稿日志器（draft_id 为空时显示为 -）"""
    return logging.LoggerAdapter(draft_logger, {"draft_id": "-" if draft_id is None else draft_id})
