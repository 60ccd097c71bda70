"""日志工具测试"""

import logging
import os
import re

import pytest

from orgdraft.config import LoggingSettings
from orgdraft.log import (
    DEFAULT_LOG_FORMAT,
    DraftContextFilter,
    MicrosecondFormatter,
    ROOT_LOGGER_NAME,
    create_formatter,
    draft_log,
    draft_logger,
    get_logger,
    setup_logger,
    setup_logger_from_config,
)


@pytest.fixture
def logger_name(request):
    """每个测试独立的日志器名称，结束后清理处理器"""
    name = f"orgdraft_test.{request.node.name}"
    yield name
    _logger = logging.getLogger(name)
    for handler in list(_logger.handlers):
        handler.close()
        _logger.removeHandler(handler)


class TestGetLogger:
    """get_logger 测试"""

    def test_infers_module_name(self):
        """测试自动推断模块名"""
        assert get_logger().name == __name__

    def test_short_name_prefixed(self):
        """测试简写名称添加包前缀"""
        assert get_logger("draft").name == "orgdraft.draft"

    def test_full_name_kept(self):
        """测试完整名称保持不变"""
        assert get_logger("orgdraft.draft").name == "orgdraft.draft"
        assert get_logger("uvicorn.error").name == "uvicorn.error"

    def test_draft_logger(self):
        """测试草稿日志器名称"""
        assert draft_logger.name == "orgdraft.draft"


class TestSetupLogger:
    """setup_logger 测试"""

    def test_level_and_console(self, logger_name):
        """测试日志级别与控制台输出"""
        _logger = setup_logger(logger_name, level="DEBUG")

        assert _logger.level == logging.DEBUG
        assert len(_logger.handlers) == 1
        assert isinstance(_logger.handlers[0], logging.StreamHandler)

    def test_handlers_replaced(self, logger_name):
        """测试重复设置不会叠加处理器"""
        setup_logger(logger_name)
        _logger = setup_logger(logger_name)
        assert len(_logger.handlers) == 1

    def test_log_file(self, logger_name, temp_dir):
        """测试写入日志文件并自动创建目录"""
        log_file = os.path.join(temp_dir, "logs", "app.log")
        _logger = setup_logger(logger_name, log_file=log_file, console=False)

        _logger.info("draft published")
        for handler in _logger.handlers:
            handler.flush()

        with open(log_file, encoding="utf-8") as f:
            assert "draft published" in f.read()

    def test_from_config(self, logger_name):
        """测试按配置对象设置"""
        _logger = setup_logger_from_config(LoggingSettings(level="WARNING"), name=logger_name)

        assert _logger.level == logging.WARNING
        assert _logger.propagate is False


class TestFormatter:
    """格式化器测试"""

    def test_microseconds(self):
        """测试微秒精度时间戳"""
        formatter = create_formatter()
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert isinstance(formatter, MicrosecondFormatter)
        assert re.match(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{6}", formatter.formatTime(record))

    def test_plain_formatter(self):
        """测试关闭微秒精度"""
        formatter = create_formatter(use_microseconds=False)
        assert not isinstance(formatter, MicrosecondFormatter)
        assert formatter._fmt == DEFAULT_LOG_FORMAT


class TestDraftContext:
    """draft_id 上下文测试"""

    def test_filter_fills_placeholder(self):
        """测试缺少 draft_id 时补上占位值"""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert DraftContextFilter().filter(record) is True
        assert record.draft_id == "-"

    def test_filter_keeps_existing(self):
        """测试已有 draft_id 不被覆盖"""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        record.draft_id = 12

        DraftContextFilter().filter(record)
        assert record.draft_id == 12

    def test_draft_log_writes_draft_id(self, temp_dir):
        """测试 draft_log 输出带 draft_id"""
        log_file = os.path.join(temp_dir, "draft.log")
        _logger = setup_logger(draft_logger.name, log_file=log_file, console=False)
        try:
            draft_log(7).info("published")
            get_logger("draft").info("no context")
            for handler in _logger.handlers:
                handler.flush()

            with open(log_file, encoding="utf-8") as f:
                content = f.read()
            assert "[draft=7] published" in content
            assert "[draft=-] no context" in content
        finally:
            for handler in list(_logger.handlers):
                handler.close()
                _logger.removeHandler(handler)
            _logger.setLevel(logging.NOTSET)

    def test_draft_log_caplog(self, caplog):
        """测试 draft_log 记录可被捕获"""
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            draft_log(3).info("draft created")

        record = caplog.records[-1]
        assert record.name == "orgdraft.draft"
        assert record.draft_id == 3
