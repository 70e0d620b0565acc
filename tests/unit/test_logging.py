"""
Unit Tests for logging setup.
"""
import logging

import pytest

from pain_safety.utils.logging import StructuredFormatter, get_logger, setup_logging


@pytest.fixture
def root_handlers():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _record(level=logging.WARNING, msg="high MME"):
    return logging.LogRecord("pain_safety.core.mme", level, __file__, 1, msg, None, None)


class TestStructuredFormatter:

    def test_plain_line(self):
        line = StructuredFormatter(use_color=False).format(_record())
        assert "WARNING" in line
        assert "[pain_safety.core.mme] high MME" in line
        assert "\033[" not in line

    def test_colored_line(self):
        line = StructuredFormatter(use_color=True).format(_record(logging.ERROR))
        assert line.startswith(StructuredFormatter.LEVEL_COLORS["ERROR"])
        assert line.endswith("\033[0m")


class TestSetupLogging:

    def test_repeat_calls_replace_own_handlers(self, root_handlers):
        foreign = logging.NullHandler()
        root_handlers.addHandler(foreign)

        setup_logging("DEBUG")
        setup_logging("DEBUG")

        ours = [h for h in root_handlers.handlers if getattr(h, "_pain_safety", False)]
        assert len(ours) == 1
        assert foreign in root_handlers.handlers
        assert root_handlers.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, root_handlers):
        setup_logging("chatty")
        assert root_handlers.level == logging.INFO

    def test_log_file(self, root_handlers, tmp_path):
        log_file = tmp_path / "pain.log"
        setup_logging("INFO", log_file=str(log_file))
        get_logger("pain_safety.test").info("report written")
        for handler in root_handlers.handlers:
            handler.flush()
        assert "| INFO | pain_safety.test | report written" in log_file.read_text()
        for handler in list(root_handlers.handlers):
            if isinstance(handler, logging.FileHandler):
                handler.close()
