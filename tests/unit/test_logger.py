import logging
import sys

import pytest

from nutrition_tracker.logging.logger import Log


class TestRender:
    def test_message_without_context_is_unchanged(self) -> None:
        assert Log._render("hello", {}) == "hello"

    def test_context_appended_as_pairs(self) -> None:
        rendered = Log._render("Analyzed", {"record": "abc", "calories": 450})
        assert rendered == "Analyzed | record=abc calories=450"


class TestLogMethods:
    def test_info_includes_context(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="nutrition_tracker"):
            Log.info("Processing record", record="r-1")
        assert "Processing record | record=r-1" in caplog.text

    def test_warning_level(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="nutrition_tracker"):
            Log.warning("Skipped")
        assert caplog.records[-1].levelno == logging.WARNING

    def test_exception_attaches_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="nutrition_tracker"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                Log.exception("Run failed")
        assert caplog.records[-1].exc_info is not None


class TestConfigure:
    def test_sets_level_and_single_handler(self) -> None:
        logger = logging.getLogger("nutrition_tracker")
        original_handlers = list(logger.handlers)
        original_level = logger.level
        try:
            logger.handlers.clear()
            Log.configure("debug")
            Log.configure("debug")
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
            assert logger.handlers[0].stream is sys.stderr
        finally:
            logger.handlers[:] = original_handlers
            logger.setLevel(original_level)
