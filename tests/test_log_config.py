"""Tests for logging configuration."""

from loguru import logger

from convclone import log_config
from convclone.log_config import get_logger, log_timing


def _capture():
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{extra[name]} {message}")
    return messages, handler_id


class TestLogTiming:
    """Test the timing context manager."""

    def test_logs_elapsed_ms(self):
        messages, handler_id = _capture()
        try:
            with log_timing("rewrite transcript", get_logger("cloner")):
                pass
        finally:
            logger.remove(handler_id)

        assert len(messages) == 1
        assert messages[0].startswith("cloner rewrite transcript: ")
        assert messages[0].rstrip().endswith("ms")

    def test_logs_when_block_raises(self):
        messages, handler_id = _capture()
        try:
            try:
                with log_timing("rewrite transcript", get_logger("cloner")):
                    raise OSError("disk full")
            except OSError:
                pass
        finally:
            logger.remove(handler_id)

        assert len(messages) == 1


class TestLogFilter:
    """Test console level filtering."""

    @staticmethod
    def _record(name, level):
        return {"extra": {"name": name}, "level": logger.level(level)}

    def test_global_level(self, monkeypatch):
        monkeypatch.setattr(log_config, "_global_log_level", "INFO")

        assert log_config._log_filter(self._record("cloner", "INFO"))
        assert not log_config._log_filter(self._record("cloner", "DEBUG"))

    def test_component_override(self, monkeypatch):
        monkeypatch.setattr(log_config, "_global_log_level", "WARNING")
        monkeypatch.setitem(log_config._component_log_levels, "rewriter", "DEBUG")

        assert log_config._log_filter(self._record("rewriter", "DEBUG"))
        assert not log_config._log_filter(self._record("locator", "INFO"))

    def test_invalid_override_falls_back_to_global(self, monkeypatch):
        monkeypatch.setattr(log_config, "_global_log_level", "INFO")
        monkeypatch.setitem(log_config._component_log_levels, "rewriter", "NOPE")

        assert not log_config._log_filter(self._record("rewriter", "DEBUG"))
