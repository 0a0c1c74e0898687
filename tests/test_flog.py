"""
Tests for the logging utilities in eigenkernel.common.flog.
"""

import logging

import pytest

from eigenkernel.common.flog import Logger, Colors, get_global_logger, log_timing_summary

# --------------------------------------------

class RecordingLogger:
    def __init__(self):
        self.lines = []
    def title(self, tail, *args, **kwargs):
        self.lines.append(('title', tail))
    def info(self, msg, lvl=0, verbose=True, color=None):
        self.lines.append(('info', msg))
    def warning(self, msg, lvl=0, verbose=True, color=None):
        self.lines.append(('warning', msg))

# --------------------------------------------

class TestFormatting:

    def test_indentation(self):
        assert Logger.print("msg") == "msg"
        assert Logger.print("msg", 2) == "\t\t->msg"

    def test_colors(self):
        assert Colors('red')('x') == "\033[31mx\033[0m"
        assert str(Colors('unknown')) == Colors.white
        assert Logger.colorize("plain", None) == "plain"
        assert Logger.colorize("plain", "white") == "plain"

    def test_string_level(self):
        logger = Logger(name="eigenkernel-test-level", lvl='debug')
        assert logger.lvl == logging.DEBUG

class TestFileLogging:

    def test_no_file_without_env(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PYLOGFILE", raising=False)
        monkeypatch.chdir(tmp_path)
        logger = Logger(name="eigenkernel-test-nofile", logfile="run")
        assert logger.logfile is None
        assert not (tmp_path / "log").exists()

    def test_file_handler(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PYLOGFILE", "1")
        monkeypatch.chdir(tmp_path)
        logger = Logger(name="eigenkernel-test-file", logfile="run.log")
        logger.info("decomposition started", lvl=1, color='green')
        logger.debug("below the level")

        for h in list(logger.logger.handlers):
            h.flush()
            h.close()
            logger.logger.removeHandler(h)

        text = (tmp_path / "log" / "run.log").read_text()
        assert "decomposition started" in text
        assert "below the level" not in text
        assert "\033[" not in text

class TestGlobalLogger:

    def test_singleton(self):
        assert get_global_logger() is get_global_logger()

    def test_timing_decorator(self):
        logger = Logger(name="eigenkernel-test-timing")

        @logger.timing
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"
        assert add.elapsed >= 0.0

    def test_timing_logs_at_debug(self, capsys):
        logger = Logger(name="eigenkernel-test-timing-debug", lvl=logging.DEBUG)
        timed  = logger.timing(sorted)
        assert timed.elapsed == 0.0
        assert timed([3, 1, 2]) == [1, 2, 3]
        out = capsys.readouterr().out
        assert "Starting 'sorted'" in out
        assert "Finished 'sorted'" in out

    def test_say_levels(self, capsys):
        logger = Logger(name="eigenkernel-test-say")
        logger.say("first", "second", log='info', lvl=1)
        logger.say("hidden", log=logging.DEBUG)
        out = capsys.readouterr().out
        assert "\t->first\nsecond" in out
        assert "hidden" not in out

class TestTimingSummary:

    def test_table(self):
        logger = RecordingLogger()
        log_timing_summary(logger, {"validate": 0.001, "decompose": 0.25}, title="Run", extra_info=["n=4"])
        kinds   = [k for k, _ in logger.lines]
        text    = "\n".join(m for _, m in logger.lines)
        assert kinds[0] == 'title'
        assert "n=4" in text
        assert "validate" in text and "decompose" in text
        assert "0.2510" in text

    def test_total_mismatch_warns(self):
        logger = RecordingLogger()
        log_timing_summary(logger, {"a": 1.0}, total_duration=5.0)
        assert any(k == 'warning' for k, _ in logger.lines)
        assert "5.0000" in "\n".join(m for _, m in logger.lines)

    def test_empty_phases(self):
        logger = RecordingLogger()
        log_timing_summary(logger, {})
        assert any("No phases timed" in m for _, m in logger.lines)

# --------------------------------------------
