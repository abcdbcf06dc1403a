"""Tests for adaptive_nav.utils.logger - console logger, buffer and log files."""

from __future__ import annotations

import pathlib

import pytest

from adaptive_nav.utils import logger


@pytest.fixture(autouse=True)
def fresh_buffer() -> None:
    logger.clear_log_buffer()


class TestFormatDuration:
    def test_milliseconds(self) -> None:
        assert logger.format_duration(250) == "250ms"

    def test_seconds(self) -> None:
        assert logger.format_duration(1500) == "1.50s"

    def test_minutes(self) -> None:
        assert logger.format_duration(123000) == "2m 3.0s"


class TestLogger:
    def test_context_prefix(self) -> None:
        logger.create_logger("Navigator").info("Clicking link")
        assert "[Navigator] Clicking link" in logger.get_log_buffer()[-1]

    def test_data_pairs(self) -> None:
        logger.create_logger("Test").warn("Retrying", {"attempt": 2, "page": "tickets"})
        line = logger.get_log_buffer()[-1]
        assert "attempt=2" in line
        assert 'page="tickets"' in line

    def test_buffer_has_no_ansi(self) -> None:
        logger.create_logger("Test").error("Failed")
        assert "\033[" not in logger.get_log_buffer()[-1]

    def test_clear_buffer(self) -> None:
        logger.create_logger("Test").debug("noise")
        logger.clear_log_buffer()
        assert logger.get_log_buffer() == []

    def test_timer(self) -> None:
        log = logger.create_logger("Test")
        log.start_timer("nav")
        elapsed = log.end_timer("nav", "Navigation done")
        assert elapsed >= 0
        assert "Navigation done" in logger.get_log_buffer()[-1]

    def test_timer_not_started(self) -> None:
        assert logger.create_logger("Test").end_timer("missing") == 0.0
        assert 'Timer "missing" was not started' in logger.get_log_buffer()[-1]

    def test_timers_scoped_by_context(self) -> None:
        logger.create_logger("A").start_timer("nav")
        assert logger.create_logger("B").end_timer("nav") == 0.0

    def test_section(self) -> None:
        logger.create_logger("Test").section("Navigate to tickets")
        assert any("Navigate to tickets" in line for line in logger.get_log_buffer())


class TestLogFile:
    def test_disabled_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WRITE_TO_FILE", raising=False)
        assert logger.start_log_file("tickets") is None

    def test_writes_plain_lines(self, monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
        monkeypatch.setenv("WRITE_TO_FILE", "true")
        monkeypatch.chdir(tmp_path)

        path = logger.start_log_file("tickets / mobile")
        logger.create_logger("Test").success("Page verified", {"page": "tickets"})
        logger.end_log_file()

        assert path is not None
        log_path = pathlib.Path(path)
        assert log_path.parent == tmp_path / ".logs"
        assert log_path.name.startswith("tickets___mobile_")
        content = log_path.read_text(encoding="utf-8")
        assert "Navigation Log - tickets / mobile" in content
        assert "[Test] Page verified" in content
        assert "\033[" not in content

    def test_end_without_start(self) -> None:
        logger.end_log_file()
