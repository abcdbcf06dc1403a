"""
Structured console logger for navigation runs.
Colourful, timestamped output with key/value data and phase timers.
When WRITE_TO_FILE is set, each scenario also gets a plain-text log file.

Per-scenario state (timers, line buffer, log-file handle) lives in
``contextvars.ContextVar`` so concurrently running scenarios keep
their diagnostics apart.
"""

from __future__ import annotations

import contextvars
import io
import os
import pathlib
import re
import sys
import time
from datetime import UTC, datetime

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")

# ============================================================================
# Per-scenario state
# ============================================================================

_timers_var: contextvars.ContextVar[dict[str, tuple[float, str]]] = contextvars.ContextVar("_timers_var")
_buffer_var: contextvars.ContextVar[list[str]] = contextvars.ContextVar("_buffer_var")
_file_var: contextvars.ContextVar[io.TextIOWrapper | None] = contextvars.ContextVar("_file_var", default=None)


def _timers() -> dict[str, tuple[float, str]]:
    try:
        return _timers_var.get()
    except LookupError:
        timers: dict[str, tuple[float, str]] = {}
        _timers_var.set(timers)
        return timers


def _buffer() -> list[str]:
    try:
        return _buffer_var.get()
    except LookupError:
        buf: list[str] = []
        _buffer_var.set(buf)
        return buf


def get_log_buffer() -> list[str]:
    """Return a copy of the lines logged in this context (ANSI-stripped)."""
    return list(_buffer())


def clear_log_buffer() -> None:
    """Reset the line buffer and timers before the next scenario."""
    _buffer().clear()
    _timers().clear()


# ============================================================================
# File Logging
# ============================================================================


def _file_logging_enabled() -> bool:
    return os.environ.get("WRITE_TO_FILE", "").lower() == "true"


def start_log_file(scenario: str) -> str | None:
    """Open a log file for *scenario* under ``.logs/``.

    Returns the path written to, or ``None`` when file logging is
    disabled or the file could not be opened.
    """
    if not _file_logging_enabled():
        return None

    end_log_file()

    logs_dir = pathlib.Path.cwd() / ".logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    safe_name = "".join(c if c.isalnum() or c in ".-" else "_" for c in scenario.strip())[:60] or "scenario"
    now = datetime.now(UTC)
    path = logs_dir / f"{safe_name}_{now.strftime('%Y-%m-%d_%H-%M-%S')}.log"

    try:
        stream = open(path, "a", encoding="utf-8")  # noqa: SIM115
    except OSError as exc:
        print(f"\033[31m✗ [Logger] Failed to open log file: {exc}\033[0m", file=sys.stderr)
        return None

    _file_var.set(stream)
    stream.write(f"\n{'=' * 80}\n  Navigation Log - {scenario}\n  Started: {now.isoformat()}\n{'=' * 80}\n")
    return str(path)


def end_log_file() -> None:
    """Flush and close the current scenario's log file, if any."""
    stream = _file_var.get(None)
    if stream is None:
        return
    try:
        stream.flush()
        stream.close()
    except OSError:
        print("\033[33m⚠ [Logger] Failed to close log file\033[0m", file=sys.stderr)
    _file_var.set(None)


def _emit(line: str) -> None:
    """Send *line* to stderr, the log file and the in-memory buffer."""
    print(line, file=sys.stderr)
    clean = _ANSI_RE.sub("", line)
    stream = _file_var.get(None)
    if stream is not None:
        stream.write(clean + "\n")
        stream.flush()
    _buffer().append(clean)


# ============================================================================
# Formatting
# ============================================================================

_colours = {
    "reset": "\033[0m",
    "bright": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "red": "\033[31m",
    "magenta": "\033[35m",
    "blue": "\033[34m",
    "gray": "\033[90m",
}

_level_style = {
    "info": (_colours["cyan"], "ℹ"),
    "success": (_colours["green"], "✓"),
    "warn": (_colours["yellow"], "⚠"),
    "error": (_colours["red"], "✗"),
    "debug": (_colours["gray"], "•"),
    "timing": (_colours["magenta"], "⏱"),
}


def _timestamp() -> str:
    now = datetime.now(UTC)
    return now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"


def format_duration(ms: float) -> str:
    """Render a millisecond duration as ``250ms``, ``1.50s`` or ``2m 3.0s``."""
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60000:
        return f"{ms / 1000:.2f}s"
    minutes = int(ms // 60000)
    return f"{minutes}m {(ms % 60000) / 1000:.1f}s"


def _format_value(value: object) -> str:
    c = _colours
    if value is None:
        return f"{c['dim']}None{c['reset']}"
    if isinstance(value, bool):
        return f"{c['green']}True{c['reset']}" if value else f"{c['red']}False{c['reset']}"
    if isinstance(value, (int, float)):
        return f"{c['yellow']}{value}{c['reset']}"
    if isinstance(value, str):
        shown = value[:197] + "..." if len(value) > 200 else value
        return f'{c["green"]}"{shown}"{c["reset"]}'
    if isinstance(value, (list, tuple)):
        return f"{c['cyan']}[{len(value)} items]{c['reset']}"
    if isinstance(value, dict):
        return f"{c['cyan']}{{{len(value)} keys}}{c['reset']}"
    return str(value)


# ============================================================================
# Logger Class
# ============================================================================


class Logger:
    """Console logger that prefixes every line with a component name."""

    def __init__(self, context: str = "Navigation") -> None:
        self._context = context

    def _log(self, level: str, message: str, data: dict[str, object] | None = None) -> None:
        colour, symbol = _level_style.get(level, _level_style["info"])
        c = _colours
        prefix = (
            f"{c['gray']}[{_timestamp()}]{c['reset']} {colour}{symbol}{c['reset']} "
            f"{c['bright']}[{self._context}]{c['reset']}"
        )
        if data:
            pairs = " ".join(f"{c['dim']}{k}={c['reset']}{_format_value(v)}" for k, v in data.items())
            _emit(f"{prefix} {message} {pairs}")
        else:
            _emit(f"{prefix} {message}")

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("info", message, data)

    def success(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("success", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("debug", message, data)

    def start_timer(self, label: str) -> None:
        """Start a named timer, scoped to this logger's context."""
        _timers()[f"{self._context}:{label}"] = (time.monotonic() * 1000, _timestamp())
        self._log("timing", f"Starting: {label}")

    def end_timer(self, label: str, message: str | None = None) -> float:
        """Stop a named timer, log the elapsed time and return it in ms."""
        entry = _timers().pop(f"{self._context}:{label}", None)
        if entry is None:
            self.warn(f'Timer "{label}" was not started')
            return 0.0

        started_ms, started_ts = entry
        elapsed = time.monotonic() * 1000 - started_ms
        c = _colours
        self._log(
            "timing",
            f"{message or f'Completed: {label}'} {c['dim']}took{c['reset']} "
            f"{c['magenta']}{format_duration(elapsed)}{c['reset']} {c['dim']}(started {started_ts}){c['reset']}",
        )
        return elapsed

    def section(self, title: str) -> None:
        """Print a prominent divider, e.g. at the start of a navigation."""
        c = _colours
        rule = "─" * 60
        for line in ("", f"{c['blue']}{rule}{c['reset']}", f"{c['blue']}{c['bright']}  {title}{c['reset']}", f"{c['blue']}{rule}{c['reset']}"):
            _emit(line)

    def subsection(self, title: str) -> None:
        """Print a smaller header, e.g. for each retry attempt."""
        _emit(f"{_colours['cyan']}  ▸ {title}{_colours['reset']}")


def create_logger(context: str) -> Logger:
    """Create a logger for a specific component."""
    return Logger(context)
