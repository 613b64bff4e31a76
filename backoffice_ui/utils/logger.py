# backoffice_ui/utils/logger.py
"""
Logging
-------
One root configuration per process: a rich console handler on stderr and,
with LOG_TO_FILE, a rotating JSON-lines file. The runner adds one JSON file
per scenario run on top of that.

Scenarios may run as concurrent asyncio tasks in a single thread, so a run's
file handler only accepts records emitted inside that run's scope (see
`enter_scope`), and every JSON line carries the scope it came from.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from backoffice_ui.utils.config import LogLevel, get_settings


__all__ = [
    "get_logger",
    "set_log_level",
    "set_colorized",
    "bind",
    "unbind",
    "log_with_context",
    "attach_file_logger",
    "detach_file_logger",
    "enter_scope",
    "exit_scope",
]

ROOT_NAME = "backoffice_ui"
_MAX_BYTES = 5 * 1024 * 1024

_lock = threading.Lock()
_ready = False
# process-wide fields (e.g. run_id) merged into every record
_context: Dict[str, Any] = {}
# scenario run the current asyncio task is working for
_scope: ContextVar[Optional[str]] = ContextVar("backoffice_ui_log_scope", default=None)


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, scope, message, context."""

    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "scope": _scope.get(),
            "task": getattr(record, "taskName", None),
            "message": record.getMessage(),
        }
        ctx = getattr(record, "extra", None)
        if isinstance(ctx, dict):
            for k, v in ctx.items():
                line.setdefault(k, v if isinstance(v, (str, int, float, bool)) or v is None else str(v))
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False)


class _ScopeFilter(logging.Filter):
    def __init__(self, scope: str) -> None:
        super().__init__()
        self.scope = scope

    def filter(self, record: logging.LogRecord) -> bool:
        return _scope.get() == self.scope


def _console(colorized: bool) -> Console:
    return Console(stderr=True, force_jupyter=False, color_system="auto" if colorized else None)


def _json_file(path: str, level: int, backups: int) -> RotatingFileHandler:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=backups, encoding="utf-8", delay=True)
    handler.setLevel(level)
    handler.setFormatter(JsonLinesFormatter())
    return handler


def _configure() -> None:
    global _ready
    if _ready:
        return
    with _lock:
        if _ready:
            return
        s = get_settings()
        level = logging.getLevelName(s.LOG_LEVEL.value)

        root = logging.getLogger()
        root.setLevel(level)
        root.handlers.clear()

        console = RichHandler(
            console=_console(s.COLORIZED_OUTPUT),
            show_path=False,
            rich_tracebacks=True,
            markup=False,
            omit_repeated_times=False,
        )
        console.setFormatter(logging.Formatter("%(message)s"))
        console.setLevel(level)
        root.addHandler(console)

        if s.LOG_TO_FILE:
            root.addHandler(_json_file(str(s.LOG_FILE), level, backups=5))

        # playwright's own chatter only when it matters
        for noisy in ("asyncio", "playwright"):
            logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

        _ready = True


def get_logger(name: Optional[str] = None) -> logging.LoggerAdapter:
    """Logger adapter carrying the process-wide context from `bind`."""
    _configure()
    return logging.LoggerAdapter(logging.getLogger(name or ROOT_NAME), extra={"extra": _context})


def set_log_level(level: LogLevel | str) -> None:
    _configure()
    name = level.value if isinstance(level, LogLevel) else str(level).upper()
    py_level = logging.getLevelName(name)
    if not isinstance(py_level, int):
        py_level = logging.INFO
    root = logging.getLogger()
    root.setLevel(py_level)
    for h in root.handlers:
        h.setLevel(py_level)


def set_colorized(enabled: bool) -> None:
    """Switch ANSI colour on the console handler on or off."""
    _configure()
    for h in logging.getLogger().handlers:
        if isinstance(h, RichHandler):
            h.console = _console(enabled)


def bind(**fields: Any) -> None:
    """Attach fields (e.g. run_id) to every record from now on."""
    _context.update(fields)


def unbind(*keys: str) -> None:
    for k in keys:
        _context.pop(k, None)


def log_with_context(logger: logging.LoggerAdapter, **fields: Any) -> logging.LoggerAdapter:
    """
    Adapter for one section of work, e.g. a scenario or a widget:

        scoped = log_with_context(log, scenario="Successful login")
        scoped.info("starting")
    """
    inherited = logger.extra.get("extra") if isinstance(logger.extra, dict) else None
    merged = {**_context, **(inherited or {}), **fields}
    return logging.LoggerAdapter(logger.logger, extra={"extra": merged})


# ---------- Per-run files ----------

def enter_scope(scope: str) -> Token:
    """Mark the current task's log records as belonging to `scope`."""
    return _scope.set(scope)


def exit_scope(token: Token) -> None:
    _scope.reset(token)


def attach_file_logger(
    path: os.PathLike | str,
    level: Optional[int] = None,
    scope: Optional[str] = None,
) -> logging.Handler:
    """
    Add a JSON-lines file on the root logger and return it for
    `detach_file_logger`. With `scope`, only records emitted inside
    `enter_scope(scope)` are written.
    """
    _configure()
    root = logging.getLogger()
    handler = _json_file(os.fspath(path), level if level is not None else root.level, backups=3)
    if scope is not None:
        handler.addFilter(_ScopeFilter(scope))
    root.addHandler(handler)
    return handler


def detach_file_logger(handler: logging.Handler) -> None:
    logging.getLogger().removeHandler(handler)
    handler.close()
