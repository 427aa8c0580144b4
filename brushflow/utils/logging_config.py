"""Logging setup shared by the library, the replay CLI and the tests.

Provides:
    - Console handler (stderr) and optional file handler with size rotation
    - Human-readable or JSON line format
    - Contextual fields (app, stroke id, ...) attached to every record
    - Warning capture (Python warnings → logging)

Public API:
    setup_logging(log_level="INFO", log_file=None, json=False, context={"app": "replay"})
    push_context(stroke="00001-ab12cd34")
    pop_context(keys=["stroke"])

Format examples:
    Human: 2026-10-19T13:45:12.345Z | INFO     | app=replay stroke=00001-ab12cd34 | Stroke done
    JSON:  {"t":"2026-10-19T13:45:12.345000+00:00","lvl":"INFO","stroke":"00001-ab12cd34","msg":"..."}

Context lives in a contextvar, so concurrent strokes in different threads
keep separate fields. Repeated setup_logging() calls replace handlers
instead of stacking them.
"""

import contextvars
import json as _json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context_var = contextvars.ContextVar('brushflow_log_context', default={})

_configured = False

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Formatter that appends the current context fields.

    Parameters
    ----------
    fmt_mode : str
        "human" or "json"
    use_color : bool
        ANSI level colors (only honored when stderr is a TTY)
    """

    def __init__(self, fmt_mode: str = "human", use_color: bool = True):
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"Unknown log format: {fmt_mode}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get({})
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)

        if self.fmt_mode == "json":
            payload = {
                't': ts.isoformat(),
                'lvl': record.levelname,
                'name': record.name,
                'msg': record.getMessage(),
            }
            payload.update(context)
            if record.exc_info:
                payload['exc'] = self.formatException(record.exc_info)
            return _json.dumps(payload, default=str)

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"

        parts = [ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z', '|', level, '|']
        if context:
            parts.append(' '.join(f"{k}={v}" for k, v in context.items()) + ' |')
        parts.append(record.getMessage())

        line = ' '.join(parts)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    max_bytes: int = 0,
    backup_count: int = 3,
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None
) -> List[logging.Handler]:
    """Configure the root logger (idempotent).

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        File to log to; parent directories are created
    json : bool
        JSON lines instead of the human format (file handler only)
    color : bool
        ANSI colors on the console handler
    to_stderr : bool
        Attach a console handler
    max_bytes : int
        Rotate the log file at this size; 0 disables rotation
    backup_count : int
        Rotated files to keep
    capture_warnings : bool
        Route ``warnings.warn`` through logging
    context : dict, optional
        Initial context fields, e.g. ``{"app": "replay"}``

    Returns
    -------
    list[logging.Handler]
        Handlers attached to the root logger
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    root.setLevel(level)

    handlers: List[logging.Handler] = []

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", use_color=color))
        handlers.append(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        if max_bytes > 0:
            file_handler = logging.handlers.RotatingFileHandler(
                path, maxBytes=max_bytes, backupCount=backup_count
            )
        else:
            file_handler = logging.FileHandler(path)
        file_handler.setFormatter(
            ContextFormatter("json" if json else "human", use_color=False)
        )
        handlers.append(file_handler)

    for handler in handlers:
        root.addHandler(handler)

    if context:
        push_context(**context)

    if capture_warnings:
        logging.captureWarnings(True)

    _configured = True
    return handlers


def push_context(**kwargs) -> None:
    """Add fields to every subsequent record in this context.

    Examples
    --------
    >>> push_context(app="replay", stroke="00003-9f2a11c0")
    >>> logger.info("Replaying")  # → "... | app=replay stroke=00003-9f2a11c0 | Replaying"
    """
    _context_var.set({**_context_var.get({}), **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove context fields; all of them when ``keys`` is None."""
    if keys is None:
        _context_var.set({})
        return
    current = dict(_context_var.get({}))
    for key in keys:
        current.pop(key, None)
    _context_var.set(current)


def get_context() -> Dict[str, Any]:
    """Snapshot of the current context fields."""
    return dict(_context_var.get({}))
