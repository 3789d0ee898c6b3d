"""Structured JSON logging for the plan generator.

Every module gets its logger from `setup_structured_logger()`; records are
written as JSON lines to FITPLAN_LOG_DIR (one file per logger, rotated at
midnight). Context travels in `extra={"extra_fields": {...}}`.
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Tuple

LOG_DIR = Path(os.getenv("FITPLAN_LOG_DIR", "/tmp/fitplan_logs"))
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "7"))
STRUCTURED_LOG_LEVEL = os.getenv("STRUCTURED_LOG_LEVEL", "INFO").upper()

# Payloads longer than this are truncated in log records
MAX_LOGGED_PAYLOAD_CHARS = 5000

_cleanup_done = False


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `extra_fields` are merged at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(getattr(record, "extra_fields", {}))
        return json.dumps(entry, default=str)


def _file_handler(name: str) -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    _cleanup_once()
    return logging.handlers.TimedRotatingFileHandler(
        filename=LOG_DIR / f"{name}.jsonl",
        when="midnight",
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
    )


def setup_structured_logger(name: str) -> logging.Logger:
    """Logger `name` writing JSON lines to LOG_DIR/<name>.jsonl.

    Falls back to stderr when the log directory cannot be created. Calling it
    twice for the same name returns the already configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, STRUCTURED_LOG_LEVEL, logging.INFO))
    if logger.handlers:
        return logger

    try:
        handler = _file_handler(name)
    except OSError as e:
        print(f"⚠️  Log directory {LOG_DIR} unavailable ({e}), logging to stderr", file=sys.stderr)
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    return logger


def cleanup_old_logs(log_dir: Path = LOG_DIR, retention_days: int = LOG_RETENTION_DAYS) -> int:
    """Delete *.jsonl files (and their rotations) older than `retention_days`.

    Returns:
        Number of files removed
    """
    cutoff = (datetime.now() - timedelta(days=retention_days)).timestamp()
    removed = 0
    try:
        for log_file in log_dir.glob("*.jsonl*"):
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                removed += 1
    except OSError as e:
        print(f"⚠️  Failed to clean up {log_dir}: {e}", file=sys.stderr)
    return removed


def _cleanup_once() -> None:
    global _cleanup_done
    if not _cleanup_done:
        _cleanup_done = True
        cleanup_old_logs()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


@contextmanager
def log_workflow(logger: logging.Logger, workflow_name: str, **context):
    """Log start, completion or failure (with duration) of one planner step.

    Exceptions are logged with their traceback and re-raised.

    Example:
        with log_workflow(logger, "grocery_list", tier="affordable"):
            ...
    """
    fields = {"workflow": workflow_name, **context}
    logger.info(f"Workflow started: {workflow_name}", extra={"extra_fields": {**fields, "phase": "start"}})
    started = time.perf_counter()

    try:
        yield
    except Exception as e:
        logger.error(
            f"Workflow failed: {workflow_name}",
            extra={
                "extra_fields": {
                    **fields,
                    "phase": "error",
                    "duration_ms": _elapsed_ms(started),
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            },
            exc_info=True,
        )
        raise

    logger.info(
        f"Workflow completed: {workflow_name}",
        extra={"extra_fields": {**fields, "phase": "complete", "duration_ms": _elapsed_ms(started)}},
    )


def _serialize_payload(data: Any) -> Tuple[str, bool]:
    """Text form of `data` and whether serialization succeeded."""
    if not isinstance(data, (dict, list)):
        return str(data), True
    try:
        return json.dumps(data, indent=2, default=str), True
    except (TypeError, ValueError):
        # Integers past the digit limit, circular references
        return f"<non-serializable: {type(data).__name__}>", False


def log_data_structure(
    logger: logging.Logger,
    name: str,
    data: Any,
    level: str = "DEBUG",
    **context,
) -> None:
    """Log a payload (raw completion text, cleaned JSON, parsed dict).

    Text over MAX_LOGGED_PAYLOAD_CHARS is cut; `full_size` keeps the original
    length. `context` (attempt, category, state) is attached to the record.
    """
    serialized, ok = _serialize_payload(data)
    if not ok:
        logger.warning(f"Failed to serialize {name}", extra={"extra_fields": dict(context)})

    truncated = len(serialized) > MAX_LOGGED_PAYLOAD_CHARS
    fields: Dict[str, Any] = {
        "data_name": name,
        "data": serialized[:MAX_LOGGED_PAYLOAD_CHARS],
        "full_size": len(serialized),
        "truncated": truncated,
        **context,
    }
    message = f"{name} (truncated)" if truncated else name
    getattr(logger, level.lower())(message, extra={"extra_fields": fields})
