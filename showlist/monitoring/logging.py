"""Structured logging with context injection.

Features:
- console handler (stderr, so stdout stays free for command output)
- optional file handler per run
- JSON logs optional (easy ingestion)
- context injection (run_id/stage) without needing a big framework
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass
from typing import Any

from showlist.storage.layouts import Layout, ensure_parent

ROOT_LOGGER = "showlist"
CONTEXT_FIELDS = ("run_id", "stage", "source_file")

# ---------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in CONTEXT_FIELDS:
            if hasattr(record, k):
                base[k] = getattr(record, k)

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        # allow structured payload
        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            base["payload"] = payload

        return json.dumps(base, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Format log records as human-readable text."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [record.levelname, record.name]

        ctx = []
        for key, label in (("run_id", "run"), ("stage", "stage"), ("source_file", "file")):
            value = getattr(record, key, None)
            if value:
                ctx.append(f"{label}={value}")
        if ctx:
            parts.append("[" + " ".join(ctx) + "]")

        parts.append(record.getMessage())
        s = " ".join(parts)

        if record.exc_info:
            s += "\n" + self.formatException(record.exc_info)

        return s


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingOptions:
    """Configure logging behavior for runs."""

    level: str = "INFO"
    json_logs: bool = False

    # file logging, under <output>/logs/
    enable_file: bool = False

    # console logging
    enable_console: bool = True


def setup_run_logger(
    layout: Layout,
    *,
    run_id: str,
    options: LoggingOptions | None = None,
) -> logging.Logger:
    """Configure the package logger for one run and return it."""
    options = options or LoggingOptions()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, options.level.upper(), logging.INFO))
    logger.propagate = False

    # Prevent duplicate handlers in repeated calls
    if getattr(logger, "_showlist_run_id", None) == run_id:
        return logger

    # Clear old handlers if re-configuring for a new run
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    fmt = JsonFormatter() if options.json_logs else TextFormatter()

    if options.enable_console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(logger.level)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    if options.enable_file:
        log_path = ensure_parent(layout.run_log_path(run_id))
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logger.level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    logger._showlist_run_id = run_id
    return logger


# ---------------------------------------------------------------------
# Context injection
# ---------------------------------------------------------------------


class ContextAdapter(logging.LoggerAdapter):
    """Inject context fields into log records."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        merged = dict(self.extra)
        merged.update(extra)
        kwargs["extra"] = merged
        return msg, kwargs


def with_context(
    logger: logging.Logger | logging.LoggerAdapter,
    *,
    run_id: str | None = None,
    stage: str | None = None,
    source_file: str | None = None,
) -> ContextAdapter:
    """Create a context adapter with run, stage and source file info."""
    extra: dict[str, Any] = {}
    if isinstance(logger, logging.LoggerAdapter):
        extra.update(logger.extra or {})
        logger = logger.logger
    if run_id:
        extra["run_id"] = run_id
    if stage:
        extra["stage"] = stage
    if source_file:
        extra["source_file"] = source_file
    return ContextAdapter(logger, extra)
