"""Diagnostic logging setup for runcmd.

Diagnostics go to stderr so they never mix with the tagged command output on
stdout. ``--log-file`` adds a JSON Lines file with one record per event.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

__all__ = ["JSONFormatter", "LOGGER_NAME", "setup_logging"]

LOGGER_NAME = "runcmd"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON Lines.

    Each line carries ``ts``, ``level``, ``logger`` and ``message``; records
    logged for a target directory also carry ``directory`` (and ``pid`` or
    ``return_code`` where known), passed through ``extra=``.
    """

    def format(
        self, record: logging.LogRecord
    ) -> str:  # noqa: D401 - short override doc
        entry: Dict[str, object] = {
            "ts": _record_time(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _TASK_FIELDS:
            if hasattr(record, key):
                entry[key] = _json_safe(getattr(record, key))

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS or key in entry:
                continue
            entry[key] = _json_safe(value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


_TASK_FIELDS = ("directory", "pid", "return_code")
# Attributes every LogRecord has; anything else came in through ``extra=``.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Attach stderr (and optionally JSONL file) handlers to the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in _build_handlers(verbose, quiet, log_file):
        logger.addHandler(handler)
    return logger


def _console_level(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.INFO


def _build_handlers(
    verbose: bool, quiet: bool, log_file: Optional[Path]
) -> List[logging.Handler]:
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_console_level(verbose=verbose, quiet=quiet))
    console_handler.setFormatter(
        logging.Formatter("%(levelname)s %(name)s: %(message)s")
    )
    handlers: List[logging.Handler] = [console_handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)
    return handlers


def _record_time(record: logging.LogRecord) -> str:
    stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _json_safe(value: object) -> object:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value
