from __future__ import annotations

import json
import logging
from io import StringIO
from pathlib import Path

import pytest

from rich.console import Console

from runcmd.engine import OutputSink, run_group
from runcmd.utils.log_setup import LOGGER_NAME, JSONFormatter, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        "runcmd.engine", logging.WARNING, __file__, 1, "failed in %s", ("a",), None
    )
    record.directory = "a"
    record.return_code = 2
    record.unserializable = object()

    entry = json.loads(JSONFormatter().format(record))

    assert entry["level"] == "WARNING"
    assert entry["logger"] == "runcmd.engine"
    assert entry["message"] == "failed in a"
    assert entry["directory"] == "a"
    assert isinstance(entry["unserializable"], str)
    assert entry["return_code"] == 2
    assert "pid" not in entry
    assert "lineno" not in entry and "args" not in entry
    assert entry["ts"].endswith("Z")


@pytest.mark.parametrize(
    "verbose, quiet, level",
    [(False, False, logging.INFO), (True, False, logging.DEBUG), (False, True, logging.ERROR)],
)
def test_console_level(package_logger, verbose: bool, quiet: bool, level: int) -> None:
    logger = setup_logging(verbose=verbose, quiet=quiet)
    assert logger is package_logger
    assert [h.level for h in logger.handlers] == [level]
    assert logger.propagate is False


def test_log_file_receives_json_lines(package_logger, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "runcmd.jsonl"
    setup_logging(log_file=log_file)

    logging.getLogger("runcmd.engine.executor").debug("started pid %s", 42)
    for handler in package_logger.handlers:
        handler.flush()

    lines = log_file.read_text().splitlines()
    assert json.loads(lines[-1])["message"] == "started pid 42"


def test_setup_is_idempotent(package_logger) -> None:
    setup_logging()
    setup_logging()
    assert len(package_logger.handlers) == 1


@pytest.mark.asyncio
async def test_engine_records_carry_directory(package_logger, tmp_path: Path) -> None:
    target = tmp_path / "work"
    target.mkdir()
    log_file = tmp_path / "runcmd.jsonl"
    setup_logging(quiet=True, log_file=log_file)
    sink = OutputSink(Console(file=StringIO(), force_terminal=False, color_system=None))

    await run_group(["exit 5"], [str(target)], 1, sink=sink)
    for handler in package_logger.handlers:
        handler.flush()

    entries = [json.loads(line) for line in log_file.read_text().splitlines()]
    failed = [e for e in entries if e["message"].startswith("Commands failed")]
    assert len(failed) == 1
    assert failed[0]["directory"] == str(target)
    assert failed[0]["return_code"] == 5
    assert failed[0]["level"] == "WARNING"
    started = [e for e in entries if e["message"].startswith("Started pid")]
    assert started and isinstance(started[0]["pid"], int)
