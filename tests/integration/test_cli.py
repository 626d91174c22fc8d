from __future__ import annotations

from io import StringIO
from pathlib import Path

import logging

import pytest

from rich.console import Console

from runcmd.cli import app, run_cli
from runcmd.cli.parser import USAGE
from runcmd.utils import log_setup


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(app, "setup_logging", lambda *a, **k: None)


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.txt").write_text(
        "[settings]\n"
        "concurrency = 2\n"
        "\n"
        "[build]\n"
        "echo step1\n"
        "echo step2\n"
        "\n"
        "[fail]\n"
        "echo trying\n"
        "exit 3\n"
    )
    for name in ("a", "b", "c"):
        (tmp_path / name).mkdir()
    return tmp_path


def _run(argv: list[str]) -> tuple[int, str]:
    buffer = StringIO()
    console = Console(file=buffer, force_terminal=False, color_system=None)
    code = run_cli(argv, console=console)
    return code, buffer.getvalue()


@pytest.mark.parametrize("argv", [[], ["build"]])
def test_missing_arguments_print_usage(workspace: Path, argv: list[str]) -> None:
    code, output = _run(argv)
    assert code == 0
    assert output.strip() == USAGE


def test_end_to_end_build(workspace: Path) -> None:
    code, output = _run(["--no-global-config", "build", "a", "b", "c"])

    assert code == 0
    lines = output.splitlines()
    assert lines[0] == "Max concurrency: 2"
    assert output.count(">>> Running commands in [") == 3
    assert output.count("<<< Finished commands in [") == 3
    for name in ("a", "b", "c"):
        assert [line for line in lines if line.startswith(f"[{name}] ")] == [
            f"[{name}] step1",
            f"[{name}] step2",
        ]


def test_unknown_group_dispatches_nothing(workspace: Path) -> None:
    code, output = _run(["--no-global-config", "nope", "a"])

    assert code == 1
    assert "nope" in output
    assert ">>>" not in output


def test_failing_group_still_exits_zero(workspace: Path) -> None:
    code, output = _run(["--no-global-config", "fail", "a", "b"])

    assert code == 0
    assert "[a] command error: exit status 3" in output
    assert "[b] command error: exit status 3" in output
    assert output.count("<<< Finished commands in [") == 2


def test_strict_maps_failures_to_exit_one(workspace: Path) -> None:
    code, _ = _run(["--no-global-config", "--strict", "fail", "a"])
    assert code == 1

    code, _ = _run(["--no-global-config", "--strict", "build", "a"])
    assert code == 0


def test_missing_directory_is_isolated(workspace: Path) -> None:
    code, output = _run(["--no-global-config", "build", "a", "missing", "b"])

    assert code == 0
    assert "[missing] failed to start:" in output
    assert "[a] step2" in output and "[b] step2" in output


@pytest.mark.parametrize(
    "flag, expected",
    [("4", "Max concurrency: 4"), ("0", "Max concurrency: 3"), ("-1", "Max concurrency: 3")],
)
def test_concurrency_flag_obeys_fallback(workspace: Path, flag: str, expected: str) -> None:
    code, output = _run(["--no-global-config", "build", "a", f"--concurrency={flag}"])
    assert code == 0
    assert output.splitlines()[0] == expected


def test_non_numeric_concurrency_setting_falls_back(workspace: Path) -> None:
    (workspace / "config.txt").write_text("[settings]\nconcurrency = lots\n[g]\necho x\n")

    code, output = _run(["--no-global-config", "g", "a"])

    assert code == 0
    assert output.splitlines()[0] == "Max concurrency: 3"


def test_explicit_yaml_config(workspace: Path) -> None:
    path = workspace / "deploy.yaml"
    path.write_text("settings:\n  concurrency: 1\ngroups:\n  deploy:\n    - echo shipped\n")

    code, output = _run(["--no-global-config", "--config", str(path), "deploy", "a"])

    assert code == 0
    assert "Max concurrency: 1" in output
    assert "[a] shipped" in output


def test_missing_explicit_config_is_an_error(workspace: Path) -> None:
    code, output = _run(["--no-global-config", "--config", "nope.txt", "build", "a"])
    assert code == 1
    assert "nope.txt" in output


def test_list_groups(workspace: Path) -> None:
    code, output = _run(["--no-global-config", "--list-groups"])

    assert code == 0
    assert "build  (2 commands)" in output
    assert "fail  (2 commands)" in output
    assert ">>>" not in output


def test_summary_flag(workspace: Path) -> None:
    code, output = _run(["--no-global-config", "--summary", "fail", "a"])

    assert code == 0
    assert "Summary" in output
    assert "0/1 succeeded, 1 failed, 0 failed to start" in output


@pytest.fixture
def real_logging(monkeypatch):
    logger = logging.getLogger(log_setup.LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    monkeypatch.setattr(app, "setup_logging", log_setup.setup_logging)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_project_config_notice_on_stderr(workspace: Path, real_logging, capsys) -> None:
    code, output = _run(["--no-global-config", "build", "a"])

    err = capsys.readouterr().err
    assert code == 0
    assert "Found external configuration" in err
    assert "config.txt" in err
    assert "Found external configuration" not in output


def test_quiet_hides_config_notice(workspace: Path, real_logging, capsys) -> None:
    code, _ = _run(["--no-global-config", "-q", "build", "a"])

    assert code == 0
    assert "Found external configuration" not in capsys.readouterr().err
