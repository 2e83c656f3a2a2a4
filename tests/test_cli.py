from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from desyde_settings.cli import app
from desyde_settings.config import load_options

runner = CliRunner()


def test_check_prints_settings(input_files) -> None:
    result = runner.invoke(
        app,
        [
            "check",
            "-i", input_files[0],
            "-i", input_files[1],
            "--model", "SDF",
            "--search", "OPTIMIZE_IT",
            "--criteria", "THROUGHPUT",
            "--criteria", "POWER",
            "--timeout", "1000",
            "--timeout", "5000",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "criteria = THROUGHPUT,POWER" in result.output
    assert "timeout_all = 5000" in result.output


def test_check_rejects_bad_token(input_files) -> None:
    result = runner.invoke(app, ["check", "-i", input_files[0], "--model", "SDFX"])
    assert result.exit_code == 4
    assert "SDFX" in result.output


def test_check_without_inputs() -> None:
    result = runner.invoke(app, ["check", "--model", "SDF"])
    assert result.exit_code == 4
    assert "argument" in result.output


def test_check_strict_warnings(input_files) -> None:
    result = runner.invoke(app, ["check", "-i", input_files[0], "--search", "OPTIMIZE", "--strict"])
    assert result.exit_code == 2
    assert "WARNING" in result.output


def test_check_with_option_file(tmp_path: Path, input_files) -> None:
    config = tmp_path / "options.yml"
    init = runner.invoke(app, ["init-config", str(config)])
    assert init.exit_code == 0
    assert load_options(config).search == "OPTIMIZE_IT"

    dump = tmp_path / "dump.yml"
    result = runner.invoke(
        app,
        [
            "check",
            "--config", str(config),
            "-i", input_files[0],
            "-o", str(tmp_path / "out"),
            "--threads", "4",
            "--dump-cfg", str(dump),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "threads = 4" in result.output
    dumped = load_options(dump)
    assert dumped.input == [input_files[0]]
    assert dumped.criteria == ["THROUGHPUT", "POWER"]


def test_vocabulary() -> None:
    result = runner.invoke(app, ["vocabulary"])
    assert result.exit_code == 0
    assert "OPTIMIZE_IT" in result.output


def test_check_prints_bracketed_token_verbatim(input_files) -> None:
    result = runner.invoke(app, ["check", "-i", input_files[0], "--model", "SD\\[bold]X"])
    assert result.exit_code == 4
    assert "SD\\[bold]X" in result.output


def test_check_writes_log_file(tmp_path: Path, input_files) -> None:
    log_path = tmp_path / "logs" / "run.log"
    result = runner.invoke(
        app,
        [
            "check",
            "-i", input_files[0],
            "--log-level", "INFO",
            "--log-level", "DEBUG",
            "--log-file", str(log_path),
        ],
    )
    assert result.exit_code == 0, result.output
    assert f"log_path = {log_path}" in result.output
    assert log_path.exists()
    assert "Log routing finalized" in log_path.read_text()
