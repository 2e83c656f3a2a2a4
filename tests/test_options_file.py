from __future__ import annotations

from pathlib import Path

import pytest

from desyde_settings.config import ConfigError, RawOptions, Settings, load_options, save_options


def test_options_file_round_trip(tmp_path: Path) -> None:
    options = RawOptions(input=["a.xml"], criteria=["POWER"], timeout=[10, 20], threads=2)
    path = tmp_path / "cfg" / "options.yml"
    save_options(options, path)
    assert load_options(path) == options


def test_single_string_becomes_list(tmp_path: Path) -> None:
    path = tmp_path / "options.yml"
    path.write_text("input: a.xml\ncriteria: THROUGHPUT\n")
    options = load_options(path)
    assert options.input == ["a.xml"]
    assert options.criteria == ["THROUGHPUT"]


def test_command_line_overrides_file() -> None:
    base = RawOptions(input=["a.xml"], model="SDF", threads=1)
    merged = base.merged(RawOptions(threads=8, search="FIRST"))
    assert merged.input == ["a.xml"]
    assert merged.model == "SDF"
    assert merged.threads == 8
    assert merged.search == "FIRST"


@pytest.mark.parametrize(
    "content, fragment",
    [
        ("input: [a.xml\n", "parse YAML"),
        ("- a.xml\n", "mapping"),
        ("threads: many\n", "Invalid option file"),
    ],
)
def test_bad_options_file(tmp_path: Path, content: str, fragment: str) -> None:
    path = tmp_path / "options.yml"
    path.write_text(content)
    with pytest.raises(ConfigError) as excinfo:
        load_options(path)
    assert fragment in str(excinfo.value)


def test_missing_options_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_options(tmp_path / "absent.yml")


def test_settings_model_rechecks_invariants() -> None:
    with pytest.raises(ValueError):
        Settings(inputs_paths=())
    with pytest.raises(ValueError):
        Settings(inputs_paths=("a.xml",), timeout_first=100, timeout_all=50)
    with pytest.raises(ValueError):
        Settings(inputs_paths=("a.xml",), criteria=("POWER",), optimization_step=1)
    with pytest.raises(ValueError):
        Settings(inputs_paths=("a.xml",), config_tdn=True)
