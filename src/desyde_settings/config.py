"""Settings model, option files and configuration errors."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, root_validator, validator

from .models import (
    BuildReport,
    CPModel,
    ErrorKind,
    LogLevel,
    MultiStepHeuristic,
    OptCriterion,
    OutputFileType,
    OutputPrintFrequency,
    PresolverModel,
    SearchType,
    ThroughputPropagator,
)


class Settings(BaseModel):
    """Validated settings for a single exploration run."""

    inputs_paths: Tuple[str, ...]
    output_path: str = "."
    log_path: Optional[str] = None
    log_level_console: LogLevel = LogLevel.INFO
    log_level_file: LogLevel = LogLevel.INFO

    model: CPModel = CPModel.NONECP
    pre_models: Tuple[PresolverModel, ...] = ()
    pre_heuristics: Tuple[MultiStepHeuristic, ...] = ()
    search: SearchType = SearchType.NONESEARCH
    pre_search: SearchType = SearchType.NONESEARCH
    pre_multi_step_search: SearchType = SearchType.NONESEARCH
    optimization_step: int = Field(default=0, ge=0)
    criteria: Tuple[OptCriterion, ...] = ()

    timeout_first: int = Field(default=0, ge=0, description="Milliseconds, 0 is unbounded.")
    timeout_all: int = Field(default=0, ge=0, description="Milliseconds, 0 is unbounded.")
    pre_timeout_first: int = Field(default=0, ge=0)
    pre_timeout_all: int = Field(default=0, ge=0)

    luby_scale: int = Field(default=0, ge=0)
    threads: int = Field(default=0, ge=0)
    no_good_depth: int = Field(default=0, ge=0)
    th_prop: ThroughputPropagator = ThroughputPropagator.SSE
    out_file_type: OutputFileType = OutputFileType.ALL_OUT
    out_print_freq: OutputPrintFrequency = OutputPrintFrequency.ALL_SOL
    print_metrics: Tuple[OptCriterion, ...] = ()

    config_tdn: bool = False
    tdn_config_path: Optional[str] = None

    class Config:
        frozen = True

    @validator("inputs_paths")
    def _ensure_inputs(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("At least one input path must be configured")
        return value

    @root_validator(skip_on_failure=True)
    def _check_consistency(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        for first_key, all_key in (
            ("timeout_first", "timeout_all"),
            ("pre_timeout_first", "pre_timeout_all"),
        ):
            first, all_ = values.get(first_key, 0), values.get(all_key, 0)
            if all_ and all_ < first:
                raise ValueError(f"{all_key} ({all_}) must be 0 or at least {first_key} ({first})")

        step = values.get("optimization_step", 0)
        criteria = values.get("criteria", ())
        if step and step >= len(criteria):
            raise ValueError(
                f"optimization_step {step} is out of range for {len(criteria)} criteria"
            )

        if bool(values.get("config_tdn")) != (values.get("tdn_config_path") is not None):
            raise ValueError("config_tdn must be set together with tdn_config_path")
        return values

    @property
    def field_names(self) -> List[str]:
        return list(type(self).__fields__)


class RawOptions(BaseModel):
    """Option values as they come from the command line or an option file."""

    input: Optional[List[str]] = None
    output: Optional[str] = None
    log_file: Optional[str] = None
    log_level: Optional[List[str]] = None
    model: Optional[str] = None
    search: Optional[str] = None
    criteria: Optional[List[str]] = None
    print_metrics: Optional[List[str]] = None
    th_prop: Optional[str] = None
    timeout: Optional[List[int]] = None
    threads: Optional[int] = None
    nogood: Optional[int] = None
    luby_scale: Optional[int] = None
    presolver_model: Optional[List[str]] = None
    presolver_heuristic: Optional[List[str]] = None
    presolver_search: Optional[str] = None
    presolver_multistep_search: Optional[str] = None
    presolver_timeout: Optional[List[int]] = None
    out_file_type: Optional[str] = None
    out_print_freq: Optional[str] = None
    tdn_config: Optional[str] = None

    @validator(
        "input",
        "log_level",
        "criteria",
        "print_metrics",
        "presolver_model",
        "presolver_heuristic",
        pre=True,
    )
    def _listify(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    def merged(self, override: "RawOptions") -> "RawOptions":
        """Return a copy with every value present in ``override`` applied."""

        data = self.dict()
        data.update({key: value for key, value in override.dict().items() if value is not None})
        return RawOptions(**data)


class ConfigError(Exception):
    """Raised when the run configuration is invalid."""

    kind: ErrorKind | None = None


class FormatError(ConfigError):
    """An option token is not part of its vocabulary."""

    kind = ErrorKind.FORMAT


class ResourceError(ConfigError):
    """A path-bearing option refers to an unusable location."""

    kind = ErrorKind.RESOURCE


class StateError(ConfigError):
    """An operation violates the configuration lifecycle."""

    kind = ErrorKind.STATE


class ArgumentError(ConfigError):
    """The settings construction was invoked with nothing to build from."""

    kind = ErrorKind.ARGUMENT


class SettingsBuildFailure(ConfigError):
    """Raised when one or more options failed validation."""

    def __init__(self, report: BuildReport) -> None:
        details = "; ".join(str(issue) for issue in report.errors)
        super().__init__(f"Invalid configuration: {details}")
        self.report = report


def load_options(path: Path) -> RawOptions:
    """Load option values from a YAML file."""

    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError as exc:
        raise ConfigError(f"Option file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML: {exc}") from exc

    if data is None:
        return RawOptions()
    if not isinstance(data, dict):
        raise ConfigError(f"Option file {path} must contain a mapping")
    try:
        return RawOptions.parse_obj(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid option file {path}: {exc}") from exc


def save_options(options: RawOptions, path: Path) -> None:
    """Persist option values to disk as YAML."""

    rendered = options.dict(exclude_none=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(rendered, sort_keys=False))


__all__ = [
    "Settings",
    "RawOptions",
    "ConfigError",
    "FormatError",
    "ResourceError",
    "StateError",
    "ArgumentError",
    "SettingsBuildFailure",
    "load_options",
    "save_options",
]
