"""Assemble validated :class:`Settings` from raw option values."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Set

from loguru import logger
from pydantic import ValidationError

from .config import RawOptions, Settings, SettingsBuildFailure
from .log_routing import LogRouter
from .models import (
    OPTIMIZING_SEARCHES,
    BuildReport,
    ConfigIssue,
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
    TokenEnum,
)
from .validators import (
    FilesystemPathResolver,
    PathResolver,
    parse_token,
    parse_token_list,
    validate_non_negative,
    validate_readable,
    validate_timeout_pair,
    validate_writable,
)


class SettingsBuilder:
    """Stage option values one setter at a time, then build :class:`Settings`.

    Every setter returns the issues it found; an empty list means the value
    was staged. A rejected value never overwrites what was staged before.
    All issues are also collected in :attr:`report` so a whole batch of
    options can be checked in one pass.
    """

    def __init__(
        self,
        resolver: PathResolver | None = None,
        log_router: LogRouter | None = None,
    ) -> None:
        self.resolver = resolver or FilesystemPathResolver()
        self.log_router = log_router
        self.report = BuildReport()
        self._staged: Dict[str, Any] = {}
        self._timeouts_set: Set[str] = set()
        self._inputs_given = False

    @property
    def staged(self) -> Dict[str, Any]:
        return dict(self._staged)

    def _record(self, messages: List[ConfigIssue]) -> List[ConfigIssue]:
        self.report.extend(messages)
        for message in messages:
            logger.debug("Rejected option: {}", message)
        return messages

    def _set_token(self, option: str, key: str, raw: str, enum_type: type[TokenEnum]) -> List[ConfigIssue]:
        value, messages = parse_token(option, raw, enum_type)
        if value is not None:
            self._staged[key] = value
        return self._record(messages)

    def _set_token_list(
        self, option: str, key: str, raw: Sequence[str], enum_type: type[TokenEnum]
    ) -> List[ConfigIssue]:
        values, messages = parse_token_list(option, raw, enum_type)
        if values is not None:
            self._staged[key] = values
        return self._record(messages)

    def _set_count(self, option: str, key: str, value: int) -> List[ConfigIssue]:
        messages = validate_non_negative(option, value)
        if not messages:
            self._staged[key] = int(value)
        return self._record(messages)

    # Paths

    def set_input_paths(self, paths: Sequence[str]) -> List[ConfigIssue]:
        self._inputs_given = True
        if not paths:
            return self._record(
                [ConfigIssue.error(ErrorKind.RESOURCE, "input", "At least one input path is required")]
            )
        messages = validate_readable("input", paths, self.resolver)
        if not messages:
            self._staged["inputs_paths"] = tuple(str(path) for path in paths)
        return self._record(messages)

    def set_output_path(self, path: str) -> List[ConfigIssue]:
        messages = validate_writable("output", path, self.resolver)
        if not messages:
            self._staged["output_path"] = str(path)
        return self._record(messages)

    def set_log_path(self, path: str) -> List[ConfigIssue]:
        messages = validate_writable("log-file", path, self.resolver)
        if not messages:
            self._staged["log_path"] = str(path)
        return self._record(messages)

    def set_tdn_config(self, path: str) -> List[ConfigIssue]:
        messages = validate_readable("tdn-config", [path], self.resolver)
        if not messages:
            self._staged["tdn_config_path"] = str(path)
            self._staged["config_tdn"] = True
        return self._record(messages)

    # Logging

    def set_log_level(self, levels: Sequence[str]) -> List[ConfigIssue]:
        """Accept ``[console]`` or ``[console, file]`` level names."""

        if self.log_router is not None and self.log_router.finalized:
            return self._record(
                [ConfigIssue.error(ErrorKind.STATE, "log-level", "Log routing has already been finalized")]
            )
        if not 1 <= len(levels) <= 2:
            return self._record(
                [
                    ConfigIssue.error(
                        ErrorKind.FORMAT,
                        "log-level",
                        f"Expected one or two levels (console[, file]), got {len(levels)}",
                    )
                ]
            )
        parsed, messages = parse_token_list("log-level", levels, LogLevel)
        if parsed is not None:
            self._staged["log_level_console"] = parsed[0]
            self._staged["log_level_file"] = parsed[-1]
        return self._record(messages)

    # Enumerated options

    def set_model(self, raw: str) -> List[ConfigIssue]:
        return self._set_token("model", "model", raw, CPModel)

    def set_search(self, raw: str) -> List[ConfigIssue]:
        return self._set_token("search", "search", raw, SearchType)

    def set_presolver_search(self, raw: str) -> List[ConfigIssue]:
        return self._set_token("presolver-search", "pre_search", raw, SearchType)

    def set_multi_step_search(self, raw: str) -> List[ConfigIssue]:
        return self._set_token("presolver-multistep-search", "pre_multi_step_search", raw, SearchType)

    def set_th_propagator(self, raw: str) -> List[ConfigIssue]:
        return self._set_token("th-prop", "th_prop", raw, ThroughputPropagator)

    def set_output_file_type(self, raw: str) -> List[ConfigIssue]:
        return self._set_token("out-file-type", "out_file_type", raw, OutputFileType)

    def set_output_print_frequency(self, raw: str) -> List[ConfigIssue]:
        return self._set_token("out-print-freq", "out_print_freq", raw, OutputPrintFrequency)

    def set_criteria(self, raw: Sequence[str]) -> List[ConfigIssue]:
        return self._set_token_list("criteria", "criteria", raw, OptCriterion)

    def set_print_metrics(self, raw: Sequence[str]) -> List[ConfigIssue]:
        return self._set_token_list("print-metrics", "print_metrics", raw, OptCriterion)

    def set_presolver_models(self, raw: Sequence[str]) -> List[ConfigIssue]:
        return self._set_token_list("presolver-model", "pre_models", raw, PresolverModel)

    def set_heuristics(self, raw: Sequence[str]) -> List[ConfigIssue]:
        return self._set_token_list("presolver-heuristic", "pre_heuristics", raw, MultiStepHeuristic)

    # Numeric options

    def _set_timeouts(self, option: str, first_key: str, all_key: str, raw: Sequence[int]) -> List[ConfigIssue]:
        if option in self._timeouts_set:
            return self._record(
                [ConfigIssue.error(ErrorKind.STATE, option, "Timeouts for this phase were already set")]
            )
        pair, messages = validate_timeout_pair(option, raw)
        if pair is not None:
            self._staged[first_key], self._staged[all_key] = pair
            self._timeouts_set.add(option)
        return self._record(messages)

    def set_timeout(self, raw: Sequence[int]) -> List[ConfigIssue]:
        return self._set_timeouts("timeout", "timeout_first", "timeout_all", raw)

    def set_presolver_timeout(self, raw: Sequence[int]) -> List[ConfigIssue]:
        return self._set_timeouts("presolver-timeout", "pre_timeout_first", "pre_timeout_all", raw)

    def set_threads(self, value: int) -> List[ConfigIssue]:
        return self._set_count("threads", "threads", value)

    def set_no_good_depth(self, value: int) -> List[ConfigIssue]:
        return self._set_count("nogood", "no_good_depth", value)

    def set_luby_scale(self, value: int) -> List[ConfigIssue]:
        return self._set_count("luby-scale", "luby_scale", value)

    # Batch

    def apply_options(self, options: RawOptions) -> BuildReport:
        """Run the setter for every option present in ``options``."""

        setters = (
            ("input", self.set_input_paths),
            ("output", self.set_output_path),
            ("log_file", self.set_log_path),
            ("log_level", self.set_log_level),
            ("model", self.set_model),
            ("search", self.set_search),
            ("criteria", self.set_criteria),
            ("print_metrics", self.set_print_metrics),
            ("th_prop", self.set_th_propagator),
            ("timeout", self.set_timeout),
            ("threads", self.set_threads),
            ("nogood", self.set_no_good_depth),
            ("luby_scale", self.set_luby_scale),
            ("presolver_model", self.set_presolver_models),
            ("presolver_heuristic", self.set_heuristics),
            ("presolver_search", self.set_presolver_search),
            ("presolver_multistep_search", self.set_multi_step_search),
            ("presolver_timeout", self.set_presolver_timeout),
            ("out_file_type", self.set_output_file_type),
            ("out_print_freq", self.set_output_print_frequency),
            ("tdn_config", self.set_tdn_config),
        )
        for name, setter in setters:
            value = getattr(options, name)
            if value is not None:
                setter(value)
        return self.report

    # Build

    def _consistency_warnings(self) -> List[ConfigIssue]:
        staged = self._staged
        criteria = staged.get("criteria", ())
        search = staged.get("search", SearchType.NONESEARCH)
        pre_models = staged.get("pre_models", ())
        warnings: List[ConfigIssue] = []

        if search in OPTIMIZING_SEARCHES and (not criteria or criteria[0] == OptCriterion.NONE):
            warnings.append(
                ConfigIssue.warning("search", f"Search '{search.value}' is set but no optimization criterion is active")
            )
        if search == SearchType.OPTIMIZE and len(criteria) > 1:
            warnings.append(
                ConfigIssue.warning(
                    "search",
                    f"Search 'OPTIMIZE' only optimizes the first of {len(criteria)} criteria; use 'OPTIMIZE_IT'",
                )
            )
        if staged.get("pre_heuristics") and not pre_models:
            warnings.append(ConfigIssue.warning("presolver-heuristic", "Heuristics have no effect without a presolver model"))
        if staged.get("pre_search", SearchType.NONESEARCH) != SearchType.NONESEARCH and not pre_models:
            warnings.append(ConfigIssue.warning("presolver-search", "Presolver search has no effect without a presolver model"))
        return warnings

    def build(self) -> Settings:
        """Validate the staged values and return the finished settings."""

        if not self._inputs_given:
            self._record([ConfigIssue.error(ErrorKind.ARGUMENT, "input", "No input paths were given")])
        if self.report.has_errors:
            raise SettingsBuildFailure(self.report)

        criteria = self._staged.get("criteria", ())
        if len(criteria) > 1:
            logger.debug("Multi-step optimization implied by {} criteria", len(criteria))
        if self._staged.get("pre_models"):
            logger.debug("Presolving implied by presolver models {}", [m.value for m in self._staged["pre_models"]])
        self._record(self._consistency_warnings())

        try:
            settings = Settings(**self._staged)
        except ValidationError as exc:
            self._record([ConfigIssue.error(ErrorKind.FORMAT, "settings", str(exc))])
            raise SettingsBuildFailure(self.report) from exc
        logger.info("Settings built for {} input(s)", len(settings.inputs_paths))
        return settings


def build_settings(
    options: RawOptions,
    resolver: PathResolver | None = None,
    log_router: LogRouter | None = None,
) -> Settings:
    """Build settings from a batch of raw options."""

    builder = SettingsBuilder(resolver=resolver, log_router=log_router)
    builder.apply_options(options)
    return builder.build()


__all__ = ["SettingsBuilder", "build_settings"]
