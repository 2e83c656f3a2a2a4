"""Shared models for option domains, issues and presolver data."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Type, Union


class TokenEnum(str, Enum):
    """Enum whose value is the exact command-line token."""

    @classmethod
    def tokens(cls) -> List[str]:
        return [member.value for member in cls]


class CPModel(TokenEnum):
    NONECP = "NONE"
    SDF = "SDF"
    SDF_PR_ONLINE = "SDF_PR_ONLINE"


class PresolverModel(TokenEnum):
    NO_PRE = "NONE"
    ONE_PROC_MAPPINGS = "ONE_PROC_MAPPINGS"


class MultiStepHeuristic(TokenEnum):
    NO_HEURISTIC = "NONE"
    TODAES = "TODAES"


class SearchType(TokenEnum):
    NONESEARCH = "NONE"
    FIRST = "FIRST"
    ALL = "ALL"
    OPTIMIZE = "OPTIMIZE"
    OPTIMIZE_IT = "OPTIMIZE_IT"
    GIST_ALL = "GIST_ALL"
    GIST_OPT = "GIST_OPT"


class OptCriterion(TokenEnum):
    NONE = "NONE"
    POWER = "POWER"
    THROUGHPUT = "THROUGHPUT"
    LATENCY = "LATENCY"


class ThroughputPropagator(TokenEnum):
    """Self-timed execution or maximum cycle ratio."""

    SSE = "SSE"
    MCR = "MCR"


class OutputFileType(TokenEnum):
    ALL_OUT = "ALL_OUT"
    TXT = "TXT"
    CSV = "CSV"
    CSV_MOST = "CSV_MOST"
    XML = "XML"


class OutputPrintFrequency(TokenEnum):
    ALL_SOL = "ALL_SOL"
    LAST = "LAST"
    EVERY_n = "EVERY_n"
    FIRSTandLAST = "FIRSTandLAST"


class LogLevel(TokenEnum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


OPTIMIZING_SEARCHES = frozenset({SearchType.OPTIMIZE, SearchType.OPTIMIZE_IT, SearchType.GIST_OPT})


class MessageLevel(str, Enum):
    """Severity for configuration issues."""

    ERROR = "error"
    WARNING = "warning"


class ErrorKind(str, Enum):
    """Category of a configuration error."""

    FORMAT = "format"
    RESOURCE = "resource"
    STATE = "state"
    ARGUMENT = "argument"


@dataclass(slots=True)
class ConfigIssue:
    """A single problem found while assigning an option."""

    level: MessageLevel
    text: str
    kind: Optional[ErrorKind] = None
    option: Optional[str] = None
    position: Optional[int] = None

    @classmethod
    def error(
        cls, kind: ErrorKind, option: str, text: str, position: Optional[int] = None
    ) -> "ConfigIssue":
        return cls(MessageLevel.ERROR, text, kind=kind, option=option, position=position)

    @classmethod
    def warning(cls, option: str, text: str) -> "ConfigIssue":
        return cls(MessageLevel.WARNING, text, option=option)

    def __str__(self) -> str:
        prefix = f"[{self.kind.value}] " if self.kind else ""
        return f"{prefix}{self.option}: {self.text}" if self.option else f"{prefix}{self.text}"


@dataclass(slots=True)
class BuildReport:
    """Issues collected over one pass of option assignments."""

    errors: List[ConfigIssue] = field(default_factory=list)
    warnings: List[ConfigIssue] = field(default_factory=list)

    def extend(self, issues: Iterable[ConfigIssue]) -> None:
        for issue in issues:
            if issue.level == MessageLevel.ERROR:
                self.errors.append(issue)
            elif issue.level == MessageLevel.WARNING:
                self.warnings.append(issue)

    def errors_of(self, kind: ErrorKind) -> List[ConfigIssue]:
        return [issue for issue in self.errors if issue.kind == kind]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass(slots=True, frozen=True)
class SolutionValues:
    """Objective/decision values of one solution and when it was found."""

    time: timedelta
    values: Tuple[int, ...]


@dataclass(slots=True, frozen=True)
class OneProcMapping:
    """Candidate mapping of tasks onto resources of a single processor."""

    processor: int
    assignments: Tuple[Tuple[int, int], ...]


@dataclass(slots=True, frozen=True)
class EnforceMapping:
    """Constrain the model to the one-processor mapping at ``index``."""

    index: int


@dataclass(slots=True, frozen=True)
class ForbidAllMappings:
    """Forbid every recorded one-processor mapping."""


MappingDirective = Union[EnforceMapping, ForbidAllMappings]


def directive_from_index(index: int, size: int) -> MappingDirective:
    """Translate a raw iteration index against ``size`` recorded mappings."""

    if index < 0:
        raise ValueError(f"Mapping index must be non-negative, got {index}")
    if index < size:
        return EnforceMapping(index)
    return ForbidAllMappings()


@dataclass(slots=True)
class PresolverResults:
    """Output of the presolving phase, filled in while presolving runs."""

    mapping_directive: MappingDirective = field(default_factory=lambda: EnforceMapping(0))
    one_proc_mappings: List[OneProcMapping] = field(default_factory=list)
    opt_results: List[SolutionValues] = field(default_factory=list)
    print_results: List[SolutionValues] = field(default_factory=list)
    presolver_delay: timedelta = field(default_factory=timedelta)

    @property
    def it_mapping(self) -> int:
        if isinstance(self.mapping_directive, EnforceMapping):
            return self.mapping_directive.index
        return len(self.one_proc_mappings)

    @property
    def forbids_all(self) -> bool:
        return isinstance(self.mapping_directive, ForbidAllMappings)

    def enforced_mapping(self) -> Optional[OneProcMapping]:
        """Return the mapping currently enforced, if any."""

        directive = self.mapping_directive
        if isinstance(directive, EnforceMapping) and directive.index < len(self.one_proc_mappings):
            return self.one_proc_mappings[directive.index]
        return None

    def add_mapping(self, processor: int, assignments: Sequence[Tuple[int, int]]) -> OneProcMapping:
        mapping = OneProcMapping(processor, tuple((int(task), int(res)) for task, res in assignments))
        self.one_proc_mappings.append(mapping)
        return mapping

    def advance_mapping(self) -> MappingDirective:
        """Move to the next candidate, or forbid all once they are exhausted."""

        if isinstance(self.mapping_directive, EnforceMapping):
            self.mapping_directive = directive_from_index(
                self.mapping_directive.index + 1, len(self.one_proc_mappings)
            )
        return self.mapping_directive

    def record_opt_result(self, time: timedelta, values: Iterable[int]) -> SolutionValues:
        entry = SolutionValues(time, tuple(values))
        self.opt_results.append(entry)
        return entry

    def record_print_result(self, time: timedelta, values: Iterable[int]) -> SolutionValues:
        entry = SolutionValues(time, tuple(values))
        self.print_results.append(entry)
        return entry

    def total_time(self, elapsed: timedelta) -> timedelta:
        return self.presolver_delay + elapsed


def enum_types() -> List[Type[TokenEnum]]:
    return [
        CPModel,
        PresolverModel,
        MultiStepHeuristic,
        SearchType,
        OptCriterion,
        ThroughputPropagator,
        OutputFileType,
        OutputPrintFrequency,
        LogLevel,
    ]


__all__ = [
    "TokenEnum",
    "CPModel",
    "PresolverModel",
    "MultiStepHeuristic",
    "SearchType",
    "OptCriterion",
    "ThroughputPropagator",
    "OutputFileType",
    "OutputPrintFrequency",
    "LogLevel",
    "OPTIMIZING_SEARCHES",
    "MessageLevel",
    "ErrorKind",
    "ConfigIssue",
    "BuildReport",
    "SolutionValues",
    "OneProcMapping",
    "EnforceMapping",
    "ForbidAllMappings",
    "MappingDirective",
    "directive_from_index",
    "PresolverResults",
    "enum_types",
]
