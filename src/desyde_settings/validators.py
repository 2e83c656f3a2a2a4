"""Validation helpers turning raw option values into typed values."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple, Type, TypeVar

from .models import ConfigIssue, ErrorKind, TokenEnum

E = TypeVar("E", bound=TokenEnum)


class PathResolver(Protocol):
    """Decides whether a path-bearing option points somewhere usable."""

    def problem_reading(self, path: str) -> Optional[str]:
        ...

    def problem_writing(self, path: str) -> Optional[str]:
        ...


class FilesystemPathResolver:
    """Check paths against the local filesystem."""

    def problem_reading(self, path: str) -> Optional[str]:
        target = Path(path)
        if not target.exists():
            return f"'{path}' does not exist"
        if not os.access(target, os.R_OK):
            return f"'{path}' is not readable"
        return None

    def problem_writing(self, path: str) -> Optional[str]:
        target = Path(path)
        if target.exists():
            if not os.access(target, os.W_OK):
                return f"'{path}' is not writable"
            return None
        ancestor = _nearest_existing(target)
        if not ancestor.is_dir():
            return f"'{ancestor}' is not a directory, cannot create '{path}'"
        if not os.access(ancestor, os.W_OK | os.X_OK):
            return f"'{ancestor}' is not writable, cannot create '{path}'"
        return None


def _nearest_existing(path: Path) -> Path:
    current = path.absolute()
    while not current.exists() and current != current.parent:
        current = current.parent
    return current


def _vocabulary(enum_type: Type[E]) -> str:
    return ", ".join(enum_type.tokens())


def parse_token(option: str, raw: str, enum_type: Type[E]) -> Tuple[E | None, List[ConfigIssue]]:
    """Match ``raw`` exactly against the tokens of ``enum_type``."""

    for member in enum_type:
        if member.value == raw:
            return member, []
    return None, [
        ConfigIssue.error(
            ErrorKind.FORMAT,
            option,
            f"Unknown value '{raw}' (expected one of: {_vocabulary(enum_type)})",
        )
    ]


def parse_token_list(
    option: str, raw: Sequence[str], enum_type: Type[E]
) -> Tuple[Tuple[E, ...] | None, List[ConfigIssue]]:
    """Match every token in order, stopping at the first unknown one."""

    parsed: List[E] = []
    for position, token in enumerate(raw):
        member, _ = parse_token(option, token, enum_type)
        if member is None:
            return None, [
                ConfigIssue.error(
                    ErrorKind.FORMAT,
                    option,
                    f"Unknown value '{token}' at position {position} "
                    f"(expected one of: {_vocabulary(enum_type)})",
                    position=position,
                )
            ]
        parsed.append(member)
    return tuple(parsed), []


def validate_non_negative(option: str, value: int) -> List[ConfigIssue]:
    if value < 0:
        return [ConfigIssue.error(ErrorKind.FORMAT, option, f"Value {value} must be non-negative")]
    return []


def validate_timeout_pair(option: str, raw: Sequence[int]) -> Tuple[Tuple[int, int] | None, List[ConfigIssue]]:
    """Check a (first solution, all solutions) timeout pair."""

    if len(raw) != 2:
        return None, [
            ConfigIssue.error(
                ErrorKind.FORMAT,
                option,
                f"Expected exactly two values (first, all), got {len(raw)}",
            )
        ]
    messages: List[ConfigIssue] = []
    for value in raw:
        messages.extend(validate_non_negative(option, value))
    if messages:
        return None, messages

    first, all_ = int(raw[0]), int(raw[1])
    if all_ and all_ < first:
        return None, [
            ConfigIssue.error(
                ErrorKind.STATE,
                option,
                f"Timeout for all solutions ({all_}) is shorter than for the first solution ({first})",
            )
        ]
    return (first, all_), []


def validate_readable(option: str, paths: Sequence[str], resolver: PathResolver) -> List[ConfigIssue]:
    messages: List[ConfigIssue] = []
    for path in paths:
        problem = resolver.problem_reading(path)
        if problem:
            messages.append(ConfigIssue.error(ErrorKind.RESOURCE, option, problem))
    return messages


def validate_writable(option: str, path: str, resolver: PathResolver) -> List[ConfigIssue]:
    problem = resolver.problem_writing(path)
    if problem:
        return [ConfigIssue.error(ErrorKind.RESOURCE, option, problem)]
    return []


__all__ = [
    "PathResolver",
    "FilesystemPathResolver",
    "parse_token",
    "parse_token_list",
    "validate_non_negative",
    "validate_timeout_pair",
    "validate_readable",
    "validate_writable",
]
