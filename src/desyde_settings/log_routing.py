"""Route loguru output to the console and an optional log file."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger
from rich.console import Console

from .models import LogLevel


def _stderr_sink(message) -> None:
    sys.stderr.write(message)


class LogRouter:
    """Own the loguru sinks for one run.

    Log levels may change until :meth:`finalize` installs the sinks; after
    that the routing is fixed until :meth:`close`. ``finalize`` replaces every
    loguru handler of the process, and ``close`` puts a plain stderr handler
    back in their place.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._sink_ids: List[int] = []
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def finalize(
        self,
        console_level: LogLevel = LogLevel.INFO,
        file_level: LogLevel = LogLevel.INFO,
        log_path: Path | None = None,
        sink: Optional[Callable[[str], None]] = None,
    ) -> None:
        logger.remove()
        self._sink_ids.append(logger.add(sink or self._console.print, level=console_level.value))
        if log_path:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._sink_ids.append(logger.add(log_path, level=file_level.value))
        self._finalized = True
        logger.debug("Log routing finalized (console={}, file={})", console_level.value, file_level.value)

    def close(self) -> None:
        if not self._finalized:
            return
        for sink_id in self._sink_ids:
            logger.remove(sink_id)
        self._sink_ids.clear()
        self._finalized = False
        logger.add(_stderr_sink, level="DEBUG")


__all__ = ["LogRouter"]
