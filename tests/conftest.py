from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from desyde_settings.builder import SettingsBuilder
from desyde_settings.config import Settings


class FakeResolver:
    """Path resolver reporting problems for a fixed set of paths."""

    def __init__(self, unreadable: Optional[Dict[str, str]] = None, unwritable: Optional[Dict[str, str]] = None) -> None:
        self.unreadable = unreadable or {}
        self.unwritable = unwritable or {}

    def problem_reading(self, path: str) -> Optional[str]:
        return self.unreadable.get(path)

    def problem_writing(self, path: str) -> Optional[str]:
        return self.unwritable.get(path)


@pytest.fixture()
def input_files(tmp_path: Path) -> List[str]:
    paths = []
    for name in ("a.xml", "b.xml"):
        path = tmp_path / name
        path.write_text("<sdf/>")
        paths.append(str(path))
    return paths


@pytest.fixture()
def builder_factory():
    def _factory(unreadable=None, unwritable=None, log_router=None) -> SettingsBuilder:
        resolver = FakeResolver(unreadable=unreadable, unwritable=unwritable)
        return SettingsBuilder(resolver=resolver, log_router=log_router)

    return _factory


@pytest.fixture()
def builder(builder_factory) -> SettingsBuilder:
    return builder_factory()


@pytest.fixture()
def settings_factory():
    def _factory(**overrides) -> Settings:
        values = {"inputs_paths": ("a.xml", "b.xml")}
        values.update(overrides)
        return Settings(**values)

    return _factory
