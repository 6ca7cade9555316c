# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import pytest

from vercat.config import ENV_SOURCES
from vercat.console import ACTIONS_ENV, NO_COLOR_ENV

SAMPLE_CATALOG = """
[versions]
kotlin = "2.0.0"
okhttp = "4.12.0"

[libraries.kotlin-stdlib]
group = "org.jetbrains.kotlin"
name = "kotlin-stdlib"
version = { ref = "kotlin" }

[libraries.okhttp]
module = "com.squareup.okhttp3:okhttp"
version.ref = "okhttp"

[libraries.junit]
group = "junit"
name = "junit"
version = "4.13.2"
""".lstrip()


class FakeRegistry:
    """Registry client answering from a mapping of ``group:artifact`` to versions."""

    def __init__(self, latest: Mapping[str, str | None], *, failing: frozenset[str] = frozenset()) -> None:
        self.latest = dict(latest)
        self.failing = failing
        self.calls: list[tuple[str, str]] = []

    def fetch_latest_version(self, group_id: str, artifact_id: str) -> str | None:
        self.calls.append((group_id, artifact_id))
        coordinate = f"{group_id}:{artifact_id}"
        if coordinate in self.failing:
            raise ConnectionError(f"registry unavailable for {coordinate}")
        return self.latest.get(coordinate)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop CI-provided variables that would leak into configuration resolution."""

    for names in ENV_SOURCES.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv(ACTIONS_ENV, raising=False)
    monkeypatch.delenv(NO_COLOR_ENV, raising=False)


@pytest.fixture
def catalog_path(tmp_path: Path) -> Path:
    """Write the sample catalog into ``tmp_path`` and return its location."""

    path = tmp_path / "gradle" / "libs.versions.toml"
    path.parent.mkdir(parents=True)
    path.write_text(SAMPLE_CATALOG, encoding="utf-8")
    return path


@pytest.fixture
def registry_factory() -> type[FakeRegistry]:
    """Return the fake registry class so tests can seed latest versions."""

    return FakeRegistry
