# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for console colour detection and console caching."""

from __future__ import annotations

import pytest

from vercat.console import RichConsoleManager, supports_color


@pytest.mark.parametrize(
    ("tty", "env", "expected"),
    [
        (True, {}, True),
        (False, {}, False),
        (False, {"GITHUB_ACTIONS": "true"}, True),
        (False, {"GITHUB_ACTIONS": "false"}, False),
        (True, {"NO_COLOR": "1"}, False),
        (False, {"GITHUB_ACTIONS": "true", "NO_COLOR": "1"}, False),
    ],
)
def test_supports_color(monkeypatch: pytest.MonkeyPatch, tty: bool, env: dict[str, str], expected: bool) -> None:
    monkeypatch.setattr("vercat.console.detect_tty", lambda: tty)

    assert supports_color(env) is expected


def test_manager_caches_consoles_per_preference() -> None:
    manager = RichConsoleManager()

    plain = manager.get(color=False, emoji=False)

    assert manager.get(color=False, emoji=False) is plain
    assert manager.get(color=False, emoji=True) is not plain
    assert plain.no_color is True
    assert manager.get(color=True, emoji=False).is_terminal is True
