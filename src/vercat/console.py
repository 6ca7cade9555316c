# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich console management utilities."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from functools import lru_cache
from typing import Final

from rich.console import Console

NO_COLOR_ENV: Final[str] = "NO_COLOR"
# Actions log viewers render ANSI colour even though stdout is a pipe.
ACTIONS_ENV: Final[str] = "GITHUB_ACTIONS"


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def supports_color(env: Mapping[str, str] | None = None) -> bool:
    """Return whether coloured output should be produced for the current run.

    Args:
        env: Environment to inspect; defaults to ``os.environ``.

    Returns:
        bool: ``False`` when ``NO_COLOR`` is set, otherwise ``True`` on a
        terminal or inside a GitHub Actions job.
    """

    environ = os.environ if env is None else env
    if environ.get(NO_COLOR_ENV):
        return False
    return detect_tty() or environ.get(ACTIONS_ENV, "").lower() == "true"


class RichConsoleManager:
    """Provision Rich :class:`Console` instances keyed by colour and emoji settings.

    Consoles write to whatever ``sys.stdout`` is at print time, so cached
    instances stay valid when the stream is swapped.
    """

    def __init__(self) -> None:
        self._cache: dict[tuple[bool, bool], Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return the console rendering with ``color`` and ``emoji`` preferences."""

        key = (color, emoji)
        console = self._cache.get(key)
        if console is None:
            console = Console(
                color_system="auto" if color else None,
                force_terminal=True if color else None,
                no_color=not color,
                emoji=emoji,
                soft_wrap=True,
                highlight=False,
            )
            self._cache[key] = console
        return console


@lru_cache(maxsize=1)
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide :class:`RichConsoleManager` instance."""

    return RichConsoleManager()


__all__ = ["RichConsoleManager", "detect_tty", "get_console_manager", "supports_color"]
