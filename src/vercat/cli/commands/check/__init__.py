# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Check CLI command package."""

from __future__ import annotations

from typer import Typer

from .command import main

__all__ = ["register"]


def register(app: Typer) -> None:
    """Attach the ``check`` command to ``app``.

    Args:
        app: Typer application receiving the command.
    """

    app.command(name="check")(main)
