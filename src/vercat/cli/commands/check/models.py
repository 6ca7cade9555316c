# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Data structures for the catalog check CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

CATALOG_ARGUMENT = Annotated[
    Path | None,
    typer.Argument(
        help="Version catalog to check, relative to --root (default: gradle/libs.versions.toml).",
        show_default=False,
    ),
]
ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root holding the catalog and pyproject.toml."),
]
OPEN_ISSUE_OPTION = Annotated[
    bool | None,
    typer.Option(
        "--open-issue/--no-open-issue",
        help="Open a GitHub issue when updates are found (overrides the action input).",
        show_default=False,
    ),
]
TOKEN_OPTION = Annotated[
    str | None,
    typer.Option("--github-token", help="Token used to open the GitHub issue.", show_default=False),
]
REPOSITORY_OPTION = Annotated[
    str | None,
    typer.Option("--repository", help="Repository (owner/name) receiving the issue.", show_default=False),
]
REGISTRY_OPTION = Annotated[
    str | None,
    typer.Option("--registry-url", help="Search endpoint queried for latest versions.", show_default=False),
]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Number of concurrent registry lookups.", show_default=False),
]
TIMEOUT_OPTION = Annotated[
    float | None,
    typer.Option("--timeout", help="Seconds allowed for all registry lookups.", show_default=False),
]
PARTIAL_OPTION = Annotated[
    bool,
    typer.Option("--allow-partial", help="Report finished lookups when the timeout expires."),
]
OUTPUT_OPTION = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="GitHub Actions output file to append results to.", show_default=False),
]
JSON_OPTION = Annotated[
    bool,
    typer.Option("--json", help="Print the update list as JSON."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Print per-dependency lookup traces."),
]


@dataclass(slots=True)
class CheckOptions:
    """Normalised CLI inputs for the check workflow."""

    root: Path
    catalog: Path | None
    open_issue: bool | None
    github_token: str | None
    repository: str | None
    registry_url: str | None
    jobs: int | None
    timeout: float | None
    allow_partial: bool
    output: Path | None
    emit_json: bool
    use_emoji: bool
    debug: bool

    def overrides(self) -> dict[str, Any]:
        """Return the configuration values explicitly supplied on the command line.

        Flags that were left off map to ``None`` so lower-precedence sources
        still apply.
        """

        return {
            "catalog": self.catalog,
            "open_issue": self.open_issue,
            "github_token": self.github_token,
            "repository": self.repository,
            "registry_url": self.registry_url,
            "jobs": self.jobs,
            "timeout": self.timeout,
            "allow_partial": True if self.allow_partial else None,
            "output_file": self.output,
            "emit_json": True if self.emit_json else None,
        }


__all__ = [
    "CATALOG_ARGUMENT",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "JOBS_OPTION",
    "JSON_OPTION",
    "OPEN_ISSUE_OPTION",
    "OUTPUT_OPTION",
    "PARTIAL_OPTION",
    "REGISTRY_OPTION",
    "REPOSITORY_OPTION",
    "ROOT_OPTION",
    "TIMEOUT_OPTION",
    "TOKEN_OPTION",
    "CheckOptions",
]
