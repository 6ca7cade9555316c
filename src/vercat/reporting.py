# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Render update reports as log lines, JSON outputs and GitHub issues."""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Final, Protocol

from . import __version__
from .errors import IssueReportError, OutputWriteError
from .models import UpdateRecord
from .registry import UrlOpener

DEPENDENCIES_OUTPUT: Final[str] = "dependencies"
GITHUB_API_URL: Final[str] = "https://api.github.com"
ISSUE_TITLE_PREFIX: Final[str] = "Dependency Updates"
ISSUE_BODY_HEADER: Final[str] = "The following dependencies have updates available:"


def format_update(update: UpdateRecord) -> str:
    """Return the ``name: (old) -> (new)`` line describing ``update``."""

    return f"{update.name}: ({update.version}) -> ({update.new_version})"


def updates_to_json(updates: Sequence[UpdateRecord]) -> str:
    """Serialise ``updates`` as the JSON array published as the run output."""

    return json.dumps([update.to_payload() for update in updates])


def write_action_output(path: Path, name: str, value: str) -> None:
    """Append ``name=value`` to a GitHub Actions output file.

    The multi-line delimiter syntax is used so values may contain newlines.

    Raises:
        OutputWriteError: If the output file cannot be opened or written.
    """

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    try:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    except OSError as exc:
        raise OutputWriteError(f"Unable to write run output to {path}: {exc}") from exc


def build_issue_title(day: date) -> str:
    """Return the issue title dated ``day``."""

    return f"{ISSUE_TITLE_PREFIX}: {day.isoformat()}"


def build_issue_body(updates: Sequence[UpdateRecord]) -> str:
    """Return the Markdown issue body listing every update as a bullet."""

    lines = [ISSUE_BODY_HEADER]
    lines.extend(f"* `{update.name}`: ({update.version}) -> ({update.new_version})" for update in updates)
    return "\n".join(lines) + "\n"


@dataclass(frozen=True, slots=True)
class IssueResult:
    """Reference to the issue created for an update report."""

    number: int | None = None
    url: str | None = None


class IssueReporter(Protocol):
    """Capability filing an update report in an issue tracker."""

    def report(self, updates: Sequence[UpdateRecord]) -> IssueResult:
        """File ``updates`` and return a reference to the created issue."""
        ...


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class GitHubIssueReporter:
    """Open a GitHub issue listing outdated dependencies through the REST API."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        api_url: str = GITHUB_API_URL,
        opener: UrlOpener | None = None,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self._token = token
        self._repository = repository
        self._api_url = api_url.rstrip("/")
        self._opener = opener or urllib.request.build_opener(
            urllib.request.HTTPSHandler(context=ssl.create_default_context()),
        )
        self._today = today

    @property
    def issues_url(self) -> str:
        """Return the REST endpoint issues are created through."""

        return f"{self._api_url}/repos/{self._repository}/issues"

    def report(self, updates: Sequence[UpdateRecord]) -> IssueResult:
        """Create the issue for ``updates``.

        Raises:
            IssueReportError: If the API request fails or is rejected.
        """

        payload = {
            "title": build_issue_title(self._today()),
            "body": build_issue_body(updates),
        }
        request = urllib.request.Request(
            self.issues_url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self._token}",
                "Content-Type": "application/json",
                "User-Agent": f"vercat/{__version__}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )
        try:
            with self._opener.open(request) as response:
                status = getattr(response, "status", 201)
                body = response.read()
        except urllib.error.HTTPError as exc:
            raise IssueReportError(f"GitHub rejected issue creation for {self._repository}: HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise IssueReportError(f"Could not reach GitHub to create an issue: {exc}") from exc
        if not 200 <= status < 300:
            raise IssueReportError(f"GitHub rejected issue creation for {self._repository}: HTTP {status}")
        try:
            created = json.loads(body) if body else {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            created = {}
        if not isinstance(created, dict):
            created = {}
        number = created.get("number")
        url = created.get("html_url")
        return IssueResult(
            number=number if isinstance(number, int) else None,
            url=url if isinstance(url, str) else None,
        )


__all__ = [
    "DEPENDENCIES_OUTPUT",
    "GITHUB_API_URL",
    "GitHubIssueReporter",
    "IssueReporter",
    "IssueResult",
    "build_issue_body",
    "build_issue_title",
    "format_update",
    "updates_to_json",
    "write_action_output",
]
