# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for end-to-end run orchestration with fake collaborators."""

from __future__ import annotations

import json
import socket
import threading
import time
from collections.abc import Sequence
from pathlib import Path

import pytest

from vercat.checker import LOOKUP_THREAD_PREFIX
from vercat.config import CheckConfig
from vercat.errors import IssueReportError
from vercat.models import UpdateRecord
from vercat.reporting import IssueResult
from vercat.runner import run_check

SINGLE_LIBRARY = """
[versions]
v1 = "1.0.0"

[libraries.lib]
group = "org.example"
name = "lib"
version = { ref = "v1" }
"""


class RecordingLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def _record(self, level: str, message: str) -> None:
        self.records.append((level, message))

    def info(self, message: str) -> None:
        self._record("info", message)

    def ok(self, message: str) -> None:
        self._record("ok", message)

    def warn(self, message: str) -> None:
        self._record("warn", message)

    def fail(self, message: str) -> None:
        self._record("fail", message)

    def echo(self, message: str) -> None:
        self._record("echo", message)

    def debug(self, message: str) -> None:
        self._record("debug", message)

    def messages(self, level: str) -> list[str]:
        return [message for record_level, message in self.records if record_level == level]


class RecordingIssueReporter:
    def __init__(self) -> None:
        self.reports: list[list[UpdateRecord]] = []

    def report(self, updates: Sequence[UpdateRecord]) -> IssueResult:
        self.reports.append(list(updates))
        return IssueResult(number=7, url="https://github.com/octo/repo/issues/7")


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "libs.versions.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_up_to_date_catalog_reports_empty_list(tmp_path: Path, registry_factory) -> None:
    output = tmp_path / "out"
    config = CheckConfig(catalog=_write(tmp_path, SINGLE_LIBRARY), output_file=output)
    logger = RecordingLogger()

    result = run_check(config, logger=logger, client=registry_factory({"org.example:lib": "1.0.0"}))

    assert result.updates == []
    assert "🎉 All dependencies are up to date!" in logger.messages("echo")
    assert "[]" in output.read_text(encoding="utf-8").splitlines()


def test_outdated_catalog_lists_updates(tmp_path: Path, registry_factory) -> None:
    config = CheckConfig(catalog=_write(tmp_path, SINGLE_LIBRARY), emit_json=True)
    logger = RecordingLogger()

    result = run_check(config, logger=logger, use_emoji=False, client=registry_factory({"org.example:lib": "1.2.0"}))

    assert [update.to_payload() for update in result.updates] == [
        {"name": "lib", "version": "1.0.0", "newVersion": "1.2.0"},
    ]
    echoed = logger.messages("echo")
    assert json.loads(echoed[0]) == [{"name": "lib", "version": "1.0.0", "newVersion": "1.2.0"}]
    assert echoed[1:] == ["The following dependencies are out-of-date:", "lib: (1.0.0) -> (1.2.0)"]


def test_malformed_catalog_does_not_fail_run(tmp_path: Path, registry_factory) -> None:
    registry = registry_factory({})
    config = CheckConfig(catalog=_write(tmp_path, "[libraries\n"))
    logger = RecordingLogger()

    result = run_check(config, logger=logger, use_emoji=False, client=registry)

    assert result.dependencies == []
    assert result.updates == []
    assert registry.calls == []
    assert logger.messages("fail")[0].startswith("Error parsing TOML file")
    assert "All dependencies are up to date!" in logger.messages("echo")


def test_missing_catalog_does_not_fail_run(tmp_path: Path, registry_factory) -> None:
    config = CheckConfig(catalog=tmp_path / "missing.toml")
    logger = RecordingLogger()

    result = run_check(config, logger=logger, client=registry_factory({}))

    assert result.updates == []
    assert logger.messages("fail")


def test_lookup_failures_are_logged_and_skipped(tmp_path: Path, catalog_path: Path, registry_factory) -> None:
    registry = registry_factory(
        {"org.jetbrains.kotlin:kotlin-stdlib": "2.1.0"},
        failing=frozenset({"com.squareup.okhttp3:okhttp"}),
    )
    logger = RecordingLogger()

    result = run_check(CheckConfig(catalog=catalog_path), logger=logger, use_emoji=False, client=registry)

    assert [update.name for update in result.updates] == ["kotlin-stdlib"]
    assert any("com.squareup.okhttp3:okhttp" in message for message in logger.messages("fail"))
    assert logger.messages("info") == ["Version.ref not found for junit"]


def test_issue_is_opened_only_when_requested_and_needed(tmp_path: Path, registry_factory) -> None:
    catalog = _write(tmp_path, SINGLE_LIBRARY)
    reporter = RecordingIssueReporter()
    config = CheckConfig(catalog=catalog, open_issue=True, github_token="t", repository="octo/repo")

    current = run_check(
        config,
        logger=RecordingLogger(),
        client=registry_factory({"org.example:lib": "1.0.0"}),
        issue_reporter=reporter,
    )
    assert current.issue is None
    assert reporter.reports == []

    logger = RecordingLogger()
    outdated = run_check(
        config,
        logger=logger,
        use_emoji=False,
        client=registry_factory({"org.example:lib": "2.0.0"}),
        issue_reporter=reporter,
    )
    assert outdated.issue == IssueResult(number=7, url="https://github.com/octo/repo/issues/7")
    assert reporter.reports == [outdated.updates]
    assert "Issue Created Successfully!" in logger.messages("echo")


def test_issue_not_opened_without_flag(tmp_path: Path, registry_factory) -> None:
    reporter = RecordingIssueReporter()
    config = CheckConfig(catalog=_write(tmp_path, SINGLE_LIBRARY))

    run_check(
        config,
        logger=RecordingLogger(),
        client=registry_factory({"org.example:lib": "2.0.0"}),
        issue_reporter=reporter,
    )

    assert reporter.reports == []


def test_issue_failure_propagates(tmp_path: Path, registry_factory) -> None:
    class FailingReporter:
        def report(self, updates: Sequence[UpdateRecord]) -> IssueResult:
            raise IssueReportError("GitHub rejected issue creation")

    config = CheckConfig(catalog=_write(tmp_path, SINGLE_LIBRARY), open_issue=True, github_token="t", repository="o/r")

    with pytest.raises(IssueReportError):
        run_check(
            config,
            logger=RecordingLogger(),
            client=registry_factory({"org.example:lib": "2.0.0"}),
            issue_reporter=FailingReporter(),
        )


def test_registry_requests_are_bounded_by_run_timeout(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    registry_factory,
) -> None:
    captured: dict[str, object] = {}

    def build_client(**kwargs: object):
        captured.update(kwargs)
        return registry_factory({"org.example:lib": "1.0.0"})

    monkeypatch.setattr("vercat.runner.MavenCentralClient", build_client)

    run_check(CheckConfig(catalog=_write(tmp_path, SINGLE_LIBRARY), timeout=1.5), logger=RecordingLogger())

    assert captured["timeout"] == 1.5


def test_stalled_registry_does_not_outlive_timeout(monkeypatch: pytest.MonkeyPatch, catalog_path: Path) -> None:
    for name in ("http_proxy", "HTTP_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    logger = RecordingLogger()

    # the server listens but never accepts, so requests connect and then wait forever for a reply
    with socket.create_server(("127.0.0.1", 0)) as server:
        host, port = server.getsockname()[:2]
        config = CheckConfig(
            catalog=catalog_path,
            registry_url=f"http://{host}:{port}/select",
            jobs=2,
            timeout=0.5,
            allow_partial=True,
        )
        started = time.monotonic()
        result = run_check(config, logger=logger, use_emoji=False)
        lookups = [thread for thread in threading.enumerate() if thread.name.startswith(LOOKUP_THREAD_PREFIX)]
        for thread in lookups:
            thread.join(timeout=5)
        elapsed = time.monotonic() - started

    assert result.updates == []
    assert not any(thread.is_alive() for thread in lookups)
    assert elapsed < 3
