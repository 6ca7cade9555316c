# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run orchestration tying catalog parsing, registry checks and reporting together."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from .catalog import ParseResult, read_catalog
from .checker import CheckReport, DependencyStatus, UpdateChecker
from .config import CheckConfig
from .errors import ConfigError
from .logging import emoji
from .models import ERROR, WARNING, Dependency, Diagnostic, UpdateRecord
from .registry import MavenCentralClient, RegistryClient
from .reporting import (
    DEPENDENCIES_OUTPUT,
    GitHubIssueReporter,
    IssueReporter,
    IssueResult,
    format_update,
    updates_to_json,
    write_action_output,
)


class RunLogger(Protocol):
    """Sink for the user-facing messages emitted during a run."""

    def info(self, message: str) -> None: ...

    def ok(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def fail(self, message: str) -> None: ...

    def echo(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...


@dataclass(slots=True)
class RunResult:
    """Everything a completed run produced."""

    parse: ParseResult
    report: CheckReport
    issue: IssueResult | None = None

    @property
    def dependencies(self) -> list[Dependency]:
        return self.parse.dependencies

    @property
    def updates(self) -> list[UpdateRecord]:
        return self.report.updates


@dataclass(slots=True)
class _DiagnosticEmitter:
    logger: RunLogger

    def __call__(self, diagnostic: Diagnostic) -> None:
        emit_diagnostics((diagnostic,), self.logger)


def emit_diagnostics(diagnostics: Iterable[Diagnostic], logger: RunLogger) -> None:
    """Render ``diagnostics`` through ``logger`` according to their level."""

    for diagnostic in diagnostics:
        if diagnostic.level == ERROR:
            logger.fail(diagnostic.message)
        elif diagnostic.level == WARNING:
            logger.warn(diagnostic.message)
        else:
            logger.info(diagnostic.message)


def emit_summary(updates: Sequence[UpdateRecord], logger: RunLogger, *, use_emoji: bool) -> None:
    """Log whether everything is current, or list every outdated dependency."""

    if not updates:
        logger.echo(f"{emoji('🎉 ', use_emoji)}All dependencies are up to date!")
        return
    logger.echo(f"{emoji('🟠 ', use_emoji)}The following dependencies are out-of-date:")
    for update in updates:
        logger.echo(format_update(update))


def run_check(
    config: CheckConfig,
    *,
    logger: RunLogger,
    use_emoji: bool = True,
    client: RegistryClient | None = None,
    issue_reporter: IssueReporter | None = None,
) -> RunResult:
    """Check the configured catalog and report outdated dependencies.

    Catalog, entry and lookup problems are logged and never fail the run.

    Args:
        config: Resolved run configuration.
        logger: Destination for user-facing messages.
        use_emoji: Whether summary lines carry emoji glyphs.
        client: Registry client override; defaults to Maven Central.
        issue_reporter: Issue reporter override; defaults to GitHub when
            ``config.open_issue`` is set.

    Returns:
        RunResult: Parsed dependencies, check outcomes and any created issue.

    Raises:
        CheckCancelledError: If the check timed out without partial results.
        IssueReportError: If the issue could not be created.
    """

    parse_result = read_catalog(config.catalog)
    emit_diagnostics(parse_result.diagnostics, logger)
    for dependency in parse_result.dependencies:
        logger.debug(f"library={dependency.key} coordinate={dependency.coordinate} version={dependency.version}")

    registry = client or MavenCentralClient(
        base_url=config.registry_url,
        timeout=config.timeout,
        on_error=_DiagnosticEmitter(logger),
    )
    checker = UpdateChecker(
        registry,
        jobs=config.jobs,
        timeout=config.timeout,
        allow_partial=config.allow_partial,
    )
    report = checker.check(parse_result.dependencies)
    emit_diagnostics(report.diagnostics, logger)
    for outcome in report.outcomes:
        logger.debug(
            f"coordinate={outcome.dependency.coordinate} status={outcome.status.value} "
            f"latest={outcome.latest_version or '-'}",
        )
    if not report.complete:
        logger.warn(
            f"Reporting partial results: {report.count(DependencyStatus.UNDETERMINED)} lookup(s) did not finish",
        )

    updates = report.updates
    payload = updates_to_json(updates)
    if config.output_file is not None:
        write_action_output(config.output_file, DEPENDENCIES_OUTPUT, payload)
    if config.emit_json:
        logger.echo(payload)
    emit_summary(updates, logger, use_emoji=use_emoji)

    result = RunResult(parse=parse_result, report=report)
    if updates and config.open_issue:
        reporter = issue_reporter or _github_reporter(config)
        result.issue = reporter.report(updates)
        logger.echo(f"{emoji('🟢 ', use_emoji)}Issue Created Successfully!")
        if result.issue.url:
            logger.ok(f"Opened {result.issue.url}")
    return result


def _github_reporter(config: CheckConfig) -> GitHubIssueReporter:
    if not config.github_token or not config.repository:
        raise ConfigError("Opening an issue requires a GitHub token and repository")
    return GitHubIssueReporter(token=config.github_token, repository=config.repository)


__all__ = ["RunLogger", "RunResult", "emit_diagnostics", "emit_summary", "run_check"]
