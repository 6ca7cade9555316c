# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compare resolved dependencies with the latest versions published upstream."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from .errors import CheckCancelledError
from .models import ERROR, WARNING, Dependency, Diagnostic, UpdateRecord
from .registry import RegistryClient

Clock = Callable[[], float]
LOOKUP_THREAD_PREFIX: Final[str] = "vercat-lookup"


class DependencyStatus(Enum):
    """Terminal state of a single dependency lookup."""

    UP_TO_DATE = "up-to-date"
    OUT_OF_DATE = "out-of-date"
    UNDETERMINED = "undetermined"


@dataclass(frozen=True, slots=True)
class DependencyOutcome:
    """Terminal state reached by one dependency during a check."""

    dependency: Dependency
    status: DependencyStatus
    latest_version: str | None = None

    @property
    def update(self) -> UpdateRecord | None:
        """Return the update record for an out-of-date dependency, else ``None``."""

        if self.status is not DependencyStatus.OUT_OF_DATE or self.latest_version is None:
            return None
        return UpdateRecord(
            name=self.dependency.name,
            version=self.dependency.version,
            new_version=self.latest_version,
        )


@dataclass(slots=True)
class CheckReport:
    """Ordered outcomes of an update check.

    Attributes:
        outcomes: One outcome per checked dependency, in input order.
        diagnostics: Problems recorded while looking dependencies up.
        complete: ``False`` when a deadline cut the check short.
    """

    outcomes: list[DependencyOutcome] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    complete: bool = True

    @property
    def updates(self) -> list[UpdateRecord]:
        """Return update records for every out-of-date dependency, in input order."""

        return [update for outcome in self.outcomes if (update := outcome.update) is not None]

    def count(self, status: DependencyStatus) -> int:
        """Return how many outcomes ended in ``status``."""

        return sum(1 for outcome in self.outcomes if outcome.status is status)


def classify(dependency: Dependency, latest_version: str | None) -> DependencyOutcome:
    """Return the outcome for ``dependency`` given the registry's ``latest_version``.

    Versions are compared as plain strings; an unknown latest version is never
    reported as out of date.
    """

    if latest_version is None:
        return DependencyOutcome(dependency, DependencyStatus.UNDETERMINED)
    if latest_version != dependency.version:
        return DependencyOutcome(dependency, DependencyStatus.OUT_OF_DATE, latest_version)
    return DependencyOutcome(dependency, DependencyStatus.UP_TO_DATE, latest_version)


_LookupResult = tuple[DependencyOutcome, Diagnostic | None]


class UpdateChecker:
    """Look every dependency up in a registry and collect version mismatches."""

    def __init__(
        self,
        client: RegistryClient,
        *,
        jobs: int = 1,
        timeout: float | None = None,
        allow_partial: bool = False,
        clock: Clock = time.monotonic,
    ) -> None:
        if jobs < 1:
            raise ValueError("jobs must be at least 1")
        self._client = client
        self._jobs = jobs
        self._timeout = timeout
        self._allow_partial = allow_partial
        self._clock = clock

    def check(self, dependencies: Sequence[Dependency]) -> CheckReport:
        """Check ``dependencies`` and return their ordered outcomes.

        Raises:
            CheckCancelledError: If the timeout expires before every lookup
                finished and partial results are not allowed.
        """

        deadline = None if self._timeout is None else self._clock() + self._timeout
        slots: list[_LookupResult | None] = [None] * len(dependencies)
        if self._jobs > 1 and len(dependencies) > 1:
            self._check_parallel(dependencies, slots, deadline)
        else:
            self._check_serial(dependencies, slots, deadline)
        return self._assemble(dependencies, slots)

    def _lookup(self, dependency: Dependency) -> _LookupResult:
        try:
            latest = self._client.fetch_latest_version(dependency.group_id, dependency.name)
        except Exception as exc:  # any client failure leaves the dependency undetermined
            diagnostic = Diagnostic(
                ERROR,
                f"Error fetching latest version for {dependency.coordinate}: {exc}",
                key=dependency.coordinate,
            )
            return DependencyOutcome(dependency, DependencyStatus.UNDETERMINED), diagnostic
        return classify(dependency, latest), None

    def _check_serial(
        self,
        dependencies: Sequence[Dependency],
        slots: list[_LookupResult | None],
        deadline: float | None,
    ) -> None:
        for index, dependency in enumerate(dependencies):
            if deadline is not None and self._clock() >= deadline:
                return
            slots[index] = self._lookup(dependency)

    def _check_parallel(
        self,
        dependencies: Sequence[Dependency],
        slots: list[_LookupResult | None],
        deadline: float | None,
    ) -> None:
        executor = ThreadPoolExecutor(
            max_workers=min(self._jobs, len(dependencies)),
            thread_name_prefix=LOOKUP_THREAD_PREFIX,
        )
        future_map: dict[Future[_LookupResult], int] = {}
        try:
            for index, dependency in enumerate(dependencies):
                future_map[executor.submit(self._lookup, dependency)] = index
            remaining = None if deadline is None else max(0.0, deadline - self._clock())
            done, _pending = wait(future_map, timeout=remaining)
            for future in done:
                slots[future_map[future]] = future.result()
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _assemble(
        self,
        dependencies: Sequence[Dependency],
        slots: Sequence[_LookupResult | None],
    ) -> CheckReport:
        report = CheckReport()
        missing = [dependency for dependency, slot in zip(dependencies, slots) if slot is None]
        if missing and not self._allow_partial:
            raise CheckCancelledError(
                f"Update check timed out after {self._timeout}s with {len(missing)} lookup(s) unfinished",
            )
        for dependency, slot in zip(dependencies, slots):
            if slot is None:
                report.outcomes.append(DependencyOutcome(dependency, DependencyStatus.UNDETERMINED))
                report.diagnostics.append(
                    Diagnostic(
                        WARNING,
                        f"Lookup for {dependency.coordinate} abandoned after timeout",
                        key=dependency.coordinate,
                    ),
                )
                continue
            outcome, diagnostic = slot
            report.outcomes.append(outcome)
            if diagnostic is not None:
                report.diagnostics.append(diagnostic)
        report.complete = not missing
        return report


def check_for_updates(dependencies: Sequence[Dependency], client: RegistryClient) -> list[UpdateRecord]:
    """Return the update records for ``dependencies`` using sequential lookups."""

    return UpdateChecker(client).check(dependencies).updates


__all__ = [
    "LOOKUP_THREAD_PREFIX",
    "CheckReport",
    "DependencyOutcome",
    "DependencyStatus",
    "UpdateChecker",
    "check_for_updates",
    "classify",
]
