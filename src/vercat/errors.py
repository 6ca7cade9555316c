# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exception hierarchy shared by the catalog, registry and reporting layers."""

from __future__ import annotations


class VercatError(RuntimeError):
    """Base class for failures raised by vercat."""


class ConfigError(VercatError):
    """Raised when run configuration input is invalid."""


class CatalogDecodeError(VercatError):
    """Raised when catalog text cannot be decoded into a usable document."""


class CatalogEntryError(VercatError):
    """Raised when a single library declaration has an unexpected shape."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class RegistryError(VercatError):
    """Raised when the registry lookup for a coordinate fails."""

    def __init__(self, coordinate: str, message: str) -> None:
        super().__init__(f"{coordinate}: {message}")
        self.coordinate = coordinate


class CheckCancelledError(VercatError):
    """Raised when an update check exceeds its deadline and partial results are disallowed."""


class IssueReportError(VercatError):
    """Raised when filing the update report as an issue fails."""


class OutputWriteError(VercatError):
    """Raised when the structured run output cannot be written."""


__all__ = [
    "CatalogDecodeError",
    "CatalogEntryError",
    "CheckCancelledError",
    "ConfigError",
    "IssueReportError",
    "OutputWriteError",
    "RegistryError",
    "VercatError",
]
