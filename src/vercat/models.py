# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Value objects describing catalog declarations, dependencies and updates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

DiagnosticLevel = Literal["info", "warning", "error"]

INFO: Final[DiagnosticLevel] = "info"
WARNING: Final[DiagnosticLevel] = "warning"
ERROR: Final[DiagnosticLevel] = "error"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Describe a recoverable problem noticed while parsing or checking.

    Attributes:
        level: Severity used when the diagnostic is rendered.
        message: Human-readable description of the problem.
        key: Catalog key or ``group:artifact`` coordinate the problem relates to.
    """

    level: DiagnosticLevel
    message: str
    key: str | None = None


@dataclass(frozen=True, slots=True)
class LiteralVersion:
    """Version declared inline on the library entry."""

    value: object


@dataclass(frozen=True, slots=True)
class VersionReference:
    """Version declared through a named entry of the ``versions`` table."""

    ref: str


VersionSpec: TypeAlias = LiteralVersion | VersionReference


@dataclass(frozen=True, slots=True)
class LibraryDeclaration:
    """Library entry taken from the ``libraries`` table of a catalog."""

    key: str
    group: str
    name: str
    version: VersionSpec

    @property
    def coordinate(self) -> str:
        return f"{self.group}:{self.name}"


class Dependency(BaseModel):
    """Fully resolved ``(group, artifact, version)`` triple."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    group_id: str = Field(alias="groupId")
    name: str
    version: str
    key: str = Field(default="", exclude=True)

    @field_validator("group_id", "name", "version")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @property
    def coordinate(self) -> str:
        return f"{self.group_id}:{self.name}"


class UpdateRecord(BaseModel):
    """Mismatch between a declared version and the latest published version."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    version: str
    new_version: str = Field(alias="newVersion")

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready mapping using the published field names."""

        return self.model_dump(by_alias=True)


__all__ = [
    "ERROR",
    "INFO",
    "WARNING",
    "Dependency",
    "Diagnostic",
    "DiagnosticLevel",
    "LibraryDeclaration",
    "LiteralVersion",
    "UpdateRecord",
    "VersionReference",
    "VersionSpec",
]
