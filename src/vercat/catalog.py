# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Decode version catalogs and resolve library declarations to dependencies.

Catalogs follow the Gradle ``libs.versions.toml`` layout: a ``[libraries]``
table whose entries point at shared version constants in ``[versions]``::

    [versions]
    kotlin = "2.0.0"

    [libraries.kotlin-stdlib]
    group = "org.jetbrains.kotlin"
    name = "kotlin-stdlib"
    version = { ref = "kotlin" }

Only versions declared through a ``ref`` are resolved. Inline literal versions
are reported as unresolved and produce no dependency.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .errors import CatalogDecodeError, CatalogEntryError
from .models import (
    ERROR,
    INFO,
    WARNING,
    Dependency,
    Diagnostic,
    LibraryDeclaration,
    LiteralVersion,
    VersionReference,
    VersionSpec,
)

LIBRARIES_KEY: Final[str] = "libraries"
VERSIONS_KEY: Final[str] = "versions"
REF_KEY: Final[str] = "ref"
MODULE_SEPARATOR: Final[str] = ":"


@dataclass(slots=True)
class ParseResult:
    """Dependencies resolved from a catalog plus the diagnostics gathered on the way."""

    dependencies: list[Dependency] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def decode_catalog(text: str) -> Mapping[str, Any]:
    """Decode catalog ``text`` into a document exposing a ``libraries`` table.

    Args:
        text: Raw TOML catalog contents.

    Returns:
        Mapping[str, Any]: Decoded catalog document.

    Raises:
        CatalogDecodeError: If the text is not valid TOML or lacks a
            ``[libraries]`` table.
    """

    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise CatalogDecodeError(str(exc)) from exc
    libraries = document.get(LIBRARIES_KEY)
    if not isinstance(libraries, Mapping):
        raise CatalogDecodeError(f"missing [{LIBRARIES_KEY}] table")
    return document


def parse_declaration(key: str, entry: object) -> LibraryDeclaration:
    """Return the :class:`LibraryDeclaration` described by a ``libraries`` entry.

    Args:
        key: Alias of the entry within the ``libraries`` table.
        entry: Raw decoded value of the entry.

    Returns:
        LibraryDeclaration: Declaration with coordinates and version spec.

    Raises:
        CatalogEntryError: If the entry does not have the expected shape.
    """

    if not isinstance(entry, Mapping):
        raise CatalogEntryError(key, "library declaration must be a table")
    group, name = _coordinates(key, entry)
    return LibraryDeclaration(key=key, group=group, name=name, version=_version_spec(key, entry))


def parse_catalog(text: str) -> ParseResult:
    """Parse catalog ``text`` and resolve every referenced library version.

    Decode failures produce an empty result carrying a single error
    diagnostic. Problems with individual entries are recorded and the entry
    is skipped while the remaining entries are still processed.

    Args:
        text: Raw TOML catalog contents.

    Returns:
        ParseResult: Resolved dependencies in document order and diagnostics.
    """

    result = ParseResult()
    try:
        document = decode_catalog(text)
    except CatalogDecodeError as exc:
        result.diagnostics.append(Diagnostic(ERROR, f"Error parsing TOML file: {exc}"))
        return result

    versions = document.get(VERSIONS_KEY)
    for key, entry in document[LIBRARIES_KEY].items():
        try:
            declaration = parse_declaration(key, entry)
            dependency = _resolve(declaration, versions, result.diagnostics)
        except CatalogEntryError as exc:
            result.diagnostics.append(Diagnostic(ERROR, f"Error parsing library entry {exc}", key=key))
            continue
        if dependency is not None:
            result.dependencies.append(dependency)
    return result


def read_catalog(path: Path) -> ParseResult:
    """Read the catalog at ``path`` and parse it with :func:`parse_catalog`.

    An unreadable file is treated like undecodable text: the result is empty
    and carries an error diagnostic.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return ParseResult(diagnostics=[Diagnostic(ERROR, f"Error reading catalog {path}: {exc}")])
    return parse_catalog(text)


def _coordinates(key: str, entry: Mapping[str, Any]) -> tuple[str, str]:
    if "group" in entry or "name" in entry:
        return _require_string(key, entry, "group"), _require_string(key, entry, "name")
    module = entry.get("module")
    if not isinstance(module, str):
        raise CatalogEntryError(key, "expected 'group' and 'name' or a 'module' string")
    group, separator, name = module.partition(MODULE_SEPARATOR)
    if not separator or not group or not name or MODULE_SEPARATOR in name:
        raise CatalogEntryError(key, f"module '{module}' must use the form 'group:name'")
    return group, name


def _require_string(key: str, entry: Mapping[str, Any], field_name: str) -> str:
    value = entry.get(field_name)
    if not isinstance(value, str) or not value:
        raise CatalogEntryError(key, f"'{field_name}' must be a non-empty string")
    return value


def _version_spec(key: str, entry: Mapping[str, Any]) -> VersionSpec:
    if "version" not in entry:
        raise CatalogEntryError(key, "missing 'version'")
    raw = entry["version"]
    if isinstance(raw, Mapping) and REF_KEY in raw:
        ref = raw[REF_KEY]
        if not isinstance(ref, str):
            raise CatalogEntryError(key, "'version.ref' must be a string")
        return VersionReference(ref=ref)
    return LiteralVersion(value=raw)


def _resolve(
    declaration: LibraryDeclaration,
    versions: object,
    diagnostics: list[Diagnostic],
) -> Dependency | None:
    match declaration.version:
        case LiteralVersion():
            diagnostics.append(
                Diagnostic(INFO, f"Version.ref not found for {declaration.key}", key=declaration.key),
            )
            return None
        case VersionReference(ref=ref):
            if not isinstance(versions, Mapping):
                raise CatalogEntryError(declaration.key, f"[{VERSIONS_KEY}] table is missing")
            resolved = versions.get(ref)
            if resolved is None or resolved == "":
                diagnostics.append(
                    Diagnostic(
                        WARNING,
                        f"Version reference '{ref}' for {declaration.key} is not declared in [{VERSIONS_KEY}]",
                        key=declaration.key,
                    ),
                )
                return None
            if not isinstance(resolved, str):
                raise CatalogEntryError(declaration.key, f"version '{ref}' must be a string")
            return _dependency(declaration, resolved)


def _dependency(declaration: LibraryDeclaration, resolved: str) -> Dependency:
    try:
        return Dependency(
            group_id=declaration.group,
            name=declaration.name,
            version=resolved,
            key=declaration.key,
        )
    except ValidationError as exc:
        raise CatalogEntryError(declaration.key, str(exc)) from exc


__all__ = [
    "LIBRARIES_KEY",
    "VERSIONS_KEY",
    "ParseResult",
    "decode_catalog",
    "parse_catalog",
    "parse_declaration",
    "read_catalog",
]
