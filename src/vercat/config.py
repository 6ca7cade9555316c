# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run configuration models and layered loading helpers."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError
from .registry import MAVEN_CENTRAL_SEARCH_URL

PYPROJECT_MANIFEST: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "vercat"
DEFAULT_CATALOG: Final[Path] = Path("gradle") / "libs.versions.toml"

# Ordered by precedence; GitHub Actions exposes `with:` inputs as INPUT_<NAME>.
ENV_SOURCES: Final[Mapping[str, tuple[str, ...]]] = {
    "catalog": ("INPUT_FILE-NAME", "VERCAT_CATALOG"),
    "open_issue": ("INPUT_OPEN-ISSUE", "VERCAT_OPEN_ISSUE"),
    "github_token": ("INPUT_GITHUB-TOKEN", "GITHUB_TOKEN"),
    "repository": ("GITHUB_REPOSITORY",),
    "registry_url": ("VERCAT_REGISTRY_URL",),
    "jobs": ("VERCAT_JOBS",),
    "timeout": ("VERCAT_TIMEOUT",),
    "output_file": ("GITHUB_OUTPUT",),
}

PROJECT_KEYS: Final[frozenset[str]] = frozenset(
    {"catalog", "open_issue", "repository", "registry_url", "jobs", "timeout", "allow_partial"},
)

_REPOSITORY_RE: Final[re.Pattern[str]] = re.compile(r"^[\w.-]+/[\w.-]+$")


class CheckConfig(BaseModel):
    """Settings controlling a single catalog check run."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    catalog: Path = DEFAULT_CATALOG
    open_issue: bool = False
    github_token: str | None = Field(default=None, repr=False)
    repository: str | None = None
    registry_url: str = MAVEN_CENTRAL_SEARCH_URL
    jobs: int = Field(default=1, ge=1)
    timeout: float | None = Field(default=None, gt=0)
    allow_partial: bool = False
    output_file: Path | None = None
    emit_json: bool = False

    @field_validator("repository")
    @classmethod
    def _validate_repository(cls, value: str | None) -> str | None:
        if value is not None and not _REPOSITORY_RE.match(value):
            raise ValueError("repository must use the form 'owner/name'")
        return value

    @field_validator("registry_url")
    @classmethod
    def _validate_registry_url(cls, value: str) -> str:
        if not value.startswith(("https://", "http://")):
            raise ValueError("registry_url must be an http(s) URL")
        return value

    @model_validator(mode="after")
    def _require_issue_credentials(self) -> CheckConfig:
        if self.open_issue and not self.github_token:
            raise ValueError("a GitHub token is required when open_issue is enabled")
        if self.open_issue and not self.repository:
            raise ValueError("a repository is required when open_issue is enabled")
        return self


def load_project_settings(root: Path) -> dict[str, Any]:
    """Return the ``[tool.vercat]`` table from ``root/pyproject.toml``.

    Raises:
        ConfigError: If the manifest cannot be decoded or the table holds
            unknown keys.
    """

    manifest = root / PYPROJECT_MANIFEST
    if not manifest.is_file():
        return {}
    try:
        with manifest.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to read {manifest}: {exc}") from exc
    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {manifest} must be a table")
    if unknown := sorted(set(section) - PROJECT_KEYS):
        raise ConfigError(
            f"Unknown key(s) in [{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}]: {', '.join(unknown)}",
        )
    return dict(section)


def settings_from_env(env: Mapping[str, str]) -> dict[str, str]:
    """Return settings supplied through environment variables.

    Empty values are ignored so unset action inputs fall back to defaults.
    """

    settings: dict[str, str] = {}
    for field_name, names in ENV_SOURCES.items():
        for name in names:
            value = env.get(name, "").strip()
            if value:
                settings[field_name] = value
                break
    return settings


def resolve_config(
    root: Path,
    *,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> CheckConfig:
    """Build the run configuration for ``root``.

    Precedence, lowest first: built-in defaults, ``[tool.vercat]`` in
    ``pyproject.toml``, environment variables, explicit ``overrides``.

    Raises:
        ConfigError: If any layer holds invalid values.
    """

    settings: dict[str, Any] = {}
    settings.update(load_project_settings(root))
    settings.update(settings_from_env(env or {}))
    settings.update({key: value for key, value in (overrides or {}).items() if value is not None})
    try:
        config = CheckConfig.model_validate(settings)
    except ValidationError as exc:
        raise ConfigError(_describe_validation_error(exc)) from exc
    if not config.catalog.is_absolute():
        config.catalog = root / config.catalog
    return config


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "Invalid configuration: " + "; ".join(problems)


__all__ = [
    "DEFAULT_CATALOG",
    "ENV_SOURCES",
    "CheckConfig",
    "load_project_settings",
    "resolve_config",
    "settings_from_env",
]
