# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command checking a version catalog for outdated dependencies."""

from __future__ import annotations

import os
from pathlib import Path

import typer

from ....config import resolve_config
from ....errors import VercatError
from ....runner import run_check
from ...shared import CLIError, CLILogger, build_cli_logger
from .models import (
    CATALOG_ARGUMENT,
    DEBUG_OPTION,
    EMOJI_OPTION,
    JOBS_OPTION,
    JSON_OPTION,
    OPEN_ISSUE_OPTION,
    OUTPUT_OPTION,
    PARTIAL_OPTION,
    REGISTRY_OPTION,
    REPOSITORY_OPTION,
    ROOT_OPTION,
    TIMEOUT_OPTION,
    TOKEN_OPTION,
    CheckOptions,
)


def main(
    catalog: CATALOG_ARGUMENT = None,
    root: ROOT_OPTION = Path("."),
    open_issue: OPEN_ISSUE_OPTION = None,
    github_token: TOKEN_OPTION = None,
    repository: REPOSITORY_OPTION = None,
    registry_url: REGISTRY_OPTION = None,
    jobs: JOBS_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    allow_partial: PARTIAL_OPTION = False,
    output: OUTPUT_OPTION = None,
    emit_json: JSON_OPTION = False,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Compare catalog versions with the latest published releases."""

    options = CheckOptions(
        root=root.resolve(),
        catalog=catalog,
        open_issue=open_issue,
        github_token=github_token,
        repository=repository,
        registry_url=registry_url,
        jobs=jobs,
        timeout=timeout,
        allow_partial=allow_partial,
        output=output,
        emit_json=emit_json,
        use_emoji=emoji,
        debug=debug,
    )
    logger = build_cli_logger(emoji=options.use_emoji, debug=options.debug)
    try:
        _run(options, logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc


def _run(options: CheckOptions, logger: CLILogger) -> None:
    """Resolve configuration for ``options`` and execute the check.

    Raises:
        CLIError: When configuration is invalid or the run fails.
    """

    try:
        config = resolve_config(options.root, overrides=options.overrides(), env=os.environ)
        logger.debug(f"catalog={config.catalog} jobs={config.jobs} open_issue={config.open_issue}")
        run_check(config, logger=logger, use_emoji=options.use_emoji)
    except VercatError as exc:
        raise CLIError(str(exc)) from exc


__all__ = ["main"]
