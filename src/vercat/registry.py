# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Latest-version lookups against the Maven Central search API."""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Final, Protocol
from urllib.parse import urlencode, urlparse

from . import __version__
from .errors import RegistryError
from .models import ERROR, Diagnostic

MAVEN_CENTRAL_SEARCH_URL: Final[str] = "https://search.maven.org/solrsearch/select"
USER_AGENT: Final[str] = f"vercat/{__version__}"
_SUPPORTED_SCHEMES: Final[frozenset[str]] = frozenset({"https", "http"})

DiagnosticSink = Callable[[Diagnostic], None]


class RegistryClient(Protocol):
    """Capability returning the latest published version of an artifact."""

    def fetch_latest_version(self, group_id: str, artifact_id: str) -> str | None:
        """Return the latest version, or ``None`` when it cannot be determined."""
        ...


class UrlOpener(Protocol):
    def open(self, fullurl: urllib.request.Request, data: bytes | None = None, timeout: float = ...) -> Any: ...


def _discard(_diagnostic: Diagnostic) -> None:
    return None


class MavenCentralClient:
    """Query ``search.maven.org`` for the latest version of a group/artifact pair."""

    def __init__(
        self,
        *,
        base_url: str = MAVEN_CENTRAL_SEARCH_URL,
        timeout: float | None = None,
        opener: UrlOpener | None = None,
        on_error: DiagnosticSink | None = None,
    ) -> None:
        parsed = urlparse(base_url)
        if parsed.scheme.lower() not in _SUPPORTED_SCHEMES:
            raise ValueError(f"Unsupported registry URL scheme '{parsed.scheme}'")
        self._base_url = base_url
        self._timeout = timeout
        self._opener = opener or urllib.request.build_opener(
            urllib.request.HTTPSHandler(context=ssl.create_default_context()),
        )
        self._on_error = on_error or _discard

    def build_url(self, group_id: str, artifact_id: str) -> str:
        """Return the search URL filtering on the exact group and artifact."""

        query = urlencode(
            {
                "q": f'g:"{group_id}" AND a:"{artifact_id}"',
                "rows": 1,
                "wt": "json",
            },
        )
        return f"{self._base_url}?{query}"

    def fetch_latest_version(self, group_id: str, artifact_id: str) -> str | None:
        """Return the latest version of ``group_id:artifact_id`` or ``None``.

        Failures never raise; they are reported to the ``on_error`` sink with
        the coordinate as context.
        """

        try:
            return self.latest_version(group_id, artifact_id)
        except RegistryError as exc:
            self._on_error(
                Diagnostic(
                    ERROR,
                    f"Error fetching latest version for {exc.coordinate}: {exc}",
                    key=exc.coordinate,
                ),
            )
            return None

    def latest_version(self, group_id: str, artifact_id: str) -> str:
        """Return the latest version of ``group_id:artifact_id``.

        Raises:
            RegistryError: If the request fails or the response holds no usable
                ``latestVersion``.
        """

        coordinate = f"{group_id}:{artifact_id}"
        payload = self._request(self.build_url(group_id, artifact_id), coordinate)
        return extract_latest_version(payload, coordinate)

    def _request(self, url: str, coordinate: str) -> object:
        request = urllib.request.Request(
            url,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )
        try:
            if self._timeout is None:
                response_cm = self._opener.open(request)
            else:
                response_cm = self._opener.open(request, timeout=self._timeout)
            with response_cm as response:
                status = getattr(response, "status", 200)
                if not 200 <= status < 300:
                    raise RegistryError(coordinate, f"registry responded with HTTP {status}")
                body = response.read()
        except urllib.error.HTTPError as exc:
            raise RegistryError(coordinate, f"registry responded with HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise RegistryError(coordinate, f"request failed: {exc}") from exc
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RegistryError(coordinate, "registry returned invalid JSON") from exc


def extract_latest_version(payload: object, coordinate: str) -> str:
    """Return ``response.docs[0].latestVersion`` from a search ``payload``.

    Raises:
        RegistryError: If the payload does not have the expected shape or the
            result set is empty.
    """

    response = payload.get("response") if isinstance(payload, Mapping) else None
    docs = response.get("docs") if isinstance(response, Mapping) else None
    if not isinstance(docs, Sequence) or isinstance(docs, str):
        raise RegistryError(coordinate, "unexpected response shape")
    if not docs:
        raise RegistryError(coordinate, "no matching artifact found")
    first = docs[0]
    latest = first.get("latestVersion") if isinstance(first, Mapping) else None
    if not isinstance(latest, str) or not latest:
        raise RegistryError(coordinate, "result has no latestVersion")
    return latest


__all__ = [
    "MAVEN_CENTRAL_SEARCH_URL",
    "DiagnosticSink",
    "MavenCentralClient",
    "RegistryClient",
    "extract_latest_version",
]
