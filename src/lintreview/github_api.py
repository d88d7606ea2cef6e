# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Minimal GitHub REST client shared by the diff source and review sink."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

import requests

from .context import RunContext
from .environment import GENERIC_TOKEN_ENV, GITHUB_TOKEN_ENV

DEFAULT_API_URL: Final[str] = "https://api.github.com"
API_URL_ENV: Final[str] = "GITHUB_API_URL"
DEFAULT_REQUEST_TIMEOUT: Final[float] = 30.0
JSON_MEDIA_TYPE: Final[str] = "application/vnd.github.v3+json"
DIFF_MEDIA_TYPE: Final[str] = "application/vnd.github.v3.diff"


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub request fails or returns an error status."""


def github_token(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the GitHub token from the review-specific variables."""

    source = os.environ if environ is None else environ
    return source.get(GITHUB_TOKEN_ENV) or source.get(GENERIC_TOKEN_ENV) or None


def github_api_url(environ: Mapping[str, str] | None = None) -> str:
    """Return the API base URL, honouring ``GITHUB_API_URL``."""

    source = os.environ if environ is None else environ
    return (source.get(API_URL_ENV) or DEFAULT_API_URL).rstrip("/")


def split_repository(repository: str) -> tuple[str, str]:
    """Split ``owner/name`` into its two parts.

    Raises:
        ValueError: If ``repository`` is not of the form ``owner/name``.
    """

    owner, sep, name = repository.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"repository must be 'owner/name', got {repository!r}")
    return owner, name


@dataclass(slots=True)
class GitHubClient:
    """Authenticated access to one repository's REST endpoints."""

    repository: str
    token: str | None = None
    api_url: str = DEFAULT_API_URL
    session: requests.Session = field(default_factory=requests.Session)

    @classmethod
    def from_environment(cls, repository: str, *, environ: Mapping[str, str] | None = None) -> GitHubClient:
        """Build a client using token and API URL from the environment."""

        split_repository(repository)
        return cls(repository=repository, token=github_token(environ), api_url=github_api_url(environ))

    def headers(self, accept: str = JSON_MEDIA_TYPE) -> dict[str, str]:
        headers = {"Accept": accept}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def url(self, path: str) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.repository}/{path.lstrip('/')}"

    def request(
        self,
        ctx: RunContext,
        method: str,
        path: str,
        *,
        accept: str = JSON_MEDIA_TYPE,
        json: Any = None,
    ) -> requests.Response:
        """Send a request bounded by the run context.

        Raises:
            RunCancelledError: If ``ctx`` is no longer live.
            GitHubAPIError: On transport errors or non-2xx responses.
        """

        ctx.check()
        remaining = ctx.remaining()
        timeout = DEFAULT_REQUEST_TIMEOUT if remaining is None else max(0.01, min(DEFAULT_REQUEST_TIMEOUT, remaining))
        url = self.url(path)
        try:
            response = self.session.request(method, url, headers=self.headers(accept), json=json, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise GitHubAPIError(f"{method} {url} failed: {exc}") from exc
        return response


__all__ = [
    "API_URL_ENV",
    "DEFAULT_API_URL",
    "DIFF_MEDIA_TYPE",
    "GitHubAPIError",
    "GitHubClient",
    "JSON_MEDIA_TYPE",
    "github_api_url",
    "github_token",
    "split_repository",
]
