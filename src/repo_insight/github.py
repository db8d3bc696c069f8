"""GitHub REST client. Anonymous, read-only, no retries.

Only the metadata fetch is allowed to fail loudly. Listings, languages and
file contents are best-effort: failures are logged and turned into empty
results so one unreadable directory cannot sink a whole analysis.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import NotFoundError, UpstreamError
from .logging import get_logger

GITHUB_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListingResult:
    """One directory listing.

    ``failed`` separates "empty because the fetch failed" from
    "empty because the directory is empty".
    """

    entries: tuple[dict[str, Any], ...] = ()
    failed: bool = False
    error: str = ""

    @classmethod
    def failure(cls, error: str) -> "ListingResult":
        return cls(failed=True, error=error)


class GitHubClient:
    """Client for the repository host API."""

    def __init__(
        self,
        base_url: str = GITHUB_API_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout,
            headers={"Accept": "application/vnd.github+json"},
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _repo_url(self, owner: str, repo: str, suffix: str = "") -> str:
        return f"{self.base_url}/repos/{owner}/{repo}{suffix}"

    def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        """Fetch repository metadata. Raises on anything but 200."""
        url = self._repo_url(owner, repo)
        logger.debug("GET %s", url)
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Cannot reach GitHub: {e}")

        if resp.status_code == 404:
            raise NotFoundError(
                f"Repository {owner}/{repo} not found or not accessible"
            )
        if resp.status_code != 200:
            raise UpstreamError(
                f"GitHub returned {resp.status_code} for {owner}/{repo}: {resp.text[:200]}"
            )
        try:
            data = resp.json()
        except ValueError:
            raise UpstreamError(f"GitHub returned invalid JSON for {owner}/{repo}")
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected metadata payload for {owner}/{repo}")
        return data

    def get_languages(self, owner: str, repo: str) -> list[str]:
        """Language names by declared byte count order. Empty on failure."""
        url = self._repo_url(owner, repo, "/languages")
        logger.debug("GET %s", url)
        try:
            resp = self._client.get(url)
            if resp.status_code != 200:
                logger.warning("Language breakdown unavailable (%s)", resp.status_code)
                return []
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Language breakdown unavailable: %s", e)
            return []
        if not isinstance(data, dict):
            return []
        return [str(lang) for lang in data]

    def list_directory(self, owner: str, repo: str, path: str = "") -> ListingResult:
        """List one directory. Never raises."""
        url = self._repo_url(owner, repo, f"/contents/{path}")
        logger.debug("GET %s", url)
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as e:
            return ListingResult.failure(str(e) or type(e).__name__)

        if resp.status_code != 200:
            return ListingResult.failure(f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError:
            return ListingResult.failure("invalid JSON")
        if not isinstance(data, list):
            # A file path returns an object, not a listing
            return ListingResult.failure("not a directory listing")
        return ListingResult(entries=tuple(e for e in data if isinstance(e, dict)))

    def get_file_content(self, owner: str, repo: str, path: str) -> str | None:
        """Fetch and decode a file. None when it cannot be read."""
        url = self._repo_url(owner, repo, f"/contents/{path}")
        logger.debug("GET %s", url)
        try:
            resp = self._client.get(url)
            if resp.status_code != 200:
                logger.warning("Skipping sample %s (HTTP %s)", path, resp.status_code)
                return None
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Skipping sample %s: %s", path, e)
            return None

        encoded = data.get("content") if isinstance(data, dict) else None
        if not isinstance(encoded, str):
            logger.warning("Skipping sample %s: no content in payload", path)
            return None
        return decode_content(encoded)


def decode_content(encoded: str) -> str | None:
    """Decode the API's base64 content (wrapped at 60 chars) to text."""
    try:
        raw = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError):
        return None
    return raw.decode("utf-8", errors="replace")
