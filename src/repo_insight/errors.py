"""Error taxonomy shared by the GitHub client, the model client and the CLI."""

from __future__ import annotations


class RepoInsightError(Exception):
    """Base error. The message is meant to be shown to the user as-is."""


class InvalidUrlError(RepoInsightError):
    """The URL does not name a GitHub owner/repo."""


class NotFoundError(RepoInsightError):
    """Repository metadata could not be fetched."""


class AuthError(RepoInsightError):
    """The generative service rejected the API key."""


class RateLimitedError(RepoInsightError):
    """The generative service is rate limiting this key."""


class UpstreamError(RepoInsightError):
    """Unexpected status or payload from a remote service."""
