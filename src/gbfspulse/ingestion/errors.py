from __future__ import annotations

from typing import Optional


class GBFSError(RuntimeError):
    """Base class for failures while building a station snapshot."""


class FeedNotFoundError(GBFSError):
    """The discovery document lacks the locale or the named sub-feeds we need."""


class MalformedFeedError(GBFSError):
    """An upstream body could not be read as the expected GBFS JSON object."""


class UpstreamUnavailableError(GBFSError):
    """
    Raised when an upstream fetch does not succeed.

    `status_code` is None for transport failures (timeouts, refused connections).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        reason: str = "",
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.url = url


class EmptyResultError(GBFSError):
    """Upstream returned no stations, or none survived the join."""
