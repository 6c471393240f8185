"""Custom exception hierarchy for pyrtdb."""

from __future__ import annotations


class RtdbError(Exception):
    """Base exception for all pyrtdb errors."""


class RtdbConfigError(RtdbError):
    """Invalid or missing configuration."""


class RtdbQueryParamError(RtdbConfigError):
    """A query parameter could not be parsed."""


class RtdbFetchError(RtdbError):
    """A one-shot fetch (``once`` or ``first_child``) failed.

    The remote error is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        event: str = "",
    ) -> None:
        self.path = path
        self.event = event
        super().__init__(message)


class RtdbPopulateError(RtdbError):
    """The population resolver failed for a watched path."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class RtdbQueryError(RtdbFetchError):
    """The remote store adapter rejected the query before anything was fetched."""
