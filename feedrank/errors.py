"""Exception types raised by the feed pipeline."""

from __future__ import annotations


class FeedError(Exception):
    """Base class for feed errors."""


class ClientInputError(FeedError):
    """The request is malformed; nothing was queried or cached."""


class MissingTagError(ClientInputError):
    def __init__(self) -> None:
        super().__init__("missing tag param")


class FeedQueryError(FeedError):
    """A storage or tag lookup failed while building a feed."""

    def __init__(self, shape: str, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.shape = shape
        self.cause = cause
