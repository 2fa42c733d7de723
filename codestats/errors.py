from __future__ import annotations


class CodestatsError(Exception):
    """Base class for errors raised by the aggregation engine."""


class UserNotFound(CodestatsError, LookupError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class StorageFailure(CodestatsError):
    """A profile document could not be read or written."""


class SourceUnavailable(CodestatsError):
    """Raised by an adapter's parse step when a response carries no usable stats.

    Never escapes ``BaseAdapter.run``; it is recorded on the FetchResult."""


class SyncAborted(CodestatsError):
    """The fetch pool was shut down before a sync could run; nothing was stored."""
