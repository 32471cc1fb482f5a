from datetime import datetime
from typing import Protocol


class ViewCounterRepoPort(Protocol):
    """Storage of per-article view counters."""

    def increment_views(self, article_id: int) -> int | None:
        """
        Add one to the article's counter in a single storage-side operation.

        Returns the new count, or None when the article does not exist.
        Raises StorageError on I/O failure.
        """
        ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
