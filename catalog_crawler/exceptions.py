"""
Exception hierarchy for the catalog crawler.

Hierarchy:
    CrawlerError (base)
    ├── TransientFetchError   # One failed network attempt; retryable
    ├── FetchFailed           # All retry attempts exhausted for a URL
    ├── DiscoveryError        # Brand catalog unreachable; run-fatal
    └── PersistenceError      # Batch checkpoint could not be written or read

Device and brand failures are not exceptions at the orchestration level:
device failures become error records, brand failures are logged and the
brand stays unprocessed.
"""

from typing import Optional


class CrawlerError(Exception):
    """Base exception for all crawler errors."""


class TransientFetchError(CrawlerError):
    """A single fetch attempt failed (timeout, connection error, bad status)."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason
        self.status = status


class FetchFailed(CrawlerError):
    """Every retry attempt for a URL failed."""

    def __init__(self, url: str, attempts: int, last_error: Optional[Exception] = None):
        message = f"Failed to fetch {url} after {attempts} attempts"
        if last_error is not None:
            message += f": {last_error}"
        super().__init__(message)
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class DiscoveryError(CrawlerError):
    """The brand catalog could not be retrieved; nothing else can be derived."""


class PersistenceError(CrawlerError):
    """A batch checkpoint could not be persisted or loaded."""

    def __init__(self, message: str, batch_id: Optional[int] = None):
        super().__init__(message)
        self.batch_id = batch_id
