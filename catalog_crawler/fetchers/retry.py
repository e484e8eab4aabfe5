"""
Retry wrapper around single fetches.

Every component that touches the network goes through RetryExecutor, which
applies linear backoff and rotates the request identity between attempts.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import aiohttp

from catalog_crawler.config import CrawlerSettings
from catalog_crawler.exceptions import FetchFailed, TransientFetchError
from catalog_crawler.utils.logging import get_logger

logger = get_logger("retry")

RETRYABLE_ERRORS = (TransientFetchError, aiohttp.ClientError, asyncio.TimeoutError)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try, how long to wait, and which identities to rotate."""

    max_attempts: int = 3
    base_delay: float = 1.0
    identity_pool: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: CrawlerSettings) -> "RetryPolicy":
        return cls(
            max_attempts=max(1, settings.max_retries),
            base_delay=settings.retry_delay,
            identity_pool=tuple(settings.user_agents),
        )

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before a 1-indexed attempt (none before the first)."""
        if attempt <= 1:
            return 0.0
        return self.base_delay * attempt

    def identity_for(self, attempt: int) -> Optional[str]:
        """Identity for a 1-indexed attempt, cycling through the pool."""
        if not self.identity_pool:
            return None
        return self.identity_pool[(attempt - 1) % len(self.identity_pool)]


class RetryExecutor:
    """Bounded retry with linear backoff and identity rotation."""

    def __init__(
        self,
        fetcher,
        policy: RetryPolicy,
        timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            fetcher: Object exposing `async get(url, identity, timeout) -> str`
            policy: Retry policy
            timeout: Per-attempt timeout passed through to the fetcher
            sleep: Coroutine used to wait between attempts
        """
        self.fetcher = fetcher
        self.policy = policy
        self.timeout = timeout
        self._sleep = sleep

    async def execute(self, url: str) -> str:
        """
        Fetch a URL, retrying transport failures.

        Raises:
            FetchFailed: after policy.max_attempts unsuccessful attempts
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self.policy.max_attempts + 1):
            delay = self.policy.delay_before(attempt)
            if delay > 0:
                await self._sleep(delay)

            try:
                return await self.fetcher.get(url, self.policy.identity_for(attempt), self.timeout)
            except RETRYABLE_ERRORS as e:
                last_error = e
                logger.warning(
                    f"Attempt {attempt}/{self.policy.max_attempts} failed for URL {url}: {e}"
                )

        raise FetchFailed(url, self.policy.max_attempts, last_error)
