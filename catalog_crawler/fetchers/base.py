"""
Base fetcher utilities for async HTTP operations.

Provides URL building and the single-request transport used by RetryExecutor.
"""

import asyncio
from typing import Dict, Optional
from urllib.parse import urljoin

import aiohttp

from catalog_crawler.config import CrawlerSettings, DEFAULT_SETTINGS
from catalog_crawler.exceptions import TransientFetchError


def build_url(base_url: str, path: str) -> str:
    """
    Build an absolute URL from a site root and a (possibly relative) path.

    Args:
        base_url: Site root, e.g. 'https://deviceatlas.com'
        path: Absolute or relative path, or an already absolute URL

    Returns:
        Complete URL string
    """
    return urljoin(base_url, path)


class HttpFetcher:
    """Performs one HTTP GET per call; retries are RetryExecutor's job."""

    def __init__(self, session: aiohttp.ClientSession, settings: CrawlerSettings = DEFAULT_SETTINGS):
        """
        Initialize fetcher.

        Args:
            session: Shared aiohttp session
            settings: Crawler settings (timeouts, headers)
        """
        self.session = session
        self.settings = settings

    def get_headers(self, identity: Optional[str] = None) -> Dict[str, str]:
        """Get HTTP headers for one request."""
        headers = {"Accept-Language": self.settings.accept_language}
        if identity:
            headers["User-Agent"] = identity
        return headers

    async def get(self, url: str, identity: Optional[str] = None, timeout: Optional[float] = None) -> str:
        """
        Fetch a URL once.

        Args:
            url: URL to fetch
            identity: User-Agent to present
            timeout: Total timeout in seconds for this attempt

        Returns:
            Response body text

        Raises:
            TransientFetchError: on timeout, connection failure, non-200 status
                or a body that does not decode in its declared charset
        """
        client_timeout = aiohttp.ClientTimeout(total=timeout or self.settings.request_timeout)
        try:
            async with self.session.get(
                url,
                headers=self.get_headers(identity),
                timeout=client_timeout
            ) as resp:
                if resp.status != 200:
                    raise TransientFetchError(url, f"HTTP {resp.status}", status=resp.status)
                return await resp.text()

        except asyncio.TimeoutError as e:
            raise TransientFetchError(url, "Timeout") from e

        except aiohttp.ClientError as e:
            raise TransientFetchError(url, str(e) or type(e).__name__) from e

        except (UnicodeDecodeError, LookupError) as e:
            raise TransientFetchError(url, f"Undecodable body: {type(e).__name__}") from e

    @staticmethod
    def create_connector(limit: int = DEFAULT_SETTINGS.connection_limit) -> aiohttp.TCPConnector:
        """Create a TCP connector with appropriate limits."""
        return aiohttp.TCPConnector(limit=limit)
