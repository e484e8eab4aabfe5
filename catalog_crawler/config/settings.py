"""
Crawler settings and configuration constants.

This module centralizes all configurable parameters for the crawler,
making it easy to adjust behavior without modifying core logic.
"""

from dataclasses import dataclass


@dataclass
class CrawlerSettings:
    """Configuration settings for the catalog crawler."""

    # Concurrency settings (brand_workers x device_workers bounds in-flight requests)
    brand_workers: int = 2
    device_workers: int = 4
    connection_limit: int = 20

    # Timeout and retry settings
    request_timeout: float = 100.0  # Seconds, per attempt
    max_retries: int = 3
    retry_delay: float = 1.0  # Base delay for linear backoff
    user_agents: tuple[str, ...] = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/15.0 Safari/605.1.15",
        "Mozilla/5.0 (Linux; Android 13; SM-A536B) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/112.0.0.0 Mobile Safari/537.36",
    )
    accept_language: str = "*"

    # Batch / checkpoint settings
    brands_per_batch: int = 5
    batch_prefix: str = "batch"

    # Pagination guard
    max_pages: int = 200


# Default settings instance
DEFAULT_SETTINGS = CrawlerSettings()
