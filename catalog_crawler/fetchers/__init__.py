"""Async fetchers for catalog pages."""

from catalog_crawler.fetchers.base import build_url, HttpFetcher
from catalog_crawler.fetchers.retry import RetryPolicy, RetryExecutor
from catalog_crawler.fetchers.brand_fetcher import BrandDiscoverer
from catalog_crawler.fetchers.listing_fetcher import DeviceEnumerator
from catalog_crawler.fetchers.device_fetcher import DeviceDetailFetcher, DeviceWorkerPool

__all__ = [
    # Base
    "build_url",
    "HttpFetcher",
    # Retry
    "RetryPolicy",
    "RetryExecutor",
    # Brand discovery
    "BrandDiscoverer",
    # Listing pagination
    "DeviceEnumerator",
    # Device details
    "DeviceDetailFetcher",
    "DeviceWorkerPool",
]
