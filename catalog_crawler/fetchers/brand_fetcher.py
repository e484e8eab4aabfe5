"""
Brand discovery fetcher.

Fetches the brand catalog page and returns the brands not yet committed.
"""

from typing import AbstractSet, Dict

from catalog_crawler.config import SiteConfig
from catalog_crawler.exceptions import DiscoveryError, FetchFailed
from catalog_crawler.fetchers.base import build_url
from catalog_crawler.fetchers.retry import RetryExecutor
from catalog_crawler.parsers import CatalogParser
from catalog_crawler.utils.logging import get_logger

logger = get_logger("discovery")


class BrandDiscoverer:
    """Fetcher for the brand catalog."""

    def __init__(self, site: SiteConfig, executor: RetryExecutor, parser: CatalogParser):
        self.site = site
        self.executor = executor
        self.parser = parser

    @property
    def catalog_url(self) -> str:
        return build_url(self.site.base_url, self.site.catalog_path)

    async def discover(self, processed: AbstractSet[str]) -> Dict[str, str]:
        """
        Discover brands that still need processing.

        Args:
            processed: Names of brands already committed in a checkpoint

        Returns:
            Mapping of brand name -> listing URL, in catalog order

        Raises:
            DiscoveryError: if the catalog page cannot be fetched
        """
        try:
            html = await self.executor.execute(self.catalog_url)
        except FetchFailed as e:
            raise DiscoveryError(f"Brand catalog unavailable: {e}") from e

        brands: Dict[str, str] = {}
        skipped = 0
        for name, url in self.parser.brand_links(html):
            if name in processed:
                skipped += 1
                continue
            # First occurrence wins for duplicated names
            brands.setdefault(name, url)

        logger.info(f"Discovered {len(brands)} unprocessed brands ({skipped} already processed)")
        return brands
