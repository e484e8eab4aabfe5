"""
Device listing fetcher.

Walks a brand's paginated device listing and collects device references.
"""

from catalog_crawler.exceptions import FetchFailed
from catalog_crawler.fetchers.retry import RetryExecutor
from catalog_crawler.models import Brand, DeviceReference
from catalog_crawler.parsers import CatalogParser
from catalog_crawler.utils.logging import get_logger

logger = get_logger("listing")


class DeviceEnumerator:
    """Follows a brand's pagination chain iteratively, up to a page ceiling."""

    def __init__(self, executor: RetryExecutor, parser: CatalogParser, max_pages: int = 200):
        self.executor = executor
        self.parser = parser
        self.max_pages = max(1, max_pages)

    async def enumerate(self, brand: Brand) -> list[DeviceReference]:
        """
        Collect device references across every listing page of a brand.

        The first page must be fetched; its failure raises FetchFailed so
        the brand is retried on a later run. A failure further down the
        chain ends the walk and keeps what was collected so far.

        Returns:
            Device references in page order
        """
        references: list[DeviceReference] = []
        visited: set[str] = set()
        url = brand.listing_url
        pages = 0

        while url and pages < self.max_pages:
            try:
                html = await self.executor.execute(url)
            except FetchFailed as e:
                if pages == 0:
                    raise
                logger.warning(
                    f"Stopping pagination for {brand.name} at page {pages + 1}: {e}"
                )
                break

            visited.add(url)
            pages += 1

            for model, detail_url in self.parser.device_links(html):
                references.append(DeviceReference(model=model, detail_url=detail_url, brand=brand))

            link = self.parser.next_page_link(html)
            if link is None or link.is_terminal:
                break
            if link.url in visited:
                logger.debug(f"Pagination cycle for {brand.name} at {link.url}")
                break
            url = link.url
        else:
            if url and pages >= self.max_pages:
                logger.warning(f"Page limit ({self.max_pages}) reached for {brand.name}")

        logger.debug(f"{brand.name}: {len(references)} devices across {pages} pages")
        return references
