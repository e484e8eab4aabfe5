"""
Device detail fetcher.

Resolves device references into device records, one bounded pool per brand.
"""

import asyncio
from typing import Iterable, List

from catalog_crawler.exceptions import FetchFailed
from catalog_crawler.fetchers.retry import RetryExecutor
from catalog_crawler.models import DeviceRecord, DeviceReference
from catalog_crawler.parsers import CatalogParser
from catalog_crawler.utils.logging import get_logger

logger = get_logger("devices")


class DeviceDetailFetcher:
    """Fetcher for device detail pages. Never raises; failures become records."""

    def __init__(self, executor: RetryExecutor, parser: CatalogParser):
        self.executor = executor
        self.parser = parser

    async def fetch(self, ref: DeviceReference) -> DeviceRecord:
        """
        Fetch and parse one device detail page.

        Args:
            ref: Device reference from a listing page

        Returns:
            DeviceRecord with the display title, or an error record
        """
        try:
            html = await self.executor.execute(ref.detail_url)
            return DeviceRecord.ok(ref.model, self.parser.device_title(html))
        except FetchFailed as e:
            logger.debug(f"Error fetching device {ref.model}: {e}")
            return DeviceRecord.failed(ref.model, "Unable to fetch device page")
        except Exception as e:
            logger.warning(f"Error processing device {ref.model}: {e}")
            return DeviceRecord.failed(ref.model, str(e) or type(e).__name__)


class DeviceWorkerPool:
    """Bounded fan-out of DeviceDetailFetcher over one brand's devices."""

    def __init__(self, fetcher: DeviceDetailFetcher, workers: int = 4):
        self.fetcher = fetcher
        self.workers = max(1, workers)

    async def run(self, refs: Iterable[DeviceReference]) -> List[DeviceRecord]:
        """
        Fetch every reference with at most `workers` in flight.

        Returns:
            Records in completion order, one per reference
        """
        refs = list(refs)
        if not refs:
            return []

        # Scoped to this call: each brand gets a fresh pool
        semaphore = asyncio.Semaphore(self.workers)

        async def fetch_with_semaphore(ref: DeviceReference) -> DeviceRecord:
            async with semaphore:
                return await self.fetcher.fetch(ref)

        records: List[DeviceRecord] = []
        for next_done in asyncio.as_completed([fetch_with_semaphore(r) for r in refs]):
            records.append(await next_done)

        return records
