#!/usr/bin/env python3
"""
Batch-checkpointed crawler for hierarchical device catalogs.

Walks brand -> device listing -> device detail, groups brands into fixed-size
batches and writes one checkpoint per completed batch, so an interrupted run
resumes without refetching committed brands.

Usage:
    python main.py [site] [options]

Examples:
    python main.py deviceatlas
    python main.py gsmarena --batch-size 10 --brand-workers 2 --device-workers 3
    python main.py --list-sites
"""

import argparse
import asyncio
import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import aiohttp
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn, TimeRemainingColumn, MofNCompleteColumn

from catalog_crawler.config import CrawlerSettings, DEFAULT_SETTINGS, SiteConfig, get_site_config, list_sites
from catalog_crawler.config.sites import DEFAULT_SITE
from catalog_crawler.exceptions import DiscoveryError, PersistenceError
from catalog_crawler.fetchers import (
    BrandDiscoverer,
    DeviceDetailFetcher,
    DeviceEnumerator,
    DeviceWorkerPool,
    HttpFetcher,
    RetryExecutor,
    RetryPolicy,
)
from catalog_crawler.models import Batch, Brand, DeviceRecord
from catalog_crawler.parsers import CatalogParser
from catalog_crawler.storage import BatchSerializer, CheckpointStore, DataExporter
from catalog_crawler.utils.logging import setup_logging, get_logger

# Rich console for phase headers
console = Console()

logger = get_logger()


def create_progress(disable: bool = False) -> Progress:
    """Create a Rich progress bar with consistent styling"""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("<"),
        TimeRemainingColumn(),
        console=console,
        transient=False,
        disable=disable,
    )


@dataclass
class RunSummary:
    """Outcome of one crawl run."""

    discovered: int = 0
    committed_batches: List[int] = field(default_factory=list)
    committed_brands: List[str] = field(default_factory=list)
    unprocessed_brands: List[str] = field(default_factory=list)
    failed_batches: List[int] = field(default_factory=list)


class CatalogCrawler:
    """Discovers brands, crawls them in batches and checkpoints each batch"""

    def __init__(
        self,
        site: SiteConfig,
        output_dir: str = "data",
        settings: CrawlerSettings = DEFAULT_SETTINGS,
        fetcher=None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        show_progress: bool = True,
    ):
        """
        Args:
            site: Catalog site profile
            output_dir: Root output directory; checkpoints go to <output_dir>/<site key>
            settings: Crawler settings
            fetcher: Transport exposing `async get(url, identity, timeout)`.
                When omitted an aiohttp-backed HttpFetcher is created per run.
            sleep: Coroutine used for retry backoff
            show_progress: Render rich progress bars
        """
        self.site = site
        self.settings = settings
        self.output_dir = Path(output_dir) / site.key
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.store = CheckpointStore(self.output_dir, BatchSerializer(), settings.batch_prefix)
        self.exporter = DataExporter(self.output_dir, site.name)
        self.parser = CatalogParser(site)
        self.policy = RetryPolicy.from_settings(settings)

        self._fetcher = fetcher
        self._sleep = sleep
        self.show_progress = show_progress

        self.processed: set[str] = set()
        self._commit_lock: Optional[asyncio.Lock] = None

    @staticmethod
    def create_batches(brands: Dict[str, str], batch_size: int, first_id: int) -> List[Tuple[int, List[Brand]]]:
        """
        Split brands into consecutive batches of `batch_size`, keeping order.

        The last batch may be shorter. Ids increase from `first_id`.
        """
        batch_size = max(1, batch_size)
        members = [Brand(name=name, listing_url=url) for name, url in brands.items()]
        return [
            (first_id + n, members[i:i + batch_size])
            for n, i in enumerate(range(0, len(members), batch_size))
        ]

    async def run(self, export: bool = False) -> RunSummary:
        """
        Run the complete crawl.

        Raises:
            DiscoveryError: if the brand catalog cannot be fetched
        """
        if self._fetcher is not None:
            summary = await self._crawl(self._fetcher)
        else:
            connector = HttpFetcher.create_connector(self.settings.connection_limit)
            async with aiohttp.ClientSession(connector=connector) as session:
                summary = await self._crawl(HttpFetcher(session, self.settings))

        if export:
            self.exporter.export_all(self.store)
        return summary

    async def _crawl(self, fetcher) -> RunSummary:
        executor = RetryExecutor(fetcher, self.policy, timeout=self.settings.request_timeout, sleep=self._sleep)
        discoverer = BrandDiscoverer(self.site, executor, self.parser)
        enumerator = DeviceEnumerator(executor, self.parser, max_pages=self.settings.max_pages)
        detail_fetcher = DeviceDetailFetcher(executor, self.parser)

        self._commit_lock = asyncio.Lock()
        self.store.discard_partial_writes()
        self.processed = self.store.load_processed()
        logger.info(f"Number of brands done: {len(self.processed)}")

        console.rule("[bold cyan]Phase 1: Discovering Brands")
        brands = await discoverer.discover(frozenset(self.processed))
        summary = RunSummary(discovered=len(brands))
        logger.info(f"Total remaining brands: {len(brands)}")

        if not brands:
            logger.info("All brands already processed!")
            return summary

        batches = self.create_batches(brands, self.settings.brands_per_batch, self.store.next_batch_id())
        logger.info(
            f"Scheduled {len(batches)} batches of up to {self.settings.brands_per_batch} brands "
            f"({self.settings.brand_workers} brand workers x {self.settings.device_workers} device workers)"
        )

        console.rule("[bold green]Phase 2: Crawling Brands")
        brand_semaphore = asyncio.Semaphore(max(1, self.settings.brand_workers))

        with create_progress(disable=not self.show_progress) as progress:
            task = progress.add_task("[yellow]Crawling brands", total=len(brands))

            async def run_brand(batch_id: int, brand: Brand) -> List[DeviceRecord]:
                async with brand_semaphore:
                    try:
                        return await self._process_brand(batch_id, brand, enumerator, detail_fetcher)
                    finally:
                        progress.update(task, advance=1)

            async def run_batch(batch_id: int, members: List[Brand]) -> Optional[Batch]:
                results = await asyncio.gather(
                    *(run_brand(batch_id, b) for b in members),
                    return_exceptions=True
                )
                return await self._commit_batch(batch_id, members, results)

            outcomes = await asyncio.gather(*(run_batch(i, m) for i, m in batches))

        for (batch_id, _), batch in zip(batches, outcomes):
            if batch is None:
                summary.failed_batches.append(batch_id)
            else:
                summary.committed_batches.append(batch_id)
                summary.committed_brands.extend(batch.brand_names)

        summary.unprocessed_brands = [name for name in brands if name not in self.processed]
        return summary

    async def _process_brand(
        self,
        batch_id: int,
        brand: Brand,
        enumerator: DeviceEnumerator,
        detail_fetcher: DeviceDetailFetcher,
    ) -> List[DeviceRecord]:
        """Enumerate one brand's devices and fetch them through a per-brand pool"""
        logger.info(f"Processing Brand: {brand.name} in batch {batch_id}")
        refs = await enumerator.enumerate(brand)

        pool = DeviceWorkerPool(detail_fetcher, self.settings.device_workers)
        records = await pool.run(refs)

        errors = sum(1 for r in records if r.is_error)
        logger.info(f"Completed Brand: {brand.name} - Found {len(records)} devices ({errors} errors)")
        return records

    async def _commit_batch(self, batch_id: int, members: List[Brand], results: list) -> Optional[Batch]:
        """Assemble a batch from brand-task results and checkpoint it"""
        entries: Dict[str, List[DeviceRecord]] = {}
        for brand, result in zip(members, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(f"Error processing brand {brand.name}: {result}")
                continue
            entries[brand.name] = result

        if not entries:
            logger.warning(f"Batch {batch_id} has no completed brands; nothing to checkpoint")
            return None

        batch = Batch(id=batch_id, entries=entries)
        async with self._commit_lock:
            try:
                await asyncio.to_thread(self.store.write, batch)
            except PersistenceError as e:
                logger.error(f"Error writing batch {batch_id}: {e}")
                return None
            self.processed.update(batch.brand_names)

        logger.info(f"Processed brands in batch {batch_id}: {batch.brand_names}")
        return batch


def _apply_overrides(settings: CrawlerSettings, args: argparse.Namespace) -> CrawlerSettings:
    overrides = {
        "brand_workers": args.brand_workers,
        "device_workers": args.device_workers,
        "brands_per_batch": args.batch_size,
        "max_pages": args.max_pages,
        "max_retries": args.max_retries,
        "retry_delay": args.retry_delay,
        "request_timeout": args.timeout,
    }
    return dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Crawl a device catalog into resumable batch checkpoints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py deviceatlas
  python main.py gsmarena --batch-size 10
  python main.py --list-sites
        """
    )

    parser.add_argument("site", nargs="?", default=DEFAULT_SITE, help=f"Site key (default: {DEFAULT_SITE})")
    parser.add_argument("--list-sites", action="store_true", help="List available sites")
    parser.add_argument("--output-dir", default="data", help="Output directory (default: data/)")
    parser.add_argument("--brand-workers", type=int, help="Concurrent brands (default: 2)")
    parser.add_argument("--device-workers", type=int, help="Concurrent devices per brand (default: 4)")
    parser.add_argument("--batch-size", type=int, help="Brands per checkpoint batch (default: 5)")
    parser.add_argument("--max-pages", type=int, help="Listing pages to follow per brand (default: 200)")
    parser.add_argument("--max-retries", type=int, help="Attempts per request (default: 3)")
    parser.add_argument("--retry-delay", type=float, help="Base retry delay in seconds (default: 1.0)")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default: 100)")
    parser.add_argument("--export", action="store_true", help="Merge all batches into devices.json / devices.csv")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging (debug level)")

    args = parser.parse_args(argv)

    if args.list_sites:
        print("\nAvailable sites:")
        print("-" * 60)
        for site in list_sites():
            print(f"{site['key']:15} | {site['name']:12} | {site['base_url']}")
        print("-" * 60)
        return 0

    try:
        site = get_site_config(args.site)
    except ValueError as e:
        print(f"Error: {e}")
        print("\nUse --list-sites to see available sites")
        return 2

    settings = _apply_overrides(DEFAULT_SETTINGS, args)
    crawler = CatalogCrawler(site, args.output_dir, settings=settings)
    setup_logging(crawler.output_dir, verbose=args.verbose)

    logger.info("#" * 60)
    logger.info(f"CATALOG CRAWLER - {site.name}")
    logger.info("#" * 60)
    logger.info(f"Output Directory: {crawler.output_dir}")

    try:
        summary = asyncio.run(crawler.run(export=args.export))
    except DiscoveryError as e:
        logger.error(f"Aborting run: {e}")
        return 1

    logger.info("#" * 60)
    logger.info("CRAWL COMPLETE")
    logger.info("#" * 60)
    logger.info(f"Brands discovered this run: {summary.discovered}")
    logger.info(f"Committed batches: {len(summary.committed_batches)} {summary.committed_batches}")
    logger.info(f"Committed brands: {len(summary.committed_brands)}")
    if summary.failed_batches:
        logger.warning(f"Batches not committed: {summary.failed_batches}")
    if summary.unprocessed_brands:
        logger.warning(f"Brands left for next run ({len(summary.unprocessed_brands)}): {summary.unprocessed_brands}")
    logger.info("#" * 60)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
