import csv
import os
import threading

import pytest

from catalog_crawler.config import CrawlerSettings
from catalog_crawler.crawler import CatalogCrawler, main
from catalog_crawler.exceptions import DiscoveryError

from tests.helpers import FakeFetcher, build_catalog, url


def make_crawler(site, tmp_path, fetcher, no_sleep, **overrides):
    settings = CrawlerSettings(retry_delay=0.1, **overrides)
    return CatalogCrawler(
        site, str(tmp_path), settings=settings, fetcher=fetcher,
        sleep=no_sleep, show_progress=False,
    )


def test_create_batches_flushes_short_trailing_batch():
    brands = {f"B{i}": url(f"b{i}") for i in range(1, 7)}
    batches = CatalogCrawler.create_batches(brands, batch_size=5, first_id=4)

    assert [batch_id for batch_id, _ in batches] == [4, 5]
    assert [b.name for b in batches[0][1]] == ["B1", "B2", "B3", "B4", "B5"]
    assert [b.name for b in batches[1][1]] == ["B6"]


def test_create_batches_empty():
    assert CatalogCrawler.create_batches({}, batch_size=5, first_id=1) == []


@pytest.mark.asyncio
async def test_six_brands_make_two_checkpoints(site, tmp_path, no_sleep):
    catalog = {f"Brand {i}": [f"M{i}"] for i in range(1, 7)}
    crawler = make_crawler(site, tmp_path, FakeFetcher(build_catalog(catalog)), no_sleep, brands_per_batch=5)

    summary = await crawler.run()

    assert crawler.store.list_existing() == [1, 2]
    assert len(crawler.store.read(1).entries) == 5
    assert crawler.store.read(2).brand_names == ["Brand 6"]
    assert sorted(summary.committed_batches) == [1, 2]
    assert summary.unprocessed_brands == []
    assert crawler.processed == set(catalog)


@pytest.mark.asyncio
async def test_failed_device_is_recorded_without_dropping_brand(site, tmp_path, no_sleep):
    pages = build_catalog({"A": ["rec1", "rec2"], "B": ["rec1", "rec2"], "C": ["rec1", "rec2"]})
    fetcher = FakeFetcher(pages, failing={url("b/rec2")})
    crawler = make_crawler(site, tmp_path, fetcher, no_sleep)

    summary = await crawler.run()

    batch = crawler.store.read(1)
    assert batch.brand_names == ["A", "B", "C"]
    for name in ("A", "C"):
        assert sorted((r.model, r.status) for r in batch.entries[name]) == [("rec1", "ok"), ("rec2", "ok")]
    b_records = {r.model: r for r in batch.entries["B"]}
    assert b_records["rec1"].display_name == "B rec1"
    assert b_records["rec2"].is_error
    assert crawler.store.load_processed() == {"A", "B", "C"}
    assert summary.committed_brands == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_undecodable_device_page_does_not_block_brand_commit(site, tmp_path, no_sleep):
    pages = build_catalog({"A": ["rec1", "rec2"], "B": ["rec1", "rec2"], "C": ["rec1", "rec2"]})
    garbled = UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
    fetcher = FakeFetcher(pages, raising={url("b/rec2"): garbled})
    crawler = make_crawler(site, tmp_path, fetcher, no_sleep)

    summary = await crawler.run()

    assert summary.committed_brands == ["A", "B", "C"]
    assert summary.unprocessed_brands == []
    b_records = {r.model: r for r in crawler.store.read(1).entries["B"]}
    assert b_records["rec1"].status == "ok"
    assert b_records["rec2"].is_error
    assert crawler.store.load_processed() == {"A", "B", "C"}


@pytest.mark.asyncio
async def test_failed_brand_is_isolated_and_retried_next_run(site, tmp_path, no_sleep):
    pages = build_catalog({"A": ["a1"], "B": ["b1"], "C": ["c1"]})
    first = make_crawler(site, tmp_path, FakeFetcher(pages, failing={url("b-phones")}), no_sleep)

    summary = await first.run()

    assert first.store.read(1).brand_names == ["A", "C"]
    assert summary.unprocessed_brands == ["B"]

    second_fetcher = FakeFetcher(pages)
    second = make_crawler(site, tmp_path, second_fetcher, no_sleep)
    summary = await second.run()

    assert summary.committed_batches == [2]
    assert second.store.read(2).brand_names == ["B"]
    assert url("a-phones") not in second_fetcher.urls_called()
    assert second.store.load_processed() == {"A", "B", "C"}


@pytest.mark.asyncio
async def test_resume_skips_everything_when_all_committed(site, tmp_path, no_sleep):
    pages = build_catalog({"A": ["a1"], "B": ["b1"]})
    await make_crawler(site, tmp_path, FakeFetcher(pages), no_sleep).run()

    fetcher = FakeFetcher(pages)
    crawler = make_crawler(site, tmp_path, fetcher, no_sleep)
    summary = await crawler.run()

    assert summary.discovered == 0
    assert summary.committed_batches == []
    assert fetcher.urls_called() == [url("brands")]
    assert crawler.store.list_existing() == [1]


@pytest.mark.asyncio
async def test_failed_checkpoint_leaves_brands_unprocessed(site, tmp_path, no_sleep, monkeypatch):
    catalog = {f"Brand {i}": [f"M{i}"] for i in range(1, 5)}
    pages = build_catalog(catalog)
    crawler = make_crawler(site, tmp_path, FakeFetcher(pages), no_sleep, brands_per_batch=2, brand_workers=1)

    real_replace = os.replace
    writes = []

    def replace_failing_second(src, dst):
        writes.append(dst)
        if len(writes) == 2:
            raise OSError("disk full")
        return real_replace(src, dst)

    monkeypatch.setattr(os, "replace", replace_failing_second)
    summary = await crawler.run()
    monkeypatch.undo()

    assert len(summary.committed_batches) == 1
    assert len(summary.failed_batches) == 1
    committed = crawler.store.read(summary.committed_batches[0]).brand_names
    assert len(committed) == 2
    assert sorted(summary.unprocessed_brands) == sorted(set(catalog) - set(committed))

    restarted = make_crawler(site, tmp_path, FakeFetcher(pages), no_sleep, brands_per_batch=2)
    assert restarted.store.load_processed() == set(committed)
    summary = await restarted.run()
    assert summary.unprocessed_brands == []
    assert restarted.store.load_processed() == set(catalog)


@pytest.mark.asyncio
async def test_run_discards_stale_temp_files(site, tmp_path, no_sleep):
    crawler = make_crawler(site, tmp_path, FakeFetcher(build_catalog({"A": ["a1"]})), no_sleep)
    stale = crawler.output_dir / ".batch_1.q8w7e6.tmp"
    stale.write_text('{"batch_id": 1', encoding="utf-8")

    await crawler.run()

    assert not stale.exists()
    assert crawler.store.list_existing() == [1]


@pytest.mark.asyncio
async def test_checkpoint_write_runs_off_event_loop_thread(site, tmp_path, no_sleep, monkeypatch):
    crawler = make_crawler(site, tmp_path, FakeFetcher(build_catalog({"A": ["a1"], "B": ["b1"]})), no_sleep)
    real_write = crawler.store.write
    writer_threads = []

    def recording_write(batch):
        writer_threads.append(threading.current_thread())
        return real_write(batch)

    monkeypatch.setattr(crawler.store, "write", recording_write)
    summary = await crawler.run()

    assert summary.committed_batches == [1]
    assert writer_threads and threading.main_thread() not in writer_threads


@pytest.mark.asyncio
async def test_brand_workers_bound_concurrent_requests(site, tmp_path, no_sleep):
    catalog = {f"Brand {i}": [f"M{i}-{k}" for k in range(4)] for i in range(1, 7)}
    fetcher = FakeFetcher(build_catalog(catalog), delay=0.005)
    crawler = make_crawler(
        site, tmp_path, fetcher, no_sleep,
        brands_per_batch=3, brand_workers=2, device_workers=2,
    )

    await crawler.run()

    assert fetcher.max_in_flight <= 4
    assert crawler.store.load_processed() == set(catalog)


@pytest.mark.asyncio
async def test_unreachable_catalog_aborts_without_checkpoints(site, tmp_path, no_sleep):
    crawler = make_crawler(site, tmp_path, FakeFetcher(failing={url("brands")}), no_sleep)
    with pytest.raises(DiscoveryError):
        await crawler.run()
    assert crawler.store.list_existing() == []


@pytest.mark.asyncio
async def test_export_merges_batches(site, tmp_path, no_sleep):
    pages = build_catalog({"A": ["a1", "a2"], "B": ["b1"]})
    fetcher = FakeFetcher(pages, failing={url("a/a2")})
    crawler = make_crawler(site, tmp_path, fetcher, no_sleep, brands_per_batch=1)

    await crawler.run(export=True)

    with open(crawler.output_dir / "devices.csv", newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert sorted((r["brand"], r["model"], r["status"]) for r in rows) == [
        ("A", "a1", "ok"), ("A", "a2", "error"), ("B", "b1", "ok"),
    ]
    assert (crawler.output_dir / "devices.json").exists()


def test_cli_lists_sites(capsys):
    assert main(["--list-sites"]) == 0
    out = capsys.readouterr().out
    assert "deviceatlas" in out
    assert "gsmarena" in out


def test_cli_rejects_unknown_site(capsys):
    assert main(["nosuchsite"]) == 2
    assert "Unknown site" in capsys.readouterr().out
