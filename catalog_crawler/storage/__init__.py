"""Storage modules for the catalog crawler."""

from catalog_crawler.storage.checkpoint import BatchSerializer, CheckpointStore
from catalog_crawler.storage.exporter import DataExporter

__all__ = [
    "BatchSerializer",
    "CheckpointStore",
    "DataExporter",
]
