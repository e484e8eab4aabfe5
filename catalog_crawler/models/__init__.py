"""Data models for the catalog crawler."""

from catalog_crawler.models.catalog import (
    Brand,
    DeviceReference,
    DeviceRecord,
    Batch,
    STATUS_OK,
    STATUS_ERROR,
)

__all__ = [
    "Brand",
    "DeviceReference",
    "DeviceRecord",
    "Batch",
    "STATUS_OK",
    "STATUS_ERROR",
]
