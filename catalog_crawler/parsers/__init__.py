"""HTML parsers for catalog pages."""

from catalog_crawler.parsers.base import BaseParser
from catalog_crawler.parsers.catalog_parser import CatalogParser, PageLink, UNKNOWN_TITLE

__all__ = [
    "BaseParser",
    "CatalogParser",
    "PageLink",
    "UNKNOWN_TITLE",
]
