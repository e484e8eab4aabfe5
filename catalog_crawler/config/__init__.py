"""Configuration module for the catalog crawler."""

from catalog_crawler.config.settings import CrawlerSettings, DEFAULT_SETTINGS
from catalog_crawler.config.sites import SiteConfig, SITES, get_site_config, list_sites

__all__ = [
    "CrawlerSettings",
    "DEFAULT_SETTINGS",
    "SiteConfig",
    "SITES",
    "get_site_config",
    "list_sites",
]
