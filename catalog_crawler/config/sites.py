"""
Site profiles for device catalogs.

Each profile holds the base URL and the CSS selectors needed to pull brand
links, device links, pagination pointers and device titles out of a page.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SiteConfig:
    """Configuration for one catalog site"""
    key: str                              # Registry key (used on the CLI)
    name: str                             # Display name
    base_url: str                         # Absolute root every relative href is joined to
    catalog_path: str                     # Path of the brand listing page
    brand_selector: str                   # Links to each brand's device listing
    device_selector: str                  # Links to each device detail page
    device_name_selector: Optional[str] = None  # Sub-element holding the model name
    next_page_selector: Optional[str] = None    # Pagination links (last one is "next")
    title_container_id: Optional[str] = None    # Detail section wrapper
    title_selector: str = "h1"                  # Title inside the detail section


# Known site configurations
SITES = {
    "deviceatlas": SiteConfig(
        key="deviceatlas",
        name="DeviceAtlas",
        base_url="https://deviceatlas.com",
        catalog_path="/device-data/devices/",
        brand_selector=".manufacturer-group ul li a",
        device_selector="#vendor-browser-container div p a",
        title_container_id="product-data",
        title_selector=".device-title",
    ),
    "gsmarena": SiteConfig(
        key="gsmarena",
        name="GSMArena",
        base_url="https://www.gsmarena.com/",
        catalog_path="makers.php3",
        brand_selector="table tbody tr td a",
        device_selector=".makers ul li a",
        device_name_selector="strong span",
        next_page_selector=".nav-pages a",
        title_container_id="body",
        title_selector="h1.specs-phone-name-title",
    ),
}

DEFAULT_SITE = "deviceatlas"


def get_site_config(key: str) -> SiteConfig:
    """
    Look up a site profile by key (case-insensitive).

    Raises:
        ValueError: if the key is not registered
    """
    normalized = key.strip().lower()
    if normalized in SITES:
        return SITES[normalized]
    available = ", ".join(sorted(SITES))
    raise ValueError(f"Unknown site '{key}'. Available: {available}")


def list_sites() -> list[dict]:
    """List all registered sites"""
    return [
        {"key": k, "name": s.name, "base_url": s.base_url}
        for k, s in SITES.items()
    ]
