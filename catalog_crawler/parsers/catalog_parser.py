"""
Catalog HTML parser.

Extracts brand links, device links, pagination pointers and device titles
from catalog pages, using the selectors of a SiteConfig.
"""

from dataclasses import dataclass
from typing import Optional

from catalog_crawler.config import SiteConfig
from catalog_crawler.parsers.base import BaseParser

UNKNOWN_TITLE = "Unknown"

# Text of the closing pagination arrow
NEXT_ARROW = "►"


@dataclass(frozen=True)
class PageLink:
    """A pagination control link as found on a listing page."""

    url: str
    href: str
    text: str = ""
    has_label: bool = False

    @property
    def is_terminal(self) -> bool:
        """
        True for the "end of pagination" marker.

        On the last page the trailing arrow points at the page itself ("#")
        and carries no title attribute.
        """
        return self.href == "#" and not self.has_label and self.text == NEXT_ARROW


class CatalogParser(BaseParser):
    """Parser for brand catalog, device listing and device detail pages."""

    def __init__(self, site: SiteConfig):
        self.site = site

    def brand_links(self, html: str) -> list[tuple[str, str]]:
        """
        Extract (brand name, absolute listing URL) pairs from the catalog page.

        Links without text or href are skipped.
        """
        soup = self.make_soup(html)
        links = []
        for element in soup.select(self.site.brand_selector):
            name = self.get_text_safe(element)
            href = self.get_href(element)
            if name and href:
                links.append((name, self.absolute_url(self.site.base_url, href)))
        return links

    def device_links(self, html: str) -> list[tuple[str, str]]:
        """Extract (model name, absolute detail URL) pairs from a listing page."""
        soup = self.make_soup(html)
        links = []
        for element in soup.select(self.site.device_selector):
            href = self.get_href(element)
            if not href:
                continue
            name = ""
            if self.site.device_name_selector:
                name = self.get_text_safe(element.select_one(self.site.device_name_selector))
            if not name:
                name = self.get_text_safe(element)
            if name:
                links.append((name, self.absolute_url(self.site.base_url, href)))
        return links

    def next_page_link(self, html: str) -> Optional[PageLink]:
        """
        Return the last pagination link on a listing page.

        Returns None when the site has no pagination or the page has no
        pagination links. The caller checks PageLink.is_terminal.
        """
        if not self.site.next_page_selector:
            return None

        soup = self.make_soup(html)
        candidates = soup.select(self.site.next_page_selector)
        if not candidates:
            return None

        element = candidates[-1]
        href = self.get_href(element)
        if not href:
            return None

        return PageLink(
            url=self.absolute_url(self.site.base_url, href),
            href=href,
            text=self.get_text_safe(element),
            has_label=element.has_attr("title"),
        )

    def device_title(self, html: str) -> str:
        """Extract the device display title, or UNKNOWN_TITLE when absent."""
        soup = self.make_soup(html)

        scope = soup
        if self.site.title_container_id:
            scope = soup.find(id=self.site.title_container_id)
            if scope is None:
                return UNKNOWN_TITLE

        title = self.get_text_safe(scope.select_one(self.site.title_selector))
        return title or UNKNOWN_TITLE
