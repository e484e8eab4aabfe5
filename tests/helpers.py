import asyncio

from catalog_crawler.exceptions import TransientFetchError


BASE_URL = "https://catalog.test/"


class FakeFetcher:
    """In-memory transport: serves canned pages, fails listed URLs."""

    def __init__(self, pages=None, failing=None, delay=0.0, raising=None):
        self.pages = dict(pages or {})
        self.failing = set(failing or ())
        # url -> exception raised as-is, bypassing the transient-error mapping
        self.raising = dict(raising or {})
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get(self, url, identity=None, timeout=None):
        self.calls.append((url, identity, timeout))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if url in self.raising:
                raise self.raising[url]
            if url in self.failing:
                raise TransientFetchError(url, "HTTP 503", status=503)
            if url not in self.pages:
                raise TransientFetchError(url, "HTTP 404", status=404)
            return self.pages[url]
        finally:
            self.in_flight -= 1

    def urls_called(self):
        return [c[0] for c in self.calls]


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def url(path):
    return BASE_URL + path


def catalog_page(brands):
    links = "".join(f'<li><a href="{href}">{name}</a></li>' for name, href in brands)
    return f'<html><body><div class="brands"><ul>{links}</ul></div></body></html>'


def listing_page(devices, next_href=None, terminal=False):
    items = "".join(
        f'<li><a href="{href}"><strong><span>{name}</span></strong></a></li>'
        for name, href in devices
    )
    nav = ""
    if next_href:
        nav = f'<div class="nav-pages"><strong>1</strong><a href="{next_href}" title="Next page">►</a></div>'
    elif terminal:
        nav = '<div class="nav-pages"><a href="prev.php">1</a><a href="#">►</a></div>'
    return f'<html><body><div class="devices"><ul>{items}</ul></div>{nav}</body></html>'


def detail_page(title):
    return (
        '<html><body><div id="product-data">'
        f'<h1 class="device-title">{title}</h1>'
        '</div></body></html>'
    )


def build_catalog(brands):
    """
    Build pages for a single-page-per-brand catalog.

    Args:
        brands: mapping brand name -> list of model names

    Returns:
        dict of url -> html
    """
    pages = {}
    links = []
    for name, models in brands.items():
        slug = name.lower().replace(" ", "-")
        links.append((name, f"{slug}-phones"))
        devices = [(m, f"{slug}/{m.lower().replace(' ', '-')}") for m in models]
        pages[url(f"{slug}-phones")] = listing_page(devices, terminal=True)
        for model, href in devices:
            pages[url(href)] = detail_page(f"{name} {model}")
    pages[url("brands")] = catalog_page(links)
    return pages


