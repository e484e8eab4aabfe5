import pytest

from catalog_crawler.config import SiteConfig
from tests.helpers import BASE_URL, RecordingSleep


@pytest.fixture
def site():
    return SiteConfig(
        key="testsite",
        name="Test Catalog",
        base_url=BASE_URL,
        catalog_path="brands",
        brand_selector=".brands a",
        device_selector=".devices a",
        device_name_selector="strong span",
        next_page_selector=".nav-pages a",
        title_container_id="product-data",
        title_selector=".device-title",
    )


@pytest.fixture
def no_sleep():
    return RecordingSleep()
