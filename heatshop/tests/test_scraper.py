"""Tests for fetching, retry behaviour and the scrape loop."""

from unittest.mock import MagicMock, call, patch

import pytest
import requests

from conftest import BARE_PAGE, FakeSession, category_page, make_response, product_page
from heatshop.config import BASE_URL, get_category
from heatshop.html_utils import DEFAULT_NAME

PRODUCT_URL = f"{BASE_URL}/infrared-heaters/aurora-panel-450w"


@pytest.fixture
def no_sleep():
    with patch("heatshop.scraper.time.sleep") as sleep:
        yield sleep


def scripted_session(*responses) -> MagicMock:
    session = MagicMock()
    session.get.side_effect = list(responses)
    return session


class TestFetchHtml:
    def test_success_waits_the_polite_delay(self, make_scraper, no_sleep):
        session = FakeSession({PRODUCT_URL: "<html>ok</html>"})
        scraper = make_scraper(session, delay=2.0)

        assert scraper.fetch_html(PRODUCT_URL) == "<html>ok</html>"
        assert session.calls == [PRODUCT_URL]
        assert no_sleep.call_args_list == [call(2.0)]
        assert scraper.statistics.successful_requests == 1
        assert scraper.errors == []

    def test_gives_up_after_max_retries(self, make_scraper, no_sleep):
        session = FakeSession()
        scraper = make_scraper(session, delay=2.0, retry_delay=4.0, max_retries=3)

        assert scraper.fetch_html(PRODUCT_URL) is None
        # one attempt plus three retries, never a fifth
        assert len(session.calls) == 4
        assert no_sleep.call_args_list == [call(4.0)] * 3

        assert len(scraper.errors) == 1
        error = scraper.errors[0]
        assert error.step == "request"
        assert error.url == PRODUCT_URL
        assert error.retry_count == 3
        assert "Failed to connect" in error.error

        stats = scraper.statistics
        assert (stats.total_requests, stats.failed_requests, stats.successful_requests) == (4, 4, 0)

    def test_retry_then_success(self, make_scraper, no_sleep):
        session = scripted_session(
            requests.exceptions.ConnectionError("reset"),
            make_response("<html>second time</html>"),
        )
        scraper = make_scraper(session, delay=1.0, retry_delay=2.0)

        assert scraper.fetch_html(PRODUCT_URL) == "<html>second time</html>"
        assert session.get.call_count == 2
        assert no_sleep.call_args_list == [call(2.0), call(1.0)]
        assert scraper.errors == []

    def test_server_error_status_is_retried(self, make_scraper, no_sleep):
        session = scripted_session(make_response("", 503), make_response("<html>ok</html>"))
        scraper = make_scraper(session)

        assert scraper.fetch_html(PRODUCT_URL) == "<html>ok</html>"
        assert scraper.statistics.failed_requests == 1

    def test_timeout_is_passed(self, make_scraper, no_sleep):
        session = scripted_session(make_response("<html></html>"))
        make_scraper(session).fetch_html(PRODUCT_URL)
        assert session.get.call_args == call(PRODUCT_URL, timeout=15)

    def test_retries_disabled(self, make_scraper, no_sleep):
        session = FakeSession()
        scraper = make_scraper(session, retry_failed_requests=False)

        assert scraper.fetch_html(PRODUCT_URL) is None
        assert len(session.calls) == 1
        assert no_sleep.call_count == 0
        assert scraper.errors[0].retry_count == 0

    @pytest.mark.parametrize("url", [
        "https://other-shop.example.com/infrared-heaters/panel",
        "ftp://www.heatershop.co.uk/file",
        "javascript:alert(1)",
    ])
    def test_rejected_urls_are_never_requested(self, make_scraper, no_sleep, url):
        session = FakeSession()
        scraper = make_scraper(session)

        assert scraper.fetch_html(url) is None
        assert session.calls == []
        assert [e.step for e in scraper.errors] == ["url_validation"]
        assert scraper.statistics.total_requests == 0

    def test_default_retry_delay_is_twice_the_delay(self, make_scraper):
        scraper = make_scraper(delay=1.5, retry_delay=None)
        assert scraper.retry_delay == 3.0


class TestBuildProduct:
    def test_sample_product(self, sample_product):
        product = sample_product
        assert product.id == "herschel-select-xl-600w-infrared-panel"
        assert product.name == "Herschel Select XL 600W Infrared Panel"
        assert product.path == "/infrared-heaters/panel-heaters/herschel-select-xl-600w-infrared-panel"
        assert product.category == "Panel Heaters"
        assert product.base_price == 349.99
        assert product.price_range["min"] == 279.99
        assert product.price_range["base"] == 349.99
        assert product.power_category == "Medium Power (400-800W)"
        assert product.efficiency == "A+ Energy Rating"
        assert product.coverage == "12m²"
        assert product.warranty == "5 year warranty"
        assert product.availability == "In Stock"
        assert product.manufacturer == "Herschel"
        assert product.has_datasheet is True
        assert len(product.images) == 2
        assert product.topics == ["/infrared-heaters/panel-heaters"]
        assert product.generated_fields == ["stock"]

    def test_sample_product_variants(self, sample_product):
        variants = sample_product.variants
        assert [v.sku for v in variants] == ["HER-600W", "HER-400W", "HER-900W"]
        assert variants[0].is_default
        assert variants[0].price == 349.99
        assert variants[1].price == round(349.99 * 400 / 600, 2)

    def test_generated_fields_are_listed(self, make_scraper, panel_category):
        product = make_scraper().build_product(BARE_PAGE, PRODUCT_URL, panel_category)

        assert product.name == DEFAULT_NAME
        assert 200 <= product.base_price <= 700
        assert product.generated_fields == [
            "price", "description", "features", "warranty",
            "wattage", "dimensions", "weight", "stock",
        ]
        # placeholder specs go to the CMS components, never the scraped specs
        assert product.specifications.wattage is None
        assert product.components["specifications"]["chunks"][0]["wattage"] is not None
        assert [v.name for v in product.variants] == ["350W", "550W", "900W"]

    def test_invalid_product_dropped_without_fallback(self, make_scraper, panel_category):
        scraper = make_scraper(generate_fallback_data=False)
        assert scraper.build_product(BARE_PAGE, PRODUCT_URL, panel_category) is None

    def test_extraction_error_is_recorded(self, make_scraper, panel_category, no_sleep):
        scraper = make_scraper(FakeSession({PRODUCT_URL: "<html></html>"}))
        with patch.object(scraper, "build_product", side_effect=ValueError("bad markup")):
            assert scraper.scrape_product(PRODUCT_URL, panel_category) is None

        assert scraper.errors[0].step == "product_extraction"
        assert scraper.errors[0].error == "bad markup"


class TestScrapeRun:
    @pytest.fixture
    def site(self, panel_category):
        return {
            BASE_URL + panel_category.path: category_page([
                "/infrared-heaters/aurora-panel-450w",
                "/infrared-heaters/solus-panel-600w",
                "/infrared-heaters/broken-panel-900w",
            ]),
            PRODUCT_URL: product_page("Aurora Panel Heater 450W", "289.00", 450),
            f"{BASE_URL}/infrared-heaters/solus-panel-600w": product_page(
                "Solus Panel Heater 600W", "1,049.50", 600
            ),
        }

    def test_unreachable_product_is_skipped(self, make_scraper, panel_category, site, no_sleep):
        scraper = make_scraper(FakeSession(site))
        products = scraper.scrape_products([panel_category])

        assert [p.name for p in products] == ["Aurora Panel Heater 450W", "Solus Panel Heater 600W"]
        assert [p.base_price for p in products] == [289.0, 1049.5]
        assert len(scraper.errors) == 1
        assert scraper.errors[0].url == f"{BASE_URL}/infrared-heaters/broken-panel-900w"

        stats = scraper.statistics
        assert stats.products_extracted == 2
        assert stats.categories_processed == 1
        # category page + 2 products + 4 attempts at the broken one
        assert stats.total_requests == 7

    def test_max_products_stops_the_run(self, make_scraper, panel_category, site, no_sleep):
        session = FakeSession(site)
        scraper = make_scraper(session, max_products=1)
        products = scraper.scrape_products([panel_category, get_category("Patio Heaters")])

        assert len(products) == 1
        assert session.calls == [BASE_URL + panel_category.path, PRODUCT_URL]
        assert scraper.statistics.categories_processed == 1

    def test_urls_per_category_cap(self, make_scraper, panel_category, site, no_sleep):
        scraper = make_scraper(FakeSession(site), max_urls_per_category=1)
        assert len(scraper.extract_product_urls(panel_category)) == 1

    def test_product_seen_in_earlier_category_is_skipped(self, make_scraper, panel_category, site, no_sleep):
        far = get_category("Far Infrared Heaters")
        site[BASE_URL + far.path] = category_page(["/infrared-heaters/aurora-panel-450w"])
        scraper = make_scraper(FakeSession(site))

        scraper.scrape_products([panel_category, far])

        assert [p.name for p in scraper.products].count("Aurora Panel Heater 450W") == 1
        assert scraper.statistics.categories_processed == 2

    def test_unreachable_category(self, make_scraper, panel_category, no_sleep):
        scraper = make_scraper(FakeSession())
        assert scraper.scrape_products([panel_category]) == []
        assert [e.step for e in scraper.errors] == ["request"]

    def test_category_failure_does_not_stop_the_run(self, make_scraper, panel_category, no_sleep):
        patio = get_category("Patio Heaters")
        scraper = make_scraper()
        with patch.object(scraper, "extract_product_urls", side_effect=[RuntimeError("boom"), []]):
            assert scraper.scrape_products([panel_category, patio]) == []

        assert scraper.errors[0].step == "category_processing"
        assert scraper.errors[0].category == "Panel Heaters"
        assert scraper.statistics.categories_processed == 2

    def test_configuration_reflects_instance_settings(self, make_scraper):
        config = make_scraper(delay=0.5, retry_delay=1.0, max_products=7).configuration()
        assert config["delay"] == 0.5
        assert config["retryDelay"] == 1.0
        assert config["maxProducts"] == 7
        assert config["userAgent"] == "Educational-Portfolio-Bot/1.0"
