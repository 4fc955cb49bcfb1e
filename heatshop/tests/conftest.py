"""Shared test fixtures: sample pages and a scripted HTTP session."""

import random
from typing import Dict, List, Optional, Union
from unittest.mock import MagicMock

import pytest
import requests

from heatshop.config import BASE_URL, get_category
from heatshop.scraper import HeatShopScraper


PRODUCT_PAGE = """
<html>
<head><title>Herschel Select XL 600W | HeaterShop</title></head>
<body>
  <h1>Herschel Select XL
      600W Infrared Panel</h1>
  <div class="product-price">£349.99</div>
  <div class="product-description">
    <p>The Herschel Select XL is a slim infrared panel heater that warms people and objects directly.</p>
  </div>
  <ul class="features">
    <li>Slim 25mm profile panel</li>
    <li>Thermostat included for precise control</li>
  </ul>
  <table class="specifications">
    <tr><th>Power</th><td>600W</td></tr>
    <tr><th>Dimensions</th><td>1000 x 600 x 20 mm</td></tr>
    <tr><th>Weight</th><td>9.5 kg</td></tr>
    <tr><th>Heating Area</th><td>12 m²</td></tr>
    <tr><th>Voltage</th><td>230V</td></tr>
    <tr><th>IP Rating</th><td>IP44</td></tr>
  </table>
  <p>Comes with a 5 year warranty.</p>
  <img src="/images/product/herschel-xl-front.jpg" alt="Front view">
  <img src="/images/product/herschel-xl-side.jpg">
  <a href="/downloads/herschel-xl-datasheet.pdf">Datasheet</a>
  <div class="stock-status">In stock</div>
</body>
</html>
"""

BARE_PAGE = "<html><body><p>Nothing here</p></body></html>"


def product_page(name: str, price: str, wattage: int) -> str:
    """A minimal product page with a name, price and power rating."""
    return f"""
    <html><body>
      <h1>{name}</h1>
      <span class="price">£{price}</span>
      <table><tr><td>Power</td><td>{wattage}W</td></tr></table>
    </body></html>
    """


def category_page(hrefs: List[str]) -> str:
    cards = "\n".join(
        f'<div class="product-card"><a href="{href}">Heater</a></div>' for href in hrefs
    )
    return f"""
    <html><body>
      <nav><a href="/">Home</a><a href="/cart">Cart</a></nav>
      {cards}
    </body></html>
    """


def make_response(text: str = "", status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.text = text
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} Error")
    return resp


class FakeSession:
    """Serves canned pages by URL; unknown URLs raise ConnectionError."""

    def __init__(self, pages: Optional[Dict[str, Union[str, Exception]]] = None):
        self.pages = pages or {}
        self.calls: List[str] = []

    def get(self, url: str, timeout: Optional[float] = None):
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            raise requests.exceptions.ConnectionError(f"Failed to connect: {url}")
        if isinstance(page, Exception):
            raise page
        return make_response(page)


@pytest.fixture
def panel_category():
    return get_category("Panel Heaters")


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def make_scraper():
    """Build a scraper with no delays and a seeded RNG."""

    def _make(session=None, **kwargs) -> HeatShopScraper:
        kwargs.setdefault("delay", 0)
        kwargs.setdefault("retry_delay", 0)
        kwargs.setdefault("rng", random.Random(42))
        return HeatShopScraper(session=session or FakeSession(), **kwargs)

    return _make


@pytest.fixture
def sample_product(make_scraper, panel_category):
    """A fully populated product built from PRODUCT_PAGE."""
    scraper = make_scraper()
    url = f"{BASE_URL}/infrared-heaters/herschel-select-xl-600w"
    return scraper.build_product(PRODUCT_PAGE, url, panel_category)
