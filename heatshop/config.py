"""Configuration and constants for the scraper.

Values are hard-coded defaults; a few can be overridden through environment
variables (a local ``.env`` file is loaded first).
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

__all__ = [
    "BASE_URL",
    "SOURCE_NAME",
    "SCRAPER_VERSION",
    "HEADERS",
    "REQUEST_TIMEOUT",
    "REQUEST_DELAY",
    "RETRY_DELAY",
    "MAX_RETRIES",
    "RETRY_FAILED_REQUESTS",
    "MAX_PRODUCTS",
    "MAX_URLS_PER_CATEGORY",
    "VALIDATE_DATA",
    "GENERATE_FALLBACK_DATA",
    "OUTPUT_PATH",
    "SUMMARY_PATH",
    "IMPORT_PATH",
    "CMS_SPEC_PATH",
    "PRODUCT_SHAPE",
    "CURRENCY",
    "Category",
    "CATEGORIES",
    "get_category",
    "scraper_configuration",
]

load_dotenv()

BASE_URL = os.getenv("HEATSHOP_BASE_URL", "https://www.heatershop.co.uk")
SOURCE_NAME = "heatershop.co.uk"
SCRAPER_VERSION = "2.0.0"

# Polite identification plus browser-like accept headers
HEADERS = {
    "User-Agent": "Educational-Portfolio-Bot/1.0",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

# Request timeout (seconds)
REQUEST_TIMEOUT = 15

# Fixed delay after every successful request (seconds)
REQUEST_DELAY = float(os.getenv("HEATSHOP_REQUEST_DELAY", "2.0"))

# Retries use a doubled constant delay, no exponential backoff
RETRY_DELAY = REQUEST_DELAY * 2
MAX_RETRIES = int(os.getenv("HEATSHOP_MAX_RETRIES", "3"))
RETRY_FAILED_REQUESTS = True

# Run limits
MAX_PRODUCTS = int(os.getenv("HEATSHOP_MAX_PRODUCTS", "100"))
MAX_URLS_PER_CATEGORY = 25

# Data quality
VALIDATE_DATA = True
GENERATE_FALLBACK_DATA = True  # Fill missing fields with placeholder data

# Output paths
OUTPUT_PATH = os.getenv("HEATSHOP_OUTPUT_PATH", "crystallize-products.json")
SUMMARY_PATH = "scraping-summary.json"
IMPORT_PATH = "crystallize-import.json"
CMS_SPEC_PATH = "crystallize-spec.json"

# CMS shape every imported product conforms to
PRODUCT_SHAPE = "Heater Product"
CURRENCY = "GBP"


@dataclass(frozen=True)
class Category:
    """A product category on the source site and its place in the CMS tree."""

    name: str
    path: str
    cms_path: str
    description: str
    power_range: str
    # CSS selectors for product containers and for product links
    product_selector: str
    link_selector: str

    @property
    def url(self) -> str:
        return BASE_URL + self.path


_PRODUCT_CONTAINERS = '.product-item, .product-card, [class*="product"]'

CATEGORIES: List[Category] = [
    Category(
        name="Panel Heaters",
        path="/infrared-heaters/infrared-panel-heaters",
        cms_path="/infrared-heaters/panel-heaters",
        description="Wall-mounted infrared panel heaters perfect for residential and office spaces",
        power_range="250W - 1200W",
        product_selector=_PRODUCT_CONTAINERS,
        link_selector='a[href*="panel"], a[href*="infrared"]',
    ),
    Category(
        name="Ceiling Heaters",
        path="/infrared-heaters/ceiling-infrared-heaters-1",
        cms_path="/infrared-heaters/ceiling-heaters",
        description="Ceiling-mounted infrared heaters ideal for commercial environments",
        power_range="1000W - 3000W",
        product_selector=_PRODUCT_CONTAINERS,
        link_selector='a[href*="ceiling"], a[href*="cassette"]',
    ),
    Category(
        name="Industrial Heaters",
        path="/infrared-heaters/industrial-warehouse",
        cms_path="/infrared-heaters/industrial-heaters",
        description="Heavy-duty infrared heaters for workshops and industrial spaces",
        power_range="2000W - 6000W",
        product_selector=_PRODUCT_CONTAINERS,
        link_selector='a[href*="industrial"], a[href*="warehouse"]',
    ),
    Category(
        name="Far Infrared Heaters",
        path="/infrared-heaters/far-infrared-heaters",
        cms_path="/infrared-heaters/far-infrared-heaters",
        description="Health-focused far infrared heating technology",
        power_range="300W - 800W",
        product_selector=_PRODUCT_CONTAINERS,
        link_selector='a[href*="far"], a[href*="health"]',
    ),
    Category(
        name="Patio Heaters",
        path="/infrared-heaters/outdoor-patio-heaters",
        cms_path="/infrared-heaters/patio-heaters",
        description="Outdoor infrared heaters for patios and hospitality",
        power_range="1500W - 3000W",
        product_selector=_PRODUCT_CONTAINERS,
        link_selector='a[href*="patio"], a[href*="outdoor"]',
    ),
]


def get_category(name: str) -> Optional[Category]:
    """Look up a category by name (case-insensitive)."""
    wanted = name.strip().lower()
    for category in CATEGORIES:
        if category.name.lower() == wanted:
            return category
    return None


def scraper_configuration() -> Dict[str, Any]:
    """Effective settings, embedded in the output metadata."""
    return {
        "baseUrl": BASE_URL,
        "delay": REQUEST_DELAY,
        "retryDelay": RETRY_DELAY,
        "maxRetries": MAX_RETRIES,
        "retryFailedRequests": RETRY_FAILED_REQUESTS,
        "maxProducts": MAX_PRODUCTS,
        "maxUrlsPerCategory": MAX_URLS_PER_CATEGORY,
        "validateData": VALIDATE_DATA,
        "generateFallbackData": GENERATE_FALLBACK_DATA,
        "outputFile": OUTPUT_PATH,
        "userAgent": HEADERS["User-Agent"],
    }
