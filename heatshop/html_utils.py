"""HTML parsing and extraction heuristics.

Each field is read from an ordered list of candidates: CSS selectors for
name/price/description, regex alternatives over the lower-cased page text for
specifications. The first non-empty match wins.
"""

import html
import re
from typing import Dict, List, Optional, Pattern, Sequence, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from heatshop.config import BASE_URL, Category
from heatshop.fallback import generate_dummy_price
from heatshop.models import ProductImage, Specifications
from heatshop.url_validation import (
    ALLOWED_DOMAINS,
    URLValidationError,
    resolve_url,
    validate_image_url,
    validate_url,
)

__all__ = [
    "NAME_SELECTORS",
    "PRICE_SELECTORS",
    "DESCRIPTION_SELECTORS",
    "DEFAULT_NAME",
    "DEFAULT_DESCRIPTION",
    "DEFAULT_FEATURES",
    "DEFAULT_WARRANTY",
    "DEFAULT_AVAILABILITY",
    "DEFAULT_MANUFACTURER",
    "parse_html",
    "page_text",
    "extract_product_name",
    "find_price",
    "extract_price",
    "find_description",
    "extract_description",
    "find_features",
    "extract_features",
    "extract_images",
    "extract_model",
    "extract_specifications",
    "extract_technical_specifications",
    "find_warranty",
    "extract_warranty",
    "extract_availability",
    "extract_manufacturer",
    "has_datasheet",
    "has_manual",
    "is_product_url",
    "extract_product_urls",
]

# =============================================================================
# Extraction rule tables
# =============================================================================

NAME_SELECTORS = (
    "h1",
    ".product-title",
    ".product-name",
    "title",
    ".page-title",
    '[class*="title"]',
)
PRICE_SELECTORS = (
    ".price",
    ".product-price",
    '[class*="price"]',
    ".cost",
    ".amount",
)
DESCRIPTION_SELECTORS = (
    ".product-description",
    ".description",
    ".product-details",
    ".product-info p",
    ".content p",
    ".summary",
)
FEATURE_SELECTOR = "ul li, .features li, .benefits li, .feature-list li"
AVAILABILITY_SELECTORS = (
    ".stock-status",
    ".availability",
    '[class*="stock"]',
    '[class*="available"]',
)
MANUFACTURER_SELECTORS = (".manufacturer", ".brand", '[class*="brand"]')
SPEC_ROW_SELECTOR = "table tr, .specs tr, .specifications tr"
SPEC_ITEM_SELECTOR = ".specs li, .specifications li, .tech-specs li"
DATASHEET_SELECTOR = 'a[href*="datasheet"], a[href*="spec"], a[href*="pdf"]'
MANUAL_SELECTOR = 'a[href*="manual"], a[href*="guide"], a[href*="instructions"]'
PRODUCT_CARD_SELECTOR = '.product-item, .product-card, .product-tile, .item, [class*="product"]'

PRICE_RE = re.compile(r"£?\s*(\d[\d,]*(?:\.\d{2})?)")

WATTAGE_PATTERNS = (
    re.compile(r"(\d+)\s*w(?:att)?s?\b"),
    re.compile(r"power:\s*(\d+)\s*w"),
    re.compile(r"(\d+)\s*w\s*heater"),
)
DIMENSION_PATTERNS = (
    re.compile(r"(\d+)\s*(?:mm|cm)?\s*x\s*(\d+)\s*(?:mm|cm)?(?:\s*x\s*(\d+)\s*(?:mm|cm)?)?"),
    re.compile(r"dimensions?:\s*(\d+(?:\.\d+)?)\s*x\s*(\d+(?:\.\d+)?)\s*(?:x\s*(\d+(?:\.\d+)?))?\s*(?:mm|cm)"),
    re.compile(r"size:\s*(\d+)\s*x\s*(\d+)(?:\s*x\s*(\d+))?\s*(?:mm|cm)"),
)
WEIGHT_PATTERNS = (
    re.compile(r"(\d+(?:\.\d+)?)\s*kg"),
    re.compile(r"weight:\s*(\d+(?:\.\d+)?)\s*kg"),
)
COVERAGE_PATTERNS = (
    re.compile(r"(\d+)\s*m[²2]"),
    re.compile(r"coverage:\s*(\d+)\s*m"),
    re.compile(r"heating\s*area:\s*(\d+)\s*m"),
)
VOLTAGE_RE = re.compile(r"(\d+)\s*v(?:olts?)?\b")
IP_RATING_RE = re.compile(r"\bip\s*(\d+)")
DEFAULT_PANEL_DEPTH = "8"

MODEL_PATTERNS = (
    re.compile(r"model[:\s]+([a-z0-9-]+)", re.IGNORECASE),
    re.compile(r"([a-z]{2,}\s*\d{3,})", re.IGNORECASE),
    re.compile(r"([a-z]+\d+[a-z]*)", re.IGNORECASE),
)
WARRANTY_PATTERNS = (
    re.compile(r"(\d+)\s*year\s*warranty", re.IGNORECASE),
    re.compile(r"warranty:\s*(\d+)\s*years?", re.IGNORECASE),
    re.compile(r"guaranteed\s*for\s*(\d+)\s*years?", re.IGNORECASE),
)

KNOWN_BRANDS = ("herschel", "ecostrad", "infrared4homes", "aurora", "solus")

PRODUCT_KEYWORDS = (
    "heater", "infrared", "panel", "ceiling", "industrial",
    "patio", "outdoor", "herschel", "product",
)
EXCLUDED_URL_PARTS = (
    "category", "categories", "?", "#", "javascript:", "mailto:",
    "/search", "/cart", "/checkout", "/account", "/login",
)

# Defaults used when nothing matches
DEFAULT_NAME = "Unknown Product"
DEFAULT_DESCRIPTION = (
    "<p>High-quality infrared heater providing efficient and comfortable heating.</p>"
)
DEFAULT_FEATURES = (
    "<ul><li>Energy efficient infrared heating</li><li>Easy wall mounting</li>"
    "<li>Silent operation</li><li>Maintenance free</li></ul>"
)
DEFAULT_WARRANTY = "2 year manufacturer warranty"
DEFAULT_AVAILABILITY = "Available"
DEFAULT_MANUFACTURER = "Premium Brand"

MAX_FEATURES = 5
MAX_IMAGES = 3


def parse_html(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def page_text(soup: BeautifulSoup) -> str:
    """Visible text of the whole document, whitespace-joined."""
    return soup.get_text(" ", strip=True)


def _first_text(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[str]:
    for selector in selectors:
        element = soup.select_one(selector)
        if element is not None:
            text = element.get_text(" ", strip=True)
            if text:
                return text
    return None


def _first_match(patterns: Sequence[Pattern[str]], text: str) -> Optional[re.Match]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


# =============================================================================
# Product fields
# =============================================================================

def extract_product_name(soup: BeautifulSoup) -> str:
    name = _first_text(soup, NAME_SELECTORS)
    return re.sub(r"\s+", " ", name) if name else DEFAULT_NAME


def find_price(soup: BeautifulSoup) -> Optional[float]:
    """Scraped price in GBP, or None if no price element holds a number."""
    for selector in PRICE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        match = PRICE_RE.search(element.get_text(" ", strip=True))
        if match:
            return float(match.group(1).replace(",", ""))
    return None


def extract_price(soup: BeautifulSoup, rng=None) -> float:
    """Scraped price, or a placeholder in the 200-700 range."""
    price = find_price(soup)
    return price if price is not None else generate_dummy_price(rng)


def find_description(soup: BeautifulSoup) -> Optional[str]:
    """Inner HTML of the first description candidate with real content."""
    for selector in DESCRIPTION_SELECTORS:
        element = soup.select_one(selector)
        if element is not None and len(element.get_text(strip=True)) > 50:
            return element.decode_contents().strip() or element.get_text(strip=True)
    return None


def extract_description(soup: BeautifulSoup) -> str:
    return find_description(soup) or DEFAULT_DESCRIPTION


def find_features(soup: BeautifulSoup) -> Optional[str]:
    features: List[str] = []
    for item in soup.select(FEATURE_SELECTOR):
        text = item.get_text(" ", strip=True)
        if 10 < len(text) < 200:
            features.append(text)
        if len(features) == MAX_FEATURES:
            break

    if not features:
        return None
    return "<ul>" + "".join(f"<li>{html.escape(f)}</li>" for f in features) + "</ul>"


def extract_features(soup: BeautifulSoup) -> str:
    return find_features(soup) or DEFAULT_FEATURES


def extract_images(soup: BeautifulSoup, base_url: str = BASE_URL) -> List[ProductImage]:
    """Up to three product images; the first three <img> tags always qualify."""
    images: List[ProductImage] = []
    for index, img in enumerate(soup.find_all("img")):
        src = img.get("src")
        if not src or not isinstance(src, str):
            continue
        if not ("product" in src or "heater" in src or index < MAX_IMAGES):
            continue
        try:
            url = validate_image_url(resolve_url(src, base_url))
        except URLValidationError:
            continue
        alt = img.get("alt") or "Product image"
        images.append(ProductImage(url=url, alt_text=str(alt)))
        if len(images) == MAX_IMAGES:
            break
    return images


def extract_model(soup: BeautifulSoup, product_name: str) -> str:
    match = _first_match(MODEL_PATTERNS, page_text(soup) + " " + product_name)
    if match:
        return match.group(1).strip()

    words = [word for word in product_name.split(" ") if len(word) > 2]
    return "-".join(words[:2]).upper()


def extract_specifications(soup: BeautifulSoup) -> Specifications:
    """Pattern-match specifications from the lower-cased page text."""
    text = page_text(soup).lower()
    specs = Specifications()

    match = _first_match(WATTAGE_PATTERNS, text)
    if match:
        specs.wattage = int(match.group(1))

    match = _first_match(DIMENSION_PATTERNS, text)
    if match:
        depth = match.group(3) or DEFAULT_PANEL_DEPTH
        specs.dimensions = f"{match.group(1)}mm x {match.group(2)}mm x {depth}mm"

    match = _first_match(WEIGHT_PATTERNS, text)
    if match:
        specs.weight = float(match.group(1))

    match = _first_match(COVERAGE_PATTERNS, text)
    if match:
        specs.coverage = f"{match.group(1)}m²"

    match = VOLTAGE_RE.search(text)
    if match:
        specs.voltage = f"{match.group(1)}V"

    match = IP_RATING_RE.search(text)
    if match:
        specs.ip_rating = f"IP{match.group(1)}"

    if "wall" in text or "mount" in text:
        specs.mounting = "Wall mounted"
    elif "ceiling" in text:
        specs.mounting = "Ceiling mounted"
    elif "portable" in text or "freestanding" in text:
        specs.mounting = "Freestanding"

    if "thermostat" in text:
        specs.control_type = "Thermostat controlled"
    elif "remote" in text:
        specs.control_type = "Remote controlled"
    elif "switch" in text:
        specs.control_type = "Switch controlled"

    return specs


def _spec_key(label: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", label.strip().lower())


def extract_technical_specifications(soup: BeautifulSoup) -> Dict[str, str]:
    """Key/value pairs from spec tables and ``key: value`` spec lists."""
    tech_specs: Dict[str, str] = {}
    pairs: List[Tuple[str, str]] = []

    for row in soup.select(SPEC_ROW_SELECTOR):
        cells = row.find_all(["td", "th"])
        if len(cells) >= 2:
            pairs.append((cells[0].get_text(strip=True), cells[1].get_text(strip=True)))

    for item in soup.select(SPEC_ITEM_SELECTOR):
        text = item.get_text(strip=True)
        label, sep, value = text.partition(":")
        if sep and label and value:
            pairs.append((label, value))

    for label, value in pairs:
        key = _spec_key(label)
        value = value.strip()
        if key and value and len(key) < 50 and len(value) < 200:
            tech_specs[key] = value
    return tech_specs


def find_warranty(soup: BeautifulSoup) -> Optional[str]:
    match = _first_match(WARRANTY_PATTERNS, page_text(soup))
    return f"{match.group(1)} year warranty" if match else None


def extract_warranty(soup: BeautifulSoup) -> str:
    return find_warranty(soup) or DEFAULT_WARRANTY


def extract_availability(soup: BeautifulSoup) -> str:
    for selector in AVAILABILITY_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(" ", strip=True).lower()
        if "out of stock" in text or "unavailable" in text:
            return "Out of Stock"
        if "in stock" in text or "available" in text:
            return "In Stock"
    return DEFAULT_AVAILABILITY


def extract_manufacturer(soup: BeautifulSoup, product_name: str) -> str:
    brand = _first_text(soup, MANUFACTURER_SELECTORS)
    if brand:
        return brand

    name_lower = product_name.lower()
    for known in KNOWN_BRANDS:
        if known in name_lower:
            return known.capitalize()
    return DEFAULT_MANUFACTURER


def has_datasheet(soup: BeautifulSoup) -> bool:
    return bool(soup.select(DATASHEET_SELECTOR))


def has_manual(soup: BeautifulSoup) -> bool:
    return bool(soup.select(MANUAL_SELECTOR))


# =============================================================================
# Category pages
# =============================================================================

def is_product_url(href: str) -> bool:
    """Check if a link looks like a product detail page."""
    href_lower = href.lower()
    if len(href) <= 10:
        return False
    if any(part in href_lower for part in EXCLUDED_URL_PARTS):
        return False
    return any(keyword in href_lower for keyword in PRODUCT_KEYWORDS)


def _first_link(element) -> Optional[str]:
    link = element.find("a")
    href = link.get("href") if link is not None else None
    return href if isinstance(href, str) and href else None


def extract_product_urls(
    markup: str, category: Category, base_url: str = BASE_URL
) -> List[str]:
    """Collect product detail URLs from a category page.

    Strategies, in order: the category's own container and link selectors,
    any keyword-bearing link, then generic product cards. URLs are made
    absolute, restricted to the site's domain and de-duplicated in order.
    """
    soup = parse_html(markup)
    candidates: List[str] = []

    for element in soup.select(category.product_selector):
        href = _first_link(element)
        if href:
            candidates.append(href)
    for link in soup.select(category.link_selector):
        href = link.get("href")
        if isinstance(href, str) and href:
            candidates.append(href)

    for link in soup.select('a[href*="/"]'):
        href = link.get("href")
        if isinstance(href, str) and is_product_url(href):
            candidates.append(href)

    for element in soup.select(PRODUCT_CARD_SELECTOR):
        href = _first_link(element)
        if href and is_product_url(href):
            candidates.append(href)

    domains = ALLOWED_DOMAINS | {(urlparse(base_url).hostname or "").lower()}
    urls: List[str] = []
    seen = set()
    for href in candidates:
        try:
            url = validate_url(resolve_url(href, base_url), domains)
        except URLValidationError:
            continue
        if url not in seen:
            seen.add(url)
            urls.append(url)
    return urls
