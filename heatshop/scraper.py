"""Core scraping logic: polite fetching, category traversal, product assembly."""

import logging
import random
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set
from urllib.parse import urlparse

import requests  # type: ignore[import-untyped]

from heatshop.config import (
    BASE_URL,
    CATEGORIES,
    GENERATE_FALLBACK_DATA,
    HEADERS,
    MAX_PRODUCTS,
    MAX_RETRIES,
    MAX_URLS_PER_CATEGORY,
    REQUEST_DELAY,
    REQUEST_TIMEOUT,
    RETRY_FAILED_REQUESTS,
    VALIDATE_DATA,
    Category,
    scraper_configuration,
)
from heatshop.html_utils import (
    DEFAULT_DESCRIPTION,
    DEFAULT_FEATURES,
    DEFAULT_WARRANTY,
    extract_availability,
    extract_images,
    extract_manufacturer,
    extract_model,
    extract_product_name,
    extract_product_urls,
    extract_specifications,
    extract_technical_specifications,
    find_description,
    find_features,
    find_price,
    find_warranty,
    has_datasheet,
    has_manual,
    parse_html,
)
from heatshop.fallback import generate_dummy_price
from heatshop.logging_config import get_logger, log_scrape_event
from heatshop.models import Product, ScrapeError, ScrapeStatistics
from heatshop.product_utils import (
    build_components,
    build_seo,
    calculate_coverage,
    calculate_efficiency,
    calculate_price_range,
    categorize_power,
    generate_id,
    generate_path,
    generate_variants,
    validate_product_data,
)
from heatshop.url_validation import ALLOWED_DOMAINS, URLValidationError, validate_url

__all__ = [
    "create_session",
    "HeatShopScraper",
]

logger = get_logger("scraper")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_session() -> requests.Session:
    """Create a requests Session with the scraper's default headers.

    A shared session reuses connections (keep-alive) across the run.
    """
    session = requests.Session()
    session.headers.update(HEADERS)
    return session


class HeatShopScraper:
    """Single-threaded scraper for one run.

    Holds the run state: collected products, the set of product URLs already
    queued, the error log and request statistics. Every request blocks until
    the fixed delay has elapsed; there is no parallel fetching.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        delay: float = REQUEST_DELAY,
        retry_delay: Optional[float] = None,
        max_retries: int = MAX_RETRIES,
        retry_failed_requests: bool = RETRY_FAILED_REQUESTS,
        max_products: int = MAX_PRODUCTS,
        max_urls_per_category: int = MAX_URLS_PER_CATEGORY,
        validate_data: bool = VALIDATE_DATA,
        generate_fallback_data: bool = GENERATE_FALLBACK_DATA,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.session = session or create_session()
        self.base_url = base_url.rstrip("/")
        self.delay = delay
        self.retry_delay = retry_delay if retry_delay is not None else delay * 2
        self.max_retries = max_retries
        self.retry_failed_requests = retry_failed_requests
        self.max_products = max_products
        self.max_urls_per_category = max_urls_per_category
        self.validate_data = validate_data
        self.generate_fallback_data = generate_fallback_data
        self.rng = rng

        self.allowed_domains = ALLOWED_DOMAINS | {(urlparse(self.base_url).hostname or "").lower()}

        self.products: List[Product] = []
        self.processed_urls: Set[str] = set()
        self.errors: List[ScrapeError] = []
        self.statistics = ScrapeStatistics()
        self.request_count = 0
        self.start_time = time.monotonic()

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def fetch_html(self, url: str) -> Optional[str]:
        """GET a page with a fixed polite delay and bounded retries.

        One attempt plus up to ``max_retries`` retries, ``retry_delay`` apart.
        Returns None once retries are exhausted; the failure is appended to
        ``errors``.
        """
        try:
            url = validate_url(url, self.allowed_domains)
        except URLValidationError as e:
            logger.error(f"URL validation failed for {url}: {e}")
            self._record_error(url=url, error=str(e), step="url_validation")
            return None

        retries = self.max_retries if self.retry_failed_requests else 0
        last_error: Optional[Exception] = None
        attempt = 0

        for attempt in range(retries + 1):
            self.request_count += 1
            self.statistics.total_requests += 1
            suffix = f" (retry {attempt})" if attempt else ""
            logger.info(f"Request {self.request_count}: {url}{suffix}")

            try:
                resp = self.session.get(url, timeout=REQUEST_TIMEOUT)
                resp.raise_for_status()
            except requests.exceptions.RequestException as e:
                last_error = e
                self.statistics.failed_requests += 1
                logger.warning(f"Error fetching {url}: {e}")
                if attempt < retries:
                    logger.info(f"Retrying request {attempt + 1}/{retries}...")
                    time.sleep(self.retry_delay)
                continue

            self.statistics.successful_requests += 1
            time.sleep(self.delay)
            return str(resp.text)

        self._record_error(url=url, error=str(last_error), retry_count=attempt, step="request")
        log_scrape_event("request_failed", {
            "message": f"Giving up on {url} after {attempt} retries",
            "url": url,
            "error": str(last_error),
            "retry_count": attempt,
        }, level=logging.WARNING)
        return None

    def _record_error(self, **kwargs: Any) -> None:
        self.errors.append(ScrapeError(timestamp=_now(), **kwargs))

    # -------------------------------------------------------------------------
    # Category pages
    # -------------------------------------------------------------------------

    def category_url(self, category: Category) -> str:
        return self.base_url + category.path

    def extract_product_urls(self, category: Category) -> List[str]:
        """Product URLs on a category page not yet seen in this run."""
        html = self.fetch_html(self.category_url(category))
        if html is None:
            return []

        urls = extract_product_urls(html, category, self.base_url)
        new_urls = [url for url in urls if url not in self.processed_urls]
        self.processed_urls.update(new_urls)

        logger.info(f"Found {len(new_urls)} new product URLs in category {category.name}")
        return new_urls[: self.max_urls_per_category]

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def build_product(self, html: str, url: str, category: Category) -> Optional[Product]:
        """Turn a product page into a Product, filling gaps with placeholders.

        Returns None only when validation fails and fallback data is disabled.
        """
        soup = parse_html(html)

        name = extract_product_name(soup)
        scraped_price = find_price(soup)
        specs = extract_specifications(soup)

        if self.validate_data and not validate_product_data(name, scraped_price, specs):
            logger.warning(f"Validation failed for product: {name}")
            if not self.generate_fallback_data:
                return None

        generated: List[str] = []

        price = scraped_price
        if price is None:
            price = generate_dummy_price(self.rng)
            generated.append("price")

        description = find_description(soup)
        if description is None:
            description = DEFAULT_DESCRIPTION
            generated.append("description")

        features = find_features(soup)
        if features is None:
            features = DEFAULT_FEATURES
            generated.append("features")

        warranty = find_warranty(soup)
        if warranty is None:
            warranty = DEFAULT_WARRANTY
            generated.append("warranty")

        images = extract_images(soup, self.base_url)
        technical_specs = extract_technical_specifications(soup)

        components, generated_specs = build_components(
            description, features, specs, technical_specs, images, warranty, self.rng
        )
        generated.extend(generated_specs)

        variants = generate_variants(name, price, specs, self.rng)
        generated.append("stock")

        return Product(
            id=generate_id(name),
            name=name,
            path=generate_path(name, category),
            category=category.name,
            category_description=category.description,
            cms_path=category.cms_path,
            source_url=url,
            extracted_at=_now(),
            base_price=price,
            price_range=calculate_price_range(price),
            specifications=specs,
            technical_specs=technical_specs,
            power_category=categorize_power(specs.wattage),
            efficiency=calculate_efficiency(specs),
            coverage=calculate_coverage(specs),
            description=description,
            features=features,
            warranty=warranty,
            availability=extract_availability(soup),
            manufacturer=extract_manufacturer(soup, name),
            model=extract_model(soup, name),
            images=images,
            has_datasheet=has_datasheet(soup),
            has_manual=has_manual(soup),
            components=components,
            variants=variants,
            topics=[category.cms_path],
            seo=build_seo(name, category, description, specs),
            generated_fields=generated,
        )

    def scrape_product(self, url: str, category: Category) -> Optional[Product]:
        """Fetch and parse one product; failures are logged and the product dropped."""
        html = self.fetch_html(url)
        if html is None:
            return None

        try:
            return self.build_product(html, url, category)
        except Exception as e:
            logger.error(f"Error extracting product from {url}: {e}")
            self._record_error(url=url, error=str(e), step="product_extraction")
            log_scrape_event("product_error", {
                "url": url,
                "error": str(e),
                "category": category.name,
            }, level=logging.ERROR)
            return None

    def scrape_category(self, category: Category) -> List[Product]:
        """Scrape every new product of one category, up to the run limit."""
        logger.info(f"Processing category {category.name}: {self.category_url(category)}")
        log_scrape_event("category_start", {
            "category": category.name,
            "url": self.category_url(category),
            "power_range": category.power_range,
        })
        self.statistics.categories_processed += 1
        started = time.monotonic()

        product_urls = self.extract_product_urls(category)
        if not product_urls:
            logger.warning(f"No products found in category {category.name}")
            return []

        scraped: List[Product] = []
        for index, url in enumerate(product_urls, start=1):
            if len(self.products) >= self.max_products:
                break

            logger.info(f"  [{index}/{len(product_urls)}] {url}")
            product = self.scrape_product(url, category)
            if product is None:
                logger.info("    Failed to extract product data")
                continue

            self.products.append(product)
            self.statistics.products_extracted += 1
            scraped.append(product)
            logger.info(
                f"    {product.name} - £{product.base_price} - "
                f"{product.specifications.wattage or 'Unknown'}W"
            )

        success_rate = round(100 * len(scraped) / len(product_urls))
        logger.info(
            f"  Category {category.name}: {len(scraped)} products in "
            f"{time.monotonic() - started:.0f}s ({success_rate}% success)"
        )
        log_scrape_event("category_complete", {
            "category": category.name,
            "products_scraped": len(scraped),
            "urls_found": len(product_urls),
        })
        return scraped

    def scrape_products(self, categories: Optional[Iterable[Category]] = None) -> List[Product]:
        """Linear pass over categories then products; always returns what was collected."""
        categories = list(categories if categories is not None else CATEGORIES)
        logger.info(
            f"Starting scrape: target {self.max_products} products, "
            f"{self.delay}s delay, {self.max_retries} retries, {len(categories)} categories"
        )

        for category in categories:
            if len(self.products) >= self.max_products:
                break
            try:
                self.scrape_category(category)
            except Exception as e:
                logger.error(f"Category processing failed for {category.name}: {e}")
                self._record_error(category=category.name, error=str(e), step="category_processing")

        stats = self.statistics
        logger.info(
            f"Scraping complete: {len(self.products)} products, "
            f"{stats.total_requests} requests ({stats.failed_requests} failed), "
            f"{len(self.errors)} errors"
        )
        log_scrape_event("run_complete", {
            "products": len(self.products),
            "errors": len(self.errors),
            **stats.to_dict(),
        })
        return self.products

    # -------------------------------------------------------------------------
    # Run info
    # -------------------------------------------------------------------------

    def processing_time_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)

    def configuration(self) -> Dict[str, Any]:
        config = scraper_configuration()
        config.update({
            "baseUrl": self.base_url,
            "delay": self.delay,
            "retryDelay": self.retry_delay,
            "maxRetries": self.max_retries,
            "retryFailedRequests": self.retry_failed_requests,
            "maxProducts": self.max_products,
            "maxUrlsPerCategory": self.max_urls_per_category,
            "validateData": self.validate_data,
            "generateFallbackData": self.generate_fallback_data,
        })
        return config
