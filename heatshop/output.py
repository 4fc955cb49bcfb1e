"""JSON output: the product file, the run summary and the CMS import file.

Each write overwrites the previous run's file; nothing is written until the
scrape has finished.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from heatshop.config import CATEGORIES, SCRAPER_VERSION, SOURCE_NAME, Category
from heatshop.logging_config import get_logger
from heatshop.models import Product, ScrapeError, ScrapeStatistics

__all__ = [
    "build_metadata",
    "build_data_quality",
    "save_products",
    "save_summary",
    "build_import_items",
    "save_import_file",
    "load_products",
]

logger = get_logger("output")

PathLike = Union[str, Path]


def _min_max(values: Sequence[float]) -> Dict[str, Optional[float]]:
    if not values:
        return {"min": None, "max": None}
    return {"min": min(values), "max": max(values)}


def build_data_quality(products: Sequence[Product]) -> Dict[str, Any]:
    """Coverage counts plus price and wattage ranges; None on an empty run."""
    prices = [p.base_price for p in products]
    wattages = [p.specifications.wattage for p in products if p.specifications.wattage]
    return {
        "productsWithPricing": sum(1 for p in products if p.base_price > 0),
        "productsWithSpecs": len(wattages),
        "productsWithImages": sum(1 for p in products if p.images),
        "productsWithGeneratedData": sum(1 for p in products if p.generated_fields),
        "averagePrice": round(sum(prices) / len(prices)) if prices else None,
        "priceRange": _min_max(prices),
        "powerRange": _min_max(wattages),
    }


def build_metadata(
    products: Sequence[Product],
    statistics: ScrapeStatistics,
    errors: Sequence[ScrapeError],
    configuration: Dict[str, Any],
    processing_time_ms: int,
    categories: Optional[Iterable[Category]] = None,
    scraped_at: Optional[str] = None,
) -> Dict[str, Any]:
    categories = list(categories if categories is not None else CATEGORIES)
    return {
        "scrapedAt": scraped_at or datetime.now(timezone.utc).isoformat(),
        "totalProducts": len(products),
        "source": SOURCE_NAME,
        "scraper": {
            "version": SCRAPER_VERSION,
            "configuration": configuration,
            "statistics": statistics.to_dict(),
            "errors": [e.to_dict() for e in errors],
            "processingTime": processing_time_ms,
        },
        "categories": [
            {
                "name": c.name,
                "description": c.description,
                "powerRange": c.power_range,
                "productsExtracted": sum(1 for p in products if p.category == c.name),
            }
            for c in categories
        ],
        "dataQuality": build_data_quality(products),
    }


def _write_json(path: PathLike, data: Any) -> None:
    path = Path(path)
    if path.parent != Path("."):
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def save_products(path: PathLike, products: Sequence[Product], metadata: Dict[str, Any]) -> None:
    """Write ``{"metadata": ..., "products": [...]}``, replacing any previous file."""
    _write_json(path, {
        "metadata": metadata,
        "products": [p.to_dict() for p in products],
    })
    logger.info(f"Saved {len(products)} products to {path}")


def save_summary(path: PathLike, metadata: Dict[str, Any]) -> None:
    _write_json(path, metadata)
    logger.info(f"Saved scraping summary to {path}")


def build_import_items(products: Iterable[Product]) -> List[Dict[str, Any]]:
    """Wrap each product as a ``catalogueItem`` for the CMS import script."""
    items = []
    for product in products:
        items.append({
            "catalogueItem": {
                "name": product.name,
                "shape": product.shape,
                "path": product.path,
                "topics": list(product.topics),
                "components": [
                    {"componentId": component_id, **component}
                    for component_id, component in product.components.items()
                ],
                "variants": [v.to_dict() for v in product.variants],
            }
        })
    return items


def save_import_file(path: PathLike, products: Sequence[Product]) -> None:
    _write_json(path, build_import_items(products))
    logger.info(f"Generated CMS import file: {path}")


def load_products(path: PathLike) -> Tuple[Dict[str, Any], List[Product]]:
    """Read a product file back into ``(metadata, products)``."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    products = [Product.from_dict(p) for p in data.get("products", [])]
    return data.get("metadata", {}), products
