"""Summary report for a finished scrape.

Loads ``crystallize-products.json`` into a DataFrame and computes the figures
printed after a run (price and power ranges, per-category counts, how much of
the data is placeholder).
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from heatshop.models import Product
from heatshop.output import load_products

__all__ = [
    "products_to_frame",
    "load_products_frame",
    "summarize",
    "format_summary",
]

FRAME_COLUMNS = [
    "id",
    "name",
    "category",
    "price",
    "wattage",
    "dimensions",
    "weight",
    "coverage",
    "images",
    "variants",
    "generated",
]


def products_to_frame(products: List[Product]) -> pd.DataFrame:
    """One row per product with the fields the report looks at."""
    rows = [
        {
            "id": p.id,
            "name": p.name,
            "category": p.category,
            "price": p.base_price,
            "wattage": p.specifications.wattage,
            "dimensions": p.specifications.dimensions,
            "weight": p.specifications.weight,
            "coverage": p.coverage,
            "images": len(p.images),
            "variants": len(p.variants),
            "generated": len(p.generated_fields),
        }
        for p in products
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def load_products_frame(path: Union[str, Path]) -> pd.DataFrame:
    _, products = load_products(path)
    return products_to_frame(products)


def _clean(value: Any) -> Optional[float]:
    """Convert pandas NA values to None and numpy scalars to float."""
    if value is None or pd.isna(value):
        return None
    return float(value)


def summarize(df: pd.DataFrame, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    wattage = pd.to_numeric(df["wattage"], errors="coerce")
    summary: Dict[str, Any] = {
        "products": int(len(df)),
        "price": {
            "mean": _clean(df["price"].mean()),
            "min": _clean(df["price"].min()),
            "max": _clean(df["price"].max()),
        },
        "power": {
            "min": _clean(wattage.min()),
            "max": _clean(wattage.max()),
        },
        "byCategory": {str(k): int(v) for k, v in df["category"].value_counts().items()},
        "withSpecs": int(wattage.notna().sum()),
        "withImages": int((df["images"] > 0).sum()),
        "withGeneratedData": int((df["generated"] > 0).sum()),
    }
    if metadata:
        scraper = metadata.get("scraper", {})
        summary["processingTimeSeconds"] = round(scraper.get("processingTime", 0) / 1000)
        summary["errors"] = len(scraper.get("errors", []))
    return summary


def format_summary(summary: Dict[str, Any]) -> str:
    total = summary["products"]
    price = summary["price"]
    power = summary["power"]

    def _money(value: Optional[float]) -> str:
        return "n/a" if value is None else f"£{value:.2f}"

    def _watts(value: Optional[float]) -> str:
        return "n/a" if value is None else f"{value:.0f}W"

    lines = [
        "Scrape results",
        "=" * 40,
        f"Products extracted: {total}",
    ]
    if "processingTimeSeconds" in summary:
        lines.append(f"Processing time: {summary['processingTimeSeconds']}s")
        lines.append(f"Errors: {summary['errors']}")
    lines += [
        "",
        f"Average price: {_money(price['mean'])}",
        f"Price range: {_money(price['min'])} - {_money(price['max'])}",
        f"Power range: {_watts(power['min'])} - {_watts(power['max'])}",
        "",
        "Products by category:",
    ]
    lines += [f"  {name}: {count}" for name, count in summary["byCategory"].items()]
    lines += [
        "",
        f"Products with specs: {summary['withSpecs']}/{total}",
        f"Products with images: {summary['withImages']}/{total}",
        f"Products with placeholder data: {summary['withGeneratedData']}/{total}",
    ]
    return "\n".join(lines)
