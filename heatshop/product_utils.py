"""Identifiers and derived product values (SKUs, variants, SEO, CMS components)."""

import html
import random
import re
from typing import Any, Dict, List, Optional, Tuple

from heatshop.config import CURRENCY, Category
from heatshop.fallback import (
    generate_dummy_dimensions,
    generate_dummy_stock,
    generate_dummy_wattage,
    generate_dummy_weight,
)
from heatshop.models import (
    PriceVariant,
    ProductImage,
    Specifications,
    Variant,
    VariantAttribute,
)

__all__ = [
    "MAX_ID_LENGTH",
    "generate_id",
    "generate_path",
    "generate_sku",
    "strip_html",
    "categorize_power",
    "calculate_coverage",
    "calculate_price_range",
    "calculate_efficiency",
    "generate_keywords",
    "generate_variants",
    "build_components",
    "build_seo",
    "validate_product_data",
]

MAX_ID_LENGTH = 50

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")

BASE_KEYWORDS = (
    "infrared heater",
    "electric heater",
    "energy efficient heating",
)
BRAND_KEYWORD = "norko heating"
STANDARD_WATTAGES = (350, 550, 900)


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def _round_price(value: float) -> float:
    return _round_half_up(value * 100) / 100


def generate_id(name: str) -> str:
    """Slugify a product name: lowercase, ``[a-z0-9-]`` only, at most 50 chars.

    >>> generate_id("Panel Heater 600W!!")
    'panel-heater-600w'
    """
    slug = _NON_SLUG_RE.sub("-", name.lower()).strip("-")
    return slug[:MAX_ID_LENGTH].strip("-")


def generate_path(name: str, category: Category) -> str:
    return f"{category.cms_path}/{generate_id(name)}"


def generate_sku(name: str, wattage: int) -> str:
    return f"{name[:3].upper()}-{wattage}W"


def strip_html(text: str) -> str:
    """Drop tags and collapse whitespace."""
    return _WS_RE.sub(" ", _TAG_RE.sub("", text or "")).strip()


def categorize_power(wattage: Optional[int]) -> str:
    if not wattage:
        return "Unknown"
    if wattage < 400:
        return "Low Power (< 400W)"
    if wattage < 800:
        return "Medium Power (400-800W)"
    if wattage < 1500:
        return "High Power (800-1500W)"
    return "Extra High Power (> 1500W)"


def calculate_coverage(specs: Specifications) -> str:
    """Scraped coverage, else roughly 12W per m², else 15m²."""
    if specs.coverage:
        return specs.coverage
    if specs.wattage:
        return f"{_round_half_up(specs.wattage / 12)}m²"
    return "15m²"


def calculate_price_range(base_price: float) -> Dict[str, float]:
    return {
        "min": _round_price(base_price * 0.8),
        "max": _round_price(base_price * 1.5),
        "base": base_price,
    }


def calculate_efficiency(specs: Specifications) -> str:
    control = (specs.control_type or "").lower()
    if "thermostat" in control:
        return "A+ Energy Rating"
    if "remote" in control:
        return "A Energy Rating"
    return "B+ Energy Rating"


def generate_keywords(name: str, category: Category, specs: Specifications) -> List[str]:
    keywords = list(BASE_KEYWORDS)
    keywords.append(category.name.lower())
    keywords.append(BRAND_KEYWORD)

    if specs.wattage:
        keywords.append(f"{specs.wattage}w heater")
    if specs.mounting:
        keywords.append(specs.mounting.lower())

    keywords.extend(word for word in name.lower().split(" ") if len(word) > 3)

    # de-duplicate while preserving order
    return list(dict.fromkeys(keywords))


def _variant_wattages(base_wattage: int) -> List[int]:
    wattages = [base_wattage]
    if 300 <= base_wattage < 600:
        wattages += [base_wattage + 200, base_wattage + 400]
    elif 600 <= base_wattage < 1000:
        wattages += [base_wattage - 200, base_wattage + 300]
    return wattages


def generate_variants(
    name: str,
    base_price: float,
    specs: Specifications,
    rng: Optional[random.Random] = None,
) -> List[Variant]:
    """Build wattage variants, priced in proportion to wattage.

    A known wattage yields variants around it; otherwise the standard
    350/550/900W line-up is used. The first variant is the default.
    """
    if specs.wattage:
        reference = specs.wattage
        wattages = _variant_wattages(specs.wattage)
    else:
        reference = STANDARD_WATTAGES[0]
        wattages = list(STANDARD_WATTAGES)

    variants: List[Variant] = []
    for index, wattage in enumerate(wattages):
        price = _round_price(base_price * wattage / reference)
        attributes = [
            VariantAttribute("wattage", f"{wattage}W"),
            VariantAttribute(
                "dimensions",
                (specs.dimensions if specs.wattage else None) or generate_dummy_dimensions(rng),
            ),
            VariantAttribute("coverage", calculate_coverage(Specifications(wattage=wattage))),
        ]
        if specs.wattage:
            attributes.append(VariantAttribute("efficiency", calculate_efficiency(specs)))

        variants.append(
            Variant(
                name=f"{wattage}W",
                sku=generate_sku(name, wattage),
                price=price,
                stock=generate_dummy_stock(rng),
                is_default=index == 0,
                price_variants=[PriceVariant(price=price, currency=CURRENCY)],
                attributes=attributes,
            )
        )
    return variants


def build_components(
    description: str,
    features: str,
    specs: Specifications,
    technical_specs: Dict[str, str],
    images: List[ProductImage],
    warranty: str,
    rng: Optional[random.Random] = None,
) -> Tuple[Dict[str, Any], List[str]]:
    """Build the CMS component structure for a product.

    Returns the components and the names of spec fields that had to be filled
    with placeholder values.
    """
    generated: List[str] = []

    wattage = specs.wattage
    if wattage is None:
        wattage = generate_dummy_wattage(rng)
        generated.append("wattage")
    dimensions = specs.dimensions
    if dimensions is None:
        dimensions = generate_dummy_dimensions(rng)
        generated.append("dimensions")
    weight = specs.weight
    if weight is None:
        weight = generate_dummy_weight(rng)
        generated.append("weight")

    components: Dict[str, Any] = {
        "description": {
            "type": "richText",
            "content": {"html": description, "plainText": strip_html(description)},
        },
        "specifications": {
            "type": "contentChunk",
            "chunks": [
                {
                    "wattage": wattage,
                    "dimensions": dimensions,
                    "weight": weight,
                    "coverage": calculate_coverage(specs),
                    "mounting": specs.mounting or "Wall mounted",
                    "efficiency": specs.efficiency or calculate_efficiency(specs),
                }
            ],
        },
        "features": {
            "type": "richText",
            "content": {"html": features, "plainText": strip_html(features)},
        },
        "technicalSpecs": {"type": "contentChunk", "chunks": [dict(technical_specs)]},
        "productImages": {"type": "images", "images": [img.to_dict() for img in images]},
        "warranty": {"type": "singleLine", "text": warranty},
    }
    return components, generated


def build_seo(
    name: str, category: Category, description: str, specs: Specifications
) -> Dict[str, Any]:
    return {
        "title": f"{name} - {category.name} | Norko Infrared Heaters",
        "description": f"{name}. {html.unescape(strip_html(description))[:160]}...",
        "keywords": generate_keywords(name, category, specs),
    }


def validate_product_data(name: str, price: Optional[float], specs: Specifications) -> bool:
    """Basic sanity checks; a failure triggers placeholder data, not rejection."""
    valid_name = bool(name) and 5 < len(name) < 200
    valid_price = price is not None and 0 < price < 10000
    return valid_name and valid_price and specs.has_any()
