"""Placeholder data used when a field cannot be scraped.

Every generator takes an optional ``random.Random`` so a run (or a test) can be
made reproducible; the module-level RNG is used otherwise.
"""

import random
from typing import Optional

__all__ = [
    "DUMMY_WATTAGES",
    "DUMMY_DIMENSIONS",
    "DUMMY_PRICE_MIN",
    "DUMMY_PRICE_MAX",
    "generate_dummy_wattage",
    "generate_dummy_dimensions",
    "generate_dummy_weight",
    "generate_dummy_price",
    "generate_dummy_stock",
]

DUMMY_WATTAGES = (250, 350, 550, 900, 1200)
DUMMY_DIMENSIONS = (
    "600mm x 300mm",
    "800mm x 600mm",
    "900mm x 300mm",
    "1000mm x 800mm",
    "1200mm x 300mm",
)
DUMMY_PRICE_MIN = 200.0
DUMMY_PRICE_MAX = 700.0


def _rng(rng: Optional[random.Random]):
    return rng if rng is not None else random


def generate_dummy_wattage(rng: Optional[random.Random] = None) -> int:
    return _rng(rng).choice(DUMMY_WATTAGES)


def generate_dummy_dimensions(rng: Optional[random.Random] = None) -> str:
    return _rng(rng).choice(DUMMY_DIMENSIONS)


def generate_dummy_weight(rng: Optional[random.Random] = None) -> float:
    """Weight in kg, 2-12 with one decimal place."""
    return round(_rng(rng).uniform(2.0, 12.0), 1)


def generate_dummy_price(rng: Optional[random.Random] = None) -> float:
    """Price in GBP, within [DUMMY_PRICE_MIN, DUMMY_PRICE_MAX]."""
    return round(_rng(rng).uniform(DUMMY_PRICE_MIN, DUMMY_PRICE_MAX), 2)


def generate_dummy_stock(rng: Optional[random.Random] = None) -> int:
    """Units in stock, 5-54."""
    return _rng(rng).randint(5, 54)
