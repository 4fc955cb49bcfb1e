"""HeatShop infrared heater scraper package."""

__version__ = "2.0.0"

# Re-export main components for convenient imports
from heatshop.config import BASE_URL, CATEGORIES, OUTPUT_PATH, Category, get_category
from heatshop.html_utils import extract_price
from heatshop.models import Product, ScrapeError, Specifications, Variant
from heatshop.output import load_products, save_import_file, save_products
from heatshop.product_utils import generate_id, generate_sku
from heatshop.scraper import HeatShopScraper

__all__ = [
    # Version
    "__version__",
    # Config
    "BASE_URL",
    "CATEGORIES",
    "OUTPUT_PATH",
    "Category",
    "get_category",
    # Models
    "Product",
    "ScrapeError",
    "Specifications",
    "Variant",
    # Core functions
    "HeatShopScraper",
    "extract_price",
    "generate_id",
    "generate_sku",
    "save_products",
    "save_import_file",
    "load_products",
]
