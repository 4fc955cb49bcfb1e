"""Command-line interface for the scraper."""

import argparse
import logging
import sys
from typing import List, Optional

__all__ = ["main", "run_scrape", "parse_args"]

from heatshop.config import (
    CATEGORIES,
    CMS_SPEC_PATH,
    IMPORT_PATH,
    MAX_PRODUCTS,
    OUTPUT_PATH,
    REQUEST_DELAY,
    SUMMARY_PATH,
    get_category,
)
from heatshop.importer import ConfigError, prepare_import
from heatshop.logging_config import get_logger, setup_logging
from heatshop.output import build_metadata, load_products, save_import_file, save_products, save_summary
from heatshop.report import format_summary, products_to_frame, summarize
from heatshop.scraper import HeatShopScraper

logger = get_logger("cli")


def run_scrape(
    scraper: HeatShopScraper,
    category_names: Optional[List[str]] = None,
    output_path: str = OUTPUT_PATH,
    summary_path: str = SUMMARY_PATH,
    import_path: str = IMPORT_PATH,
) -> dict:
    """Scrape, then write the product, summary and import files.

    Returns the run metadata.
    """
    categories = CATEGORIES
    if category_names:
        categories = [c for c in (get_category(n) for n in category_names) if c is not None]

    products = scraper.scrape_products(categories)

    metadata = build_metadata(
        products,
        scraper.statistics,
        scraper.errors,
        scraper.configuration(),
        scraper.processing_time_ms(),
        categories=categories,
    )
    save_products(output_path, products, metadata)
    save_summary(summary_path, metadata)
    save_import_file(import_path, products)
    return metadata


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Infrared heater product scraper producing CMS import files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full run with the built-in settings
  python -m heatshop.cli

  # Quick test run: 5 products, 1s delay, panel heaters only
  python -m heatshop.cli --max-products 5 --delay 1 --categories "Panel Heaters"

  # Summarise a previous run
  python -m heatshop.cli --analyze crystallize-products.json

  # Write the CMS spec file from crystallize-import.json
  python -m heatshop.cli --prepare-import
        """,
    )
    parser.add_argument(
        "--max-products",
        type=int,
        default=MAX_PRODUCTS,
        help=f"Stop after this many products (default: {MAX_PRODUCTS})",
    )
    parser.add_argument(
        "--categories",
        nargs="+",
        choices=[c.name for c in CATEGORIES],
        metavar="NAME",
        help="Categories to scrape (default: all). See --list-categories",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=REQUEST_DELAY,
        help=f"Seconds to wait after each request (default: {REQUEST_DELAY})",
    )
    parser.add_argument(
        "--output",
        default=OUTPUT_PATH,
        help=f"Product JSON path (default: {OUTPUT_PATH})",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Drop products that fail validation instead of filling placeholder data",
    )
    parser.add_argument(
        "--list-categories",
        action="store_true",
        help="List available categories and exit",
    )
    parser.add_argument(
        "--analyze",
        metavar="PATH",
        help="Print a summary of an existing product file and exit",
    )
    parser.add_argument(
        "--prepare-import",
        action="store_true",
        help=f"Write {CMS_SPEC_PATH} from {IMPORT_PATH} (needs CMS credentials)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging on the console",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.list_categories:
        print("Available categories:")
        for category in CATEGORIES:
            print(f"  {category.name} ({category.power_range}): {category.url}")
        return 0

    if args.analyze:
        metadata, products = load_products(args.analyze)
        print(format_summary(summarize(products_to_frame(products), metadata)))
        return 0

    if args.prepare_import:
        try:
            spec_path = prepare_import(IMPORT_PATH, CMS_SPEC_PATH)
        except ConfigError as e:
            logger.error(str(e))
            return 1
        print(f"Review {spec_path}, then run the CMS CLI import with it.")
        return 0

    scraper = HeatShopScraper(
        delay=args.delay,
        max_products=args.max_products,
        generate_fallback_data=not args.no_fallback,
    )
    metadata = run_scrape(scraper, args.categories, output_path=args.output)

    stats = scraper.statistics
    print(f"\nTotal products: {metadata['totalProducts']}")
    print(f"Requests: {stats.successful_requests} ok, {stats.failed_requests} failed")
    print(f"Errors: {len(scraper.errors)}")
    print("Output files:")
    print(f"  - {args.output} (detailed data)")
    print(f"  - {SUMMARY_PATH} (run summary)")
    print(f"  - {IMPORT_PATH} (import format)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
