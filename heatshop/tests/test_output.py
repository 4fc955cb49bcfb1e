"""Tests for the JSON output files."""

import json

from heatshop.config import CATEGORIES, get_category
from heatshop.models import ScrapeError, ScrapeStatistics
from heatshop.output import (
    build_data_quality,
    build_import_items,
    build_metadata,
    load_products,
    save_import_file,
    save_products,
    save_summary,
)


def metadata_for(products, errors=()):
    stats = ScrapeStatistics(total_requests=5, successful_requests=4, failed_requests=1)
    return build_metadata(
        products, stats, list(errors), {"delay": 0}, 1234,
        categories=[get_category("Panel Heaters")],
        scraped_at="2025-01-01T00:00:00+00:00",
    )


class TestProductFile:
    def test_save_and_load(self, tmp_path, sample_product):
        path = tmp_path / "products.json"
        metadata = metadata_for([sample_product])
        save_products(path, [sample_product], metadata)

        loaded_metadata, products = load_products(path)
        assert loaded_metadata == metadata
        assert products == [sample_product]

    def test_file_layout(self, tmp_path, sample_product):
        path = tmp_path / "products.json"
        save_products(path, [sample_product], metadata_for([sample_product]))

        data = json.loads(path.read_text(encoding="utf-8"))
        product = data["products"][0]
        assert product["pricing"]["basePrice"] == 349.99
        assert product["pricing"]["currency"] == "GBP"
        assert product["specifications"]["basic"]["wattage"] == 600
        assert product["crystallizePath"] == "/infrared-heaters/panel-heaters"
        assert product["generatedFields"] == ["stock"]
        # non-ASCII is written as-is
        assert "12m²" in path.read_text(encoding="utf-8")

    def test_overwrites_previous_run(self, tmp_path, sample_product):
        path = tmp_path / "products.json"
        save_products(path, [sample_product, sample_product], metadata_for([sample_product] * 2))
        save_products(path, [], metadata_for([]))

        metadata, products = load_products(path)
        assert products == []
        assert metadata["totalProducts"] == 0

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "out" / "nested" / "summary.json"
        save_summary(path, metadata_for([]))
        assert json.loads(path.read_text(encoding="utf-8"))["source"] == "heatershop.co.uk"


class TestMetadata:
    def test_run_summary(self, sample_product):
        errors = [ScrapeError(error="timeout", timestamp="t", url="https://x", retry_count=3, step="request")]
        metadata = metadata_for([sample_product], errors)

        assert metadata["scrapedAt"] == "2025-01-01T00:00:00+00:00"
        assert metadata["totalProducts"] == 1
        assert metadata["scraper"]["version"] == "2.0.0"
        assert metadata["scraper"]["processingTime"] == 1234
        assert metadata["scraper"]["statistics"]["failedRequests"] == 1
        assert metadata["scraper"]["errors"] == [{
            "error": "timeout",
            "timestamp": "t",
            "url": "https://x",
            "retryCount": 3,
            "step": "request",
        }]
        assert metadata["categories"] == [{
            "name": "Panel Heaters",
            "description": get_category("Panel Heaters").description,
            "powerRange": "250W - 1200W",
            "productsExtracted": 1,
        }]

    def test_all_categories_by_default(self):
        metadata = build_metadata([], ScrapeStatistics(), [], {}, 0)
        assert [c["name"] for c in metadata["categories"]] == [c.name for c in CATEGORIES]

    def test_data_quality(self, sample_product, make_scraper, panel_category):
        other = make_scraper().build_product(
            "<html><body><p>Nothing here</p></body></html>",
            "https://www.heatershop.co.uk/infrared-heaters/x",
            panel_category,
        )
        quality = build_data_quality([sample_product, other])

        assert quality["productsWithPricing"] == 2
        assert quality["productsWithSpecs"] == 1
        assert quality["productsWithImages"] == 1
        assert quality["productsWithGeneratedData"] == 2
        assert quality["averagePrice"] == round((349.99 + other.base_price) / 2)
        assert quality["priceRange"] == {
            "min": min(349.99, other.base_price),
            "max": max(349.99, other.base_price),
        }
        assert quality["powerRange"] == {"min": 600, "max": 600}

    def test_empty_run(self):
        quality = build_data_quality([])
        assert quality["productsWithPricing"] == 0
        assert quality["averagePrice"] is None
        assert quality["priceRange"] == {"min": None, "max": None}
        assert quality["powerRange"] == {"min": None, "max": None}


class TestImportFile:
    def test_catalogue_items(self, sample_product):
        items = build_import_items([sample_product])
        item = items[0]["catalogueItem"]

        assert item["name"] == sample_product.name
        assert item["shape"] == "Heater Product"
        assert item["path"] == sample_product.path
        assert item["topics"] == ["/infrared-heaters/panel-heaters"]
        assert [c["componentId"] for c in item["components"]] == [
            "description", "specifications", "features",
            "technicalSpecs", "productImages", "warranty",
        ]
        assert item["components"][5] == {
            "componentId": "warranty", "type": "singleLine", "text": "5 year warranty",
        }
        assert [v["sku"] for v in item["variants"]] == ["HER-600W", "HER-400W", "HER-900W"]
        assert item["variants"][0]["isDefault"] is True

    def test_save_import_file(self, tmp_path, sample_product):
        path = tmp_path / "import.json"
        save_import_file(path, [sample_product])
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data) == 1
        assert data[0]["catalogueItem"]["variants"][0]["priceVariants"] == [
            {"identifier": "default", "price": 349.99, "currency": "GBP"}
        ]
