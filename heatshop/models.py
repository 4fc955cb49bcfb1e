"""Data models for scraped products.

Dataclasses are the in-memory form; ``to_dict``/``from_dict`` convert to and
from the camelCase JSON interchange shape written to
``crystallize-products.json``.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

from heatshop.config import CURRENCY, PRODUCT_SHAPE

__all__ = [
    "ProductImage",
    "Specifications",
    "PriceVariant",
    "VariantAttribute",
    "Variant",
    "Product",
    "ScrapeError",
    "ScrapeStatistics",
]


@dataclass
class ProductImage:
    url: str
    alt_text: str = "Product image"

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "altText": self.alt_text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductImage":
        return cls(url=data["url"], alt_text=data.get("altText", "Product image"))


@dataclass
class Specifications:
    """Flat specification bag; every field is independently nullable."""

    wattage: Optional[int] = None
    dimensions: Optional[str] = None
    weight: Optional[float] = None
    mounting: Optional[str] = None
    coverage: Optional[str] = None
    efficiency: Optional[str] = None
    voltage: Optional[str] = None
    heating_type: Optional[str] = None
    control_type: Optional[str] = None
    ip_rating: Optional[str] = None

    def has_any(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Specifications":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class PriceVariant:
    price: float
    identifier: str = "default"
    currency: str = CURRENCY

    def to_dict(self) -> Dict[str, Any]:
        return {"identifier": self.identifier, "price": self.price, "currency": self.currency}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceVariant":
        return cls(
            price=data["price"],
            identifier=data.get("identifier", "default"),
            currency=data.get("currency", CURRENCY),
        )


@dataclass
class VariantAttribute:
    attribute: str
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {"attribute": self.attribute, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VariantAttribute":
        return cls(attribute=data["attribute"], value=data["value"])


@dataclass
class Variant:
    """One purchasable wattage option of a product."""

    name: str
    sku: str
    price: float
    stock: int
    is_default: bool = False
    price_variants: List[PriceVariant] = field(default_factory=list)
    attributes: List[VariantAttribute] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "sku": self.sku,
            "price": self.price,
            "priceVariants": [pv.to_dict() for pv in self.price_variants],
            "attributes": [a.to_dict() for a in self.attributes],
            "stock": self.stock,
            "isDefault": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variant":
        return cls(
            name=data["name"],
            sku=data["sku"],
            price=data["price"],
            stock=data["stock"],
            is_default=data.get("isDefault", False),
            price_variants=[PriceVariant.from_dict(pv) for pv in data.get("priceVariants", [])],
            attributes=[VariantAttribute.from_dict(a) for a in data.get("attributes", [])],
        )


@dataclass
class Product:
    """A single heater product scraped from the source site.

    ``generated_fields`` names every field that holds placeholder data rather
    than a scraped value (e.g. ``"price"``, ``"wattage"``).
    """

    # Required fields
    id: str
    name: str
    path: str
    category: str
    source_url: str
    extracted_at: str
    base_price: float

    category_description: str = ""
    cms_path: str = ""
    shape: str = PRODUCT_SHAPE

    # Pricing
    currency: str = CURRENCY
    price_range: Dict[str, float] = field(default_factory=dict)
    vat_included: bool = True

    # Specifications
    specifications: Specifications = field(default_factory=Specifications)
    technical_specs: Dict[str, str] = field(default_factory=dict)
    power_category: str = "Unknown"
    efficiency: Optional[str] = None
    coverage: Optional[str] = None

    # Information
    description: str = ""
    features: str = ""
    warranty: Optional[str] = None
    availability: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None

    # Media
    images: List[ProductImage] = field(default_factory=list)
    has_datasheet: bool = False
    has_manual: bool = False

    # CMS import structure
    components: Dict[str, Any] = field(default_factory=dict)
    variants: List[Variant] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    seo: Dict[str, Any] = field(default_factory=dict)

    generated_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "shape": self.shape,
            "category": self.category,
            "categoryDescription": self.category_description,
            "crystallizePath": self.cms_path,
            "sourceUrl": self.source_url,
            "extractedAt": self.extracted_at,
            "pricing": {
                "basePrice": self.base_price,
                "currency": self.currency,
                "priceRange": dict(self.price_range),
                "vatIncluded": self.vat_included,
            },
            "specifications": {
                "basic": self.specifications.to_dict(),
                "technical": dict(self.technical_specs),
                "powerCategory": self.power_category,
                "efficiency": self.efficiency,
                "coverage": self.coverage,
            },
            "information": {
                "description": self.description,
                "features": self.features,
                "warranty": self.warranty,
                "availability": self.availability,
                "manufacturer": self.manufacturer,
                "model": self.model,
            },
            "media": {
                "images": [img.to_dict() for img in self.images],
                "hasDatasheet": self.has_datasheet,
                "hasManual": self.has_manual,
            },
            "components": self.components,
            "variants": [v.to_dict() for v in self.variants],
            "topics": list(self.topics),
            "seo": self.seo,
            "generatedFields": list(self.generated_fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        pricing = data.get("pricing", {})
        specs = data.get("specifications", {})
        info = data.get("information", {})
        media = data.get("media", {})
        return cls(
            id=data["id"],
            name=data["name"],
            path=data.get("path", ""),
            shape=data.get("shape", PRODUCT_SHAPE),
            category=data.get("category", ""),
            category_description=data.get("categoryDescription", ""),
            cms_path=data.get("crystallizePath", ""),
            source_url=data.get("sourceUrl", ""),
            extracted_at=data.get("extractedAt", ""),
            base_price=pricing.get("basePrice", 0.0),
            currency=pricing.get("currency", CURRENCY),
            price_range=dict(pricing.get("priceRange", {})),
            vat_included=pricing.get("vatIncluded", True),
            specifications=Specifications.from_dict(specs.get("basic", {})),
            technical_specs=dict(specs.get("technical", {})),
            power_category=specs.get("powerCategory", "Unknown"),
            efficiency=specs.get("efficiency"),
            coverage=specs.get("coverage"),
            description=info.get("description", ""),
            features=info.get("features", ""),
            warranty=info.get("warranty"),
            availability=info.get("availability"),
            manufacturer=info.get("manufacturer"),
            model=info.get("model"),
            images=[ProductImage.from_dict(img) for img in media.get("images", [])],
            has_datasheet=media.get("hasDatasheet", False),
            has_manual=media.get("hasManual", False),
            components=data.get("components", {}),
            variants=[Variant.from_dict(v) for v in data.get("variants", [])],
            topics=list(data.get("topics", [])),
            seo=data.get("seo", {}),
            generated_fields=list(data.get("generatedFields", [])),
        )


@dataclass
class ScrapeError:
    """A failure recorded during a run (failed request, dropped product, ...)."""

    error: str
    timestamp: str
    url: Optional[str] = None
    category: Optional[str] = None
    retry_count: Optional[int] = None
    step: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.error, "timestamp": self.timestamp}
        if self.url is not None:
            data["url"] = self.url
        if self.category is not None:
            data["category"] = self.category
        if self.retry_count is not None:
            data["retryCount"] = self.retry_count
        if self.step is not None:
            data["step"] = self.step
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScrapeError":
        return cls(
            error=data["error"],
            timestamp=data["timestamp"],
            url=data.get("url"),
            category=data.get("category"),
            retry_count=data.get("retryCount"),
            step=data.get("step"),
        )


@dataclass
class ScrapeStatistics:
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    products_extracted: int = 0
    categories_processed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalRequests": self.total_requests,
            "successfulRequests": self.successful_requests,
            "failedRequests": self.failed_requests,
            "productsExtracted": self.products_extracted,
            "categoriesProcessed": self.categories_processed,
        }
