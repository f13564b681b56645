"""
Value objects for stores, menu products and aggregated specials.

Each entity round-trips through ``to_dict``/``from_dict`` (the JSON shape
stored in the key-value cache). Entities that come from the inventory API
also expose ``from_api`` to map its camelCase GraphQL payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from service_specials.app.formatting import calculate_discount


def _formatted(value: Any) -> Optional[str]:
    """Unwrap ``{"formatted": "..."}`` potency objects."""
    if isinstance(value, Mapping):
        return value.get("formatted")
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Store:
    """A dispensary location as listed by the inventory API."""

    id: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Store":
        return cls(
            id=str(payload["id"]),
            name=payload.get("name") or "Unknown Store",
            address=payload.get("address"),
            phone=payload.get("phone"),
        )

    # Retailer objects already use the cache field names
    from_api = from_dict


@dataclass(frozen=True)
class Variant:
    """A purchasable option of a product; prices are in minor currency units."""

    id: str
    option: Optional[str]
    price: Optional[int]
    special_price: Optional[int] = None
    quantity: Optional[int] = None

    @property
    def is_on_special(self) -> bool:
        """True when a discounted price is present and strictly below the regular price."""
        if not self.special_price or not self.price:
            return False
        return self.special_price < self.price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "option": self.option,
            "price": self.price,
            "special_price": self.special_price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Variant":
        return cls(
            id=str(payload["id"]),
            option=payload.get("option"),
            price=payload.get("price"),
            special_price=payload.get("special_price"),
            quantity=payload.get("quantity"),
        )

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Variant":
        return cls(
            id=str(payload.get("id", "")),
            option=payload.get("option"),
            price=payload.get("priceRec"),
            special_price=payload.get("specialPriceRec"),
            quantity=payload.get("quantity"),
        )


@dataclass(frozen=True)
class SpecialProduct:
    """A menu product; retained by the aggregator only when a variant is on special."""

    id: str
    name: str
    brand_name: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    potency_thc: Optional[str] = None
    potency_cbd: Optional[str] = None
    variants: Tuple[Variant, ...] = field(default_factory=tuple)

    @property
    def special_variants(self) -> List[Variant]:
        return [variant for variant in self.variants if variant.is_on_special]

    def best_variant(self) -> Optional[Variant]:
        """Return the on-special variant with the deepest percentage discount."""
        candidates = self.special_variants
        if not candidates:
            return None
        return max(candidates, key=lambda v: calculate_discount(v.price, v.special_price))

    def max_discount(self) -> int:
        """Largest discount percentage across this product's variants."""
        best = self.best_variant()
        if best is None:
            return 0
        return calculate_discount(best.price, best.special_price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "brand_name": self.brand_name,
            "category": self.category,
            "subcategory": self.subcategory,
            "image": self.image,
            "description": self.description,
            "potency_thc": self.potency_thc,
            "potency_cbd": self.potency_cbd,
            "variants": [variant.to_dict() for variant in self.variants],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SpecialProduct":
        return cls(
            id=str(payload["id"]),
            name=payload.get("name", ""),
            brand_name=payload.get("brand_name"),
            category=payload.get("category"),
            subcategory=payload.get("subcategory"),
            image=payload.get("image"),
            description=payload.get("description"),
            potency_thc=payload.get("potency_thc"),
            potency_cbd=payload.get("potency_cbd"),
            variants=tuple(Variant.from_dict(v) for v in payload.get("variants") or []),
        )

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "SpecialProduct":
        brand = payload.get("brand") or {}
        return cls(
            id=str(payload.get("id", "")),
            name=payload.get("name", ""),
            brand_name=brand.get("name") if isinstance(brand, Mapping) else None,
            category=payload.get("category"),
            subcategory=payload.get("subcategory"),
            image=payload.get("image"),
            description=payload.get("description"),
            potency_thc=_formatted(payload.get("potencyThc")),
            potency_cbd=_formatted(payload.get("potencyCbd")),
            variants=tuple(Variant.from_api(v) for v in payload.get("variants") or []),
        )


@dataclass(frozen=True)
class StoreSpecialsResult:
    """A store paired with the products it currently has on special."""

    store: Store
    products: Tuple[SpecialProduct, ...]

    @property
    def special_count(self) -> int:
        return len(self.products)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "store": self.store.to_dict(),
            "products": [product.to_dict() for product in self.products],
            "special_count": self.special_count,
        }


@dataclass(frozen=True)
class AggregateResult:
    """Outcome of a multi-store specials fetch, handed to the render layer."""

    store_specials: Tuple[StoreSpecialsResult, ...] = ()
    total_specials: int = 0
    errors: Tuple[str, ...] = ()
    duration: float = 0.0
    store_count: int = 0

    @property
    def success_rate(self) -> float:
        """Percentage of requested stores that returned specials."""
        if not self.store_count:
            return 0.0
        return round(len(self.store_specials) / self.store_count * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "store_specials": [entry.to_dict() for entry in self.store_specials],
            "total_specials": self.total_specials,
            "errors": list(self.errors),
            "duration": self.duration,
            "store_count": self.store_count,
            "success_rate": self.success_rate,
        }
