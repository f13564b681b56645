"""
Domain value objects for the specials service.
"""

from .models import AggregateResult, SpecialProduct, Store, StoreSpecialsResult, Variant

__all__ = [
    "AggregateResult",
    "SpecialProduct",
    "Store",
    "StoreSpecialsResult",
    "Variant",
]
