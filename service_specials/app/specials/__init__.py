"""
Specials aggregation layer.
"""

from .service import SpecialsService, filter_specials, is_on_special

__all__ = ["SpecialsService", "filter_specials", "is_on_special"]
