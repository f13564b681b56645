"""
Display helpers shared by the specials pages.
"""

import math
from typing import Optional


CATEGORY_ICONS = {
    "FLOWER": "🌿",
    "PRE_ROLLS": "🚬",
    "VAPORIZERS": "💨",
    "CONCENTRATES": "🍯",
    "EDIBLES": "🍭",
    "TOPICALS": "🧴",
    "CARTRIDGES": "🖊️",
    "TINCTURES": "💧",
    "ACCESSORIES": "🔧",
    "CBD": "🌱",
}
DEFAULT_CATEGORY_ICON = "🌿"


def get_category_icon(category: Optional[str]) -> str:
    """Return the emoji shown next to a menu category."""
    return CATEGORY_ICONS.get(category or "", DEFAULT_CATEGORY_ICON)


def calculate_discount(regular: Optional[float], special: Optional[float]) -> int:
    """
    Percentage saved by the special price, rounded half-up to a whole number.

    Returns 0 when either price is missing or zero, or when the special price
    is not below the regular price.
    """
    if not regular or not special or special >= regular:
        return 0
    return int(math.floor((regular - special) / regular * 100 + 0.5))


def format_price(price: float) -> str:
    """Format a price in minor units (cents) as US dollars, e.g. 123456 -> "$1,234.56"."""
    return f"${price / 100:,.2f}"
