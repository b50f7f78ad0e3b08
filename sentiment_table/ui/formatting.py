"""
Utility helpers for formatting measure values for display.
"""

from __future__ import annotations

import math
from typing import Any, Optional

MISSING = "–"


def format_number(value: Any, decimals: Optional[int] = None) -> str:
    """Thousands-separated number; integral values drop decimals unless asked."""
    if value is None:
        return MISSING
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return MISSING
    if math.isnan(numeric):
        return MISSING
    if decimals is None:
        decimals = 0 if numeric.is_integer() else 2
    return f"{numeric:,.{decimals}f}"


def humanize_column(name: str) -> str:
    return str(name).replace("_", " ").strip().title()
