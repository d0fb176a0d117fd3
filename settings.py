"""
Centralized configuration for the product configuration engine.
"""
from __future__ import annotations

import os
from typing import Any, List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CURRENCY: str = (os.getenv("DEFAULT_CURRENCY") or "USD").strip().upper()

# Display rounding only; intermediate price math is never rounded.
PRICE_DECIMALS: int = int(os.getenv("PRICE_DECIMALS", "2"))

# Used when a product or variant tracks inventory without its own threshold.
LOW_STOCK_DEFAULT_THRESHOLD: int = int(os.getenv("LOW_STOCK_DEFAULT_THRESHOLD", "5"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

PORT: int = int(os.getenv("PORT", "8080"))

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
}


def sanitize_currency(value: Optional[Any]) -> str:
    """Normalize a raw currency code, falling back to DEFAULT_CURRENCY."""
    if value is None:
        return DEFAULT_CURRENCY
    text = str(value).strip().upper()
    if not text:
        return DEFAULT_CURRENCY
    return text[:5]


def cors_origins() -> List[str]:
    """Parse CORS_ORIGINS (comma separated) with a localhost fallback."""
    raw = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5000")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["http://localhost:3000"]
