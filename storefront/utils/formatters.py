from __future__ import annotations

import math
import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from storefront.config import settings
from storefront.constants import PLACEHOLDER_IMAGE

NBSP = "\u00a0"

_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> float:
    """parseFloat-like coercion: leading numeric prefix or 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        m = _NUMBER_PREFIX.match(str(value))
        if not m:
            return 0.0
        num = float(m.group(1))
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def format_price(value: Any) -> str:
    # как toLocaleString('ru-RU'): 1 234,5
    d = Decimal(repr(parse_number(value))).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    sign = "-" if d < 0 else ""
    integer, _, frac = f"{abs(d):f}".partition(".")
    frac = frac.rstrip("0")
    grouped = f"{int(integer):,}".replace(",", NBSP)
    text = f"{sign}{grouped}"
    if frac:
        text += f",{frac}"
    return text


def money(v: Any, currency: str | None = None) -> str:
    return f"{format_price(v)} {currency or settings.currency_sign}"


def format_timestamp(dt: datetime) -> str:
    return dt.strftime("%d.%m.%Y, %H:%M:%S")


def image_url(url: str | None) -> str:
    if not url:
        return PLACEHOLDER_IMAGE
    url = str(url).strip()
    if not url.startswith("http"):
        return PLACEHOLDER_IMAGE
    return url


def product_details_line(concentration: str | None, volume: str | None) -> str:
    parts = [p for p in (concentration, volume) if p]
    return " • ".join(parts)
