from __future__ import annotations

from typing import List, Optional

from storefront.constants import SORT_ASC, SORT_DESC
from storefront.models import Product
from storefront.utils.formatters import parse_number


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip().casefold()


def matches(product: Product, term: str) -> bool:
    if not term:
        return True
    name = (product.name or "").casefold()
    concentration = (product.concentration or "").casefold()
    return term in name or term in concentration


def price_key(product: Product) -> float:
    return parse_number(product.price)


def filter_and_sort(products: List[Product], query: Optional[str], direction: str = SORT_ASC) -> List[Product]:
    term = normalize_query(query)
    found = [p for p in products if matches(p, term)]
    # sorted() стабилен, reverse=True сохраняет порядок равных цен
    return sorted(found, key=price_key, reverse=(direction == SORT_DESC))


def toggle_direction(direction: str) -> str:
    return SORT_DESC if direction == SORT_ASC else SORT_ASC
