from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from storefront.constants import CATALOG_EMPTY, CATALOG_ERROR, CATALOG_OK
from storefront.models import Product
from storefront.store.client import LoadError, StoreClient
from storefront.utils.formatters import parse_number
from storefront.utils.validators import positive_int

logger = logging.getLogger(__name__)


def _opt_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def normalize_products(rows: Iterable[Dict[str, Any]]) -> List[Product]:
    """
    Legacy adapter for sheets without a stable id column.

    Rows with a usable positive id keep it. Rows without one (or with an id
    already taken) get 1 + position when that is free, otherwise the next
    integer above the current maximum. Ids depend on row order, so a
    reordered sheet remaps them.
    """
    rows = [r for r in rows if isinstance(r, dict)]
    explicit: List[Optional[int]] = [positive_int(r.get("id")) for r in rows]

    used: Set[int] = set()
    ids: List[Optional[int]] = []
    for pid in explicit:
        if pid is not None and pid not in used:
            used.add(pid)
            ids.append(pid)
        else:
            ids.append(None)

    next_free = max(used, default=0)
    products: List[Product] = []
    for index, row in enumerate(rows):
        pid = ids[index]
        if pid is None:
            candidate = index + 1
            if candidate in used:
                next_free = max(next_free, *used) + 1
                candidate = next_free
            pid = candidate
            used.add(pid)
            if explicit[index] is not None:
                logger.warning("Duplicate product id %s re-assigned to %s", explicit[index], pid)
        products.append(
            Product(
                id=pid,
                name=str(row.get("name") or "").strip(),
                price=parse_number(row.get("price")),
                concentration=_opt_str(row.get("concentration")),
                volume=_opt_str(row.get("volume")),
                image_url=_opt_str(row.get("image_url")),
            )
        )
    return products


@dataclass
class LoadResult:
    status: str
    products: List[Product] = field(default_factory=list)
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == CATALOG_OK


class CatalogCache:
    def __init__(self) -> None:
        self._products: List[Product] = []
        self._by_id: Dict[int, Product] = {}
        self.loaded = False

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def get(self, product_id: int) -> Optional[Product]:
        return self._by_id.get(product_id)

    def ids(self) -> Set[int]:
        return set(self._by_id)

    def replace(self, products: List[Product]) -> None:
        self._products = list(products)
        self._by_id = {p.id: p for p in self._products}
        self.loaded = True

    async def load(self, client: StoreClient) -> LoadResult:
        try:
            rows = await client.fetch_products()
            products = normalize_products(rows)
        except LoadError as e:
            logger.error("Catalog load failed: %s", e)
            return LoadResult(status=CATALOG_ERROR, products=self.products, error=str(e))

        self.replace(products)
        if not products:
            logger.info("Catalog is empty")
            return LoadResult(status=CATALOG_EMPTY)
        logger.info("Catalog loaded: %s products", len(products))
        return LoadResult(status=CATALOG_OK, products=self.products)
