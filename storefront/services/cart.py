from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from storefront.models import CartEntry, Product, TelegramUser
from storefront.store.client import StoreClient, StoreError
from storefront.utils.validators import positive_int, require_positive_number

logger = logging.getLogger(__name__)


def _clamp(qty: int, max_quantity: int) -> int:
    if max_quantity and qty > max_quantity:
        return max_quantity
    return qty


def add_or_increment(
    cart: List[CartEntry], product_id: int, delta: int, max_quantity: int = 0
) -> List[CartEntry]:
    require_positive_number(delta, "delta")
    result: List[CartEntry] = []
    found = False
    for e in cart:
        if e.product_id == product_id and not found:
            result.append(CartEntry(product_id, _clamp(e.quantity + delta, max_quantity)))
            found = True
        else:
            result.append(e)
    if not found:
        result.append(CartEntry(product_id, _clamp(delta, max_quantity)))
    return result


def remove(cart: List[CartEntry], product_id: int) -> List[CartEntry]:
    return [e for e in cart if e.product_id != product_id]


def reconcile(cart: List[CartEntry], catalog_ids: Set[int]) -> List[CartEntry]:
    return [e for e in cart if e.product_id in catalog_ids]


def parse_cart(rows: Iterable[Any]) -> List[CartEntry]:
    """Decode the Carts sheet payload; repeated products are merged, broken rows dropped."""
    merged: Dict[int, int] = {}
    for row in rows:
        if not isinstance(row, dict):
            continue
        pid = positive_int(row.get("id", row.get("product_id")))
        if pid is None:
            continue
        qty = positive_int(row.get("quantity")) or 1
        merged[pid] = merged.get(pid, 0) + qty
    return [CartEntry(pid, qty) for pid, qty in merged.items()]


def quantity_of(cart: List[CartEntry], product_id: int) -> int:
    return sum(e.quantity for e in cart if e.product_id == product_id)


def items_count(cart: List[CartEntry]) -> int:
    return sum(e.quantity for e in cart)


def cart_total(cart: List[CartEntry], products: Dict[int, Product]) -> float:
    total = 0.0
    for e in cart:
        p = products.get(e.product_id)
        if p is None:
            continue
        total += p.price * e.quantity
    return total


class CartWriter:
    """
    Write-through of the cart to the store.

    ``persist`` never blocks the caller: the write runs as a task on the
    current loop. Writes are sent one at a time in the order they were
    issued, each retried up to ``retries`` times.
    """

    def __init__(self, client: StoreClient, retries: int = 2, retry_delay: float = 0.5) -> None:
        self._client = client
        self._retries = retries
        self._retry_delay = retry_delay
        self._lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()
        self.last_error: Optional[str] = None

    def persist(self, user: Optional[TelegramUser], cart: List[CartEntry]) -> Optional[asyncio.Task]:
        if user is None or not user.identified:
            logger.debug("Cart not saved: user is not identified")
            return None
        snapshot = list(cart)
        task = asyncio.get_running_loop().create_task(self._write(user.id, snapshot))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _write(self, user_id: int, cart: List[CartEntry]) -> None:
        async with self._lock:
            attempt = 0
            while True:
                try:
                    await self._client.update_cart(user_id, cart)
                except StoreError as e:
                    if attempt < self._retries:
                        attempt += 1
                        logger.info("Cart save for %s failed (%s), retry %s/%s", user_id, e, attempt, self._retries)
                        await asyncio.sleep(self._retry_delay)
                        continue
                    self.last_error = str(e)
                    logger.warning("Cart save for %s failed: %s", user_id, e)
                    return
                self.last_error = None
                logger.info("Cart saved for %s (%s items)", user_id, len(cart))
                return

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
