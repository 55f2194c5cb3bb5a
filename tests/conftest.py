"""Shared fixtures: sample catalog, in-memory store double, test settings."""
from __future__ import annotations

import dataclasses
from typing import Any, Dict, List, Optional

import pytest

from storefront.config import settings
from storefront.models import CartEntry, Product, TelegramUser
from storefront.store.client import LoadError, StoreError


class FakeStore:
    """In-memory stand-in for the spreadsheet store."""

    def __init__(
        self,
        products: Optional[List[Dict[str, Any]]] = None,
        carts: Optional[Dict[int, List[Dict[str, Any]]]] = None,
        products_error: Optional[str] = None,
        cart_error: Optional[str] = None,
        failing_writes: int = 0,
    ) -> None:
        self.products = products if products is not None else []
        self.carts = carts or {}
        self.products_error = products_error
        self.cart_error = cart_error
        self.failing_writes = failing_writes
        self.writes: List[tuple] = []
        self.cart_requests: List[int] = []

    async def fetch_products(self) -> List[Dict[str, Any]]:
        if self.products_error:
            raise LoadError(self.products_error)
        return [dict(p) for p in self.products]

    async def fetch_cart(self, user_id: int) -> List[Any]:
        self.cart_requests.append(user_id)
        if self.cart_error:
            raise StoreError(self.cart_error)
        return list(self.carts.get(user_id, []))

    async def update_cart(self, user_id: int, cart: List[CartEntry]) -> None:
        if self.failing_writes > 0:
            self.failing_writes -= 1
            raise StoreError("sheet is locked")
        rows = [e.to_store() for e in cart]
        self.writes.append((user_id, rows))
        self.carts[user_id] = rows


@pytest.fixture()
def product_rows() -> List[Dict[str, Any]]:
    return [
        {"id": 1, "name": "Aqua", "price": 1000, "concentration": "EDT", "volume": "50 ml"},
        {"id": 2, "name": "Noir", "price": 500},
    ]


@pytest.fixture()
def products() -> List[Product]:
    return [
        Product(id=1, name="Aqua", price=1000.0, concentration="EDT", volume="50 ml"),
        Product(id=2, name="Noir", price=500.0),
    ]


@pytest.fixture()
def products_by_id(products) -> Dict[int, Product]:
    return {p.id: p for p in products}


@pytest.fixture()
def user() -> TelegramUser:
    return TelegramUser(id=42, first_name="Иван", username="ivan")


@pytest.fixture()
def store(product_rows) -> FakeStore:
    return FakeStore(products=product_rows)


@pytest.fixture()
def test_settings():
    return dataclasses.replace(
        settings,
        manager_username="@parfumdepo",
        shop_title="PARFUMDEPO",
        currency_sign="₽",
        max_quantity=99,
        cart_write_retries=2,
        cart_retry_delay=0,
    )
