from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from storefront.utils.validators import positive_int


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float
    concentration: Optional[str] = None
    volume: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class CartEntry:
    product_id: int
    quantity: int

    def to_store(self) -> Dict[str, int]:
        # таблица Carts хранит позиции как {id, quantity}
        return {"id": self.product_id, "quantity": self.quantity}


@dataclass(frozen=True)
class TelegramUser:
    id: Optional[int]
    first_name: str = ""
    username: Optional[str] = None

    @property
    def identified(self) -> bool:
        return self.id is not None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["TelegramUser"]:
        if not data:
            return None
        uid = positive_int(data.get("id"))
        if uid is None:
            return None
        return cls(
            id=uid,
            first_name=str(data.get("first_name") or ""),
            username=(str(data["username"]) if data.get("username") else None),
        )

    @classmethod
    def from_init_data(cls, init_data: Optional[str]) -> Optional["TelegramUser"]:
        """User from a raw Telegram WebApp initData query string (signature is not checked)."""
        if not init_data:
            return None
        parsed = dict(parse_qsl(init_data))
        raw_user = parsed.get("user")
        if not raw_user:
            return None
        try:
            data = json.loads(raw_user)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        return cls.from_dict(data)

