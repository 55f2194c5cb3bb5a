"""
Client for the spreadsheet-backed store (Google Apps Script web app).

Products and carts live in sheets; the script answers every call with
``{"success": bool, "data": ..., "error": ...}``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from storefront.models import CartEntry

logger = logging.getLogger(__name__)

PRODUCTS_SHEET = "Products"
CARTS_SHEET = "Carts"
UPDATE_CART_ACTION = "UPDATE_CART"


class StoreError(Exception):
    pass


class LoadError(StoreError):
    """Catalog could not be loaded (transport, HTTP status, parse or app-level failure)."""


class StoreClient:
    def __init__(self, base_url: str, timeout: float = 15.0) -> None:
        self._base_url = base_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, params: Dict[str, Any], error_cls: type[StoreError]) -> Dict[str, Any]:
        try:
            async with self._get_session().get(self._base_url, params=params) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise error_cls(f"HTTP ошибка: {resp.status}")
                # Apps Script отдаёт JSON с text/html
                payload = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise error_cls(f"Сетевая ошибка: {e}") from e
        except asyncio.TimeoutError as e:
            raise error_cls("Превышено время ожидания ответа") from e
        except ValueError as e:
            raise error_cls(f"Некорректный ответ сервера: {e}") from e
        if not isinstance(payload, dict):
            raise error_cls("Некорректный ответ сервера")
        return payload

    @staticmethod
    def _unwrap_list(payload: Dict[str, Any], error_cls: type[StoreError], default_error: str) -> List[Any]:
        if not payload.get("success"):
            raise error_cls(payload.get("error") or default_error)
        data = payload.get("data") or []
        if not isinstance(data, list):
            raise error_cls("Поле data должно быть списком")
        return data

    async def fetch_products(self) -> List[Dict[str, Any]]:
        payload = await self._get_json({"sheet": PRODUCTS_SHEET}, LoadError)
        rows = self._unwrap_list(payload, LoadError, "Ошибка при загрузке данных")
        logger.info("Loaded %s product rows", len(rows))
        return rows

    async def fetch_cart(self, user_id: int) -> List[Any]:
        payload = await self._get_json({"sheet": CARTS_SHEET, "user_id": str(user_id)}, StoreError)
        return self._unwrap_list(payload, StoreError, "Ошибка загрузки корзины")

    async def update_cart(self, user_id: int, cart: Sequence[CartEntry]) -> None:
        body = {
            "action": UPDATE_CART_ACTION,
            "user_id": user_id,
            "cart": [e.to_store() for e in cart],
        }
        try:
            async with self._get_session().post(self._base_url, json=body) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise StoreError(f"HTTP ошибка: {resp.status}")
                result = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise StoreError(f"Сетевая ошибка: {e}") from e
        except asyncio.TimeoutError as e:
            raise StoreError("Превышено время ожидания ответа") from e
        except ValueError as e:
            raise StoreError(f"Некорректный ответ сервера: {e}") from e
        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            raise StoreError(error or "Ошибка сохранения корзины")
