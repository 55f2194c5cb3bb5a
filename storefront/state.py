"""
Per-session mini-app state and the single action dispatcher.

The page sends named actions; each action updates ``AppState`` and returns
``Effects`` for the host (alerts, clipboard, links to open). ``render`` turns
the state into the view model the page draws.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from storefront.config import Settings, settings as default_settings
from storefront.constants import (
    CATALOG_EMPTY,
    CATALOG_ERROR,
    CATALOG_LOADING,
    CATALOG_OK,
    MESSAGES,
    SORT_ASC,
    VIEW_CART,
    VIEW_CATALOG,
    VIEWS,
)
from storefront.models import CartEntry, Product, TelegramUser
from storefront.services import cart as cart_ops
from storefront.services.catalog import CatalogCache
from storefront.services.orders import (
    EmptyCartError,
    format_full_order,
    format_manager_message,
    format_product_details,
    manager_link,
)
from storefront.services.search import filter_and_sort, toggle_direction
from storefront.store.client import StoreClient, StoreError
from storefront.utils.formatters import image_url, money, product_details_line
from storefront.utils.validators import positive_int

logger = logging.getLogger(__name__)


class UnknownAction(Exception):
    pass


class InvalidAction(ValueError):
    pass


@dataclass
class Effects:
    notifications: List[str] = field(default_factory=list)
    clipboard: Optional[str] = None
    clipboard_notice: Optional[str] = None
    open_link: Optional[str] = None

    def notify(self, message: str) -> None:
        self.notifications.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Overlay:
    product_id: int
    quantity: int = 1


@dataclass
class AppState:
    user: Optional[TelegramUser] = None
    catalog: CatalogCache = field(default_factory=CatalogCache)
    filtered: List[Product] = field(default_factory=list)
    query: str = ""
    sort_direction: str = SORT_ASC
    cart: List[CartEntry] = field(default_factory=list)
    view: str = VIEW_CATALOG
    overlay: Optional[Overlay] = None
    catalog_status: str = CATALOG_LOADING
    catalog_error: str = ""


Handler = Callable[[Effects, Dict[str, Any]], Awaitable[None]]


def _require_int(payload: Dict[str, Any], key: str) -> int:
    v = payload.get(key)
    if isinstance(v, bool) or not isinstance(v, (int, str)):
        raise InvalidAction(f"{key} is required")
    try:
        return int(v)
    except ValueError as e:
        raise InvalidAction(f"{key} must be an integer") from e


class Storefront:
    def __init__(
        self,
        client: StoreClient,
        user: Optional[TelegramUser],
        settings: Settings = default_settings,
        writer: Optional[cart_ops.CartWriter] = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.state = AppState(user=user)
        self.writer = writer or cart_ops.CartWriter(
            client, retries=settings.cart_write_retries, retry_delay=settings.cart_retry_delay
        )
        self._handlers: Dict[str, Handler] = {
            "start": self._start,
            "reload": self._reload,
            "search": self._search,
            "toggle_sort": self._toggle_sort,
            "show_view": self._show_view,
            "open_product": self._open_product,
            "close_product": self._close_product,
            "step_quantity": self._step_quantity,
            "add_to_cart": self._add_to_cart,
            "remove_from_cart": self._remove_from_cart,
            "copy_product": self._copy_product,
            "copy_order": self._copy_order,
            "checkout": self._checkout,
        }

    @property
    def actions(self) -> List[str]:
        return sorted(self._handlers)

    async def dispatch(self, action: str, payload: Optional[Dict[str, Any]] = None) -> Effects:
        handler = self._handlers.get(action)
        if handler is None:
            raise UnknownAction(action)
        effects = Effects()
        await handler(effects, payload or {})
        return effects

    # ---------------- loading ----------------

    async def _start(self, effects: Effects, payload: Dict[str, Any]) -> None:
        s = self.state
        s.sort_direction = SORT_ASC
        s.query = ""
        s.view = VIEW_CATALOG
        s.overlay = None
        await asyncio.gather(self._load_catalog(), self._load_cart())

    async def _reload(self, effects: Effects, payload: Dict[str, Any]) -> None:
        await self._load_catalog()

    async def _load_catalog(self) -> None:
        s = self.state
        s.catalog_status = CATALOG_LOADING
        result = await s.catalog.load(self.client)
        s.catalog_status = result.status
        if result.status == CATALOG_ERROR:
            s.catalog_error = result.error
            return
        s.catalog_error = ""
        s.query = ""
        s.filtered = s.catalog.products

    async def _load_cart(self) -> None:
        s = self.state
        if s.user is None or not s.user.identified:
            logger.info("User is not identified, using a temporary cart")
            s.cart = []
            return
        try:
            rows = await self.client.fetch_cart(s.user.id)
        except StoreError as e:
            logger.warning("Cart load for %s failed: %s", s.user.id, e)
            s.cart = []
            return
        s.cart = cart_ops.parse_cart(rows)
        logger.info("Cart loaded for %s: %s items", s.user.id, len(s.cart))

    # ---------------- search / sort ----------------

    def _refilter(self) -> None:
        s = self.state
        s.filtered = filter_and_sort(s.catalog.products, s.query, s.sort_direction)

    async def _search(self, effects: Effects, payload: Dict[str, Any]) -> None:
        self.state.query = str(payload.get("query") or "")
        self._refilter()

    async def _toggle_sort(self, effects: Effects, payload: Dict[str, Any]) -> None:
        self.state.sort_direction = toggle_direction(self.state.sort_direction)
        self._refilter()

    # ---------------- navigation / overlay ----------------

    async def _show_view(self, effects: Effects, payload: Dict[str, Any]) -> None:
        view = payload.get("view")
        if view not in VIEWS:
            raise InvalidAction(f"unknown view: {view}")
        self.state.view = view
        if view == VIEW_CART:
            self._reconcile()

    async def _open_product(self, effects: Effects, payload: Dict[str, Any]) -> None:
        pid = _require_int(payload, "product_id")
        if self.state.catalog.get(pid) is None:
            return
        self.state.overlay = Overlay(product_id=pid)

    async def _close_product(self, effects: Effects, payload: Dict[str, Any]) -> None:
        self.state.overlay = None

    async def _step_quantity(self, effects: Effects, payload: Dict[str, Any]) -> None:
        overlay = self.state.overlay
        if overlay is None:
            return
        qty = max(overlay.quantity + _require_int(payload, "delta"), 1)
        limit = self.settings.max_quantity
        if limit and qty > limit:
            qty = limit
        overlay.quantity = qty

    # ---------------- cart ----------------

    def _persist(self) -> None:
        self.writer.persist(self.state.user, self.state.cart)

    def _reconcile(self) -> None:
        s = self.state
        # пока каталог не загружен, сверять не с чем
        if not s.catalog.loaded:
            return
        pruned = cart_ops.reconcile(s.cart, s.catalog.ids())
        if len(pruned) != len(s.cart):
            logger.info("Dropped %s stale cart items", len(s.cart) - len(pruned))
            s.cart = pruned
            self._persist()

    async def _add_to_cart(self, effects: Effects, payload: Dict[str, Any]) -> None:
        s = self.state
        if s.overlay is not None:
            pid, qty = s.overlay.product_id, s.overlay.quantity
        else:
            pid = _require_int(payload, "product_id")
            qty = positive_int(payload.get("quantity")) or 1
        product = s.catalog.get(pid)
        if product is None:
            return
        before = cart_ops.quantity_of(s.cart, pid)
        s.cart = cart_ops.add_or_increment(s.cart, pid, qty, self.settings.max_quantity)
        s.overlay = None
        added = cart_ops.quantity_of(s.cart, pid) - before
        if not added:
            effects.notify(MESSAGES["limit_reached"].format(name=product.name, qty=before))
            return
        self._persist()
        effects.notify(MESSAGES["added"].format(name=product.name, qty=added))

    async def _remove_from_cart(self, effects: Effects, payload: Dict[str, Any]) -> None:
        s = self.state
        s.cart = cart_ops.remove(s.cart, _require_int(payload, "product_id"))
        self._persist()
        effects.notify(MESSAGES["removed"])

    async def _copy_product(self, effects: Effects, payload: Dict[str, Any]) -> None:
        product = self.state.catalog.get(_require_int(payload, "product_id"))
        if product is None:
            return
        effects.clipboard = format_product_details(product, self.settings.currency_sign)
        effects.clipboard_notice = MESSAGES["product_copied"]

    async def _copy_order(self, effects: Effects, payload: Dict[str, Any]) -> None:
        s = self.state
        try:
            text = format_full_order(
                s.cart,
                self._products_by_id(),
                s.user,
                title=self.settings.shop_title,
                currency=self.settings.currency_sign,
            )
        except EmptyCartError:
            effects.notify(MESSAGES["copy_empty"])
            return
        effects.clipboard = text
        effects.clipboard_notice = MESSAGES["order_copied"]

    async def _checkout(self, effects: Effects, payload: Dict[str, Any]) -> None:
        s = self.state
        try:
            text = format_manager_message(s.cart, self._products_by_id(), s.user, self.settings.currency_sign)
        except EmptyCartError:
            effects.notify(MESSAGES["checkout_empty"])
            return
        self._persist()
        effects.open_link = manager_link(self.settings.manager_username, text)

    def _products_by_id(self) -> Dict[int, Product]:
        return {p.id: p for p in self.state.catalog.products}

    # ---------------- view ----------------

    def render(self) -> Dict[str, Any]:
        self._reconcile()
        s = self.state
        products = self._products_by_id()
        arrow = "↑" if s.sort_direction == SORT_ASC else "↓"
        currency = self.settings.currency_sign

        catalog: Dict[str, Any] = {
            "status": s.catalog_status,
            "message": "",
            "error": s.catalog_error,
            "query": s.query,
            "sort": s.sort_direction,
            "sort_label": MESSAGES["sort_label"].format(arrow=arrow),
            "items": [_card(p, currency) for p in s.filtered],
        }
        if s.catalog_status == CATALOG_ERROR:
            catalog["message"] = MESSAGES["catalog_error"]
        elif s.catalog_status == CATALOG_EMPTY:
            catalog["message"] = MESSAGES["catalog_empty"]
        elif s.catalog_status == CATALOG_OK and not s.filtered:
            catalog["message"] = MESSAGES["not_found"]

        rows = []
        for e in s.cart:
            p = products.get(e.product_id)
            if p is None:
                continue
            rows.append(
                {**_card(p, currency), "quantity": e.quantity, "total_text": money(p.price * e.quantity, currency)}
            )

        overlay = None
        if s.overlay is not None and s.overlay.product_id in products:
            p = products[s.overlay.product_id]
            overlay = {**_card(p, currency), "quantity": s.overlay.quantity}

        return {
            "view": s.view,
            "user": asdict(s.user) if s.user is not None else None,
            "catalog": catalog,
            "cart": {
                "count": cart_ops.items_count(s.cart),
                "items": rows,
                "total": cart_ops.cart_total(s.cart, products),
                "total_text": money(cart_ops.cart_total(s.cart, products), currency),
                "empty": not rows,
                "empty_message": MESSAGES["cart_empty"],
            },
            "overlay": overlay,
            "sync_warning": MESSAGES["sync_warning"] if self.writer.last_error else None,
        }


def _card(p: Product, currency: str) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "concentration": p.concentration,
        "volume": p.volume,
        "details": product_details_line(p.concentration, p.volume),
        "price": p.price,
        "price_text": money(p.price, currency),
        "image": image_url(p.image_url),
    }
