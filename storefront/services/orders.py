from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional
from urllib.parse import quote

from storefront.constants import UNKNOWN_USER_NAME
from storefront.models import CartEntry, Product, TelegramUser
from storefront.utils.formatters import format_timestamp, money


class EmptyCartError(Exception):
    """Nothing to order: the cart has no lines that resolve to catalog products."""


@dataclass(frozen=True)
class OrderLine:
    product: Product
    quantity: int

    @property
    def total(self) -> float:
        return self.product.price * self.quantity


def order_lines(cart: List[CartEntry], products: Dict[int, Product]) -> List[OrderLine]:
    lines = []
    for e in cart:
        p = products.get(e.product_id)
        if p is None:
            continue
        lines.append(OrderLine(p, e.quantity))
    if not lines:
        raise EmptyCartError("cart is empty")
    return lines


def _user_name(user: Optional[TelegramUser]) -> str:
    if user is None or not user.first_name:
        return UNKNOWN_USER_NAME
    return user.first_name


def format_full_order(
    cart: List[CartEntry],
    products: Dict[int, Product],
    user: Optional[TelegramUser],
    now: Optional[datetime] = None,
    title: str = "PARFUMDEPO",
    currency: Optional[str] = None,
) -> str:
    lines = order_lines(cart, products)
    total = 0.0

    text = f"=== ЗАКАЗ ИЗ {title.upper()} ===\n\n"
    for line in lines:
        p = line.product
        total += line.total
        text += f"🏷️ {p.name}\n"
        if p.concentration:
            text += f"   Концентрация: {p.concentration}\n"
        if p.volume:
            text += f"   Объем: {p.volume}\n"
        text += f"   {line.quantity} × {money(p.price, currency)} = {money(line.total, currency)}\n"
        text += "   -----------------\n"

    text += f"\n💰 ИТОГО: {money(total, currency)}\n"
    text += f"\n👤 Пользователь: {_user_name(user)}"
    if user is not None and user.username:
        text += f"\n📱 Telegram: @{user.username}"
    text += f"\n\n📅 Дата: {format_timestamp(now or datetime.now())}"
    return text


def format_manager_message(
    cart: List[CartEntry],
    products: Dict[int, Product],
    user: Optional[TelegramUser],
    currency: Optional[str] = None,
) -> str:
    lines = order_lines(cart, products)
    total = 0.0

    text = "Здравствуйте! Хочу оформить заказ:\n\n"
    for line in lines:
        p = line.product
        total += line.total
        text += f"• {p.name}"
        if p.concentration:
            text += f" ({p.concentration})"
        if p.volume:
            text += f", {p.volume}"
        text += f" - {line.quantity} шт. × {money(p.price, currency)} = {money(line.total, currency)}\n"

    text += f"\nИтого: {money(total, currency)}"
    text += f"\n\nОт пользователя: {_user_name(user)}"
    if user is not None and user.username:
        text += f" (@{user.username})"
    return text


def manager_link(manager_username: str, text: str) -> str:
    # то же экранирование, что у encodeURIComponent
    encoded = quote(text, safe="!*'()")
    return f"https://t.me/{manager_username.replace('@', '')}?text={encoded}"


def format_product_details(product: Product, currency: Optional[str] = None) -> str:
    return (
        f"{product.name}\n"
        f"Концентрация: {product.concentration or 'не указана'}\n"
        f"Объем: {product.volume or 'не указан'}\n"
        f"Цена: {money(product.price, currency)}"
    )
