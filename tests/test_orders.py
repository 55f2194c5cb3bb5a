from datetime import datetime

import pytest

from storefront.models import CartEntry, TelegramUser
from storefront.services.orders import (
    EmptyCartError,
    format_full_order,
    format_manager_message,
    format_product_details,
    manager_link,
    order_lines,
)

NOW = datetime(2026, 10, 19, 12, 30, 0)
CART = [CartEntry(1, 2), CartEntry(2, 2)]


def test_full_order_text(products_by_id, user):
    text = format_full_order(CART, products_by_id, user, now=NOW)

    assert text == (
        "=== ЗАКАЗ ИЗ PARFUMDEPO ===\n\n"
        "🏷️ Aqua\n"
        "   Концентрация: EDT\n"
        "   Объем: 50 ml\n"
        "   2 × 1\u00a0000 ₽ = 2\u00a0000 ₽\n"
        "   -----------------\n"
        "🏷️ Noir\n"
        "   2 × 500 ₽ = 1\u00a0000 ₽\n"
        "   -----------------\n"
        "\n💰 ИТОГО: 3\u00a0000 ₽\n"
        "\n👤 Пользователь: Иван"
        "\n📱 Telegram: @ivan"
        "\n\n📅 Дата: 19.10.2026, 12:30:00"
    )


def test_full_order_without_user_and_custom_title(products_by_id):
    text = format_full_order([CartEntry(2, 1)], products_by_id, None, now=NOW, title="Shop")

    assert text.startswith("=== ЗАКАЗ ИЗ SHOP ===")
    assert "👤 Пользователь: Неизвестно" in text
    assert "Telegram:" not in text


def test_manager_message(products_by_id, user):
    text = format_manager_message(CART, products_by_id, user)

    assert text == (
        "Здравствуйте! Хочу оформить заказ:\n\n"
        "• Aqua (EDT), 50 ml - 2 шт. × 1\u00a0000 ₽ = 2\u00a0000 ₽\n"
        "• Noir - 2 шт. × 500 ₽ = 1\u00a0000 ₽\n"
        "\nИтого: 3\u00a0000 ₽"
        "\n\nОт пользователя: Иван (@ivan)"
    )


def test_manager_message_without_username(products_by_id):
    text = format_manager_message(CART, products_by_id, TelegramUser(id=7, first_name="Ольга"))
    assert text.endswith("От пользователя: Ольга")


def test_stale_entries_are_skipped(products_by_id, user):
    text = format_manager_message([CartEntry(3, 1), CartEntry(2, 1)], products_by_id, user)
    assert "Noir" in text
    assert "Итого: 500 ₽" in text


@pytest.mark.parametrize("cart", [[], [CartEntry(3, 1)]])
def test_nothing_to_order_is_signalled(products_by_id, user, cart):
    with pytest.raises(EmptyCartError):
        format_full_order(cart, products_by_id, user)
    with pytest.raises(EmptyCartError):
        format_manager_message(cart, products_by_id, user)


def test_order_lines_totals(products_by_id):
    lines = order_lines(CART, products_by_id)
    assert [line.total for line in lines] == [2000, 1000]


def test_manager_link_encodes_like_encode_uri_component():
    url = manager_link("@parfumdepo", "a b&c=(ok)!\nИ")
    assert url == "https://t.me/parfumdepo?text=a%20b%26c%3D(ok)!%0A%D0%98"


def test_product_details(products_by_id):
    assert format_product_details(products_by_id[1]) == (
        "Aqua\nКонцентрация: EDT\nОбъем: 50 ml\nЦена: 1\u00a0000 ₽"
    )
    assert format_product_details(products_by_id[2]) == (
        "Noir\nКонцентрация: не указана\nОбъем: не указан\nЦена: 500 ₽"
    )
