from aiogram import Router, html
from aiogram.filters import Command
from aiogram.types import Message

from storefront.bot.keyboards import shop_kb
from storefront.config import settings

router = Router()


def _help_text() -> str:
    return (
        f"<b>{html.quote(settings.shop_title)}</b>\n\n"
        "Каталог и корзина открываются кнопкой «🛍 Открыть магазин».\n"
        "Соберите заказ и нажмите «Оформить» — сообщение с заказом "
        f"уйдёт менеджеру {html.quote(settings.manager_username)}.\n\n"
        "/shop — открыть магазин\n"
        "/help — помощь"
    )


@router.message(Command("start"))
async def cmd_start(message: Message):
    name = message.from_user.first_name if message.from_user else ""
    await message.answer(
        f"Здравствуйте, {html.quote(name)}! 👋\nДобро пожаловать в {html.quote(settings.shop_title)}.",
        reply_markup=shop_kb(settings.webapp_url),
    )


@router.message(Command("shop"))
async def cmd_shop(message: Message):
    await message.answer("🛍 Каталог:", reply_markup=shop_kb(settings.webapp_url))


@router.message(Command("help"))
async def cmd_help(message: Message):
    await message.answer(_help_text())
