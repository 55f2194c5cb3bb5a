from aiogram.types import KeyboardButton, ReplyKeyboardMarkup, WebAppInfo


def shop_kb(webapp_url: str) -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text="🛍 Открыть магазин", web_app=WebAppInfo(url=webapp_url))],
            [KeyboardButton(text="/help")],
        ],
        resize_keyboard=True,
    )
