from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../storefront repo
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


def _get_bool(*keys: str, default: bool = False) -> bool:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    bot_token: str
    store_api_url: str
    manager_username: str
    webapp_url: str
    shop_title: str
    currency_sign: str
    max_quantity: int
    cart_write_retries: int
    cart_retry_delay: float
    request_timeout: float
    max_sessions: int
    session_ttl: float
    dev_mode: bool
    log_level: str
    web_host: str
    web_port: int


def load_settings() -> Settings:
    return Settings(
        bot_token=_get_env("BOT_TOKEN", "TELEGRAM_BOT_TOKEN", default="") or "",
        store_api_url=_get_env("STORE_API_URL", "API_URL", default="") or "",
        manager_username=_get_env("MANAGER_USERNAME", default="@parfumdepo") or "@parfumdepo",
        webapp_url=_get_env("WEBAPP_URL", default="") or "",
        shop_title=_get_env("SHOP_TITLE", default="PARFUMDEPO") or "PARFUMDEPO",
        currency_sign=_get_env("CURRENCY_SIGN", default="₽") or "₽",
        # 0 = без ограничения
        max_quantity=max(_get_int("MAX_QUANTITY", default=99) or 0, 0),
        cart_write_retries=max(_get_int("CART_WRITE_RETRIES", default=2) or 0, 0),
        cart_retry_delay=_get_float("CART_RETRY_DELAY", default=0.5),
        request_timeout=_get_float("REQUEST_TIMEOUT", default=15.0),
        max_sessions=max(_get_int("MAX_SESSIONS", default=1000) or 0, 0),
        session_ttl=_get_float("SESSION_TTL", default=3600.0),
        dev_mode=_get_bool("DEV_MODE", default=False),
        log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
        web_host=_get_env("WEB_HOST", "HOST", default="0.0.0.0") or "0.0.0.0",
        web_port=_get_int("WEB_PORT", "PORT", default=8000) or 8000,
    )


settings = load_settings()
