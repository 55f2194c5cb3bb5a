from __future__ import annotations

import logging
import random
import uuid
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from storefront.config import settings
from storefront.constants import DEV_USER, MESSAGES
from storefront.models import TelegramUser
from storefront.state import InvalidAction, Storefront, UnknownAction
from storefront.store.client import StoreClient
from storefront.web.sessions import SessionStore

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

INIT_DATA_HEADER = "X-Telegram-Init-Data"
SESSION_COOKIE = "sid"

app = FastAPI(title="Storefront Mini App")

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

SESSIONS = SessionStore(settings.max_sessions, settings.session_ttl)  # user:<id> | anon:<sid>

# режим разработки: без Telegram подставляем тестового пользователя
_DEV_USER_ID = random.randint(1, 1_000_000)


class ActionRequest(BaseModel):
    type: str
    query: Optional[str] = None
    product_id: Optional[int] = None
    quantity: Optional[int] = None
    delta: Optional[int] = None
    view: Optional[str] = None

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"type"})


@app.on_event("startup")
async def _startup() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    if getattr(app.state, "store", None) is None:
        if not settings.store_api_url:
            raise RuntimeError("STORE_API_URL is empty. Set STORE_API_URL in .env")
        app.state.store = StoreClient(settings.store_api_url, timeout=settings.request_timeout)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await SESSIONS.close()
    store = getattr(app.state, "store", None)
    if isinstance(store, StoreClient):
        await store.close()


def _resolve_user(request: Request) -> Optional[TelegramUser]:
    user = TelegramUser.from_init_data(request.headers.get(INIT_DATA_HEADER))
    if user is None and settings.dev_mode:
        user = TelegramUser(id=_DEV_USER_ID, **DEV_USER)
    return user


def _session_key(request: Request, response: Response, user: Optional[TelegramUser]) -> str:
    if user is not None and user.identified:
        return f"user:{user.id}"
    sid = request.cookies.get(SESSION_COOKIE)
    if not sid:
        sid = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE, sid, httponly=True, samesite="none", secure=True)
    return f"anon:{sid}"


async def _get_session(request: Request, response: Response, fresh: bool = False) -> Tuple[Storefront, bool]:
    user = _resolve_user(request)
    key = _session_key(request, response, user)
    session = SESSIONS.get(key)
    if session is not None and not fresh:
        await SESSIONS.evict()
        return session, False
    # writer переживает перезапуск сессии: записи корзины одного пользователя идут по очереди
    writer = session.writer if session is not None else None
    session = Storefront(request.app.state.store, user, settings=settings, writer=writer)
    await SESSIONS.put(key, session)
    return session, True


def _reply(session: Storefront, effects: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"view": session.render(), "effects": effects or {}}


def _render(request: Request, name: str, ctx: dict[str, Any]) -> HTMLResponse:
    base = {
        "shop_title": settings.shop_title,
        "copy_failed": MESSAGES["copy_failed"],
    }
    base.update(ctx)
    return templates.TemplateResponse(request, name, base)


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    return _render(request, "index.html", {})


@app.get("/health")
def health():
    return {"status": "ok", "sessions": len(SESSIONS)}


# ---------------- mini app api ----------------

@app.post("/api/session")
async def session_start(request: Request, response: Response):
    session, _ = await _get_session(request, response, fresh=True)
    effects = await session.dispatch("start")
    return _reply(session, effects.to_dict())


@app.get("/api/view")
async def view(request: Request, response: Response):
    session, created = await _get_session(request, response)
    if created:
        await session.dispatch("start")
    return _reply(session)


@app.post("/api/action")
async def action(body: ActionRequest, request: Request, response: Response):
    session, created = await _get_session(request, response)
    if created:
        await session.dispatch("start")
    try:
        effects = await session.dispatch(body.type, body.payload())
    except UnknownAction:
        raise HTTPException(status_code=400, detail=f"unknown action: {body.type}")
    except InvalidAction as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _reply(session, effects.to_dict())


def run() -> None:
    uvicorn.run("storefront.web.main:app", host=settings.web_host, port=settings.web_port)
