# promptverse/app/main.py
from __future__ import annotations
import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promptverse.app.config import settings
from promptverse.app.deps import get_context
from promptverse.app.routers.admin import router as admin_router
from promptverse.app.routers.gallery import router as gallery_router
from promptverse.services.scheduler import Ticker

# Logging simples no stdout (bom para dev e containers)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

app = FastAPI(title="Promptverse API", version="0.2.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(gallery_router)
app.include_router(admin_router)

_tickers: list[Ticker] = []


@app.on_event("startup")
async def startup() -> None:
    ctx = get_context()
    _tickers[:] = [
        Ticker("message-sweep", settings.MESSAGE_SWEEP_INTERVAL_SECONDS, ctx.sweep_messages),
        Ticker("pin-lockout", settings.LOCKOUT_TICK_SECONDS, ctx.refresh_lockouts),
    ]
    for ticker in _tickers:
        await ticker.start()


@app.on_event("shutdown")
async def shutdown() -> None:
    for ticker in _tickers:
        await ticker.stop()
    _tickers.clear()


@app.get("/health")
def health():
    return {"ok": True}
