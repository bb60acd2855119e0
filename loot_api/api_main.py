# api_main.py
# FastAPI service for the loot tracker
# - /ingest/log-line stands in for the game client's chat-dispatch thread
# - /loot and /rolls expose snapshots and the admin clear operations

from __future__ import annotations

import logging
import os
import threading
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from loot_api.catalog.source import InMemoryCatalog
from loot_api.config import Settings, configure_logging
from loot_api.discord_webhook import LootWebhookClient
from loot_api.lootlog.models import ActorContext, ItemRef, LootEvent
from loot_api.lootlog.selftest import run_classifier_selftest
from loot_api.tracking.service import LootTracker

logger = logging.getLogger("lootview")


# ---------- models ----------
class LogLineIngest(BaseModel):
    line: str
    item_id: Optional[int] = None
    item_name: Optional[str] = ""


class ActorUpdate(BaseModel):
    name: Optional[str] = None
    account_id: int = 0
    zone_id: int = 0
    zone_name: Optional[str] = ""


class ActorHolder:
    """Host-side local-player context; None until the player is logged in."""

    def __init__(self) -> None:
        self._actor: Optional[ActorContext] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[ActorContext]:
        with self._lock:
            return self._actor

    def set(self, actor: Optional[ActorContext]) -> None:
        with self._lock:
            self._actor = actor


def _load_catalog(settings: Settings) -> InMemoryCatalog:
    if not settings.catalog_path:
        logger.warning("LOOT_CATALOG_PATH not set; item names will not be resolved.")
        return InMemoryCatalog()
    return InMemoryCatalog.from_json_file(settings.catalog_path)


def _should_post(settings: Settings, webhook: LootWebhookClient, ev: LootEvent) -> bool:
    if not (settings.notifications_enabled and webhook.enabled):
        return False
    return ev.is_own_loot or not settings.notify_own_only


# ---------- app ----------
def create_app(
    settings: Optional[Settings] = None,
    *,
    catalog: Optional[InMemoryCatalog] = None,
    webhook: Optional[LootWebhookClient] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings)

    if settings.selftest_on_startup:
        run_classifier_selftest()

    actor = ActorHolder()
    tracker = LootTracker(
        catalog if catalog is not None else _load_catalog(settings),
        actor.get,
        max_recent=settings.max_recent_events,
        dedup_window=settings.dedup_window_seconds,
        dedup_horizon=settings.dedup_horizon_seconds,
    )
    webhook = webhook or LootWebhookClient(settings.loot_webhook_url)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await webhook.aclose()

    app = FastAPI(title="Lootview API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.tracker = tracker
    app.state.actor = actor
    app.state.webhook = webhook

    # ---------- routes ----------
    @app.get("/")
    async def root():
        return {"service": "lootview-api", "env": settings.environment, "ok": True}

    @app.get("/healthz")
    async def healthz():
        return {"ok": True, "env": settings.environment}

    @app.put("/actor")
    async def put_actor(payload: ActorUpdate = Body(...)):
        name = (payload.name or "").strip()
        if not name:
            actor.set(None)
            return {"ok": True, "actor": None}
        ctx = ActorContext(
            name=name,
            account_id=payload.account_id,
            zone_id=payload.zone_id,
            zone_name=(payload.zone_name or "").strip(),
        )
        actor.set(ctx)
        return {"ok": True, "actor": {"name": ctx.name, "zone": ctx.display_zone}}

    @app.post("/ingest/log-line")
    @app.post("/api/ingest/log-line")
    async def ingest_log_line(payload: LogLineIngest = Body(...)):
        if not (payload.line or "").strip():
            raise HTTPException(status_code=400, detail="Empty line")

        item_ref = None
        if payload.item_id or payload.item_name:
            item_ref = ItemRef(item_id=int(payload.item_id or 0), name=(payload.item_name or "").strip())

        ev = tracker.process_line(payload.line, item_ref)

        posted = False
        err: Optional[str] = None
        if ev is not None and _should_post(settings, webhook, ev):
            try:
                posted = await webhook.post_loot(ev, env=settings.environment)
            except Exception as e:
                err = f"webhook error: {e}"
                logger.warning("Loot webhook post failed: %s", e)

        return {
            "ok": True,
            "accepted": ev is not None,
            "event": ev.to_dict() if ev is not None else None,
            "posted": posted,
            "error": err,
        }

    @app.get("/loot/recent")
    async def loot_recent():
        events = tracker.recent_events()
        return {"count": len(events), "events": [e.to_dict() for e in events]}

    @app.post("/loot/clear")
    async def loot_clear():
        return {"ok": True, "cleared": tracker.clear_history()}

    @app.get("/rolls")
    async def rolls():
        ctx = actor.get()
        local_name = ctx.name if ctx else ""
        sessions = tracker.roll_sessions()
        return {
            "all_awarded": tracker.all_rolls_awarded(),
            "sessions": [s.to_dict(local_name) for s in sessions],
        }

    @app.post("/rolls/clear-completed")
    async def rolls_clear_completed():
        return {"ok": True, "cleared": tracker.clear_completed_rolls()}

    @app.post("/rolls/clear-all")
    async def rolls_clear_all():
        return {"ok": True, "cleared": tracker.clear_all_rolls()}

    @app.get("/catalog/items/{item_id}")
    async def catalog_item(item_id: int) -> Dict[str, Any]:
        rec = tracker.resolver.resolve_id(item_id)
        if rec is None:
            raise HTTPException(status_code=404, detail=f"Unknown item id {item_id}")
        return {"item_id": rec.item_id, "icon_id": rec.icon_id, "rarity": rec.rarity, "name": rec.name}

    return app


# ---------- uvicorn entry ----------
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("loot_api.api_main:create_app", factory=True, host="0.0.0.0", port=port, reload=False)
