"""FastAPI application entry point for the shoe shop bot."""

import logging
import sqlite3
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from basicbot.activity import Activity, InboundActivity
from basicbot.bot import BasicBot, build_bot
from basicbot.core.config import get_settings
from basicbot.core.errors import CollaboratorError, unhandled_exception_handler
from basicbot.core.logging import configure_logging, request_id_middleware
from basicbot.core.metrics import MetricsCollector
from basicbot.services.catalog import JsonProductCatalog
from basicbot.services.faq import FaqKnowledgeBase
from basicbot.state.store import SQLiteStateStorage

settings = get_settings()
logger = logging.getLogger("basicbot.app")

state_storage = SQLiteStateStorage(settings.state_db_path)
bot: BasicBot = build_bot(settings, state_storage)
metrics = MetricsCollector()

APOLOGY_MESSAGE = "I ran into an issue reaching one of my services. Could you try again later?"

app = FastAPI(title=settings.app_name, version="0.1.0", docs_url="/docs")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_id_middleware)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Return basic service status for monitoring."""

    return {"status": "ok"}


@app.get("/ready", tags=["health"])
async def readiness_probe() -> dict[str, Any]:
    """Readiness endpoint that verifies the state DB and collaborator wiring."""

    components: dict[str, dict[str, Any]] = {}

    state_ok = False
    state_error: str | None = None
    try:
        with sqlite3.connect(Path(settings.state_db_path)) as conn:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='records'"
            ).fetchone()
            state_ok = row is not None
    except Exception as exc:  # noqa: BLE001
        state_error = str(exc)
    components["state_db"] = {
        "path": str(settings.state_db_path),
        "ok": state_ok,
        **({"error": state_error} if state_error else {}),
    }

    knowledge_base = bot.knowledge_base
    knowledge_ok = knowledge_base.ready if isinstance(knowledge_base, FaqKnowledgeBase) else True
    components["knowledge_base"] = {"backend": knowledge_base.name, "ok": knowledge_ok}

    components["recognizer"] = {"backend": bot.recognizer.name, "ok": True}

    catalog = bot.catalog
    catalog_ok = catalog is not None
    if isinstance(catalog, JsonProductCatalog):
        catalog_ok = catalog.path.exists()
    components["catalog"] = {"backend": catalog.name if catalog else None, "ok": catalog_ok}

    if not state_ok:
        overall = "fail"
    elif all(component["ok"] for component in components.values()):
        overall = "ok"
    else:
        overall = "degraded"

    return {
        "status": overall,
        "environment": settings.environment,
        "components": components,
    }


@app.get("/conversations", tags=["conversations"])
async def list_conversations() -> list[str]:
    """List known conversation identifiers (development helper)."""

    return list(bot.conversation_state.iter_keys())


@app.post("/api/messages", tags=["chat"])
async def messages(payload: dict, request: Request) -> dict:
    """Run one inbound activity through the bot and return its replies."""

    try:
        activity = InboundActivity.from_payload(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        context = await bot.handle_turn(activity)
    except CollaboratorError as exc:
        logger.exception(
            "Collaborator %s failed [rid=%s]",
            exc.collaborator,
            getattr(request.state, "request_id", "-"),
        )
        metrics.record_turn(None, "collaborator_error")
        return {
            "conversation_id": activity.conversation_id,
            "activities": [Activity(text=APOLOGY_MESSAGE).to_dict()],
        }

    metrics.record_turn(context.intent, context.outcome)

    return {
        "conversation_id": activity.conversation_id,
        "activities": [reply.to_dict() for reply in context.outbox],
    }


@app.on_event("startup")
async def startup_logging() -> None:
    level = configure_logging(settings.log_level)
    logger.info(
        "Logging configured at %s level for %s environment (knowledge=%s, recognizer=%s)",
        logging.getLevelName(level),
        settings.environment,
        bot.knowledge_base.name,
        bot.recognizer.name,
    )


app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get("/metrics", tags=["metrics"])
async def metrics_endpoint() -> dict:
    snapshot = metrics.snapshot()
    return {
        "total_turns": snapshot.total_turns,
        "intents": snapshot.intents,
        "outcomes": snapshot.outcomes,
    }
