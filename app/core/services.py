# app/core/services.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Capability, Settings
from app.core.database import build_engine, build_session_factory, init_db
from app.core.logging_config import get_logger
from app.core.relay import LineMessenger, RelayPipeline
from app.core.relay.responder import build_responder
from app.core.store import MessageStore, store_capability

logger = get_logger("services")


@dataclass
class Services:
    """Process-scoped collaborators, built once at startup and injected into routes."""
    settings: Settings
    store: Optional[MessageStore]
    database: Capability
    pipeline: RelayPipeline


def build_store(settings: Settings) -> Optional[MessageStore]:
    if not settings.database_capability().available:
        logger.error("[DB] DATABASE_URL missing, running without persistence")
        return None
    try:
        engine = build_engine(settings.database_url)
    except (SQLAlchemyError, ImportError):
        # Malformed URL or missing driver
        logger.exception("[DB] cannot build an engine from DATABASE_URL, running without persistence")
        return None
    init_db(engine)
    return MessageStore(build_session_factory(engine))


def build_services(settings: Settings) -> Services:
    for name in settings.missing_names():
        logger.error("[ENV] Missing: %s", name)

    store = build_store(settings)
    database = store_capability(settings, store)

    responder = None
    if settings.openai_capability().available:
        responder = build_responder(settings)

    messenger = LineMessenger(settings.line_channel_access_token)
    pipeline = RelayPipeline(settings, store, responder, messenger, database=database)
    return Services(settings=settings, store=store, database=database, pipeline=pipeline)


def get_services(request: Request) -> Services:
    return request.app.state.services
