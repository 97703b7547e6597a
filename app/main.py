"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.core.logging import setup_logging
from app.db import AsyncSessionLocal, close_db, init_db
from app.db.repository import seed_default_rules
from app.routes import (
    clauses_router,
    documents_router,
    health_router,
    rules_router,
    summaries_router,
)
from app.services.llm_client import LLMClient
from app.services.pipeline import ContractPipeline
from app.storage import ContractArchive

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup, cleanup on shutdown."""
    setup_logging()

    # Initialize database tables
    await init_db()

    if settings.SEED_DEFAULT_RULES:
        async with AsyncSessionLocal() as db:
            added = await seed_default_rules(db)
            await db.commit()
        if added:
            logger.info("Seeded %d default compliance rules", added)

    # LLM client - absent key means heuristics only
    app.state.llm = LLMClient.from_settings(settings)
    if app.state.llm is None:
        logger.info("OPENAI_API_KEY not set, using heuristic analysis only")
    app.state.pipeline = ContractPipeline.from_settings(settings, app.state.llm)

    # MinIO archive - tolerate failure
    app.state.archive = None
    if settings.S3_ENDPOINT and settings.S3_ACCESS_KEY and settings.S3_SECRET_KEY:
        try:
            archive = ContractArchive.from_settings(settings)
            archive.ensure_buckets()
            app.state.archive = archive
            logger.info("Connected to object storage at %s", settings.S3_ENDPOINT)
        except Exception as e:
            logger.warning("Object storage unavailable: %s", e)

    yield

    await close_db()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Register routers
app.include_router(health_router)
app.include_router(rules_router)
app.include_router(clauses_router)
app.include_router(documents_router)
app.include_router(summaries_router)
