"""API routes package."""

from app.routes.clauses import router as clauses_router
from app.routes.documents import router as documents_router
from app.routes.health import router as health_router
from app.routes.rules import router as rules_router
from app.routes.summaries import router as summaries_router

__all__ = [
    "clauses_router",
    "documents_router",
    "health_router",
    "rules_router",
    "summaries_router",
]
