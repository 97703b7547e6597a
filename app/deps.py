"""Shared dependencies for FastAPI routes.

Lifecycle-scoped collaborators live on ``app.state`` (created in the
lifespan) and are handed to routes through these providers, so tests can
swap them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from fastapi import Request

if TYPE_CHECKING:
    from app.services.llm_client import LLMClient
    from app.services.pipeline import ContractPipeline
    from app.storage.archive import ContractArchive


def get_llm(request: Request) -> Optional["LLMClient"]:
    """LLM client, or None when the AI path is disabled."""
    return getattr(request.app.state, "llm", None)


def get_pipeline(request: Request) -> "ContractPipeline":
    """Analysis pipeline built at startup; built lazily if startup was skipped."""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        from app.core.config import settings
        from app.services.pipeline import ContractPipeline

        pipeline = ContractPipeline.from_settings(settings, get_llm(request))
        request.app.state.pipeline = pipeline
    return pipeline


def get_archive(request: Request) -> Optional["ContractArchive"]:
    """Object storage archive, or None when MinIO is not configured."""
    return getattr(request.app.state, "archive", None)


__all__ = ["get_archive", "get_llm", "get_pipeline"]
