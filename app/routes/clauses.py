"""Clause listing and review-progress endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import repository
from app.db.session import get_db
from app.schemas.api import ClauseResponse, CompleteClauseResponse, ResetResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clauses", tags=["clauses"])


@router.get("", response_model=list[ClauseResponse])
async def list_clauses(
    document_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List analyzed clauses in document order."""
    return await repository.list_clauses(db, document_id)


@router.post("/{clause_id}/complete", response_model=CompleteClauseResponse)
async def complete_clause(clause_id: int, db: AsyncSession = Depends(get_db)):
    """Mark a clause as reviewed."""
    record = await repository.mark_clause_completed(db, clause_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Clause not found")
    await db.commit()
    return CompleteClauseResponse(
        message="Clause marked as completed",
        clause=ClauseResponse.model_validate(record),
    )


@router.delete("/reset", response_model=ResetResponse)
async def reset_clauses(db: AsyncSession = Depends(get_db)):
    """Delete every stored clause."""
    deleted = await repository.delete_all_clauses(db)
    await db.commit()
    logger.info("Reset clauses: %d deleted", deleted)
    return ResetResponse(message=f"Deleted {deleted} clauses", deleted_count=deleted)
