"""Contract summary, financial extraction and bullet digest endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import repository
from app.db.models import ClauseRecord
from app.db.session import get_db
from app.deps import get_llm, get_pipeline
from app.schemas.api import (
    BulletSummaryResponse,
    FeesResponse,
    PaymentTermsResponse,
    RateCardResponse,
)
from app.schemas.domain import ContractSummary, FinancialData
from app.services.financial_extractor import merge_fees, merge_payment_terms, merge_rate_card
from app.services.llm_client import LLMClient
from app.services.pipeline import ContractPipeline
from app.services.summary_assembler import generate_bullet_points

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["summaries"])


async def _load_summary(db: AsyncSession, document_id: str) -> ContractSummary:
    summary = await repository.get_summary(db, document_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Contract summary not found")
    return summary


async def _load_clauses(db: AsyncSession, document_id: str) -> list[ClauseRecord]:
    clauses = await repository.list_clauses(db, document_id)
    if not clauses:
        raise HTTPException(status_code=404, detail="No clauses found for document")
    return clauses


async def _extract_financials(
    db: AsyncSession, pipeline: ContractPipeline, document_id: str
) -> tuple[ContractSummary, FinancialData]:
    summary = await _load_summary(db, document_id)
    clauses = await _load_clauses(db, document_id)
    found = await run_in_threadpool(pipeline.financials.extract, clauses)
    return summary, found


@router.get("/contract-summary/{document_id}", response_model=ContractSummary)
async def get_contract_summary(document_id: str, db: AsyncSession = Depends(get_db)):
    return await _load_summary(db, document_id)


@router.post("/contract-summary", response_model=ContractSummary)
async def save_contract_summary(summary: ContractSummary, db: AsyncSession = Depends(get_db)):
    """Create or replace the summary for its document id."""
    saved = await repository.upsert_summary(db, summary)
    await db.commit()
    return saved


@router.post("/extract-fees/{document_id}", response_model=FeesResponse)
async def extract_fees(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    pipeline: ContractPipeline = Depends(get_pipeline),
):
    """Re-extract fees and merge them into the stored summary."""
    summary, found = await _extract_financials(db, pipeline, document_id)
    before = len(summary.fees)
    summary.fees = merge_fees(summary.fees, found.fees)
    await repository.upsert_summary(db, summary)
    await db.commit()
    added = len(summary.fees) - before
    return FeesResponse(message=f"Extracted {added} new fees", fees=summary.fees)


@router.post("/extract-costs/{document_id}", response_model=RateCardResponse)
async def extract_costs(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    pipeline: ContractPipeline = Depends(get_pipeline),
):
    """Re-extract rate card items and merge them into the stored summary."""
    summary, found = await _extract_financials(db, pipeline, document_id)
    before = len(summary.rate_card)
    summary.rate_card = merge_rate_card(summary.rate_card, found.rate_card)
    await repository.upsert_summary(db, summary)
    await db.commit()
    added = len(summary.rate_card) - before
    return RateCardResponse(message=f"Extracted {added} new rate card items", rate_card=summary.rate_card)


@router.post("/extract-payment-terms/{document_id}", response_model=PaymentTermsResponse)
async def extract_payment_terms(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    pipeline: ContractPipeline = Depends(get_pipeline),
):
    """Re-extract payment terms and merge them into the stored summary."""
    summary, found = await _extract_financials(db, pipeline, document_id)
    before = len(summary.payment_terms)
    summary.payment_terms = merge_payment_terms(summary.payment_terms, found.payment_terms)
    await repository.upsert_summary(db, summary)
    await db.commit()
    added = len(summary.payment_terms) - before
    return PaymentTermsResponse(
        message=f"Extracted {added} new payment terms",
        payment_terms=summary.payment_terms,
    )


@router.post("/generate-bullet-summary/{document_id}", response_model=BulletSummaryResponse)
async def generate_bullet_summary(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    llm: LLMClient | None = Depends(get_llm),
):
    summary = await _load_summary(db, document_id)
    clauses = await repository.list_clauses(db, document_id)
    points = await run_in_threadpool(generate_bullet_points, summary, clauses, llm)
    return BulletSummaryResponse(message="Bullet points generated", bullet_points=points)
