"""Contract summary assembly and bullet-point digest."""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Optional, Protocol, Sequence

from app.schemas.domain import (
    ComplianceStatus,
    ContractSummary,
    FinancialData,
    PartiesInfo,
)
from app.services.llm_client import LLMClient, LLMSuccess

logger = logging.getLogger(__name__)

DEFAULT_TERMINATION = "Either party may terminate with 30 days written notice"
DEFAULT_CONFIDENTIALITY = "Standard confidentiality terms apply"
DEFAULT_TERM_LENGTH = "12 months"
DEFAULT_PARTIES = PartiesInfo(party1="Company A", party2="Company B")

MAX_KEY_OBLIGATIONS = 3
HIGH_RISK_THRESHOLD = 7
MEDIUM_RISK_THRESHOLD = 4
LOW_RISK_OBLIGATION_LIMIT = 5

BULLET_PROMPT = """You are an expert contract analyst that can create clear, concise bullet point summaries of legal documents.
Based on the provided contract summary and statistics, generate a set of bullet points that highlight:
1. Key parties and dates
2. Important financial terms (payment terms, fees, rates)
3. Major obligations and rights
4. Risk and compliance assessment
5. Termination conditions
6. Any other critical contract elements

Format each point as a complete sentence ending with a period. Be concise and direct.
Respond with a JSON object containing an array of strings named "bulletPoints"."""


class ScoredClause(Protocol):
    clause: str
    category: Optional[str]
    risk_score: int
    compliance_status: ComplianceStatus


def _first_clause(clauses: Sequence[ScoredClause], category: str, needle: str) -> Optional[str]:
    for c in clauses:
        if c.category == category or needle in c.clause.lower():
            return c.clause
    return None


def assemble_summary(
    document_id: str,
    clauses: Sequence[ScoredClause],
    financials: FinancialData,
    *,
    title: Optional[str] = None,
    today: Optional[date] = None,
) -> ContractSummary:
    """Build the document summary from analyzed clauses and financial terms.

    Parties, effective date and term length are placeholders; they are not
    read from the document.
    """
    termination = _first_clause(clauses, "Termination", "terminat") or DEFAULT_TERMINATION
    confidentiality = (
        _first_clause(clauses, "Confidentiality", "confidential") or DEFAULT_CONFIDENTIALITY
    )

    obligations = [
        c.clause
        for c in clauses
        if c.compliance_status == ComplianceStatus.compliant
        and c.risk_score < LOW_RISK_OBLIGATION_LIMIT
    ][:MAX_KEY_OBLIGATIONS]

    return ContractSummary(
        document_id=document_id,
        title=title,
        parties=DEFAULT_PARTIES.model_copy(),
        effective_date=(today or date.today()).isoformat(),
        term_length=DEFAULT_TERM_LENGTH,
        payment_terms=list(financials.payment_terms),
        rate_card=list(financials.rate_card),
        fees=list(financials.fees),
        key_obligations=obligations,
        confidentiality_terms=confidentiality,
        termination_clauses=[termination],
    )


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def basic_bullet_points(summary: ContractSummary, clauses: Sequence[ScoredClause]) -> list[str]:
    """Digest built from counts and the first entry of each summary field."""
    parties = summary.parties or PartiesInfo()
    points = [
        f"Contract between {parties.party1 or 'Party 1'} and {parties.party2 or 'Party 2'}.",
        f"Effective date: {summary.effective_date or 'Not specified'}.",
        f"Term length: {summary.term_length or 'Not specified'}.",
    ]

    if summary.payment_terms:
        points.append(f"Payment terms: {summary.payment_terms[0]}.")

    if summary.fees:
        points.append(
            f"Contains {_plural(len(summary.fees), 'fee')}, including {summary.fees[0].name}."
        )

    statuses = [c.compliance_status for c in clauses]
    points.append(
        "Compliance analysis: "
        f"{statuses.count(ComplianceStatus.compliant)} compliant clauses, "
        f"{statuses.count(ComplianceStatus.non_compliant)} non-compliant clauses, "
        f"{statuses.count(ComplianceStatus.review_needed)} clauses needing review."
    )

    high = sum(1 for c in clauses if c.risk_score >= HIGH_RISK_THRESHOLD)
    medium = sum(
        1 for c in clauses if MEDIUM_RISK_THRESHOLD <= c.risk_score < HIGH_RISK_THRESHOLD
    )
    low = sum(1 for c in clauses if c.risk_score < MEDIUM_RISK_THRESHOLD)
    points.append(
        f"Risk assessment: {high} high-risk clauses, {medium} medium-risk clauses, "
        f"{low} low-risk clauses."
    )

    if summary.confidentiality_terms:
        points.append("Contains confidentiality requirements.")

    if summary.termination_clauses:
        points.append(f"Termination clause: {summary.termination_clauses[0]}.")

    return points


def generate_bullet_points(
    summary: ContractSummary,
    clauses: Sequence[ScoredClause],
    llm: Optional[LLMClient] = None,
) -> list[str]:
    """Bullet-point digest of a contract, from the model when available."""
    if llm is not None:
        high = sum(1 for c in clauses if c.risk_score >= HIGH_RISK_THRESHOLD)
        non_compliant = sum(
            1 for c in clauses if c.compliance_status == ComplianceStatus.non_compliant
        )
        user = (
            f"Contract Summary: {json.dumps(summary.model_dump(by_alias=True), indent=2)}\n\n"
            "Document Statistics:\n"
            f"- Total Clauses: {len(clauses)}\n"
            f"- High Risk Clauses: {high}\n"
            f"- Non-Compliant Clauses: {non_compliant}"
        )
        result = llm.complete_json(BULLET_PROMPT, user)
        if isinstance(result, LLMSuccess):
            points = result.data.get("bulletPoints")
            if isinstance(points, list) and points:
                return [str(p) for p in points]
        logger.warning("AI bullet summary unavailable, using basic digest")

    return basic_bullet_points(summary, clauses)


__all__ = [
    "DEFAULT_CONFIDENTIALITY",
    "DEFAULT_TERMINATION",
    "assemble_summary",
    "basic_bullet_points",
    "generate_bullet_points",
]
