"""Repository helpers for rules, clauses, summaries and documents."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import (
    ClauseRecord,
    ComplianceRuleRecord,
    ContractSummaryRecord,
    Document,
    DocumentStatus,
)
from app.schemas.domain import AnalyzedClause, ComplianceRule, ContractSummary

DEFAULT_RULES = (
    ComplianceRule(keyword="Non-disclosure agreement", allowed=True),
    ComplianceRule(keyword="Liability clause", allowed=False),
    ComplianceRule(keyword="Intellectual property rights", allowed=True),
)


# -----------------
# Compliance rules
# -----------------
async def list_rules(db: AsyncSession) -> list[ComplianceRuleRecord]:
    result = await db.execute(select(ComplianceRuleRecord).order_by(ComplianceRuleRecord.id))
    return list(result.scalars().all())


async def rule_snapshot(db: AsyncSession) -> list[ComplianceRule]:
    """Immutable copy of the rule set for one analysis run."""
    return [ComplianceRule.model_validate(r) for r in await list_rules(db)]


async def get_rule(db: AsyncSession, rule_id: int) -> Optional[ComplianceRuleRecord]:
    return await db.get(ComplianceRuleRecord, rule_id)


async def create_rule(db: AsyncSession, rule: ComplianceRule) -> ComplianceRuleRecord:
    record = ComplianceRuleRecord(**rule.model_dump(exclude={"id"}))
    db.add(record)
    await db.flush()
    await db.refresh(record)
    return record


async def update_rule(
    db: AsyncSession, rule_id: int, rule: ComplianceRule
) -> Optional[ComplianceRuleRecord]:
    record = await get_rule(db, rule_id)
    if record is None:
        return None
    for key, value in rule.model_dump(exclude={"id"}).items():
        setattr(record, key, value)
    await db.flush()
    return record


async def delete_rule(db: AsyncSession, rule_id: int) -> bool:
    record = await get_rule(db, rule_id)
    if record is None:
        return False
    await db.delete(record)
    await db.flush()
    return True


async def seed_default_rules(db: AsyncSession) -> int:
    """Insert the starter rules when the table is empty. Returns rows added."""
    count = (await db.execute(select(func.count(ComplianceRuleRecord.id)))).scalar() or 0
    if count:
        return 0
    for rule in DEFAULT_RULES:
        await create_rule(db, rule)
    return len(DEFAULT_RULES)


# --------
# Clauses
# --------
async def list_clauses(db: AsyncSession, document_id: Optional[str] = None) -> list[ClauseRecord]:
    stmt = select(ClauseRecord).order_by(ClauseRecord.id)
    if document_id is not None:
        stmt = stmt.where(ClauseRecord.document_id == document_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_clause(db: AsyncSession, clause_id: int) -> Optional[ClauseRecord]:
    return await db.get(ClauseRecord, clause_id)


async def create_clauses(db: AsyncSession, clauses: Iterable[AnalyzedClause]) -> list[ClauseRecord]:
    """Insert clauses in order so ids follow document position."""
    records = []
    for clause in clauses:
        record = ClauseRecord(**clause.model_dump())
        db.add(record)
        records.append(record)
    await db.flush()
    return records


async def mark_clause_completed(db: AsyncSession, clause_id: int) -> Optional[ClauseRecord]:
    record = await get_clause(db, clause_id)
    if record is None:
        return None
    record.completed = True
    await db.flush()
    return record


async def delete_all_clauses(db: AsyncSession) -> int:
    result = await db.execute(delete(ClauseRecord))
    return result.rowcount or 0


# ------------------
# Contract summaries
# ------------------
def _summary_columns(summary: ContractSummary) -> dict:
    return summary.model_dump(mode="json", exclude={"document_id"})


async def get_summary_record(db: AsyncSession, document_id: str) -> Optional[ContractSummaryRecord]:
    result = await db.execute(
        select(ContractSummaryRecord).where(ContractSummaryRecord.document_id == document_id)
    )
    return result.scalar_one_or_none()


async def get_summary(db: AsyncSession, document_id: str) -> Optional[ContractSummary]:
    record = await get_summary_record(db, document_id)
    return ContractSummary.model_validate(record) if record is not None else None


async def upsert_summary(db: AsyncSession, summary: ContractSummary) -> ContractSummary:
    """Insert or replace the whole summary for its document id."""
    record = await get_summary_record(db, summary.document_id)
    columns = _summary_columns(summary)
    if record is None:
        record = ContractSummaryRecord(document_id=summary.document_id, **columns)
        db.add(record)
    else:
        for key, value in columns.items():
            setattr(record, key, value)
    await db.flush()
    return ContractSummary.model_validate(record)


# ----------
# Documents
# ----------
async def create_document(
    db: AsyncSession,
    *,
    document_id: str,
    filename: str,
    content_type: str,
    file_size: int,
    bucket: Optional[str] = None,
    object_key: Optional[str] = None,
) -> Document:
    doc = Document(
        id=document_id,
        filename=filename,
        content_type=content_type,
        file_size=file_size,
        bucket=bucket,
        object_key=object_key,
        status=DocumentStatus.processing,
    )
    db.add(doc)
    await db.flush()
    return doc


async def get_document(db: AsyncSession, document_id: str) -> Optional[Document]:
    return await db.get(Document, document_id)


__all__ = [
    "DEFAULT_RULES",
    "create_clauses",
    "create_document",
    "create_rule",
    "delete_all_clauses",
    "delete_rule",
    "get_clause",
    "get_document",
    "get_rule",
    "get_summary",
    "get_summary_record",
    "list_clauses",
    "list_rules",
    "mark_clause_completed",
    "rule_snapshot",
    "seed_default_rules",
    "update_rule",
    "upsert_summary",
]
