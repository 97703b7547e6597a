"""Compliance rule CRUD endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import repository
from app.db.session import get_db
from app.schemas.api import ComplianceRuleIn
from app.schemas.domain import ComplianceRule

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/compliance-rules", tags=["compliance-rules"])


@router.get("", response_model=list[ComplianceRule])
async def list_rules(db: AsyncSession = Depends(get_db)):
    records = await repository.list_rules(db)
    return [ComplianceRule.model_validate(r) for r in records]


@router.post("", response_model=ComplianceRule, status_code=201)
async def create_rule(payload: ComplianceRuleIn, db: AsyncSession = Depends(get_db)):
    record = await repository.create_rule(db, ComplianceRule(**payload.model_dump()))
    await db.commit()
    logger.info("Created compliance rule %d (%r)", record.id, record.keyword)
    return ComplianceRule.model_validate(record)


@router.put("/{rule_id}", response_model=ComplianceRule)
async def update_rule(rule_id: int, payload: ComplianceRuleIn, db: AsyncSession = Depends(get_db)):
    record = await repository.update_rule(db, rule_id, ComplianceRule(**payload.model_dump()))
    if record is None:
        raise HTTPException(status_code=404, detail="Compliance rule not found")
    await db.commit()
    return ComplianceRule.model_validate(record)


@router.delete("/{rule_id}")
async def delete_rule(rule_id: int, db: AsyncSession = Depends(get_db)):
    if not await repository.delete_rule(db, rule_id):
        raise HTTPException(status_code=404, detail="Compliance rule not found")
    await db.commit()
    logger.info("Deleted compliance rule %d", rule_id)
    return {"success": True}
