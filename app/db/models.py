from __future__ import annotations

"""SQLAlchemy models for documents, rules, clauses and summaries (typed, portable)."""

import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.schemas.domain import ComplianceStatus


class DocumentStatus(str, enum.Enum):
    processing = "processing"
    completed = "completed"
    failed = "failed"


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)  # pdf, doc or docx mimetype
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    page_count: Mapped[Optional[int]] = mapped_column(Integer)
    raw_text: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[DocumentStatus] = mapped_column(
        SAEnum(DocumentStatus), nullable=False, default=DocumentStatus.processing
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text)

    bucket: Mapped[Optional[str]] = mapped_column(String(63))
    object_key: Mapped[Optional[str]] = mapped_column(String(512))  # e.g., "<uuid>.pdf"

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class ComplianceRuleRecord(Base):
    __tablename__ = "compliance_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    keyword: Mapped[str] = mapped_column(Text, nullable=False)
    allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    category: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)


class ClauseRecord(Base):
    __tablename__ = "clauses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    clause: Mapped[str] = mapped_column(Text, nullable=False)
    section: Mapped[Optional[str]] = mapped_column(String(32))
    page: Mapped[Optional[int]] = mapped_column(Integer)
    category: Mapped[Optional[str]] = mapped_column(String(80))
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False)
    compliance_status: Mapped[ComplianceStatus] = mapped_column(
        SAEnum(
            ComplianceStatus,
            name="compliance_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    document_id: Mapped[str] = mapped_column(String(36), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recommendations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    compliance_issues: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (Index("idx_clauses_document", "document_id"),)


class ContractSummaryRecord(Base):
    __tablename__ = "contract_summaries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    title: Mapped[Optional[str]] = mapped_column(Text)
    parties: Mapped[Optional[dict]] = mapped_column(JSON)
    effective_date: Mapped[Optional[str]] = mapped_column(String(32))
    term_length: Mapped[Optional[str]] = mapped_column(String(80))
    payment_terms: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    rate_card: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    fees: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    key_obligations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    confidentiality_terms: Mapped[Optional[str]] = mapped_column(Text)
    termination_clauses: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
