"""Tests for repository helpers against a throwaway SQLite database."""

from __future__ import annotations

import pytest

from app.db import repository
from app.db.models import ClauseRecord, DocumentStatus
from app.schemas.domain import (
    AnalyzedClause,
    ComplianceIssue,
    ComplianceRule,
    ComplianceStatus,
    ContractSummary,
    Fee,
    PartiesInfo,
    RateCardItem,
    Recommendation,
)


def make_summary(document_id="doc-1", **overrides):
    data = dict(
        document_id=document_id,
        title="Contract Agreement",
        parties=PartiesInfo(party1="Company A", party2="Company B"),
        effective_date="2024-01-01",
        term_length="12 months",
        payment_terms=["Payment terms: Net 30 days.", "Late payment fee of 1.5% applies."],
        rate_card=[RateCardItem(item="Hosting Service", rate="$250", unit="per month")],
        fees=[Fee(name="Setup Fee", amount="$1,000"), Fee(name="Late Fee", amount="1.5%")],
        key_obligations=["Deliver on time.", "Report defects."],
        confidentiality_terms="Keep it secret.",
        termination_clauses=["Either party may terminate."],
    )
    data.update(overrides)
    return ContractSummary(**data)


def make_clause(text, document_id="doc-1", status=ComplianceStatus.non_compliant):
    return AnalyzedClause(
        clause=text,
        section="1",
        page=1,
        category="Liability",
        risk_score=8,
        compliance_status=status,
        document_id=document_id,
        recommendations=[Recommendation(title="Remove", description="Remove it.")],
        compliance_issues=[ComplianceIssue(issue="Bad", rule="Liability clause", description="No.")],
    )


class TestRules:
    @pytest.mark.asyncio
    async def test_crud(self, sqlite_sessionmaker):
        async with sqlite_sessionmaker() as db:
            created = await repository.create_rule(
                db, ComplianceRule(keyword="arbitration", allowed=False, risk_score=8)
            )
            await db.commit()
            assert created.id is not None

            updated = await repository.update_rule(
                db, created.id, ComplianceRule(keyword="arbitration", allowed=True, category="Disputes")
            )
            await db.commit()
            assert updated.allowed is True
            assert updated.risk_score == 5
            assert updated.category == "Disputes"

            snapshot = await repository.rule_snapshot(db)
            assert [r.keyword for r in snapshot] == ["arbitration"]
            assert snapshot[0].id == created.id

            assert await repository.delete_rule(db, created.id) is True
            assert await repository.delete_rule(db, created.id) is False
            assert await repository.update_rule(db, 999, ComplianceRule(keyword="x")) is None

    @pytest.mark.asyncio
    async def test_seed_only_when_empty(self, sqlite_sessionmaker):
        async with sqlite_sessionmaker() as db:
            assert await repository.seed_default_rules(db) == 3
            assert await repository.seed_default_rules(db) == 0
            await db.commit()

            rules = await repository.list_rules(db)
            assert [(r.keyword, r.allowed) for r in rules] == [
                ("Non-disclosure agreement", True),
                ("Liability clause", False),
                ("Intellectual property rights", True),
            ]


class TestClauses:
    @pytest.mark.asyncio
    async def test_create_list_complete_reset(self, sqlite_sessionmaker):
        async with sqlite_sessionmaker() as db:
            records = await repository.create_clauses(
                db,
                [
                    make_clause("first"),
                    make_clause("second", status=ComplianceStatus.compliant),
                    make_clause("other", document_id="doc-2"),
                ],
            )
            await db.commit()
            assert [r.id for r in records] == sorted(r.id for r in records)

        async with sqlite_sessionmaker() as db:
            clauses = await repository.list_clauses(db, "doc-1")
            assert [c.clause for c in clauses] == ["first", "second"]
            assert clauses[0].compliance_status == ComplianceStatus.non_compliant
            assert clauses[1].compliance_status == ComplianceStatus.compliant
            assert clauses[0].recommendations == [{"title": "Remove", "description": "Remove it."}]
            assert len(await repository.list_clauses(db)) == 3

            completed = await repository.mark_clause_completed(db, clauses[0].id)
            await db.commit()
            assert completed.completed is True
            assert await repository.mark_clause_completed(db, 12345) is None

            assert await repository.delete_all_clauses(db) == 3
            await db.commit()
            assert await repository.list_clauses(db) == []


class TestSummaries:
    @pytest.mark.asyncio
    async def test_round_trip_preserves_array_order(self, sqlite_sessionmaker):
        summary = make_summary()
        async with sqlite_sessionmaker() as db:
            await repository.upsert_summary(db, summary)
            await db.commit()

        async with sqlite_sessionmaker() as db:
            loaded = await repository.get_summary(db, "doc-1")

        assert loaded == summary
        for field in ("payment_terms", "fees", "rate_card", "key_obligations", "termination_clauses"):
            assert getattr(loaded, field) == getattr(summary, field)

    @pytest.mark.asyncio
    async def test_upsert_replaces(self, sqlite_sessionmaker):
        async with sqlite_sessionmaker() as db:
            await repository.upsert_summary(db, make_summary())
            await db.commit()
            await repository.upsert_summary(db, make_summary(fees=[], title="Renewed"))
            await db.commit()

        async with sqlite_sessionmaker() as db:
            loaded = await repository.get_summary(db, "doc-1")
            assert loaded.title == "Renewed"
            assert loaded.fees == []
            assert loaded.payment_terms == make_summary().payment_terms

    @pytest.mark.asyncio
    async def test_missing_summary(self, sqlite_sessionmaker):
        async with sqlite_sessionmaker() as db:
            assert await repository.get_summary(db, "nope") is None


class TestDocuments:
    @pytest.mark.asyncio
    async def test_create_document(self, sqlite_sessionmaker):
        async with sqlite_sessionmaker() as db:
            await repository.create_document(
                db,
                document_id="doc-1",
                filename="a.pdf",
                content_type="application/pdf",
                file_size=10,
                bucket="uploads",
                object_key="doc-1.pdf",
            )
            await db.commit()

        async with sqlite_sessionmaker() as db:
            doc = await repository.get_document(db, "doc-1")
            assert doc.status == DocumentStatus.processing
            assert doc.object_key == "doc-1.pdf"
            assert doc.page_count is None
