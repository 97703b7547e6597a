"""Tests for the end-to-end analysis pipeline."""

import random
import threading
import time
from unittest.mock import patch

import pytest

from app.core.config import Settings
from app.schemas.domain import ClauseAnalysis, ComplianceRule, ComplianceStatus
from app.services.pipeline import CLAUSES_PER_PAGE, ContractPipeline, detect_section
from app.services.text_extractor import DOCX_MIMETYPE, DocumentExtractionError

RULES = [
    ComplianceRule(id=1, keyword="Liability clause", allowed=False),
    ComplianceRule(id=2, keyword="Non-disclosure agreement", allowed=True),
]

PARAGRAPHS = [
    "1. The Vendor shall not be liable for any damages whatsoever under this liability clause.",
    "2. Payment terms shall be net 30 days from receipt of invoice. A late payment fee of 1.5% "
    "per month will be assessed on all overdue amounts.",
    "3. This Agreement may be terminated by either party with thirty (30) days written notice.",
    "Section 4 Both parties shall keep proprietary information confidential under the "
    "non-disclosure agreement.",
    "The relationship between the parties is that of independent contractors and nothing more.",
]


class TestDetectSection:
    @pytest.mark.parametrize(
        "clause,expected",
        [
            ("1. Definitions apply throughout.", "1"),
            ("4.2 Fees are payable monthly.", "4.2"),
            ("Section 7 Governing law.", "7"),
            ("ARTICLE 12) Notices.", "12"),
            ("The parties agree.", None),
            ("30 days written notice is required to terminate this agreement.", None),
            ("1.5% interest accrues monthly.", None),
            ("2) Term of the agreement.", "2"),
        ],
    )
    def test_detect(self, clause, expected):
        assert detect_section(clause) == expected


class TestAnalyzeClauses:
    def test_order_and_pages_preserved(self):
        pipeline = ContractPipeline(max_workers=4, rng=random.Random(5))
        clauses = [f"Clause number {i} of the agreement, long enough to count." for i in range(10)]

        results = pipeline.analyze_clauses(clauses, [], "doc-1")

        assert [r.clause for r in results] == clauses
        assert [r.page for r in results] == [i // CLAUSES_PER_PAGE + 1 for i in range(10)]
        assert all(r.document_id == "doc-1" for r in results)
        assert all(r.completed is False for r in results)

    def test_order_preserved_when_workers_finish_out_of_order(self):
        pipeline = ContractPipeline(max_workers=3)
        clauses = [f"clause-{i}" for i in range(6)]
        seen_threads = set()

        def slow_analyze(clause, rules, section=None):
            seen_threads.add(threading.get_ident())
            # Earlier clauses finish last
            time.sleep(0.01 * (6 - int(clause.split("-")[1])))
            return ClauseAnalysis(category=clause)

        with patch.object(pipeline.analyzer, "analyze", side_effect=slow_analyze):
            results = pipeline.analyze_clauses(clauses, [], "doc-1")

        assert [r.category for r in results] == clauses
        assert len(seen_threads) > 1

    def test_per_clause_fallback_does_not_abort_batch(self, make_llm):
        llm, _ = make_llm(
            {"compliance_status": "Compliant", "risk_score": 2, "category": "General"},
            "not json",
        )
        pipeline = ContractPipeline(llm, max_workers=1, rng=random.Random(0))
        results = pipeline.analyze_clauses(
            ["First clause text.", "Second clause with a liability clause."], RULES, "doc-1"
        )

        assert results[0].compliance_status == ComplianceStatus.compliant
        assert results[1].compliance_status == ComplianceStatus.non_compliant


class TestRun:
    def test_run_docx(self, docx_bytes):
        pipeline = ContractPipeline(rng=random.Random(11))
        result = pipeline.run(docx_bytes(PARAGRAPHS), DOCX_MIMETYPE, RULES, "doc-9", filename="msa.docx")

        assert result.document_id == "doc-9"
        assert [c.clause for c in result.clauses] == PARAGRAPHS
        assert [c.section for c in result.clauses] == ["1", "2", "3", "4", None]

        liability = result.clauses[0]
        assert liability.compliance_status == ComplianceStatus.non_compliant
        assert 7 <= liability.risk_score <= 9
        assert liability.category == "Liability"

        summary = result.summary
        assert summary.document_id == "doc-9"
        assert summary.title == "Contract Agreement msa.docx"
        assert "Payment terms: Net 30 days." in summary.payment_terms
        assert summary.termination_clauses == [PARAGRAPHS[2]]
        assert summary.confidentiality_terms == PARAGRAPHS[3]

    def test_extraction_failure_propagates(self, docx_bytes):
        with pytest.raises(DocumentExtractionError):
            ContractPipeline().run(docx_bytes(), DOCX_MIMETYPE, RULES, "doc-9")

    def test_sample_fallback(self, docx_bytes):
        pipeline = ContractPipeline(rng=random.Random(2), sample_fallback=True)
        result = pipeline.run(docx_bytes(), DOCX_MIMETYPE, RULES, "doc-9")

        assert result.page_count == 5
        assert len(result.clauses) == 10


class TestFromSettings:
    def test_seeded_pipelines_agree(self, docx_bytes):
        settings = Settings(RANDOM_SEED=42, ANALYSIS_MAX_WORKERS=1)
        data = docx_bytes(PARAGRAPHS)

        first = ContractPipeline.from_settings(settings).run(data, DOCX_MIMETYPE, RULES, "d")
        second = ContractPipeline.from_settings(settings).run(data, DOCX_MIMETYPE, RULES, "d")

        assert first.clauses == second.clauses
        assert first.summary.key_obligations == second.summary.key_obligations
