"""End-to-end clause analysis pipeline.

extract text -> segment -> analyze clauses (bounded pool) -> extract
financials -> assemble summary. Synchronous; the upload route runs it in
the server thread pool.
"""

from __future__ import annotations

import logging
import random
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

from app.core.config import Settings
from app.schemas.domain import AnalyzedClause, ComplianceRule, ContractSummary
from app.services.clause_analyzer import ClauseAnalyzer
from app.services.financial_extractor import FinancialExtractor
from app.services.llm_client import LLMClient
from app.services.segmenter import ClauseSegmenter
from app.services.summary_assembler import assemble_summary
from app.services.text_extractor import extract_text

logger = logging.getLogger(__name__)

# Page numbers are estimated, not read from the layout
CLAUSES_PER_PAGE = 4

# "Section 7", "4.2" or "1." / "1)"; a bare leading number such as "30 days" is not a section
_SECTION_RE = re.compile(
    r"^\s*(?:(?:section|article|clause)\s+(\d+(?:\.\d+)*)[.)]?|(\d+(?:\.\d+)+)[.)]?|(\d+)[.)])\s",
    re.IGNORECASE,
)


def detect_section(clause: str) -> Optional[str]:
    """Leading section number such as "4.2" or "Section 7", if present."""
    match = _SECTION_RE.match(clause)
    if match is None:
        return None
    return next(g for g in match.groups() if g is not None)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    document_id: str
    clauses: list[AnalyzedClause]
    summary: ContractSummary
    page_count: Optional[int]
    text: str


class ContractPipeline:
    """Wires the analysis stages to one LLM client and random source."""

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        *,
        max_workers: int = 4,
        rng: Optional[random.Random] = None,
        max_size_mb: int = 10,
        max_pages: int = 100,
        sample_fallback: bool = False,
    ):
        self.rng = rng or random.Random()
        self.segmenter = ClauseSegmenter(llm)
        self.analyzer = ClauseAnalyzer(llm, self.rng)
        self.financials = FinancialExtractor(llm)
        self.max_workers = max(1, max_workers)
        self.max_size_mb = max_size_mb
        self.max_pages = max_pages
        self.sample_fallback = sample_fallback

    @classmethod
    def from_settings(cls, settings: Settings, llm: Optional[LLMClient] = None) -> "ContractPipeline":
        return cls(
            llm,
            max_workers=settings.ANALYSIS_MAX_WORKERS,
            rng=random.Random(settings.RANDOM_SEED),
            max_size_mb=settings.MAX_FILE_SIZE_MB,
            max_pages=settings.DOC_MAX_PAGES,
            sample_fallback=settings.SAMPLE_TEXT_FALLBACK,
        )

    def analyze_clauses(
        self,
        clauses: Sequence[str],
        rules: Sequence[ComplianceRule],
        document_id: str,
    ) -> list[AnalyzedClause]:
        """Analyze clauses concurrently; output order follows input order."""
        logger.info("Analyzing %d clauses against %d compliance rules", len(clauses), len(rules))
        sections = [detect_section(c) for c in clauses]

        def analyze(item):
            text, section = item
            return self.analyzer.analyze(text, rules, section)

        # map() yields results in submission order
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            analyses = list(pool.map(analyze, zip(clauses, sections)))

        return [
            AnalyzedClause(
                clause=text,
                section=section,
                page=index // CLAUSES_PER_PAGE + 1,
                category=analysis.category,
                risk_score=analysis.risk_score,
                compliance_status=analysis.compliance_status,
                document_id=document_id,
                recommendations=analysis.recommendations,
                compliance_issues=analysis.compliance_issues,
            )
            for index, (text, section, analysis) in enumerate(zip(clauses, sections, analyses))
        ]

    def run(
        self,
        data: bytes,
        mimetype: str,
        rules: Sequence[ComplianceRule],
        document_id: str,
        *,
        filename: Optional[str] = None,
    ) -> AnalysisResult:
        """Analyze one uploaded document.

        Raises:
            DocumentExtractionError: No text could be extracted.
        """
        extracted = extract_text(
            data,
            mimetype,
            max_size_mb=self.max_size_mb,
            max_pages=self.max_pages,
            sample_fallback=self.sample_fallback,
            rng=self.rng,
        )

        clause_texts = self.segmenter.segment(extracted.text)
        clauses = self.analyze_clauses(clause_texts, rules, document_id)
        financials = self.financials.extract(clauses)

        summary = assemble_summary(
            document_id,
            clauses,
            financials,
            title=f"Contract Agreement {filename}" if filename else "Contract Agreement",
        )

        logger.info(
            "Document %s analyzed: %d clauses, %d fees, %d payment terms",
            document_id,
            len(clauses),
            len(summary.fees),
            len(summary.payment_terms),
        )
        return AnalysisResult(
            document_id=document_id,
            clauses=clauses,
            summary=summary,
            page_count=extracted.page_count,
            text=extracted.text,
        )


__all__ = ["AnalysisResult", "ContractPipeline", "detect_section"]
