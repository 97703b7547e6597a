"""Business logic services."""

from app.services.clause_analyzer import ClauseAnalyzer, heuristic_analysis
from app.services.financial_extractor import (
    FinancialExtractor,
    merge_fees,
    merge_payment_terms,
    merge_rate_card,
)
from app.services.llm_client import LLMClient, LLMFailure, LLMResult, LLMSuccess
from app.services.pipeline import AnalysisResult, ContractPipeline
from app.services.rule_matcher import RuleMatch, match_rules
from app.services.segmenter import ClauseSegmenter, split_into_clauses
from app.services.summary_assembler import assemble_summary, generate_bullet_points
from app.services.text_extractor import (
    DocumentExtractionError,
    ExtractedText,
    UnsupportedDocumentError,
    extract_text,
)

__all__ = [
    "AnalysisResult",
    "ClauseAnalyzer",
    "ClauseSegmenter",
    "ContractPipeline",
    "DocumentExtractionError",
    "ExtractedText",
    "FinancialExtractor",
    "LLMClient",
    "LLMFailure",
    "LLMResult",
    "LLMSuccess",
    "RuleMatch",
    "UnsupportedDocumentError",
    "assemble_summary",
    "extract_text",
    "generate_bullet_points",
    "heuristic_analysis",
    "match_rules",
    "merge_fees",
    "merge_payment_terms",
    "merge_rate_card",
    "split_into_clauses",
]
