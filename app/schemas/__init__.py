"""Domain schemas for contract review."""

from app.schemas.domain import (
    AnalyzedClause,
    ClauseAnalysis,
    ComplianceIssue,
    ComplianceRule,
    ComplianceStatus,
    ContractSummary,
    Fee,
    FinancialData,
    PartiesInfo,
    RateCardItem,
    Recommendation,
)

__all__ = [
    "AnalyzedClause",
    "ClauseAnalysis",
    "ComplianceIssue",
    "ComplianceRule",
    "ComplianceStatus",
    "ContractSummary",
    "Fee",
    "FinancialData",
    "PartiesInfo",
    "RateCardItem",
    "Recommendation",
]
