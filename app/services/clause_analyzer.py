"""Compliance and risk classification of individual clauses.

The AI path asks the model to classify a clause against the rule set. The
heuristic path combines rule matches with keyword sniffing and is always
available as the fallback, so analyzing a clause never fails.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from pydantic import ValidationError

from app.schemas.domain import (
    ClauseAnalysis,
    ComplianceIssue,
    ComplianceRule,
    ComplianceStatus,
    Recommendation,
)
from app.services.llm_client import LLMClient, LLMFailure
from app.services.rule_matcher import match_rules

logger = logging.getLogger(__name__)

CATEGORIES = (
    "Liability",
    "IP Rights",
    "Confidentiality",
    "Payment Terms",
    "Termination",
    "Indemnification",
)

# Checked in order; the first hit wins
CATEGORY_KEYWORDS = (
    (("confiden",), "Confidentiality"),
    (("terminat",), "Termination"),
    (("payment", "fee"), "Payment Terms"),
    (("liab",), "Liability"),
    (("intellectual", "property"), "IP Rights"),
    (("indemnif",), "Indemnification"),
)

# Inclusive risk bands per status
RISK_BANDS = {
    ComplianceStatus.non_compliant: (7, 9),
    ComplianceStatus.review_needed: (4, 6),
    ComplianceStatus.compliant: (0, 3),
}

ANALYSIS_PROMPT = """You are an expert contract analyst that can evaluate contract clauses against compliance rules.
Analyze the given clause against the provided compliance rules and determine:
1. compliance_status: Whether it's "Compliant", "Non-Compliant", or "Review Needed"
2. risk_score: A score from 1-10 (10 being highest risk)
3. category: The category of the clause (e.g., "Liability", "Payment Terms", "Confidentiality")
4. recommendations: List of recommendation objects with "title" and "description" fields
5. compliance_issues: List of issue objects with "issue", "rule" (optional), and "description" fields

Respond with JSON only."""


def format_rules(rules: Sequence[ComplianceRule]) -> str:
    """Render the rule set one rule per line for the analysis prompt."""
    lines = []
    for rule in rules:
        verdict = "allowed" if rule.allowed else "not allowed"
        lines.append(
            f'Rule {rule.id}: Keywords "{rule.keyword}" are {verdict}. '
            f"Risk score: {rule.risk_score or 5}. "
            f"Category: {rule.category or 'General'}. "
            f"{rule.description or ''}".rstrip()
        )
    return "\n".join(lines)


def infer_category(clause: str, rng: random.Random) -> str:
    text = clause.lower()
    for needles, category in CATEGORY_KEYWORDS:
        if any(n in text for n in needles):
            return category
    return rng.choice(CATEGORIES)


def heuristic_analysis(
    clause: str,
    rules: Sequence[ComplianceRule],
    rng: Optional[random.Random] = None,
) -> ClauseAnalysis:
    """Classify a clause from rule matches and keywords alone.

    A clause that matches only allowed rules is Compliant or Review Needed
    on a coin flip. The risk score is drawn from 0-9 and then forced into the
    band of the chosen status.
    """
    rng = rng or random.Random()

    matches = match_rules(clause, rules)
    violations = [m for m in matches if m.is_violation]

    if violations:
        status = ComplianceStatus.non_compliant
    elif matches:
        # TODO: confirm with product whether allowed-keyword hits should be weighted
        status = ComplianceStatus.compliant if rng.random() > 0.5 else ComplianceStatus.review_needed
    else:
        status = ComplianceStatus.compliant

    base = rng.randrange(10)
    low, high = RISK_BANDS[status]
    risk_score = max(low, min(high, base))

    recommendations = []
    if status is ComplianceStatus.non_compliant:
        keywords = ", ".join(v.rule.keyword for v in violations)
        recommendations.append(
            Recommendation(
                title="Remove non-compliant language",
                description=(
                    f"This clause contains non-compliant language related to {keywords}. "
                    "Consider revising or removing."
                ),
            )
        )
    elif status is ComplianceStatus.review_needed:
        recommendations.append(
            Recommendation(
                title="Review clause carefully",
                description=(
                    "This clause contains language that may require further review by legal experts."
                ),
            )
        )

    issues = [
        ComplianceIssue(
            issue=f'Non-compliant use of "{v.rule.keyword}"',
            rule=v.rule.keyword,
            description=v.rule.description
            or f'The use of "{v.rule.keyword}" violates compliance rules.',
        )
        for v in violations
    ]

    return ClauseAnalysis(
        compliance_status=status,
        risk_score=risk_score,
        category=infer_category(clause, rng),
        recommendations=recommendations,
        compliance_issues=issues,
    )


class ClauseAnalyzer:
    """Classify clauses, preferring the model when one is configured."""

    def __init__(self, llm: Optional[LLMClient] = None, rng: Optional[random.Random] = None):
        self.llm = llm
        self.rng = rng or random.Random()

    def _analyze_with_ai(
        self,
        clause: str,
        rules: Sequence[ComplianceRule],
        section: Optional[str],
    ) -> Optional[ClauseAnalysis]:
        user = (
            f'Clause to analyze: "{clause}"\n\n'
            f"Section: {section or 'Not specified'}\n\n"
            f"Compliance Rules:\n{format_rules(rules)}"
        )
        result = self.llm.complete_json(ANALYSIS_PROMPT, user)
        if isinstance(result, LLMFailure):
            return None

        data = {k: v for k, v in result.data.items() if v is not None}
        data.setdefault("category", section or "General")
        try:
            return ClauseAnalysis.model_validate(data)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Discarding malformed clause analysis: %s", e)
            return None

    def analyze(
        self,
        clause: str,
        rules: Sequence[ComplianceRule],
        section: Optional[str] = None,
    ) -> ClauseAnalysis:
        if self.llm is not None:
            analysis = self._analyze_with_ai(clause, rules, section)
            if analysis is not None:
                return analysis
            logger.warning("Falling back to heuristic analysis for clause: %.50s...", clause)

        return heuristic_analysis(clause, rules, self.rng)


__all__ = [
    "CATEGORIES",
    "RISK_BANDS",
    "ClauseAnalyzer",
    "format_rules",
    "heuristic_analysis",
    "infer_category",
]
