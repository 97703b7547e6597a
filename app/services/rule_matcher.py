"""Keyword matching of clauses against compliance rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from app.schemas.domain import ComplianceRule


@dataclass(frozen=True, slots=True)
class RuleMatch:
    rule: ComplianceRule
    is_violation: bool


def match_rules(clause: str, rules: Iterable[ComplianceRule]) -> list[RuleMatch]:
    """Return every rule whose keyword occurs in the clause, case-insensitively.

    A match on a disallowed rule is a violation. No stemming or negation
    handling: "not liable" still matches "liable".
    """
    text = clause.lower()
    matches = []
    for rule in rules:
        keyword = rule.keyword.strip().lower()
        if keyword and keyword in text:
            matches.append(RuleMatch(rule=rule, is_violation=not rule.allowed))
    return matches


__all__ = ["RuleMatch", "match_rules"]
