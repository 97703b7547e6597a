"""Tests for keyword rule matching."""

import itertools

from app.schemas.domain import ComplianceRule
from app.services.rule_matcher import match_rules

RULES = [
    ComplianceRule(id=1, keyword="Non-disclosure agreement", allowed=True),
    ComplianceRule(id=2, keyword="Liability clause", allowed=False),
    ComplianceRule(id=3, keyword="Intellectual property rights", allowed=True),
    ComplianceRule(id=4, keyword="arbitration", allowed=False),
]


class TestMatchRules:
    def test_case_insensitive_substring(self):
        matches = match_rules("Under this LIABILITY CLAUSE the vendor pays nothing.", RULES)
        assert [m.rule.id for m in matches] == [2]
        assert matches[0].is_violation is True

    def test_allowed_rule_is_not_violation(self):
        matches = match_rules("All intellectual property rights remain with the Company.", RULES)
        assert len(matches) == 1
        assert matches[0].is_violation is False

    def test_no_negation_handling(self):
        """Keyword presence is enough, even when negated."""
        matches = match_rules("There is no arbitration under this agreement.", RULES)
        assert [m.rule.keyword for m in matches] == ["arbitration"]

    def test_no_match(self):
        assert match_rules("The parties are independent contractors.", RULES) == []

    def test_empty_rules(self):
        assert match_rules("Any clause at all", []) == []

    def test_blank_keyword_never_matches(self):
        rule = ComplianceRule.model_construct(id=9, keyword="   ", allowed=False, risk_score=5)
        assert match_rules("anything", [rule]) == []

    def test_permutation_invariant(self):
        clause = (
            "This liability clause and the non-disclosure agreement survive; "
            "disputes go to arbitration."
        )
        expected = {m.rule.id for m in match_rules(clause, RULES)}
        assert expected == {1, 2, 4}
        for perm in itertools.permutations(RULES):
            assert {m.rule.id for m in match_rules(clause, perm)} == expected
