"""Domain models for clause analysis and contract summaries."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ComplianceStatus(str, Enum):
    """Outcome of checking a clause against the rule set."""

    compliant = "Compliant"
    non_compliant = "Non-Compliant"
    review_needed = "Review Needed"


class ComplianceRule(BaseModel):
    """User-defined keyword rule, read-only during an analysis run."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: Optional[int] = None
    keyword: str = Field(min_length=1)
    allowed: bool = True
    risk_score: int = Field(default=5, ge=1, le=10, alias="riskScore")
    category: Optional[str] = None
    description: Optional[str] = None


class Recommendation(BaseModel):
    title: str
    description: str


class ComplianceIssue(BaseModel):
    issue: str
    rule: Optional[str] = None
    description: str


class ClauseAnalysis(BaseModel):
    """Classification of a single clause.

    Defaults mirror what a partially filled model response falls back to.
    """

    compliance_status: ComplianceStatus = ComplianceStatus.review_needed
    risk_score: int = 5
    category: str = "General"
    recommendations: list[Recommendation] = Field(default_factory=list)
    compliance_issues: list[ComplianceIssue] = Field(default_factory=list)

    @field_validator("risk_score", mode="before")
    @classmethod
    def _clamp_risk(cls, value):
        if value is None:
            return 5
        return max(0, min(10, int(value)))


class AnalyzedClause(BaseModel):
    """A clause ready to be persisted for a document."""

    clause: str
    section: Optional[str] = None
    page: Optional[int] = None
    category: Optional[str] = None
    risk_score: int = Field(ge=0, le=10)
    compliance_status: ComplianceStatus
    document_id: str
    completed: bool = False
    recommendations: list[Recommendation] = Field(default_factory=list)
    compliance_issues: list[ComplianceIssue] = Field(default_factory=list)


class Fee(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    amount: str
    frequency: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


class RateCardItem(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    item: str
    rate: str
    unit: Optional[str] = None


class FinancialData(BaseModel):
    """Financial terms pulled out of a contract."""

    model_config = ConfigDict(populate_by_name=True)

    fees: list[Fee] = Field(default_factory=list)
    payment_terms: list[str] = Field(default_factory=list, alias="paymentTerms")
    rate_card: list[RateCardItem] = Field(default_factory=list, alias="rateCard")


class PartiesInfo(BaseModel):
    party1: Optional[str] = None
    party2: Optional[str] = None


class ContractSummary(BaseModel):
    """Document-level summary, unique per document id."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    document_id: str = Field(alias="documentId")
    title: Optional[str] = None
    parties: Optional[PartiesInfo] = None
    effective_date: Optional[str] = Field(default=None, alias="effectiveDate")
    term_length: Optional[str] = Field(default=None, alias="termLength")
    payment_terms: list[str] = Field(default_factory=list, alias="paymentTerms")
    rate_card: list[RateCardItem] = Field(default_factory=list, alias="rateCard")
    fees: list[Fee] = Field(default_factory=list)
    key_obligations: list[str] = Field(default_factory=list, alias="keyObligations")
    confidentiality_terms: Optional[str] = Field(default=None, alias="confidentialityTerms")
    termination_clauses: list[str] = Field(default_factory=list, alias="terminationClauses")
