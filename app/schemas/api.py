"""API request and response models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.domain import (
    AnalyzedClause,
    ComplianceIssue,
    ComplianceStatus,
    ContractSummary,
    Fee,
    RateCardItem,
    Recommendation,
)


class ComplianceRuleIn(BaseModel):
    """Payload for creating or replacing a compliance rule."""

    model_config = ConfigDict(populate_by_name=True)

    keyword: str = Field(min_length=1)
    allowed: bool = True
    risk_score: int = Field(default=5, ge=1, le=10, alias="riskScore")
    category: Optional[str] = None
    description: Optional[str] = None


class ClauseResponse(BaseModel):
    """Stored clause as returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    clause: str
    section: Optional[str] = None
    page: Optional[int] = None
    category: Optional[str] = None
    risk_score: int
    compliance_status: ComplianceStatus
    document_id: str
    completed: bool = False
    recommendations: list[Recommendation] = Field(default_factory=list)
    compliance_issues: list[ComplianceIssue] = Field(default_factory=list)


class UploadResponse(BaseModel):
    message: str
    document_id: str
    clauses: list[AnalyzedClause]
    summary: ContractSummary


class CompleteClauseResponse(BaseModel):
    message: str
    clause: ClauseResponse


class ResetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    deleted_count: int = Field(alias="deletedCount")


class FeesResponse(BaseModel):
    success: bool = True
    message: str
    fees: list[Fee]


class RateCardResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    rate_card: list[RateCardItem] = Field(alias="rateCard")


class PaymentTermsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    payment_terms: list[str] = Field(alias="paymentTerms")


class BulletSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    bullet_points: list[str] = Field(alias="bulletPoints")
