"""Fee, rate card and payment term extraction.

Each field has its own regex fallback so a partial model answer still yields
a complete FinancialData. The merge helpers implement the incremental
"extract again" operations: existing entries win, new keys are appended.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError

from app.schemas.domain import Fee, FinancialData, RateCardItem
from app.services.llm_client import LLMClient, LLMSuccess, truncate_text

logger = logging.getLogger(__name__)


class ClauseLike(Protocol):
    """Anything carrying clause text and an optional category."""

    clause: str
    category: Optional[str]


FEE_KEYWORDS = ("fee", "payment", "cost", "price", "charge")
RATE_KEYWORDS = ("price", "rate", "cost", "charge", "$", "dollar")
PAYMENT_KEYWORDS = ("payment", "invoice", "net", "due", "paid", "pay within")

FEE_NAME_RE = re.compile(r"(?:a|an|the)\s+([a-z\s]+(?:fee|charge|payment))", re.IGNORECASE)
DOLLAR_RE = re.compile(r"\$\s*([0-9,\.]+)|([0-9,\.]+)\s*dollars", re.IGNORECASE)
PERCENT_RE = re.compile(r"([0-9\.]+)\s*(?:percent|%)", re.IGNORECASE)
FREQUENCY_RE = re.compile(
    r"(?:per|each|every)\s+(month|year|quarter|week|day|hour|annum)", re.IGNORECASE
)
SERVICE_RE = re.compile(
    r"(?:for|of)\s+([a-z\s]+(?:service|support|consultation|assistance|work))",
    re.IGNORECASE,
)
UNIT_RE = re.compile(
    r"(?:per|each|every)\s+(hour|day|week|month|year|project|item|unit)", re.IGNORECASE
)
NET_DAYS_RE = re.compile(r"net\s+([0-9]+)\s+days?", re.IGNORECASE)
PAY_WITHIN_RE = re.compile(r"pay(?:ment)?\s+within\s+([0-9]+)\s+days?", re.IGNORECASE)
DUE_RE = re.compile(r"due\s+(?:within|in)\s+([0-9]+)\s+days?", re.IGNORECASE)
LATE_FEE_RE = re.compile(
    r"late\s+(?:fee|payment|charge)\s+of\s+([0-9\.]+%|[0-9\.]+\s+percent)", re.IGNORECASE
)

VERBATIM_TERM_MAX_CHARS = 100
DESCRIPTION_CHARS = 100

FINANCIALS_PROMPT = """You are an expert contract analyst specialized in extracting financial terms.
Analyze the provided contract text and extract all financial information including:

1. fees: Array of objects with name, amount, frequency (optional), description (optional), and category (optional)
2. paymentTerms: Array of payment term strings
3. rateCard: Array of objects with item, rate, and unit (optional)

Respond with a JSON object containing these three arrays."""

_AI_FIELDS = {
    "fees": TypeAdapter(list[Fee]),
    "paymentTerms": TypeAdapter(list[str]),
    "rateCard": TypeAdapter(list[RateCardItem]),
}


def _title_case(value: str) -> str:
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), value.strip())


def _mentions(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(k in lowered for k in keywords)


def extract_fees(clauses: Sequence[ClauseLike]) -> list[Fee]:
    """Pull named fees out of fee-related clauses, de-duplicated by name."""
    fees: dict[str, Fee] = {}
    for c in clauses:
        if not _mentions(c.clause, FEE_KEYWORDS):
            continue
        text = c.clause.lower()

        name_match = FEE_NAME_RE.search(text)
        amount_match = DOLLAR_RE.search(text)
        percent_match = PERCENT_RE.search(text)
        frequency_match = FREQUENCY_RE.search(text)

        if amount_match:
            amount = amount_match.group(0)
        elif percent_match:
            amount = percent_match.group(0)
        else:
            amount = "See contract for details"

        name = _title_case(name_match.group(1)) if name_match else "Unspecified Fee"
        description = c.clause[:DESCRIPTION_CHARS]
        if len(c.clause) > DESCRIPTION_CHARS:
            description += "..."

        # Last write wins; dict keeps first-seen position
        fees[name] = Fee(
            name=name,
            amount=amount,
            frequency=frequency_match.group(1) if frequency_match else None,
            category=c.category or "General Fee",
            description=description,
        )
    return list(fees.values())


def extract_rate_card(clauses: Sequence[ClauseLike]) -> list[RateCardItem]:
    """Pull priced services out of cost-related clauses, de-duplicated by item."""
    items: dict[str, RateCardItem] = {}
    for c in clauses:
        if not _mentions(c.clause, RATE_KEYWORDS):
            continue
        text = c.clause.lower()

        amount_match = DOLLAR_RE.search(text)
        if not amount_match:
            continue

        service_match = SERVICE_RE.search(text)
        unit_match = UNIT_RE.search(text)
        item = _title_case(service_match.group(1)) if service_match else (
            c.category or "General Service"
        )
        items[item] = RateCardItem(
            item=item,
            rate=amount_match.group(0),
            unit=f"per {unit_match.group(1)}" if unit_match else None,
        )
    return list(items.values())


def _payment_term(clause: str) -> Optional[str]:
    text = clause.lower()
    net_days = NET_DAYS_RE.search(text)
    pay_within = PAY_WITHIN_RE.search(text)
    due = DUE_RE.search(text)
    late_fee = LATE_FEE_RE.search(text)

    if not (net_days or pay_within or due or late_fee):
        return None
    if len(clause) <= VERBATIM_TERM_MAX_CHARS:
        return clause
    if net_days:
        return f"Payment terms: Net {net_days.group(1)} days."
    if pay_within:
        return f"Payment due within {pay_within.group(1)} days."
    if due:
        return f"Payment due within {due.group(1)} days."
    return f"Late payment fee of {late_fee.group(1)} applies."


def extract_payment_terms(clauses: Sequence[ClauseLike]) -> list[str]:
    """Normalize payment-term sentences, keeping short clauses verbatim."""
    terms: list[str] = []
    for c in clauses:
        if not _mentions(c.clause, PAYMENT_KEYWORDS):
            continue
        term = _payment_term(c.clause)
        if term is not None and term not in terms:
            terms.append(term)
    return terms


def merge_fees(existing: Sequence[Fee], new: Iterable[Fee]) -> list[Fee]:
    merged = {fee.name: fee for fee in existing}
    for fee in new:
        merged.setdefault(fee.name, fee)
    return list(merged.values())


def merge_rate_card(existing: Sequence[RateCardItem], new: Iterable[RateCardItem]) -> list[RateCardItem]:
    merged = {item.item: item for item in existing}
    for item in new:
        merged.setdefault(item.item, item)
    return list(merged.values())


def merge_payment_terms(existing: Sequence[str], new: Iterable[str]) -> list[str]:
    merged = list(dict.fromkeys(existing))
    for term in new:
        if term not in merged:
            merged.append(term)
    return merged


class FinancialExtractor:
    """Extract financial terms, preferring the model when one is configured."""

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm

    def _extract_with_ai(self, text: str) -> FinancialData:
        result = self.llm.complete_json(FINANCIALS_PROMPT, truncate_text(text, self.llm.max_chars))
        if not isinstance(result, LLMSuccess):
            return FinancialData()

        # A malformed array only sends its own field to the heuristic
        fields = {}
        for key, adapter in _AI_FIELDS.items():
            value = result.data.get(key)
            if value is None:
                continue
            try:
                fields[key] = adapter.validate_python(value)
            except ValidationError as e:
                logger.warning("Discarding malformed %s from financial extraction: %s", key, e)
        return FinancialData.model_validate(fields)

    def extract(self, clauses: Sequence[ClauseLike]) -> FinancialData:
        """Extract fees, payment terms and rate card from a document's clauses.

        Fields the model leaves empty are filled by the regex heuristics. If
        those find nothing either, the field stays empty.
        """
        found = FinancialData()
        if self.llm is not None and clauses:
            found = self._extract_with_ai("\n\n".join(c.clause for c in clauses))

        fees = found.fees
        if not fees:
            logger.info("Using heuristic fee extraction")
            fees = extract_fees(clauses)

        payment_terms = found.payment_terms
        if not payment_terms:
            logger.info("Using heuristic payment term extraction")
            payment_terms = extract_payment_terms(clauses)

        rate_card = found.rate_card
        if not rate_card:
            logger.info("Using heuristic rate card extraction")
            rate_card = extract_rate_card(clauses)

        return FinancialData(fees=fees, payment_terms=payment_terms, rate_card=rate_card)


__all__ = [
    "ClauseLike",
    "FinancialExtractor",
    "extract_fees",
    "extract_payment_terms",
    "extract_rate_card",
    "merge_fees",
    "merge_payment_terms",
    "merge_rate_card",
]
