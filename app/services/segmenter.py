"""Split contract text into clause strings."""

from __future__ import annotations

import logging
import re
from typing import Optional

from app.services.llm_client import LLMClient, LLMSuccess, truncate_text

logger = logging.getLogger(__name__)

MIN_CLAUSE_CHARS = 50

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_BREAK = re.compile(r"\.\s+")

SEGMENT_PROMPT = """You are an expert contract analyst that can identify distinct clauses in legal documents.
Analyze the provided contract text and extract individual clauses.
Each clause should be complete and self-contained, focusing on a single legal provision or concept.
Respond with a JSON object {"clauses": [...]} where each string is one complete clause."""


def split_into_clauses(text: str) -> list[str]:
    """Heuristic segmentation by paragraphs, then sentences.

    Paragraphs are separated by blank lines. Only pieces longer than
    MIN_CLAUSE_CHARS survive. A single long run-on block that neither split
    breaks up is returned whole.
    """
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text)]
    clauses = [p for p in paragraphs if len(p) > MIN_CLAUSE_CHARS]
    if clauses:
        return clauses

    sentences = [s.strip() for s in _SENTENCE_BREAK.split(text)]
    clauses = [s for s in sentences if len(s) > MIN_CLAUSE_CHARS]
    if clauses:
        return clauses

    stripped = text.strip()
    return [stripped] if len(stripped) > MIN_CLAUSE_CHARS else []


class ClauseSegmenter:
    """AI-first clause segmentation with a heuristic fallback."""

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm

    def _segment_with_ai(self, text: str) -> list[str]:
        result = self.llm.complete_json(SEGMENT_PROMPT, truncate_text(text, self.llm.max_chars))
        if not isinstance(result, LLMSuccess):
            return []

        raw = result.data.get("clauses")
        if not isinstance(raw, list):
            logger.warning("AI segmentation returned no clause list")
            return []
        return [c.strip() for c in raw if isinstance(c, str) and c.strip()]

    def segment(self, text: str) -> list[str]:
        """Return clauses in source order."""
        if self.llm is not None:
            clauses = self._segment_with_ai(text)
            if clauses:
                logger.info("AI segmentation found %d clauses", len(clauses))
                return clauses
            logger.warning("AI segmentation produced no clauses, falling back to heuristics")

        clauses = split_into_clauses(text)
        logger.info("Heuristic segmentation found %d clauses", len(clauses))
        return clauses


__all__ = ["ClauseSegmenter", "MIN_CLAUSE_CHARS", "split_into_clauses"]
