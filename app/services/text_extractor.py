"""Document text extraction.

Pure function interface over bytes: PDF via pdfplumber, Word documents via
python-docx. No disk I/O.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

import docx
import pdfplumber

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"
DOC_MIMETYPE = "application/msword"
DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_MIMETYPES = frozenset({PDF_MIMETYPE, DOC_MIMETYPE, DOCX_MIMETYPE})

# Page count assumed for sample text when a Word document yields none
WORD_SAMPLE_PAGES = 5
SAMPLE_CLAUSES_PER_PAGE = 2

SAMPLE_CLAUSES = (
    "The Vendor shall not be liable for any damages whatsoever arising out of or in connection with the use or performance of the software, including but not limited to direct, indirect, incidental, consequential, and special damages, even if advised of the possibility of such damages.",
    "All intellectual property developed during the course of this agreement shall be owned exclusively by the Company. Contractor hereby assigns all rights, title and interest in such intellectual property to the Company.",
    "Both parties agree to maintain the confidentiality of all proprietary information shared during the course of this agreement and for a period of two (2) years following termination, unless required by law to disclose such information.",
    "Payment terms shall be net 30 days from receipt of invoice. A late payment fee of 1.5% per month will be assessed on all overdue amounts.",
    "This Agreement may be terminated by either party with thirty (30) days written notice. Upon termination, all licenses granted herein shall immediately terminate.",
    "Client agrees to indemnify and hold harmless the Service Provider from any claims, damages, or liabilities arising from Client's use of the services provided under this agreement.",
    "Any dispute arising out of or in connection with this contract, including any question regarding its existence, validity or termination, shall be referred to and finally resolved by arbitration under the Rules of the London Court of International Arbitration.",
    "Neither party shall be liable for any failure or delay in performance due to circumstances beyond its reasonable control, including but not limited to acts of God, natural disasters, war, terrorism, riots, or government action.",
    "Service Provider warrants that all services will be performed in a professional manner consistent with industry standards. This warranty is exclusive and in lieu of all other warranties, whether express or implied.",
    "In no event shall the aggregate liability of either party exceed the total amount paid by Client to Service Provider in the twelve months preceding the claim.",
    "This agreement constitutes the entire understanding between the parties concerning the subject matter hereof and supersedes all prior agreements, understandings, or negotiations.",
    "The relationship between the parties is that of independent contractors. Nothing in this Agreement shall be construed as creating an employer-employee relationship, partnership, or joint venture.",
)


class DocumentExtractionError(Exception):
    """No usable text could be obtained from the uploaded document."""

    pass


class UnsupportedDocumentError(DocumentExtractionError):
    """Mimetype is not PDF, DOC or DOCX, or the content does not match it."""

    pass


@dataclass(frozen=True, slots=True)
class ExtractedText:
    """Immutable result of document text extraction."""

    text: str
    page_count: Optional[int]
    synthetic: bool = False


def generate_sample_contract_text(pages: int, rng: Optional[random.Random] = None) -> str:
    """Build placeholder contract text from the fixed sample clause pool.

    Two clauses per page; a clause never directly repeats the one before it.
    """
    rng = rng or random.Random()
    chosen: list[str] = []
    for _ in range(max(1, pages) * SAMPLE_CLAUSES_PER_PAGE):
        clause = rng.choice(SAMPLE_CLAUSES)
        while chosen and clause == chosen[-1]:
            clause = rng.choice(SAMPLE_CLAUSES)
        chosen.append(clause)
    return "\n\n".join(chosen)


def _extract_pdf(data: bytes, max_pages: int) -> tuple[str, Optional[int]]:
    if not data.startswith(b"%PDF"):
        raise UnsupportedDocumentError("unsupported content: missing PDF header")

    with pdfplumber.open(BytesIO(data)) as pdf:
        page_count = len(pdf.pages)
        if page_count > max_pages:
            raise DocumentExtractionError(f"too many pages: {page_count} > {max_pages}")

        pages_text = [(page.extract_text() or "").strip() for page in pdf.pages]
        return "\n\n".join(pages_text).strip(), page_count


def _extract_word(data: bytes) -> tuple[str, Optional[int]]:
    document = docx.Document(BytesIO(data))

    blocks = [p.text.strip() for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                blocks.append(" | ".join(cells))

    # Blank paragraphs become blank lines so paragraph splitting still works
    text = "\n\n".join(b for b in blocks if b).strip()
    # Page count is not recorded in the document body
    return text, None


def extract_text(
    data: bytes,
    mimetype: str,
    *,
    max_size_mb: int = 10,
    max_pages: int = 100,
    sample_fallback: bool = False,
    rng: Optional[random.Random] = None,
) -> ExtractedText:
    """Extract plain text from an uploaded contract.

    Args:
        data: Raw file bytes.
        mimetype: Declared content type of the upload.
        max_size_mb: Maximum allowed file size in MB.
        max_pages: Maximum allowed PDF page count.
        sample_fallback: Substitute generated sample text for empty documents.
        rng: Random source for the sample text generator.

    Returns:
        ExtractedText with the document text and its page count.

    Raises:
        UnsupportedDocumentError: Mimetype not supported or content mismatch.
        DocumentExtractionError: Document too large, unreadable or empty.
    """
    if mimetype not in SUPPORTED_MIMETYPES:
        raise UnsupportedDocumentError(f"unsupported document type: {mimetype}")

    max_size_bytes = max_size_mb * 1024 * 1024
    if len(data) > max_size_bytes:
        raise DocumentExtractionError(
            f"file too large: {len(data) / 1024 / 1024:.1f}MB > {max_size_mb}MB"
        )

    try:
        if mimetype == PDF_MIMETYPE:
            text, page_count = _extract_pdf(data, max_pages)
        else:
            text, page_count = _extract_word(data)
    except DocumentExtractionError:
        raise
    except Exception as e:
        logger.warning("Text extraction failed for %s: %s", mimetype, e, exc_info=True)
        raise DocumentExtractionError(
            f"failed to extract text from document: {type(e).__name__}"
        ) from e

    if not text:
        if not sample_fallback:
            raise DocumentExtractionError(
                "no text content: document may be scanned/image-only (OCR not supported)"
            )
        pages = page_count or WORD_SAMPLE_PAGES
        logger.warning(
            "No text extracted from %s, substituting %d pages of sample text",
            mimetype,
            pages,
        )
        return ExtractedText(
            text=generate_sample_contract_text(pages, rng),
            page_count=pages,
            synthetic=True,
        )

    logger.info("Extracted %d characters from %s (pages=%s)", len(text), mimetype, page_count)
    return ExtractedText(text=text, page_count=page_count)


__all__ = [
    "DOC_MIMETYPE",
    "DOCX_MIMETYPE",
    "PDF_MIMETYPE",
    "SAMPLE_CLAUSES",
    "SUPPORTED_MIMETYPES",
    "DocumentExtractionError",
    "ExtractedText",
    "UnsupportedDocumentError",
    "extract_text",
    "generate_sample_contract_text",
]
