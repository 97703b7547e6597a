"""Contract upload and analysis endpoint."""

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db import repository
from app.db.models import DocumentStatus
from app.db.session import get_db
from app.deps import get_archive, get_pipeline
from app.schemas.api import UploadResponse
from app.services.pipeline import ContractPipeline
from app.services.text_extractor import (
    SUPPORTED_MIMETYPES,
    DocumentExtractionError,
    UnsupportedDocumentError,
)
from app.storage import ContractArchive, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])


@router.post("/upload", response_model=UploadResponse)
async def upload(
    file: UploadFile,
    db: AsyncSession = Depends(get_db),
    pipeline: ContractPipeline = Depends(get_pipeline),
    archive: ContractArchive | None = Depends(get_archive),
):
    """Upload a PDF or Word contract and analyze its clauses."""
    # Validate content type
    if file.content_type not in SUPPORTED_MIMETYPES:
        raise HTTPException(status_code=400, detail="Only PDF and Word documents are supported")

    # Read and validate size
    content = await file.read()
    max_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds {settings.MAX_FILE_SIZE_MB}MB limit",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    document_id = str(uuid4())
    filename = file.filename or "unnamed"

    # Archive the original upload; analysis does not depend on it
    object_key = None
    if archive is not None:
        try:
            object_key = archive.store_upload(
                document_id, content, content_type=file.content_type, filename=filename
            )
        except StorageError as e:
            logger.warning("Could not archive upload %s: %s", document_id, e)

    doc = await repository.create_document(
        db,
        document_id=document_id,
        filename=filename,
        content_type=file.content_type,
        file_size=len(content),
        bucket=archive.uploads_bucket if object_key else None,
        object_key=object_key,
    )
    rules = await repository.rule_snapshot(db)
    await db.commit()

    try:
        result = await run_in_threadpool(
            pipeline.run, content, file.content_type, rules, document_id, filename=filename
        )
    except DocumentExtractionError as e:
        doc.status = DocumentStatus.failed
        doc.error_message = str(e)
        await db.commit()
        logger.warning("Extraction failed for document %s: %s", document_id, e)
        status = 400 if isinstance(e, UnsupportedDocumentError) else 422
        raise HTTPException(status_code=status, detail=str(e))

    # A new upload replaces the clauses of the previous one
    deleted = await repository.delete_all_clauses(db)
    if deleted:
        logger.info("Cleared %d clauses from previous uploads", deleted)
    await repository.create_clauses(db, result.clauses)
    summary = await repository.upsert_summary(db, result.summary)

    doc.status = DocumentStatus.completed
    doc.page_count = result.page_count
    doc.raw_text = result.text
    await db.commit()

    if archive is not None:
        try:
            archive.store_summary(summary)
        except StorageError as e:
            logger.warning("Could not archive summary for %s: %s", document_id, e)

    logger.info("Processed document %s (%s): %d clauses", document_id, filename, len(result.clauses))

    return UploadResponse(
        message="File processed successfully",
        document_id=document_id,
        clauses=result.clauses,
        summary=summary,
    )
