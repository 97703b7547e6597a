"""Pytest configuration and fixtures."""

import os

# Set test environment BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["S3_ENDPOINT"] = ""
os.environ["OPENAI_API_KEY"] = ""

import json
import random
from io import BytesIO
from unittest.mock import AsyncMock, MagicMock, Mock

import docx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.db import models  # noqa: F401
from app.db.session import Base
from app.services.llm_client import LLMClient


@pytest.fixture(scope="function")
def sqlite_sessionmaker(tmp_path):
    """Async sessionmaker over a fresh SQLite file with the schema created."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    Base.metadata.create_all(engine)
    engine.dispose()

    # NullPool: no connection outlives the event loop that opened it
    async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    yield async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    mock_session = MagicMock()
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    mock_session.execute = AsyncMock()
    mock_session.add = MagicMock()
    mock_session.commit = AsyncMock()
    return mock_session


@pytest.fixture
def mock_archive():
    """Create a mock contract archive."""
    archive = MagicMock()
    archive.uploads_bucket = "uploads"
    archive.store_upload = MagicMock(side_effect=lambda document_id, data, **kw: f"{document_id}.docx")
    archive.store_summary = MagicMock(side_effect=lambda summary: f"{summary.document_id}.json")
    return archive


def create_mock_response(content):
    """Create a mock OpenAI chat completion response."""
    if not isinstance(content, str) and content is not None:
        content = json.dumps(content)

    mock_message = Mock()
    mock_message.content = content

    mock_choice = Mock()
    mock_choice.message = mock_message

    mock_response = Mock()
    mock_response.choices = [mock_choice]
    return mock_response


@pytest.fixture
def make_llm():
    """Factory for an LLMClient over a mocked OpenAI client.

    Each positional argument is one reply (dict, list or raw string) or an
    exception to raise, consumed in order.
    """

    def factory(*replies, max_retries=3):
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = [
            r if isinstance(r, Exception) else create_mock_response(r) for r in replies
        ]
        llm = LLMClient(mock_client, max_retries=max_retries, backoff_multiplier=0)
        return llm, mock_client

    return factory


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def docx_bytes():
    """Factory building a .docx file in memory from paragraphs and table rows."""

    def factory(paragraphs=(), table_rows=()):
        document = docx.Document()
        for text in paragraphs:
            document.add_paragraph(text)
        if table_rows:
            table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
            for row, values in zip(table.rows, table_rows):
                for cell, value in zip(row.cells, values):
                    cell.text = value
        buffer = BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    return factory


@pytest.fixture
def pdf_bytes():
    """Factory building a minimal single-page PDF with one text line per entry."""

    def factory(lines):
        ops = " ".join(f"({line}) Tj 0 -16 Td" for line in lines)
        content = f"BT /F1 12 Tf 72 720 Td {ops} ET"
        objects = [
            "<< /Type /Catalog /Pages 2 0 R >>",
            "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            "/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
            f"<< /Length {len(content)} >>\nstream\n{content}\nendstream",
            "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        ]
        out = b"%PDF-1.4\n"
        offsets = []
        for number, body in enumerate(objects, start=1):
            offsets.append(len(out))
            out += f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1")
        xref_at = len(out)
        out += f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n".encode()
        for offset in offsets:
            out += f"{offset:010d} 00000 n \n".encode()
        out += (
            f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
            f"startxref\n{xref_at}\n%%EOF\n"
        ).encode()
        return out

    return factory
