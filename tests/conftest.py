"""Pytest configuration and fixtures."""

import io
import json
import tempfile
from pathlib import Path

import pymupdf
import pytest
from docx import Document as DocxDocument
from pypdf import PdfWriter

from foglia.config import Config, reset_config
from foglia.pipeline import Evaluator

TEST_POLICY_REFS = ["Regolamento attività all'aperto", "Linee guida sicurezza escursioni"]

APPROVED_WITH_RECS_JSON = json.dumps(
    {
        "decision": "approved_with_recs",
        "motivation": "Proposta chiara e conforme al regolamento.",
        "missing_fields": ["Numero massimo di partecipanti"],
        "concrete_suggestions": ["Indica un punto di ritrovo alternativo in caso di pioggia"],
    }
)


class FakeGenerationClient:
    """Stands in for GenerationClient and records every call."""

    def __init__(self, response="", provider="fake"):
        self.response = response
        self.provider = provider
        self.calls = []

    def generate(self, messages, model=None, temperature=None, timeout=None):
        self.calls.append(
            {"messages": list(messages), "model": model, "temperature": temperature, "timeout": timeout}
        )
        if isinstance(self.response, Exception):
            raise self.response
        if callable(self.response):
            return self.response(messages)
        return self.response

    def check_health(self):
        return True


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config():
    """Create a test configuration that ignores any local .env file."""
    reset_config()

    config = Config(
        _env_file=None,
        llm_provider="ollama",
        llm_model="test-model",
        llm_temperature=0.2,
        default_policy_refs=list(TEST_POLICY_REFS),
        generation_timeout=2.0,
        extraction_timeout=10.0,
    )

    yield config

    reset_config()


@pytest.fixture
def fake_client():
    """Generation client returning a valid 'approved with recommendations' verdict."""
    return FakeGenerationClient(APPROVED_WITH_RECS_JSON)


@pytest.fixture
def evaluator(test_config, fake_client):
    """Evaluator wired to the fake generation client."""
    return Evaluator(test_config, client=fake_client)


@pytest.fixture
def sample_pdf_bytes():
    """Single-page PDF with known text."""
    doc = pymupdf.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Titolo: Passeggiata nel Parco", fontsize=12)
    page.insert_text((72, 100), "Luogo: Parco X", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def blank_pdf_bytes():
    """PDF whose only page carries no text."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def sample_docx_bytes():
    """DOCX with two paragraphs and a small table."""
    doc = DocxDocument()
    doc.add_paragraph("Titolo: Passeggiata nel Parco")
    doc.add_paragraph("Sicurezza: briefing iniziale")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Luogo"
    table.cell(0, 1).text = "Parco X"
    table.cell(1, 0).text = "Data"
    table.cell(1, 1).text = "Sabato"
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
