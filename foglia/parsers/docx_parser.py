"""DOCX text extraction using python-docx."""

import io

from docx import Document as DocxDocument

from foglia.models import DocumentFormat
from foglia.parsers.base import BaseExtractor


class DocxExtractor(BaseExtractor):
    """Extractor for DOCX documents."""

    name = "python-docx"
    formats = frozenset({DocumentFormat.DOCX})

    def extract_text(self, data: bytes) -> str:
        """Extract paragraphs in order, then table rows as ``a | b | c``."""
        doc = DocxDocument(io.BytesIO(data))

        parts = [paragraph.text for paragraph in doc.paragraphs if paragraph.text.strip()]

        for table in doc.tables:
            rows = []
            for row in table.rows:
                row_data = [cell.text.strip() for cell in row.cells]
                # Skip empty rows
                if any(row_data):
                    rows.append(" | ".join(row_data))
            if rows:
                parts.append("\n".join(rows))

        return "\n".join(parts)
