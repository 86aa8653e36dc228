"""PDF text extraction using pypdf, with PyMuPDF as fallback."""

import io

import pymupdf
from pypdf import PdfReader

from foglia.models import DocumentFormat
from foglia.parsers.base import BaseExtractor


class PyPDFExtractor(BaseExtractor):
    """Primary PDF extractor."""

    name = "pypdf"
    formats = frozenset({DocumentFormat.PDF})

    def extract_text(self, data: bytes) -> str:
        """Extract the text of every page, pages separated by a blank line."""
        reader = PdfReader(io.BytesIO(data))

        pages = []
        for page in reader.pages:
            text = page.extract_text() or ""
            if text.strip():
                pages.append(text)

        return "\n\n".join(pages)


class PyMuPDFExtractor(BaseExtractor):
    """Fallback PDF extractor, tolerant of files pypdf cannot decode."""

    name = "pymupdf"
    formats = frozenset({DocumentFormat.PDF})

    def extract_text(self, data: bytes) -> str:
        """Extract the text of every page with PyMuPDF."""
        with pymupdf.open(stream=data, filetype="pdf") as doc:
            pages = [page.get_text() for page in doc]

        return "\n\n".join(text for text in pages if text.strip())
