"""Document text extractors."""

from foglia.parsers.base import (
    BaseExtractor,
    ExtractorRegistry,
    detect_format,
    extract_document,
    get_registry,
)
from foglia.parsers.docx_parser import DocxExtractor
from foglia.parsers.pdf_parser import PyMuPDFExtractor, PyPDFExtractor
from foglia.parsers.text_parser import PlainTextExtractor

__all__ = [
    "BaseExtractor",
    "ExtractorRegistry",
    "detect_format",
    "extract_document",
    "get_registry",
    "DocxExtractor",
    "PyMuPDFExtractor",
    "PyPDFExtractor",
    "PlainTextExtractor",
]
