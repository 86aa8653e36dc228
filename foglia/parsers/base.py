"""Extractor interface, format detection and the extractor registry."""

from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import Optional, Sequence

from foglia.exceptions import (
    DocumentUnreadableError,
    EmptyExtractionError,
    UnsupportedFormatError,
)
from foglia.models import DocumentFormat, ExtractionResult
from foglia.utils.logging_config import get_logger
from foglia.utils.text import normalize_whitespace, truncate_text

logger = get_logger()

DEFAULT_MAX_EXTRACTED_CHARS = 30000

MIME_FORMATS = {
    "application/pdf": DocumentFormat.PDF,
    "application/x-pdf": DocumentFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentFormat.DOCX,
    "text/plain": DocumentFormat.TEXT,
    "text/markdown": DocumentFormat.TEXT,
    "text/x-markdown": DocumentFormat.TEXT,
}

EXTENSION_FORMATS = {
    ".pdf": DocumentFormat.PDF,
    ".docx": DocumentFormat.DOCX,
    ".txt": DocumentFormat.TEXT,
    ".text": DocumentFormat.TEXT,
    ".md": DocumentFormat.TEXT,
    ".markdown": DocumentFormat.TEXT,
}


class BaseExtractor(ABC):
    """Abstract base class for document text extractors."""

    name: str = "base"
    formats: frozenset[DocumentFormat] = frozenset()

    @abstractmethod
    def extract_text(self, data: bytes) -> str:
        """Extract raw text from document bytes.

        Args:
            data: Full document content

        Returns:
            Extracted text, not yet normalized

        Raises:
            Exception: Any library error; the registry decides what to do with it
        """
        pass

    def supports_format(self, fmt: DocumentFormat) -> bool:
        """Check if this extractor handles the given format."""
        return fmt in self.formats


def detect_format(declared_mime: Optional[str], filename: Optional[str]) -> DocumentFormat:
    """Determine the document format from MIME type and filename.

    A recognized MIME type wins. Generic or unknown MIME types
    (``application/octet-stream``, empty, ...) defer to the extension.

    Raises:
        UnsupportedFormatError: If neither identifies a supported format
    """
    mime = (declared_mime or "").split(";", 1)[0].strip().lower()
    if mime in MIME_FORMATS:
        return MIME_FORMATS[mime]

    extension = PurePath(filename).suffix.lower() if filename else ""
    if extension in EXTENSION_FORMATS:
        return EXTENSION_FORMATS[extension]

    raise UnsupportedFormatError(
        f"Unsupported document format (mime={mime or 'none'}, extension={extension or 'none'})",
        filename=filename,
    )


class ExtractorRegistry:
    """Maps each document format to an ordered chain of extractors.

    The first extractor is the primary one; the rest are fallbacks tried
    only when the previous one raised.
    """

    def __init__(self, chains: dict[DocumentFormat, Sequence[BaseExtractor]]):
        self._chains = {fmt: tuple(chain) for fmt, chain in chains.items() if chain}

    @classmethod
    def default(cls) -> "ExtractorRegistry":
        """Build the registry with every built-in extractor."""
        from foglia.parsers.docx_parser import DocxExtractor
        from foglia.parsers.pdf_parser import PyMuPDFExtractor, PyPDFExtractor
        from foglia.parsers.text_parser import PlainTextExtractor

        return cls(
            {
                DocumentFormat.PDF: [PyPDFExtractor(), PyMuPDFExtractor()],
                DocumentFormat.DOCX: [DocxExtractor()],
                DocumentFormat.TEXT: [
                    PlainTextExtractor(),
                    PlainTextExtractor(encoding="latin-1"),
                ],
            }
        )

    @property
    def formats(self) -> list[DocumentFormat]:
        """Formats with at least one extractor."""
        return list(self._chains)

    def chain_for(self, fmt: DocumentFormat) -> tuple[BaseExtractor, ...]:
        """Return the extractor chain for a format."""
        try:
            return self._chains[fmt]
        except KeyError:
            raise UnsupportedFormatError(f"No extractor registered for {fmt.value}") from None

    def extract(
        self,
        data: bytes,
        declared_mime: Optional[str] = None,
        filename: Optional[str] = None,
        max_chars: int = DEFAULT_MAX_EXTRACTED_CHARS,
    ) -> ExtractionResult:
        """Extract normalized, size-bounded text from a document.

        Args:
            data: Document bytes
            declared_mime: MIME type declared by the uploader
            filename: Original filename, used when the MIME type is generic
            max_chars: Tail-truncation bound for the extracted text

        Returns:
            ExtractionResult with the text and a truncation flag

        Raises:
            UnsupportedFormatError: Format not recognized
            DocumentUnreadableError: Every extractor for the format failed
            EmptyExtractionError: The document contains no text
        """
        fmt = detect_format(declared_mime, filename)
        raw_text, extractor = self._run_chain(fmt, data, filename)

        text = normalize_whitespace(raw_text)
        if not text:
            raise EmptyExtractionError(
                f"No text could be extracted from {filename or 'the document'}"
            )

        original_length = len(text)
        text, truncated = truncate_text(text, max_chars)
        if truncated:
            logger.warning(
                f"Extracted text truncated from {original_length} to {max_chars} characters"
            )

        logger.info(f"Extracted {len(text)} characters from {fmt.value} with {extractor.name}")

        return ExtractionResult(
            text=text,
            format=fmt,
            extractor=extractor.name,
            truncated=truncated,
            original_length=original_length,
        )

    def _run_chain(
        self,
        fmt: DocumentFormat,
        data: bytes,
        filename: Optional[str],
    ) -> tuple[str, BaseExtractor]:
        last_error: Optional[Exception] = None
        for extractor in self.chain_for(fmt):
            try:
                return extractor.extract_text(data), extractor
            except Exception as e:
                logger.warning(f"{extractor.name} failed on {filename or fmt.value}: {e}")
                last_error = e

        raise DocumentUnreadableError(
            f"Could not read document as {fmt.value}",
            filename=filename,
            cause=last_error,
        )


_default_registry: Optional[ExtractorRegistry] = None


def get_registry() -> ExtractorRegistry:
    """Get or create the process-wide default registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ExtractorRegistry.default()
    return _default_registry


def extract_document(
    data: bytes,
    declared_mime: Optional[str] = None,
    filename: Optional[str] = None,
    max_chars: int = DEFAULT_MAX_EXTRACTED_CHARS,
) -> ExtractionResult:
    """Extract text from a document with the default registry."""
    return get_registry().extract(data, declared_mime, filename, max_chars)
