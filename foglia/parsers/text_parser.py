"""Plain text and Markdown extraction."""

from foglia.models import DocumentFormat
from foglia.parsers.base import BaseExtractor


class PlainTextExtractor(BaseExtractor):
    """Decode plain text or Markdown bytes.

    The default instance is strict UTF-8 (a leading BOM is dropped); a second
    instance with a single-byte encoding serves as fallback for legacy files.
    """

    formats = frozenset({DocumentFormat.TEXT})

    def __init__(self, encoding: str = "utf-8-sig"):
        self.encoding = encoding
        self.name = f"text[{encoding}]"

    def extract_text(self, data: bytes) -> str:
        """Decode the bytes, failing on invalid sequences."""
        return data.decode(self.encoding)
