"""Utility functions."""

from foglia.utils.logging_config import evaluation_logger, get_logger, setup_logging
from foglia.utils.text import normalize_whitespace, truncate_text

__all__ = [
    "evaluation_logger",
    "get_logger",
    "setup_logging",
    "normalize_whitespace",
    "truncate_text",
]
