"""Text utility functions."""

import re

_BLANK_RUNS = re.compile(r"\n{3,}")


def normalize_whitespace(text: str) -> str:
    """Normalize extracted text without changing its words.

    Removes NUL characters, converts CRLF/CR to LF, strips trailing spaces
    from every line and collapses runs of blank lines to a single one.
    """
    text = text.replace("\x00", " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip() for line in text.split("\n")]
    text = "\n".join(lines)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


def truncate_text(text: str, max_chars: int) -> tuple[str, bool]:
    """Cut text at the tail.

    Returns:
        Tuple of (possibly shortened text, whether it was shortened)
    """
    if max_chars <= 0 or len(text) <= max_chars:
        return text, False
    return text[:max_chars], True
