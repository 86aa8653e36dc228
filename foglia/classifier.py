"""Explicit pre-classification of typed submissions."""

import re

from foglia.models import RequestKind

MAX_QUESTION_CHARS = 300

# "Campo: valore" segments, separated by newlines, semicolons or full stops.
_FIELD_SEGMENT = re.compile(r"(?:^|[;\n.])\s*[^\W\d_][\w' ]{0,40}?\s*:\s*\S", re.UNICODE)

EVALUATION_VERBS = frozenset(
    {
        "valuta",
        "valutami",
        "valutate",
        "approva",
        "approvate",
        "verifica",
        "verificate",
        "controlla",
        "controllate",
        "giudica",
    }
)

GREETINGS = frozenset({"ciao", "buongiorno", "buonasera", "salve", "hey", "grazie", "ciao foglia"})

_WORDS = re.compile(r"[^\W\d_]+", re.UNICODE)


def count_field_segments(text: str) -> int:
    """Number of ``Campo: valore`` segments in the text."""
    return len(_FIELD_SEGMENT.findall(text))


def classify_request(text: str) -> RequestKind:
    """Decide whether a submission asks for an evaluation or for information.

    Rules, first match wins:
    1. two or more ``Campo: valore`` segments -> evaluation
    2. an explicit evaluation verb (``valuta``, ``verifica``, ...) -> evaluation
    3. a bare greeting -> informational
    4. a short question ending in ``?`` with no field segments -> informational
    5. anything else -> evaluation
    """
    stripped = text.strip()
    words = [w.lower() for w in _WORDS.findall(stripped)]

    segments = count_field_segments(stripped)
    if segments >= 2:
        return RequestKind.EVALUATION

    if any(word in EVALUATION_VERBS for word in words):
        return RequestKind.EVALUATION

    if " ".join(words) in GREETINGS:
        return RequestKind.INFORMATIONAL

    if len(stripped) <= MAX_QUESTION_CHARS and stripped.endswith("?") and segments == 0:
        return RequestKind.INFORMATIONAL

    return RequestKind.EVALUATION
