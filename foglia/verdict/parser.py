"""Strict decoding of model output into a verdict, with plain-text fallback."""

import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from foglia.models import ParsedOutcome, StructuredOutcome, UnstructuredOutcome, Verdict
from foglia.utils.logging_config import get_logger

logger = get_logger()

MAX_MOTIVATION_CHARS = 2000

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def _load_object(candidate: str) -> Optional[dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(raw_text: str) -> Optional[dict[str, Any]]:
    """Find a JSON object in model output.

    Tries, in order: the whole text, the first fenced code block, and the
    first complete object starting at any ``{``, so trailing prose is
    ignored. Returns None when no candidate decodes to a JSON object.
    """
    text = raw_text.strip()
    if not text:
        return None

    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        pass
    else:
        # Valid JSON that is not an object is never searched for nested objects.
        return value if isinstance(value, dict) else None

    match = _FENCED_BLOCK.search(text)
    if match:
        payload = _load_object(match.group(1).strip())
        if payload is not None:
            return payload

    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)

    return None


def parse_verdict(raw_text: str, max_motivation_chars: int = MAX_MOTIVATION_CHARS) -> ParsedOutcome:
    """Decode model output as a verdict or keep it as unstructured text.

    Decoding succeeds only for a JSON object with a recognized ``decision``
    and a non-empty ``motivation``. Everything else, including partially
    valid objects, yields ``UnstructuredOutcome`` carrying ``raw_text``
    unchanged. This function never raises for bad model output.
    """
    payload = extract_json_object(raw_text)
    if payload is None:
        logger.info("Model output is not a JSON object, keeping it as plain text")
        return UnstructuredOutcome(raw_text=raw_text)

    motivation = payload.get("motivation")
    if isinstance(motivation, str) and len(motivation) > max_motivation_chars:
        payload = {**payload, "motivation": motivation[:max_motivation_chars]}

    try:
        verdict = Verdict.model_validate(payload)
    except ValidationError as e:
        logger.info(f"Model output does not match the verdict schema: {e.error_count()} error(s)")
        return UnstructuredOutcome(raw_text=raw_text)

    return StructuredOutcome(verdict=verdict)
