"""Resolution and rendering of the policy documents an evaluation cites."""

import json
from typing import Any, Optional, Sequence

from foglia.models import PolicyDocumentSet
from foglia.utils.logging_config import get_logger

logger = get_logger()

NO_REFERENCES_LINE = "- Nessun documento di riferimento disponibile."


def _coerce_refs(candidate: Any) -> Optional[list[str]]:
    """Turn caller input into a list of references, or None if unusable.

    Accepts a sequence of strings or a JSON-encoded list of strings (the form
    uploads send). Anything else, including a list holding non-strings,
    counts as malformed.
    """
    if candidate is None:
        return None

    if isinstance(candidate, (bytes, bytearray)):
        candidate = candidate.decode("utf-8", errors="replace")

    if isinstance(candidate, str):
        if not candidate.strip():
            return None
        try:
            candidate = json.loads(candidate)
        except json.JSONDecodeError:
            logger.warning("Ignoring policy references that are not valid JSON")
            return None

    if not isinstance(candidate, (list, tuple)):
        logger.warning(f"Ignoring policy references of type {type(candidate).__name__}")
        return None

    if not all(isinstance(ref, str) for ref in candidate):
        logger.warning("Ignoring policy references containing non-string entries")
        return None

    refs = [ref for ref in candidate if ref.strip()]
    return refs or None


class PolicyContextBuilder:
    """Chooses the reference documents for an evaluation and renders them.

    The default set is fixed at construction time and never changes
    afterwards; every call to ``resolve`` returns its own copy.
    """

    def __init__(self, default_refs: Sequence[str]):
        self._default = PolicyDocumentSet(refs=tuple(default_refs))

    @property
    def default_set(self) -> PolicyDocumentSet:
        return self._default

    def resolve(self, candidate: Any = None) -> PolicyDocumentSet:
        """Resolve caller-supplied references, falling back to the default set.

        Never raises: missing, empty or malformed input yields the default.
        """
        refs = _coerce_refs(candidate)
        if refs is None:
            return self._default.model_copy()
        return PolicyDocumentSet(refs=tuple(refs))

    @staticmethod
    def render(policy_set: PolicyDocumentSet) -> str:
        """Render the set as one bullet per reference, in order."""
        if not policy_set.refs:
            return NO_REFERENCES_LINE
        return "\n".join(f"- {ref}" for ref in policy_set.refs)
