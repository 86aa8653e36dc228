"""Policy-grounded evaluation of activity proposals."""

__version__ = "0.1.0"

from foglia.config import get_config, set_config
from foglia.exceptions import FogliaError
from foglia.models import (
    ContentUnit,
    Decision,
    EvaluationResult,
    PolicyDocumentSet,
    Verdict,
)
from foglia.pipeline import Evaluator

__all__ = [
    "get_config",
    "set_config",
    "FogliaError",
    "ContentUnit",
    "Decision",
    "EvaluationResult",
    "PolicyDocumentSet",
    "Verdict",
    "Evaluator",
]
