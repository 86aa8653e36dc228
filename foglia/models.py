"""Pydantic models for domain objects."""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceKind(str, Enum):
    """Where the evaluated text came from."""

    PROMPT = "prompt"
    EXTRACTED_DOCUMENT = "extracted_document"


class DocumentFormat(str, Enum):
    """Document formats the extractors understand."""

    PDF = "pdf"
    DOCX = "docx"
    TEXT = "text"


class RequestKind(str, Enum):
    """Pre-classification of a submission before prompt assembly."""

    EVALUATION = "evaluation"
    INFORMATIONAL = "informational"


class Decision(str, Enum):
    """The four possible outcomes of an evaluation.

    Values are the wire tokens the model is asked to emit.
    """

    APPROVED = "approved"
    APPROVED_WITH_RECOMMENDATIONS = "approved_with_recs"
    CHANGES_REQUIRED = "changes"
    REJECTED = "rejected"


class EvaluationStage(str, Enum):
    """Stages an evaluation walks through, in order."""

    RECEIVED = "received"
    NORMALIZED = "normalized"
    GROUNDED = "grounded"
    GENERATED = "generated"
    PARSED = "parsed"
    RENDERED = "rendered"
    FAILED = "failed"


class ResultKind(str, Enum):
    """Whether the result carries a validated verdict."""

    STRUCTURED = "structured"
    UNSTRUCTURED = "unstructured"


class ExtractionResult(BaseModel):
    """Text pulled out of an uploaded document."""

    model_config = ConfigDict(frozen=True)

    text: str
    format: DocumentFormat
    extractor: str
    truncated: bool = False
    original_length: int


class ContentUnit(BaseModel):
    """Normalized text submitted for evaluation."""

    model_config = ConfigDict(frozen=True)

    text: str
    source_kind: SourceKind
    source_name: Optional[str] = None
    truncated: bool = False


class PolicyDocumentSet(BaseModel):
    """Ordered references to the documents an evaluation is grounded on."""

    model_config = ConfigDict(frozen=True)

    refs: tuple[str, ...] = ()


class GenerationRequest(BaseModel):
    """Everything needed to assemble the message sequence for one evaluation."""

    model_config = ConfigDict(frozen=True)

    system_instructions: str
    grounding_block: str
    user_content: str
    temperature: float = Field(ge=0.0, le=1.0)


class Message(BaseModel):
    """Role-tagged chat message sent to the generation capability."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


class Verdict(BaseModel):
    """Structured judgment returned by the model.

    Built only from a payload that names a known decision and a non-empty
    motivation; anything else is not a verdict.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    decision: Decision
    motivation: str
    missing_fields: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = Field(default=(), alias="concrete_suggestions")

    @field_validator("decision", mode="before")
    @classmethod
    def _normalize_decision(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("motivation", mode="before")
    @classmethod
    def _require_motivation(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("motivation must be a string")
        value = value.strip()
        if not value:
            raise ValueError("motivation must not be empty")
        return value

    @field_validator("missing_fields", "suggestions", mode="before")
    @classmethod
    def _coerce_string_list(cls, value: Any) -> tuple[str, ...]:
        # Unknown shapes degrade to an empty list; only string entries survive.
        if not isinstance(value, (list, tuple)):
            return ()
        return tuple(
            item.strip() for item in value if isinstance(item, str) and item.strip()
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialize using the field names the model is asked to produce."""
        return self.model_dump(mode="json", by_alias=True)


class StructuredOutcome(BaseModel):
    """Model output that decoded into a valid verdict."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["structured"] = "structured"
    verdict: Verdict


class UnstructuredOutcome(BaseModel):
    """Model output kept verbatim because it is not a valid verdict."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unstructured"] = "unstructured"
    raw_text: str


ParsedOutcome = Union[StructuredOutcome, UnstructuredOutcome]


class EvaluationResult(BaseModel):
    """Final output of an evaluation."""

    model_config = ConfigDict(frozen=True)

    kind: ResultKind
    report: str
    verdict: Optional[Verdict] = None
    request_kind: RequestKind = RequestKind.EVALUATION
    source_kind: SourceKind
    source_name: Optional[str] = None
    truncated: bool = False
    policy_refs: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        """Shape returned to callers: the report, plus the verdict when structured."""
        payload: dict[str, Any] = {"report": self.report}
        if self.kind == ResultKind.STRUCTURED and self.verdict is not None:
            payload["verdict"] = self.verdict.to_wire()
        return payload
