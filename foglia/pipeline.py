"""Evaluation orchestrator: text and document flows.

Each evaluation walks the stages received -> normalized -> grounded ->
generated -> parsed -> rendered, strictly in order. Any failure ends the
evaluation with a typed FogliaError marked with the stage it reached; a model
answer that is not a valid verdict is not a failure and is rendered as text.
"""

import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, TypeVar

from foglia.classifier import classify_request
from foglia.config import Config, get_config
from foglia.exceptions import (
    EvaluationCancelledError,
    ExtractionTimeoutError,
    FogliaError,
    GenerationTimeoutError,
    InvalidInputError,
)
from foglia.llm.client import GenerationClient
from foglia.llm.prompts import (
    CONTENT_HEADER,
    EVALUATOR_PERSONA,
    INFORMATIONAL_PERSONA,
    QUESTION_HEADER,
    assemble_messages,
    build_system_instructions,
)
from foglia.models import (
    ContentUnit,
    EvaluationResult,
    EvaluationStage,
    GenerationRequest,
    ParsedOutcome,
    RequestKind,
    ResultKind,
    SourceKind,
    StructuredOutcome,
)
from foglia.parsers.base import ExtractorRegistry
from foglia.policy import PolicyContextBuilder
from foglia.utils.logging_config import evaluation_logger
from foglia.verdict.parser import parse_verdict
from foglia.verdict.renderer import render_unstructured, render_verdict

T = TypeVar("T")

CANCEL_POLL_INTERVAL = 0.05

TRUNCATION_NOTE = "[Nota: il documento è stato troncato ai primi {limit} caratteri.]"


class EvaluationRun:
    """Bookkeeping for a single evaluation: id, current stage, cancellation."""

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        self.id = uuid.uuid4().hex[:12]
        self.stage = EvaluationStage.RECEIVED
        self.cancel_event = cancel_event
        self.started_at = time.monotonic()
        self.log = evaluation_logger(self.id)
        self.log.at_stage(self.stage.value)
        self.log.debug(f"evaluation {self.stage.value}")

    def advance(self, stage: EvaluationStage) -> None:
        self.check_cancelled()
        self.stage = stage
        self.log.at_stage(stage.value)
        self.log.debug(f"evaluation {stage.value}")

    def check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise EvaluationCancelledError("Evaluation cancelled by caller")

    def fail(self, error: FogliaError) -> None:
        error.stage = self.stage.value
        elapsed = time.monotonic() - self.started_at
        self.log.warning(
            f"evaluation failed after {self.stage.value} "
            f"({elapsed:.2f}s): {error.error_code}: {error}"
        )
        self.stage = EvaluationStage.FAILED
        self.log.at_stage(self.stage.value)


class Evaluator:
    """Runs text and document evaluations against the policy documents."""

    def __init__(
        self,
        config: Optional[Config] = None,
        client: Optional[GenerationClient] = None,
        registry: Optional[ExtractorRegistry] = None,
        policy_builder: Optional[PolicyContextBuilder] = None,
    ):
        """Initialize the evaluator.

        Collaborators not supplied are built from the configuration once,
        here, and shared read-only by every evaluation.
        """
        self.config = config or get_config()
        self.client = client or GenerationClient.from_config(self.config)
        self.registry = registry or ExtractorRegistry.default()
        self.policy_builder = policy_builder or PolicyContextBuilder(self.config.default_policy_refs)
        self.executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="foglia-worker",
        )

    def close(self) -> None:
        """Stop accepting work and drop queued calls; running calls are abandoned."""
        self.executor.shutdown(wait=False, cancel_futures=True)

    def evaluate_text(
        self,
        content: Optional[str],
        policy_refs: Any = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> EvaluationResult:
        """Evaluate a typed submission.

        Args:
            content: Submission text
            policy_refs: Caller-supplied references (list or JSON list), or None
            cancel_event: Set it to abort the evaluation

        Raises:
            InvalidInputError: Empty or oversized content
            GenerationError: The generation capability failed
            EvaluationCancelledError: The caller cancelled
        """
        run = EvaluationRun(cancel_event)
        try:
            unit = self._normalize_prompt(content)
            run.advance(EvaluationStage.NORMALIZED)

            kind = RequestKind.EVALUATION
            if self.config.classify_requests:
                kind = classify_request(unit.text)
            run.log.info(f"text submission classified as {kind.value}")

            return self._complete(run, unit, policy_refs, kind)
        except FogliaError as e:
            run.fail(e)
            raise

    def evaluate_document(
        self,
        file_bytes: Optional[bytes],
        declared_mime: Optional[str] = None,
        filename: Optional[str] = None,
        policy_refs: Any = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> EvaluationResult:
        """Evaluate an uploaded document.

        Args:
            file_bytes: Document content
            declared_mime: MIME type declared by the uploader
            filename: Original filename
            policy_refs: Caller-supplied references (list or JSON list), or None
            cancel_event: Set it to abort the evaluation

        Raises:
            InvalidInputError: Missing or oversized upload
            UnsupportedFormatError: Format not recognized or unreadable
            EmptyExtractionError: No text in the document
            ExtractionTimeoutError: Extraction took too long
            GenerationError: The generation capability failed
            EvaluationCancelledError: The caller cancelled
        """
        run = EvaluationRun(cancel_event)
        try:
            if not file_bytes:
                raise InvalidInputError("No file was uploaded")
            if len(file_bytes) > self.config.max_upload_bytes:
                raise InvalidInputError(
                    f"File exceeds the {self.config.max_upload_bytes} byte limit"
                )

            run.log.info(f"extracting {filename or 'upload'} ({len(file_bytes)} bytes)")
            extraction = self._run_bounded(
                run,
                lambda: self.registry.extract(
                    file_bytes,
                    declared_mime=declared_mime,
                    filename=filename,
                    max_chars=self.config.max_extracted_chars,
                ),
                timeout=self.config.extraction_timeout,
                on_timeout=lambda: ExtractionTimeoutError(
                    f"Text extraction exceeded {self.config.extraction_timeout}s"
                ),
            )

            unit = ContentUnit(
                text=extraction.text,
                source_kind=SourceKind.EXTRACTED_DOCUMENT,
                source_name=filename,
                truncated=extraction.truncated,
            )
            run.advance(EvaluationStage.NORMALIZED)

            return self._complete(run, unit, policy_refs, RequestKind.EVALUATION)
        except FogliaError as e:
            run.fail(e)
            raise

    def _normalize_prompt(self, content: Optional[str]) -> ContentUnit:
        if not isinstance(content, str) or not content.strip():
            raise InvalidInputError("Content is empty")
        text = content.strip()
        if len(text) > self.config.max_prompt_chars:
            raise InvalidInputError(
                f"Content exceeds the {self.config.max_prompt_chars} character limit"
            )
        return ContentUnit(text=text, source_kind=SourceKind.PROMPT)

    def _complete(
        self,
        run: EvaluationRun,
        unit: ContentUnit,
        policy_refs: Any,
        kind: RequestKind,
    ) -> EvaluationResult:
        evaluating = kind == RequestKind.EVALUATION

        policy_set = self.policy_builder.resolve(policy_refs)
        grounding_block = self.policy_builder.render(policy_set)
        run.advance(EvaluationStage.GROUNDED)

        user_content = unit.text
        if unit.truncated:
            user_content = f"{user_content}\n\n{TRUNCATION_NOTE.format(limit=self.config.max_extracted_chars)}"

        request = GenerationRequest(
            system_instructions=build_system_instructions(
                EVALUATOR_PERSONA if evaluating else INFORMATIONAL_PERSONA,
                with_contract=evaluating,
            ),
            grounding_block=grounding_block,
            user_content=user_content,
            temperature=self.config.llm_temperature,
        )
        messages = assemble_messages(
            request.system_instructions,
            request.grounding_block,
            request.user_content,
            include_example=evaluating and self.config.few_shot_example,
            content_header=CONTENT_HEADER if evaluating else QUESTION_HEADER,
        )

        timeout = self.config.generation_timeout
        raw_text = self._run_bounded(
            run,
            lambda: self.client.generate(
                messages,
                model=self.config.llm_model,
                temperature=request.temperature,
                timeout=timeout,
            ),
            timeout=timeout,
            on_timeout=lambda: GenerationTimeoutError(f"Generation timed out after {timeout}s"),
        )
        run.advance(EvaluationStage.GENERATED)

        outcome: ParsedOutcome = parse_verdict(raw_text, self.config.max_motivation_chars)
        run.advance(EvaluationStage.PARSED)

        if isinstance(outcome, StructuredOutcome):
            result = EvaluationResult(
                kind=ResultKind.STRUCTURED,
                report=render_verdict(outcome.verdict),
                verdict=outcome.verdict,
                request_kind=kind,
                source_kind=unit.source_kind,
                source_name=unit.source_name,
                truncated=unit.truncated,
                policy_refs=policy_set.refs,
            )
        else:
            result = EvaluationResult(
                kind=ResultKind.UNSTRUCTURED,
                report=render_unstructured(outcome.raw_text),
                request_kind=kind,
                source_kind=unit.source_kind,
                source_name=unit.source_name,
                truncated=unit.truncated,
                policy_refs=policy_set.refs,
            )
        run.advance(EvaluationStage.RENDERED)

        run.log.info(
            f"evaluation rendered: {result.kind.value}"
            + (f" ({result.verdict.decision.value})" if result.verdict else "")
        )
        return result

    def _run_bounded(
        self,
        run: EvaluationRun,
        fn: Callable[[], T],
        timeout: float,
        on_timeout: Callable[[], FogliaError],
    ) -> T:
        """Run ``fn`` in a worker thread, bounded by a timeout and the cancel token.

        Calls run on the evaluator's shared pool, so at most ``max_workers``
        of them execute at once; time spent queued counts against the timeout.
        On timeout or cancellation a queued call is dropped and a running one
        is abandoned, its result discarded.
        """
        run.check_cancelled()
        future = self.executor.submit(fn)
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                raise on_timeout()
            done, _ = wait([future], timeout=min(CANCEL_POLL_INTERVAL, remaining))
            if done:
                return future.result()
            if run.cancel_event is not None and run.cancel_event.is_set():
                future.cancel()
                raise EvaluationCancelledError(
                    f"Evaluation cancelled during {run.stage.value} stage"
                )
