"""HTTP API for chat and document evaluation."""

from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from foglia import __version__
from foglia.config import Config, get_config
from foglia.exceptions import FogliaError
from foglia.greeting import build_greeting
from foglia.models import EvaluationResult
from foglia.pipeline import Evaluator
from foglia.utils.logging_config import get_logger

logger = get_logger()

# Replies shown to the end user for each error type.
ERROR_REPLIES = {
    "input_invalid": "Scrivi o carica una proposta da valutare.",
    "unsupported_format": "❌ Formato non supportato: carica un PDF, un DOCX o un file di testo.",
    "document_unreadable": "❌ Errore durante l’analisi del file.",
    "empty_extraction": "❌ Il file non contiene testo leggibile.",
    "extraction_timeout": "❌ Errore durante l’analisi del file.",
    "generation_unavailable": "Errore: impossibile contattare il bosco.",
    "generation_timeout": "Il bosco non ha risposto in tempo, riprova tra poco.",
    "generation_rejected": "La richiesta non è stata accettata dal servizio di valutazione.",
    "cancelled": "Valutazione annullata.",
}
DEFAULT_ERROR_REPLY = "Errore: impossibile contattare il bosco."


class ChatRequest(BaseModel):
    """Typed submission. ``prompt`` is accepted as an alias of ``content``."""

    model_config = ConfigDict(populate_by_name=True)

    content: Optional[str] = None
    prompt: Optional[str] = None
    # Untyped: malformed values are resolved to the default set downstream.
    policy_refs: Any = Field(default=None, alias="policyRefs")


def result_payload(result: EvaluationResult) -> dict[str, Any]:
    payload = result.to_payload()
    payload["response"] = result.report
    return payload


def create_app(config: Optional[Config] = None, evaluator: Optional[Evaluator] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration (defaults to the global one)
        evaluator: Pre-built evaluator, mainly for tests

    Returns:
        Configured FastAPI app
    """
    config = config or get_config()
    evaluator = evaluator or Evaluator(config)

    app = FastAPI(
        title="Foglia",
        description="Policy-grounded evaluation of activity proposals",
        version=__version__,
    )
    app.state.evaluator = evaluator
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FogliaError)
    async def foglia_error_handler(request: Request, exc: FogliaError) -> JSONResponse:
        logger.warning(f"{request.url.path} failed with {exc.error_code}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "type": exc.error_code,
                "response": ERROR_REPLIES.get(exc.error_code, DEFAULT_ERROR_REPLY),
            },
        )

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "foglia"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/api/greeting")
    async def greeting():
        """Seasonal welcome message."""
        return {"response": build_greeting(tz=config.timezone)}

    @app.post("/api/chat")
    async def chat(request: ChatRequest):
        """Evaluate a typed submission or answer a question."""
        content = request.content if request.content is not None else request.prompt
        result = await run_in_threadpool(
            app.state.evaluator.evaluate_text,
            content,
            request.policy_refs,
        )
        return result_payload(result)

    @app.post("/api/analyze")
    async def analyze(
        file: Optional[UploadFile] = File(None),
        policy_refs: Optional[str] = Form(None, alias="policyRefs"),
    ):
        """Evaluate an uploaded PDF, DOCX or text document."""
        data = await file.read() if file is not None else None
        result = await run_in_threadpool(
            app.state.evaluator.evaluate_document,
            data,
            file.content_type if file is not None else None,
            file.filename if file is not None else None,
            policy_refs,
        )
        return result_payload(result)

    return app


def serve(config: Optional[Config] = None, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the HTTP server with uvicorn."""
    config = config or get_config()
    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.host,
        port=port or config.port,
        log_level=config.log_level.lower(),
    )
