"""HTTP client for the text generation capability (Ollama or OpenAI-compatible)."""

from typing import Any, Optional, Sequence

import requests

from foglia.config import Config
from foglia.exceptions import (
    GenerationRejectedError,
    GenerationTimeoutError,
    GenerationUnavailableError,
)
from foglia.models import Message
from foglia.utils.logging_config import get_logger

logger = get_logger()

PROVIDERS = ("ollama", "openai")

# Statuses meaning the provider refused this particular request.
REJECTED_STATUSES = {400, 413, 422, 429}


def extract_response_text(data: Any) -> str:
    """Pull the generated text out of a provider payload.

    Understands a bare string, ``response``, ``content``,
    ``message.content`` and ``choices[0].message.content``.
    """
    if isinstance(data, str):
        return data
    if not isinstance(data, dict):
        return ""

    for key in ("response", "content"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value

    message = data.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]

    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0]
        if isinstance(first, dict):
            message = first.get("message") or {}
            if isinstance(message.get("content"), str):
                return message["content"]
            if isinstance(first.get("text"), str):
                return first["text"]

    return ""


def _error_detail(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error or data)[:200]


class GenerationClient:
    """Client for a chat-style text generation API."""

    def __init__(
        self,
        provider: str = "ollama",
        host: str = "http://localhost:11434",
        model: str = "qwen2.5:7b-instruct",
        api_key: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: Optional[int] = 1024,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the generation client.

        Args:
            provider: ``ollama`` or ``openai``
            host: Ollama host, or base URL of the OpenAI-compatible API
            model: Default model identifier
            api_key: Bearer credential, required by the ``openai`` provider
            temperature: Default sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Default request timeout in seconds
            session: Optional requests session (shared connection pool)
        """
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown generation provider: {provider}")

        self.provider = provider
        self.host = host.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or requests.Session()

        if self.provider == "ollama":
            self.chat_url = f"{self.host}/api/chat"
            self.health_url = f"{self.host}/api/tags"
        else:
            self.chat_url = f"{self.host}/chat/completions"
            self.health_url = f"{self.host}/models"

        if not self.has_credentials:
            logger.warning(
                f"No API key configured for provider '{self.provider}'; "
                "evaluations will fail until FOGLIA_LLM_API_KEY is set"
            )

    @classmethod
    def from_config(cls, config: Config, session: Optional[requests.Session] = None) -> "GenerationClient":
        """Create a client from application configuration."""
        host = config.ollama_host if config.llm_provider == "ollama" else config.llm_base_url
        return cls(
            provider=config.llm_provider,
            host=host,
            model=config.llm_model,
            api_key=config.llm_api_key,
            temperature=config.llm_temperature,
            max_tokens=config.llm_max_tokens,
            timeout=config.generation_timeout,
            session=session,
        )

    @property
    def has_credentials(self) -> bool:
        return self.provider != "openai" or bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(self, messages: Sequence[Message], model: str, temperature: float) -> dict[str, Any]:
        wire_messages = [{"role": m.role, "content": m.content} for m in messages]

        if self.provider == "ollama":
            options: dict[str, Any] = {"temperature": temperature}
            if self.max_tokens:
                options["num_predict"] = self.max_tokens
            return {
                "model": model,
                "messages": wire_messages,
                "stream": False,
                "options": options,
            }

        payload: dict[str, Any] = {
            "model": model,
            "messages": wire_messages,
            "temperature": temperature,
        }
        if self.max_tokens:
            payload["max_tokens"] = self.max_tokens
        return payload

    def generate(
        self,
        messages: Sequence[Message],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Generate a completion for a message sequence.

        Args:
            messages: Ordered role-tagged messages
            model: Model identifier (defaults to the client's)
            temperature: Sampling temperature in [0, 1]
            timeout: Request timeout in seconds

        Returns:
            Generated text, stripped of surrounding whitespace

        Raises:
            GenerationUnavailableError: Provider unreachable or mis-configured
            GenerationTimeoutError: No answer within the timeout
            GenerationRejectedError: Provider refused the request
        """
        model = model or self.model
        temperature = self.temperature if temperature is None else temperature
        timeout = timeout or self.timeout

        if not 0.0 <= temperature <= 1.0:
            raise ValueError(f"temperature must be within [0, 1], got {temperature}")

        if not self.has_credentials:
            raise GenerationUnavailableError(
                f"Generation provider '{self.provider}' has no API key configured"
            )

        logger.debug(f"Calling {self.provider} model {model} with {len(messages)} messages")

        try:
            response = self.session.post(
                self.chat_url,
                json=self._payload(messages, model, temperature),
                headers=self._headers(),
                timeout=timeout,
            )
        except requests.Timeout as e:
            logger.error(f"Generation timed out after {timeout}s")
            raise GenerationTimeoutError(f"Generation timed out after {timeout}s", cause=e)
        except requests.RequestException as e:
            logger.error(f"Generation provider unreachable: {e}")
            raise GenerationUnavailableError("Generation provider unreachable", cause=e)

        if response.status_code in REJECTED_STATUSES:
            detail = _error_detail(response)
            logger.error(f"Generation rejected ({response.status_code}): {detail}")
            raise GenerationRejectedError(
                f"Generation rejected by provider: {detail}",
                provider_status=response.status_code,
            )

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.error(f"Generation provider error ({response.status_code}): {detail}")
            raise GenerationUnavailableError(
                f"Generation provider returned HTTP {response.status_code}: {detail}"
            )

        try:
            data = response.json()
        except ValueError:
            data = response.text

        if isinstance(data, dict) and data.get("error"):
            raise GenerationRejectedError(f"Generation rejected by provider: {data['error']}")

        return extract_response_text(data).strip()

    def check_health(self) -> bool:
        """Check if the provider is reachable.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = self.session.get(self.health_url, headers=self._headers(), timeout=5)
            return response.status_code == 200
        except requests.RequestException as e:
            logger.error(f"Generation provider health check failed: {e}")
            return False
