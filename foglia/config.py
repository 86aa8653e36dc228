"""Configuration management using Pydantic settings."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POLICY_REFS = [
    "Regolamento per le attività all'aperto dell'associazione",
    "Linee guida di sicurezza per escursioni e passeggiate di gruppo",
    "Codice di comportamento nei parchi e nelle aree protette",
    "Informativa privacy e consenso dei partecipanti",
]


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FOGLIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Generation
    llm_provider: Literal["ollama", "openai"] = Field(
        default="ollama",
        description="Text generation backend",
    )
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama API host URL",
    )
    llm_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible API",
    )
    llm_api_key: Optional[str] = Field(
        default=None,
        description="Credential for the OpenAI-compatible provider",
    )
    llm_model: str = Field(
        default="qwen2.5:7b-instruct",
        description="Model identifier used for evaluations",
    )
    llm_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Sampling temperature",
    )
    llm_max_tokens: int = Field(
        default=1024,
        description="Maximum tokens to generate",
    )
    generation_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds allowed for a single generation call",
    )

    # Input guards
    max_prompt_chars: int = Field(
        default=8000,
        description="Maximum length of a typed submission",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum size of an uploaded document",
    )
    max_extracted_chars: int = Field(
        default=30000,
        description="Extracted document text is truncated past this length",
    )
    extraction_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds allowed for extracting text from a document",
    )
    max_motivation_chars: int = Field(
        default=2000,
        description="Verdict motivations are cut to this length",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        description="Worker threads shared by extraction and generation calls",
    )

    # Grounding
    default_policy_refs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_POLICY_REFS),
        description="Reference documents used when the caller supplies none",
    )
    few_shot_example: bool = Field(
        default=True,
        description="Insert the worked example before the grounding block",
    )
    classify_requests: bool = Field(
        default=True,
        description="Route questions to the informational flow",
    )

    # Service
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8000, description="HTTP port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    timezone: str = Field(default="Europe/Rome", description="Timezone for the greeting")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Log file path",
    )
    json_logs: bool = Field(
        default=False,
        description="Write the log file as JSON lines",
    )

    @property
    def has_credentials(self) -> bool:
        """Whether the configured provider has what it needs to authenticate."""
        if self.llm_provider == "openai":
            return bool(self.llm_api_key)
        return True


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Config) -> None:
    """Set the global config instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset global config (mainly for testing)."""
    global _config
    _config = None
