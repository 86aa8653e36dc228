"""Generation client and prompt assembly."""

from foglia.llm.client import GenerationClient, extract_response_text
from foglia.llm.prompts import assemble_messages, build_system_instructions

__all__ = [
    "GenerationClient",
    "extract_response_text",
    "assemble_messages",
    "build_system_instructions",
]
