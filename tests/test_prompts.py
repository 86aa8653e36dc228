"""Tests for prompt assembly."""

import json

from foglia.llm.prompts import (
    CONTENT_HEADER,
    EVALUATOR_PERSONA,
    EXAMPLE_VERDICT,
    GROUNDING_HEADER,
    OUTPUT_CONTRACT,
    assemble_messages,
    build_system_instructions,
    example_messages,
)
from foglia.models import StructuredOutcome
from foglia.verdict.parser import parse_verdict


def test_message_order_with_example():
    """Instructions, example pair, grounding block, user content."""
    messages = assemble_messages("persona", "- Regolamento", "Titolo: Passeggiata")

    assert [m.role for m in messages] == ["system", "user", "assistant", "system", "user"]
    assert messages[0].content == "persona"
    assert messages[3].content == f"{GROUNDING_HEADER}\n- Regolamento"
    assert messages[4].content == f"{CONTENT_HEADER}\nTitolo: Passeggiata"


def test_message_order_without_example():
    messages = assemble_messages("persona", "- Regolamento", "testo", include_example=False)

    assert [m.role for m in messages] == ["system", "system", "user"]


def test_custom_content_header():
    messages = assemble_messages("p", "- r", "Come funziona?", include_example=False, content_header="Domanda:")

    assert messages[-1].content == "Domanda:\nCome funziona?"


def test_system_instructions_embed_contract():
    instructions = build_system_instructions(EVALUATOR_PERSONA)

    assert instructions.startswith(EVALUATOR_PERSONA)
    assert OUTPUT_CONTRACT in instructions
    for key in ("decision", "motivation", "missing_fields", "concrete_suggestions"):
        assert f'"{key}"' in instructions


def test_system_instructions_without_contract():
    assert build_system_instructions("persona", with_contract=False) == "persona"


def test_example_matches_real_schema():
    """The worked example must decode as a verdict with the real parser."""
    answer = example_messages()[1].content

    assert set(json.loads(answer)) == {"decision", "motivation", "missing_fields", "concrete_suggestions"}

    outcome = parse_verdict(answer)
    assert isinstance(outcome, StructuredOutcome)
    assert outcome.verdict == EXAMPLE_VERDICT
