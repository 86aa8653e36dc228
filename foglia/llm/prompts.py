"""Prompt templates and message assembly for the generation capability."""

from typing import Optional

from foglia.models import Decision, Message, Verdict

EVALUATOR_PERSONA = """Sei Foglia, l'assistente che valuta le proposte di attività dell'associazione.
Ricevi una proposta (testo libero o contenuto di un documento) e la confronti con i documenti di riferimento elencati.
Valuta completezza, sicurezza dei partecipanti, rispetto dei regolamenti e chiarezza organizzativa.
Non inventare regole che non derivano dai documenti di riferimento o dal buon senso organizzativo.
Scrivi la motivazione e i suggerimenti in italiano, con tono cordiale e concreto."""

INFORMATIONAL_PERSONA = """Sei Foglia, l'assistente dell'associazione.
Rispondi in italiano, in modo breve e cordiale, alle domande su come proporre un'attività e su cosa serve perché venga approvata.
Basati sui documenti di riferimento elencati; se non conosci la risposta, dillo chiaramente."""

OUTPUT_CONTRACT = """Rispondi ESCLUSIVAMENTE con un oggetto JSON, senza testo prima o dopo, con questa forma:
{ "decision": "approved"|"approved_with_recs"|"changes"|"rejected",
  "motivation": string,
  "missing_fields": [string...],
  "concrete_suggestions": [string...] }

Significato di "decision":
- "approved": la proposta è completa e conforme.
- "approved_with_recs": conforme, ma con miglioramenti consigliati o dettagli non essenziali mancanti.
- "changes": mancano informazioni essenziali o ci sono aspetti da correggere prima dell'approvazione.
- "rejected": la proposta è in contrasto con i documenti di riferimento."""

GROUNDING_HEADER = "Documenti di riferimento:"
CONTENT_HEADER = "Proposta da valutare:"
QUESTION_HEADER = "Domanda:"

EXAMPLE_SUBMISSION = (
    "Titolo: Raccolta foglie in città; Luogo: Giardini pubblici; "
    "Data: sabato mattina; Partecipanti: famiglie con bambini"
)

# Built from the model itself so the example always matches the real schema.
EXAMPLE_VERDICT = Verdict(
    decision=Decision.CHANGES_REQUIRED,
    motivation=(
        "La proposta è interessante ma mancano le informazioni sulla sicurezza "
        "e sul referente, essenziali per un'attività con bambini."
    ),
    missing_fields=("Referente responsabile", "Misure di sicurezza"),
    suggestions=(
        "Indica un referente con recapito telefonico",
        "Prevedi un breve briefing di sicurezza iniziale",
    ),
)


def build_system_instructions(persona: str, with_contract: bool = True) -> str:
    """Persona followed by the mandatory output contract."""
    if not with_contract:
        return persona
    return f"{persona}\n\n{OUTPUT_CONTRACT}"


def example_messages() -> list[Message]:
    """Worked example: a sample submission and its expected verdict."""
    return [
        Message(role="user", content=f"{CONTENT_HEADER}\n{EXAMPLE_SUBMISSION}"),
        Message(role="assistant", content=EXAMPLE_VERDICT.model_dump_json(by_alias=True)),
    ]


def assemble_messages(
    persona: str,
    grounding_block: str,
    content: str,
    include_example: bool = True,
    content_header: Optional[str] = CONTENT_HEADER,
) -> list[Message]:
    """Assemble the message sequence for one generation call.

    Order: instructions (persona and contract), optional worked example,
    grounding block, user content.

    Args:
        persona: Instructional text, already including the output contract if any
        grounding_block: Rendered policy references
        content: The submission or question
        include_example: Insert the worked example after the instructions
        content_header: Label placed before the content

    Returns:
        Ordered list of role-tagged messages
    """
    messages = [Message(role="system", content=persona)]

    if include_example:
        messages.extend(example_messages())

    messages.append(Message(role="system", content=f"{GROUNDING_HEADER}\n{grounding_block}"))

    user_content = f"{content_header}\n{content}" if content_header else content
    messages.append(Message(role="user", content=user_content))

    return messages

