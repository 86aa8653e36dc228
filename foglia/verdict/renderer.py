"""Human-readable reports for verdicts and unstructured answers."""

from foglia.models import Decision, Verdict

DECISION_TITLES = {
    Decision.APPROVED: ("✅", "Approvato"),
    Decision.APPROVED_WITH_RECOMMENDATIONS: ("✅", "Approvato con raccomandazioni"),
    Decision.CHANGES_REQUIRED: ("⚠", "Modifiche necessarie"),
    Decision.REJECTED: ("❌", "Rifiutato"),
}

MISSING_FIELDS_HEADER = "*Campi mancanti:*"
SUGGESTIONS_HEADER = "*Suggerimenti concreti:*"
CLOSING_LINE = "Se vuoi, posso aiutarti a completare o correggere la proposta. 🌿"
EMPTY_RESPONSE = "…nessuna risposta."


def render_title(decision: Decision) -> str:
    """Icon and bold label for a decision, e.g. ``✅ *Approvato*``."""
    icon, label = DECISION_TITLES[decision]
    return f"{icon} *{label}*"


def _bullet_block(header: str, items: tuple[str, ...]) -> list[str]:
    if not items:
        return []
    return ["", header, *(f"• {item}" for item in items)]


def render_verdict(verdict: Verdict) -> str:
    """Format a verdict as a report.

    Layout: title, motivation, optional missing-fields block, optional
    suggestions block, closing line. Empty blocks are omitted entirely.
    """
    lines = [render_title(verdict.decision), verdict.motivation]
    lines.extend(_bullet_block(MISSING_FIELDS_HEADER, verdict.missing_fields))
    lines.extend(_bullet_block(SUGGESTIONS_HEADER, verdict.suggestions))
    lines.extend(["", CLOSING_LINE])
    return "\n".join(lines)


def render_unstructured(raw_text: str) -> str:
    """Report for model output that is not a verdict: the text itself."""
    text = raw_text.strip()
    return text or EMPTY_RESPONSE
