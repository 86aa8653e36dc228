"""Tests for verdict parsing and rendering."""

import json

import pytest

from foglia.models import Decision, StructuredOutcome, UnstructuredOutcome, Verdict
from foglia.verdict.parser import extract_json_object, parse_verdict
from foglia.verdict.renderer import (
    CLOSING_LINE,
    EMPTY_RESPONSE,
    MISSING_FIELDS_HEADER,
    SUGGESTIONS_HEADER,
    render_unstructured,
    render_verdict,
)


def make_payload(**overrides):
    payload = {
        "decision": "approved_with_recs",
        "motivation": "Proposta conforme.",
        "missing_fields": ["Referente"],
        "concrete_suggestions": ["Aggiungi un recapito"],
    }
    payload.update(overrides)
    return payload


class TestParseVerdict:
    """Tests for parse_verdict."""

    def test_valid_schema(self):
        outcome = parse_verdict(json.dumps(make_payload()))

        assert isinstance(outcome, StructuredOutcome)
        assert outcome.verdict.decision == Decision.APPROVED_WITH_RECOMMENDATIONS
        assert outcome.verdict.missing_fields == ("Referente",)
        assert outcome.verdict.suggestions == ("Aggiungi un recapito",)

    @pytest.mark.parametrize(
        "token,decision",
        [
            ("approved", Decision.APPROVED),
            ("approved_with_recs", Decision.APPROVED_WITH_RECOMMENDATIONS),
            ("changes", Decision.CHANGES_REQUIRED),
            ("rejected", Decision.REJECTED),
            (" Rejected ", Decision.REJECTED),
        ],
    )
    def test_every_decision_token(self, token, decision):
        outcome = parse_verdict(json.dumps(make_payload(decision=token)))

        assert isinstance(outcome, StructuredOutcome)
        assert outcome.verdict.decision == decision

    def test_prose_is_kept_unchanged(self):
        prose = "Ciao! La tua proposta sembra interessante, ma dimmi di più sul luogo."
        outcome = parse_verdict(prose)

        assert isinstance(outcome, UnstructuredOutcome)
        assert outcome.raw_text == prose

    def test_fenced_json(self):
        raw = "Ecco la valutazione:\n```json\n" + json.dumps(make_payload()) + "\n```"

        assert isinstance(parse_verdict(raw), StructuredOutcome)

    def test_json_surrounded_by_prose(self):
        raw = "Valutazione: " + json.dumps(make_payload(decision="changes")) + " Fine."
        outcome = parse_verdict(raw)

        assert isinstance(outcome, StructuredOutcome)
        assert outcome.verdict.decision == Decision.CHANGES_REQUIRED

    @pytest.mark.parametrize(
        "raw",
        [
            json.dumps(make_payload(decision="maybe")),
            json.dumps(make_payload(decision=None)),
            json.dumps(make_payload(motivation="")),
            json.dumps(make_payload(motivation="   ")),
            json.dumps(make_payload(motivation=42)),
            json.dumps({k: v for k, v in make_payload().items() if k != "motivation"}),
            json.dumps({k: v for k, v in make_payload().items() if k != "decision"}),
            json.dumps([make_payload()]),
            '"approved"',
            "",
            "{ broken json",
        ],
    )
    def test_invalid_structures_degrade(self, raw):
        outcome = parse_verdict(raw)

        assert isinstance(outcome, UnstructuredOutcome)
        assert outcome.raw_text == raw

    def test_lists_are_lenient(self):
        payload = make_payload(missing_fields="Referente", concrete_suggestions=["ok", 3, None, " "])
        outcome = parse_verdict(json.dumps(payload))

        assert isinstance(outcome, StructuredOutcome)
        assert outcome.verdict.missing_fields == ()
        assert outcome.verdict.suggestions == ("ok",)

    def test_lists_may_be_absent(self):
        outcome = parse_verdict(json.dumps({"decision": "approved", "motivation": "Tutto ok."}))

        assert isinstance(outcome, StructuredOutcome)
        assert outcome.verdict.missing_fields == ()
        assert outcome.verdict.suggestions == ()

    def test_motivation_is_bounded(self):
        outcome = parse_verdict(json.dumps(make_payload(motivation="x" * 50)), max_motivation_chars=10)

        assert outcome.verdict.motivation == "x" * 10

    def test_json_followed_by_prose_with_braces(self):
        raw = json.dumps(make_payload()) + "\nNota: usa il modulo {A}."
        outcome = parse_verdict(raw)

        assert isinstance(outcome, StructuredOutcome)
        assert outcome.verdict.decision == Decision.APPROVED_WITH_RECOMMENDATIONS

    def test_first_complete_object_wins(self):
        raw = "Risposta: " + json.dumps(make_payload(decision="rejected")) + " poi " + json.dumps(make_payload())

        assert extract_json_object(raw)["decision"] == "rejected"

    def test_extract_json_object_rejects_non_objects(self):
        assert extract_json_object("[1, 2]") is None
        assert extract_json_object("nessun json qui") is None


class TestRenderVerdict:
    """Tests for render_verdict."""

    @pytest.mark.parametrize(
        "decision,title",
        [
            (Decision.APPROVED, "✅ *Approvato*"),
            (Decision.APPROVED_WITH_RECOMMENDATIONS, "✅ *Approvato con raccomandazioni*"),
            (Decision.CHANGES_REQUIRED, "⚠ *Modifiche necessarie*"),
            (Decision.REJECTED, "❌ *Rifiutato*"),
        ],
    )
    def test_title_line(self, decision, title):
        report = render_verdict(Verdict(decision=decision, motivation="Motivo."))

        assert report.splitlines()[0] == title
        assert report.splitlines()[1] == "Motivo."

    def test_full_layout(self):
        verdict = Verdict(
            decision=Decision.CHANGES_REQUIRED,
            motivation="Mancano dati.",
            missing_fields=("Data", "Luogo"),
            suggestions=("Indica la data",),
        )

        assert render_verdict(verdict) == "\n".join(
            [
                "⚠ *Modifiche necessarie*",
                "Mancano dati.",
                "",
                MISSING_FIELDS_HEADER,
                "• Data",
                "• Luogo",
                "",
                SUGGESTIONS_HEADER,
                "• Indica la data",
                "",
                CLOSING_LINE,
            ]
        )

    def test_empty_blocks_are_omitted(self):
        report = render_verdict(Verdict(decision=Decision.APPROVED, motivation="Ok."))

        assert MISSING_FIELDS_HEADER not in report
        assert SUGGESTIONS_HEADER not in report
        assert report.endswith(CLOSING_LINE)

    def test_only_suggestions(self):
        report = render_verdict(
            Verdict(decision=Decision.APPROVED, motivation="Ok.", suggestions=("Porta acqua",))
        )

        assert MISSING_FIELDS_HEADER not in report
        assert SUGGESTIONS_HEADER in report

    def test_deterministic(self):
        verdict = Verdict(
            decision=Decision.REJECTED,
            motivation="No.",
            missing_fields=("a",),
            suggestions=("b",),
        )

        assert render_verdict(verdict) == render_verdict(verdict.model_copy())

    def test_unstructured(self):
        assert render_unstructured("  testo libero \n") == "testo libero"
        assert render_unstructured("   ") == EMPTY_RESPONSE
