"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from foglia import cli
from foglia.exceptions import GenerationUnavailableError
from foglia.pipeline import Evaluator

from .conftest import FakeGenerationClient

runner = CliRunner()


@pytest.fixture
def patched_evaluator(monkeypatch, evaluator):
    monkeypatch.setattr(cli, "get_evaluator", lambda: evaluator)
    return evaluator


def test_evaluate_prints_report(patched_evaluator, fake_client):
    result = runner.invoke(cli.app, ["evaluate", "Titolo: Passeggiata; Luogo: Parco X"])

    assert result.exit_code == 0
    assert "Approvato con raccomandazioni" in result.stdout
    assert len(fake_client.calls) == 1


def test_evaluate_json(patched_evaluator):
    result = runner.invoke(cli.app, ["evaluate", "Titolo: Passeggiata; Luogo: Parco X", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["verdict"]["decision"] == "approved_with_recs"


def test_evaluate_policy_refs(patched_evaluator, fake_client):
    result = runner.invoke(
        cli.app,
        ["evaluate", "Titolo: Passeggiata; Luogo: Parco X", "-p", "Statuto", "-p", "Regolamento"],
    )

    assert result.exit_code == 0
    assert fake_client.calls[0]["messages"][3].content.endswith("- Statuto\n- Regolamento")


def test_evaluate_empty_exits_with_error(patched_evaluator, fake_client):
    result = runner.invoke(cli.app, ["evaluate", "   "])

    assert result.exit_code == 1
    assert "input_invalid" in result.stdout
    assert fake_client.calls == []


def test_evaluate_generation_failure(monkeypatch, test_config):
    evaluator = Evaluator(test_config, client=FakeGenerationClient(GenerationUnavailableError("down")))
    monkeypatch.setattr(cli, "get_evaluator", lambda: evaluator)

    result = runner.invoke(cli.app, ["evaluate", "Titolo: Passeggiata; Luogo: Parco X"])

    assert result.exit_code == 1
    assert "generation_unavailable" in result.stdout


def test_analyze_docx(patched_evaluator, fake_client, temp_dir, sample_docx_bytes):
    path = temp_dir / "proposta.docx"
    path.write_bytes(sample_docx_bytes)

    result = runner.invoke(cli.app, ["analyze", str(path)])

    assert result.exit_code == 0
    assert "proposta.docx" in result.stdout
    assert "Titolo: Passeggiata nel Parco" in fake_client.calls[0]["messages"][-1].content


def test_analyze_unsupported(patched_evaluator, fake_client, temp_dir):
    path = temp_dir / "foto.gif"
    path.write_bytes(b"GIF89a")

    result = runner.invoke(cli.app, ["analyze", str(path)])

    assert result.exit_code == 1
    assert "unsupported_format" in result.stdout
    assert fake_client.calls == []


def test_analyze_missing_file(patched_evaluator, temp_dir):
    result = runner.invoke(cli.app, ["analyze", str(temp_dir / "missing.pdf")])

    assert result.exit_code != 0


def test_greeting():
    result = runner.invoke(cli.app, ["greeting"])

    assert result.exit_code == 0
    assert "Oggi è" in result.stdout
