"""CLI application using Typer."""

import json
import mimetypes
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from foglia.config import get_config
from foglia.exceptions import FogliaError
from foglia.models import EvaluationResult
from foglia.utils.logging_config import setup_logging

app = typer.Typer(
    name="foglia",
    help="Evaluate activity proposals against reference policy documents",
    no_args_is_help=True,
)
console = Console()


def get_evaluator():
    """Build an evaluator from the global configuration."""
    from foglia.pipeline import Evaluator

    config = get_config()
    setup_logging(config.log_file, config.log_level, config.json_logs)
    return Evaluator(config)


def print_result(result: EvaluationResult, json_output: bool) -> None:
    if json_output:
        console.print(
            json.dumps(result.to_payload(), indent=2, ensure_ascii=False),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return

    console.print(result.report, markup=False)
    if result.truncated:
        console.print("\n[yellow]Note: the document was truncated before evaluation.[/yellow]")
    if result.policy_refs:
        console.print(f"\n[dim]Reference documents: {len(result.policy_refs)}[/dim]")


@app.command()
def evaluate(
    text: str = typer.Argument(..., help="Proposal text to evaluate"),
    policy_ref: Optional[list[str]] = typer.Option(
        None,
        "--policy-ref",
        "-p",
        help="Reference document (repeatable); defaults to the configured set",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Evaluate a typed proposal."""
    evaluator = get_evaluator()
    try:
        result = evaluator.evaluate_text(text, policy_ref)
    except FogliaError as e:
        console.print(f"[red]{e.error_code}: {e}[/red]")
        raise typer.Exit(1)
    finally:
        evaluator.close()

    print_result(result, json_output)


@app.command()
def analyze(
    file: Path = typer.Argument(
        ...,
        help="PDF, DOCX or text document to evaluate",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    mime: Optional[str] = typer.Option(
        None,
        "--mime",
        help="Declared MIME type (guessed from the extension if omitted)",
    ),
    policy_ref: Optional[list[str]] = typer.Option(
        None,
        "--policy-ref",
        "-p",
        help="Reference document (repeatable); defaults to the configured set",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Evaluate a document."""
    evaluator = get_evaluator()
    declared_mime = mime or mimetypes.guess_type(file.name)[0]

    console.print(f"[bold blue]Analyzing:[/bold blue] {file.name}")
    try:
        result = evaluator.evaluate_document(
            file.read_bytes(),
            declared_mime=declared_mime,
            filename=file.name,
            policy_refs=policy_ref,
        )
    except FogliaError as e:
        console.print(f"[red]{e.error_code}: {e}[/red]")
        raise typer.Exit(1)
    finally:
        evaluator.close()

    print_result(result, json_output)


@app.command()
def greeting():
    """Print the seasonal greeting."""
    from foglia.greeting import build_greeting

    config = get_config()
    console.print(build_greeting(tz=config.timezone), markup=False)


@app.command()
def status():
    """Show configuration and generation provider health."""
    from foglia.llm.client import GenerationClient

    config = get_config()
    setup_logging(config.log_file, config.log_level, config.json_logs)
    client = GenerationClient.from_config(config)

    table = Table(title="Foglia Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Provider", config.llm_provider)
    table.add_row("Endpoint", client.host)
    table.add_row("Model", config.llm_model)
    table.add_row("Temperature", str(config.llm_temperature))
    table.add_row("Credentials", "ok" if config.has_credentials else "[red]missing[/red]")
    table.add_row("Generation timeout", f"{config.generation_timeout}s")
    table.add_row("Max extracted chars", str(config.max_extracted_chars))
    table.add_row("Default references", str(len(config.default_policy_refs)))

    console.print(table)

    healthy = client.check_health()
    if healthy:
        console.print("[green]Generation provider reachable[/green]")
    else:
        console.print("[red]Generation provider unreachable[/red]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Port"),
):
    """Start the HTTP API."""
    from foglia.server import serve as serve_http

    config = get_config()
    setup_logging(config.log_file, config.log_level, config.json_logs)
    console.print("[bold]Starting Foglia API...[/bold]")
    serve_http(config, host=host, port=port)


if __name__ == "__main__":
    app()
