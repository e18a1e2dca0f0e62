"""Wiring Analyst CLI.

Runs the API server, or the analyze/chat flows in-process against the
configured assistant service.

Usage:
    wiring-analyst serve                  Start the API server
    wiring-analyst analyze a.pdf b.pdf    Analyze documents
    wiring-analyst chat "..." -t THREAD   Follow-up question
    wiring-analyst export table.json      Write a table as XLSX
    wiring-analyst config show            Show resolved configuration
"""

import asyncio
import json
import logging
import mimetypes
from pathlib import Path
from typing import Optional

import typer

from src.cli.output import console, print_analyze_result, print_chat_result, print_config
from src.config import AppConfig, load_config
from src.errors import AppError, format_error
from src.services.assistant_client import OpenAIAssistantService, RawFile
from src.services.conversation_orchestrator import ConversationOrchestrator
from src.services.table_export import export_filename, table_to_xlsx
from src.services.table_extractor import has_table_shape

_log = logging.getLogger(__name__)

app = typer.Typer(
    name="wiring-analyst",
    help="Terminal assignment analysis of engineering documents",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")

# --- Global state ---
_config_path: str | None = None


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to wiring-analyst.yaml config file"
    ),
):
    """Wiring Analyst CLI."""
    global _config_path
    _config_path = config


def _load() -> AppConfig:
    try:
        return load_config(config_path=_config_path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


async def _run_with_service(cfg: AppConfig, flow):
    """Run one orchestrator flow and close the service client afterwards."""
    service = OpenAIAssistantService(cfg.openai)
    try:
        return await flow(ConversationOrchestrator(service, cfg))
    finally:
        await service.close()


def _read_files(paths: list[Path]) -> list[RawFile]:
    files = []
    for path in paths:
        if not path.is_file():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)
        mime_type, _ = mimetypes.guess_type(path.name)
        files.append(RawFile(name=path.name, content=path.read_bytes(), mime_type=mime_type or ""))
    return files


@app.command()
def version():
    """Show Wiring Analyst version."""
    from importlib.metadata import version as pkg_version
    try:
        v = pkg_version("wiring-analyst")
    except Exception:
        v = "unknown"
    console.print(f"[bold]Wiring Analyst[/bold] v{v}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
):
    """Start the API server with uvicorn."""
    import uvicorn

    cfg = _load()
    uvicorn.run(
        "src.api.main:app",
        host=host or cfg.server.host,
        port=port or cfg.server.port,
        log_level=cfg.server.log_level,
    )


@app.command()
def analyze(
    files: list[Path] = typer.Argument(..., help="Documents to analyze"),
    thread: Optional[str] = typer.Option(None, "--thread", "-t", help="Existing thread id"),
    output: Optional[Path] = typer.Option(
        None, "--xlsx", help="Also write the extracted table to this XLSX file"
    ),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Analyze documents and print the terminal table."""
    cfg = _load()
    raw_files = _read_files(files)
    try:
        result = asyncio.run(
            _run_with_service(cfg, lambda orch: orch.analyze(raw_files, thread_id=thread))
        )
    except AppError as e:
        console.print(f"[red]{format_error(e)}[/red]")
        raise typer.Exit(1)

    print_analyze_result(result, as_json=as_json)
    if output is not None and result.table is not None:
        output.write_bytes(table_to_xlsx(result.table))
        console.print(f"[green]Table written to {output}[/green]")


@app.command()
def chat(
    message: str = typer.Argument(..., help="Message to send"),
    thread: Optional[str] = typer.Option(None, "--thread", "-t", help="Existing thread id"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Send a follow-up message on a thread."""
    cfg = _load()
    try:
        result = asyncio.run(
            _run_with_service(cfg, lambda orch: orch.chat(message, thread_id=thread))
        )
    except AppError as e:
        console.print(f"[red]{format_error(e)}[/red]")
        raise typer.Exit(1)
    print_chat_result(result, as_json=as_json)


@app.command()
def export(
    table_file: Path = typer.Argument(..., help="JSON file holding a terminal table"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="XLSX destination"),
):
    """Convert a terminal table JSON file into an XLSX workbook."""
    try:
        table = json.loads(table_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read table: {e}[/red]")
        raise typer.Exit(1)
    if not has_table_shape(table):
        console.print("[red]Not a terminal table: 'controller' and a 'rows' list are required.[/red]")
        raise typer.Exit(1)

    destination = output or Path(export_filename(table_file.name))
    destination.write_bytes(table_to_xlsx(table))
    console.print(f"[green]Wrote {len(table['rows'])} row(s) to {destination}[/green]")


@config_app.command("show")
def config_show():
    """Display resolved configuration (secrets masked)."""
    print_config(_load())


if __name__ == "__main__":
    app()
