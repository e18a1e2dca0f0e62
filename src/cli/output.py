"""CLI output formatters for Rich tables and JSON.

Provides human-readable Rich output (default) and machine-parseable JSON
output (--json flag).
"""

import json

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from src.config import AppConfig, mask_secret
from src.services.conversation_orchestrator import AnalyzeResult, ChatResult
from src.services.table_extractor import ROW_FIELDS

console = Console()

# Category color map (matches web UI domain colors)
CATEGORY_COLORS = {
    "Sensor": "cyan",
    "Actuator": "magenta",
    "Load": "yellow",
}


def format_terminal_table(table: dict) -> Table:
    """Build a Rich table for an extracted terminal table."""
    rich_table = Table(
        title=f"Terminal assignment ({table.get('controller', '?')})",
        show_lines=False,
    )
    for name in ROW_FIELDS:
        rich_table.add_column(name, overflow="fold")
    for row in table.get("rows", []):
        if not isinstance(row, dict):
            continue
        category = str(row.get("category", ""))
        color = CATEGORY_COLORS.get(category)
        cells = [str(row.get(name, "") or "") for name in ROW_FIELDS]
        rich_table.add_row(*cells, style=color)
    return rich_table


def print_analyze_result(result: AnalyzeResult, as_json: bool = False) -> None:
    """Print an analysis result."""
    if as_json:
        console.print_json(json.dumps({
            "threadId": result.thread_id,
            "reply": result.reply,
            "table": result.table,
            "note": result.note,
            "files": [
                {"name": f.local_name, "size": f.byte_size, "type": f.mime_type}
                for f in result.files
            ],
        }))
        return

    console.print(f"[bold]Thread:[/bold] {result.thread_id}")
    if result.table is not None:
        console.print(format_terminal_table(result.table))
        assumptions = result.table.get("assumptions")
        if assumptions:
            console.print(Panel(str(assumptions), title="Assumptions"))
    else:
        console.print(f"[yellow]{result.note}[/yellow]")
    console.print(Panel(Markdown(result.reply), title="Assistant reply"))


def print_chat_result(result: ChatResult, as_json: bool = False) -> None:
    """Print a chat reply."""
    if as_json:
        console.print_json(json.dumps({"threadId": result.thread_id, "reply": result.reply}))
        return
    console.print(f"[bold]Thread:[/bold] {result.thread_id}")
    console.print(Markdown(result.reply or "_(empty reply)_"))


def print_config(cfg: AppConfig) -> None:
    """Print resolved configuration with secrets masked."""
    console.print("[bold]OpenAI:[/bold]")
    console.print(f"  api_key: {mask_secret(cfg.openai.api_key)}")
    console.print(f"  base_url: {cfg.openai.base_url or '(default)'}")
    console.print(f"  analyze_assistant_id: {cfg.openai.analyze_assistant_id or '(not set)'}")
    console.print(f"  chat_assistant_id: {cfg.openai.chat_assistant_id or '(not set)'}")
    console.print(
        f"  allow_chat_assistant_override: {cfg.openai.allow_chat_assistant_override}"
    )

    console.print("\n[bold]Runs:[/bold]")
    console.print(f"  poll_interval_seconds: {cfg.runs.poll_interval_seconds}")
    console.print(f"  max_poll_attempts: {cfg.runs.max_poll_attempts}")
    console.print(f"  recent_turn_limit: {cfg.runs.recent_turn_limit}")

    console.print("\n[bold]Uploads:[/bold]")
    console.print(f"  max_files: {cfg.uploads.max_files}")
    console.print(f"  max_file_bytes: {cfg.uploads.max_file_bytes:,}")

    console.print("\n[bold]Extraction:[/bold]")
    console.print(f"  strictness: {cfg.extraction.strictness}")

    console.print("\n[bold]Server:[/bold]")
    console.print(f"  host: {cfg.server.host}")
    console.print(f"  port: {cfg.server.port}")
    console.print(f"  serialize_thread_runs: {cfg.server.serialize_thread_runs}")
