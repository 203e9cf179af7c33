"""
CLI interface for AI Trace.

Inspect model metadata, merge captured streams, and build or ship
canonical traces from recorded exchanges.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ai_trace.config.loader import load_trace_config
from ai_trace.config.logging_setup import setup_logging
from ai_trace.core.pricing import TextModelInfo, calculate_cost, find_item_by_name_or_alias
from ai_trace.core.serialization import to_interchange
from ai_trace.core.streaming import StreamMergeError
from ai_trace.providers.openai.info import MODEL_INFO_OPENAI
from ai_trace.providers.openai.stream import (
    merge_chat_response_deltas,
    merge_completion_response_deltas,
)
from ai_trace.providers.openai.trace import generate_chat_trace, generate_completion_trace
from ai_trace.transport.client import TraceClient

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """AI Trace CLI."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    if ctx.invoked_subcommand is None:
        console.print("AI Trace - Use --help to see available commands")


def _registry(config_path: Optional[str]) -> List[TextModelInfo]:
    if config_path:
        return load_trace_config(config_path).model_registry()
    return list(MODEL_INFO_OPENAI)


def _read(path: Optional[str]) -> Optional[str]:
    if path is None:
        return None
    return Path(path).read_text(encoding='utf-8')


@app.command()
def lookup(
    model: str = typer.Argument(..., help="Model name or alias"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Trace config with extra models")
):
    """Show the metadata registered for a model."""
    try:
        info = find_item_by_name_or_alias(_registry(config), model)
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    if info is None:
        console.print(f"[yellow]Model not found:[/] {escape(model)}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title=info.name)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Aliases", ", ".join(info.aliases) or "-")
    table.add_row("Currency", info.currency or "-")
    table.add_row("Characters billed as tokens", "yes" if info.character_is_token else "no")
    table.add_row("Prompt cost / 1M", _format_price(info.prompt_token_cost_per_1m))
    table.add_row("Completion cost / 1M", _format_price(info.completion_token_cost_per_1m))
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command("merge-stream")
def merge_stream(
    path: str = typer.Argument(..., help="File holding captured server-sent event lines"),
    completion: bool = typer.Option(False, "--completion", help="Stream is a text completion, not chat")
):
    """Merge a captured OpenAI stream into one response."""
    try:
        lines = Path(path).read_text(encoding='utf-8').splitlines()
        if completion:
            merged = merge_completion_response_deltas(lines)
            rows = [(str(c.index), "-", c.finish_reason or "-", escape(c.text)) for c in merged.choices]
        else:
            merged = merge_chat_response_deltas(lines)
            rows = [
                (str(c.index), c.message.role or "-", c.finish_reason or "-", escape(c.message.content or ""))
                for c in merged.choices
            ]
    except (OSError, StreamMergeError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title=f"{merged.model} ({merged.id})")
    table.add_column("Index")
    table.add_column("Role")
    table.add_column("Finish")
    table.add_column("Content")
    for row in rows:
        table.add_row(*row)
    console.print(table)

    if merged.usage:
        console.print(
            f"Tokens: prompt {merged.usage.prompt_tokens:,}, "
            f"completion {merged.usage.completion_tokens:,}, "
            f"total {merged.usage.total_tokens:,}"
        )
    sys.exit(EXIT_CODE_PASS)


@app.command()
def trace(
    request: str = typer.Argument(..., help="File holding the JSON request body"),
    response: Optional[str] = typer.Argument(None, help="File holding the response body or stream"),
    completion: bool = typer.Option(False, "--completion", help="Exchange is a text completion, not chat"),
    session_id: Optional[str] = typer.Option(None, "--session-id", "-s", help="Session to record"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Trace config with extra models")
):
    """Print the canonical trace step of a recorded exchange as JSON."""
    try:
        step = _build_step(request, response, completion, session_id, config)
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    console.print_json(json.dumps(to_interchange(step)))

    cost = _step_cost(step)
    if cost is not None:
        console.print(f"Estimated cost: {cost}")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def send(
    request: str = typer.Argument(..., help="File holding the JSON request body"),
    response: Optional[str] = typer.Argument(None, help="File holding the response body or stream"),
    config: str = typer.Option(..., "--config", "-c", help="Trace config file"),
    completion: bool = typer.Option(False, "--completion", help="Exchange is a text completion, not chat"),
    session_id: Optional[str] = typer.Option(None, "--session-id", "-s", help="Session to record")
):
    """Build the trace step of a recorded exchange and send it to the collector."""
    try:
        trace_config = load_trace_config(config)
        step = _build_step(request, response, completion, session_id, config)
        client = TraceClient(trace_config.endpoint, headers=trace_config.headers)
        asyncio.run(client.send_trace(step))
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(f"[green]✓[/] Sent trace {step.trace_id}")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def memory(
    config: str = typer.Option(..., "--config", "-c", help="Trace config file"),
    session_id: Optional[str] = typer.Option(None, "--session-id", "-s", help="Session to fetch"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="User to fetch"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum entries to fetch")
):
    """Fetch recorded conversational memory from the collector."""
    try:
        trace_config = load_trace_config(config)
        client = TraceClient(trace_config.endpoint, headers=trace_config.headers)
        items = asyncio.run(client.get_memory(
            session_id=session_id,
            user=user,
            limit=limit if limit is not None else trace_config.memory.limit
        ))
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    if not items:
        console.print("[dim]No memory found.[/]")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title="Memory")
    table.add_column("Role")
    table.add_column("Text")
    for item in items:
        table.add_row(item.role or "-", escape(item.text))
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


def _build_step(request, response, completion, session_id, config):
    generate = generate_completion_trace if completion else generate_chat_trace
    builder = generate(_read(request), _read(response), registry=_registry(config))
    return builder.set_trace_id().set_session_id(session_id).build()


def _step_cost(step):
    """Cost of a step from its resolved model info and usage, if known."""
    if step.request is None or step.response is None or step.response.model_usage is None:
        return None
    info = getattr(step.request, "model_info", None)
    if info is None:
        return None
    return calculate_cost(info, step.response.model_usage)


def _format_price(amount: Optional[float]) -> str:
    """Format a per-1M price."""
    if amount is None:
        return "-"
    return f"{amount:,.2f}"


if __name__ == "__main__":
    app()
