"""
AgentPass - Command Line Interface

Usage:
    $ agentpass --help
    $ agentpass ask "what is the SOL price?"
    $ agentpass chat
    $ agentpass profile --format json
    $ agentpass serve --port 3000
    $ agentpass config show

Sub-command Groups:
    config - Configuration inspection and validation
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from agentpass import __version__
from agentpass.api.deps import AppState, build_app_state
from agentpass.cognition.collaborators import ChatMessage
from agentpass.config.settings import Settings, validate_settings

console = Console()

app = typer.Typer(
    name="agentpass",
    help="AgentPass - Solana agent registry and skill dispatch",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

config_app = typer.Typer(
    name="config",
    help="Configuration commands",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")

_EXIT_WORDS = {"exit", "quit", "/exit", "/quit"}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"AgentPass version {__version__}")
        raise typer.Exit()


def verbose_callback(value: bool) -> None:
    """Set verbose mode."""
    if value:
        logging.basicConfig(level=logging.DEBUG)


def _state() -> AppState:
    return build_app_state(Settings())


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        callback=verbose_callback,
        help="Enable verbose output.",
    ),
) -> None:
    """
    AgentPass - Solana agent registry and skill dispatch.

    Use --help on any subcommand for detailed information.
    """


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send to the agent."),
) -> None:
    """Send one message through the dispatch engine and print the reply."""
    state = _state()
    reply = asyncio.run(state.engine.process(message))
    console.print(reply, markup=False)


@app.command()
def chat() -> None:
    """Interactive chat session (type 'exit' to leave)."""
    state = _state()
    history: list[ChatMessage] = []

    console.print(Panel.fit(
        f"Chatting with [cyan]{state.settings.SAP_AGENT_NAME}[/cyan] "
        f"via [cyan]{state.settings.AI_PROVIDER}[/cyan]",
        title="AgentPass",
    ))

    asyncio.run(_chat_loop(state, history))


async def _chat_loop(state: AppState, history: list[ChatMessage]) -> None:
    while True:
        try:
            message = console.input("[bold]you>[/bold] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if message.strip().lower() in _EXIT_WORDS:
            break

        reply = await state.engine.process(message, history)
        console.print(Text.assemble(("agent> ", "bold cyan"), reply))
        history.append(ChatMessage(role="user", content=message))
        history.append(ChatMessage(role="assistant", content=reply))


@app.command()
def profile(
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text or json.",
    ),
) -> None:
    """Show the local agent profile or its OpenClaw manifest."""
    from agentpass.cli.output import print_error, print_json

    state = _state()
    if format == "json":
        manifest = state.profiles.export_for_openclaw()
        if manifest is None:
            print_error("Agent not initialized", hint="Set SAP_ENABLED=true")
            raise typer.Exit(1)
        print_json(manifest)
    elif format == "text":
        console.print(state.profiles.get_summary(), markup=False)
    else:
        print_error(f"Unknown format: {format}", hint="Use text or json")
        raise typer.Exit(2)


@app.command()
def serve(
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        "-h",
        help="Host to bind to.",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to bind to (defaults to WEB_PORT).",
    ),
) -> None:
    """Start the AgentPass HTTP server."""
    import uvicorn

    from agentpass.cli.output import print_warning

    s = Settings()
    if s.BOT_MODE != "web":
        print_warning(f"BOT_MODE={s.BOT_MODE} is not served here; starting the web API")
    for problem in validate_settings(s):
        print_warning(problem)

    port = port or s.WEB_PORT
    console.print(Panel.fit(
        f"Starting AgentPass server on [cyan]http://{host}:{port}[/cyan]",
        title="Server",
    ))
    uvicorn.run("agentpass.main:app", host=host, port=port)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration (secrets masked)."""
    from agentpass.cli.output import print_table

    s = Settings()
    rows = []
    for name, value in s.model_dump().items():
        if name.endswith("_KEY") and value:
            value = "****"
        rows.append([name, str(value)])
    print_table("AgentPass Configuration", ["Setting", "Value"], rows, styles=["cyan", ""])


@config_app.command("validate")
def config_validate() -> None:
    """Validate the configuration and exit non-zero on problems."""
    from agentpass.cli.output import print_error, print_success

    problems = validate_settings(Settings())
    if problems:
        for problem in problems:
            print_error(problem)
        raise typer.Exit(1)
    print_success("Configuration is valid")
