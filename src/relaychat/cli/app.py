"""Main CLI application using Typer."""
import asyncio

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console

from ..client import (
    ChangeKind,
    HttpxTransport,
    MessageKind,
    MessageRole,
    NetworkMonitor,
    SessionController,
    SessionOutcome,
    TranscriptChange,
    gateway_url,
)
from ..client.config import NETWORK_PROBE_TIMEOUT
from ..logging_config import configure_logging

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="relaychat",
    help="Streaming chat gateway and terminal client",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

KIND_STYLES = {
    MessageKind.INFO: "dim",
    MessageKind.WARNING: "yellow",
    MessageKind.ERROR: "red",
}


class ConsoleRenderer:
    """Prints transcript changes to the console as they happen.

    Assistant characters are written in place as the typewriter reveals
    them; system notices go on their own line.
    """

    def __init__(self, console: Console) -> None:
        self._console = console
        self._mid_line = False

    def _break_line(self) -> None:
        if self._mid_line:
            self._console.print()
            self._mid_line = False

    def __call__(self, change: TranscriptChange) -> None:
        message = change.message
        if change.kind == ChangeKind.APPENDED:
            self._console.print(change.text, end="", markup=False, highlight=False)
            self._mid_line = True
        elif change.kind == ChangeKind.RESET:
            self._break_line()
            self._console.print("[dim](discarding partial answer)[/dim]")
        elif change.kind == ChangeKind.ADDED and message is not None and message.role == MessageRole.SYSTEM:
            self._break_line()
            style = KIND_STYLES.get(message.kind, "dim")
            self._console.print(f"[{style}]{message.text}[/{style}]", highlight=False)

    def finish(self) -> None:
        self._break_line()


@app.command()
def serve(
    host: str | None = typer.Option(
        None,
        "--host",
        help="Bind address (default: RELAYCHAT_HOST or 127.0.0.1)"
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port (default: RELAYCHAT_PORT or 3001)"
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, or error"
    ),
):
    """Run the completion gateway."""
    from ..gateway import run_gateway

    try:
        run_gateway(host=host, port=port, log_level=log_level)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to ask"),
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Gateway URL (default: RELAYCHAT_URL or http://localhost:3001)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log session activity to stderr"
    ),
):
    """Ask one question and print the streamed answer."""
    configure_logging("debug" if verbose else "warning")

    async def _ask():
        transport = HttpxTransport(url or gateway_url())
        controller = SessionController(transport, network=NetworkMonitor())
        renderer = ConsoleRenderer(console)
        controller.transcript.subscribe(renderer)
        try:
            return await controller.submit(question)
        finally:
            renderer.finish()
            await controller.aclose()
            await transport.aclose()

    try:
        outcome = asyncio.run(_ask())
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted.[/dim]")
        raise typer.Exit(code=130)

    if outcome == SessionOutcome.REJECTED:
        console.print("[red]Error: No question provided[/red]")
        raise typer.Exit(code=1)
    if outcome != SessionOutcome.COMPLETED:
        raise typer.Exit(code=1)


@app.command(name="tui")
def tui_command(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Gateway URL (default: RELAYCHAT_URL or http://localhost:3001)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    from ..ui import run_textual_tui

    try:
        asyncio.run(run_textual_tui(url or gateway_url(), log_level=log_level))
    except KeyboardInterrupt:
        pass
    console.print("\n[dim]Goodbye![/dim]")


@app.command()
def health(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Gateway URL (default: RELAYCHAT_URL or http://localhost:3001)"
    ),
):
    """Check that the gateway is reachable and has a provider configured."""
    async def _health():
        base_url = url or gateway_url()
        async with httpx.AsyncClient(timeout=NETWORK_PROBE_TIMEOUT) as client:
            try:
                response = await client.get(f"{base_url}/health")
                response.raise_for_status()
                info = response.json()
            except httpx.HTTPError as e:
                console.print(f"[red]x[/red] Gateway {base_url}: FAILED ({e})")
                raise typer.Exit(code=1)

        console.print(f"[green]+[/green] Gateway {base_url}: OK")
        if info.get("model"):
            console.print(f"[green]+[/green] Provider: {info.get('provider')} ({info['model']})")
        else:
            console.print(f"[yellow]![/yellow] Provider {info.get('provider')}: API key NOT SET")
            raise typer.Exit(code=1)

    asyncio.run(_health())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
