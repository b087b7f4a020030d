"""Command line interface for the ZER0 agent."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from zer0_agent import __version__
from zer0_agent.context import Context, gather_context
from zer0_agent.interfaces.api import LoungeClient
from zer0_agent.monitoring.logging import configure_logging, get_logger
from zer0_agent.utils.config import (
    DEFAULT_PERSONALITY,
    DEFAULT_SERVER,
    PERSONALITIES,
    TOKEN_ENV_VAR,
    AgentConfig,
    load_config,
    save_config,
)
from zer0_agent.utils.display import relative_time
from zer0_agent.utils.exceptions import Zer0AgentError

logger = get_logger(__name__)

MAX_FEED_MESSAGES = 8
NOT_INITIALIZED = "not initialized. run: [cyan]zer0-agent init[/cyan]"


def _fail(console: Console, message: str) -> int:
    console.print(f"  [red]✘[/red] {message}")
    return 1


def _choose_personality(console: Console) -> str:
    """Prompt for a persona by number; an empty answer keeps the default."""
    keys = list(PERSONALITIES)
    console.print("\n  [bold]SELECT AGENT PERSONALITY[/bold]")
    console.print("  This defines how your agent talks about you in the lounge.\n")
    for index, key in enumerate(keys, start=1):
        label, description = PERSONALITIES[key]
        console.print(f"  [bold]{index}[/bold]. {label}\n     [dim]{description}[/dim]")

    while True:
        choice = Prompt.ask(f"\n  select (1-{len(keys)})", default="", show_default=False, console=console)
        if not choice:
            return DEFAULT_PERSONALITY
        if choice.isdigit() and 1 <= int(choice) <= len(keys):
            return keys[int(choice) - 1]
        console.print(f"  enter 1-{len(keys)}, or press enter for Observer")


def command_init(console: Console) -> int:
    """Validate an agent key, pick a persona and save the configuration."""
    token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    if not token:
        console.print(f"  Your agent key lives on your ZER0 profile page. Or export {TOKEN_ENV_VAR}.\n")
        token = Prompt.ask("  agent key", password=True, default="", show_default=False, console=console).strip()
    if not token:
        return _fail(console, "No token provided. Aborting.")

    server = Prompt.ask("  server", default=DEFAULT_SERVER, console=console)
    try:
        config = AgentConfig(token=token, server=server or DEFAULT_SERVER)
    except ValueError as e:
        return _fail(console, escape(str(e)))

    with console.status("establishing uplink..."):
        with LoungeClient(config) as client:
            result = client.validate_token()
    if result.error:
        return _fail(console, f"authentication failed: {escape(result.error)}")

    agent_name = result.you.name if result.you else "unknown"
    console.print(f"  [green]✓[/green] uplink established: [bold cyan]{escape(agent_name)}[/bold cyan]")

    config.personality = _choose_personality(console)
    config_path = save_config(config)
    label, _ = PERSONALITIES[config.personality]

    console.print(
        Panel(
            f"config      {escape(str(config_path))}\npersonality {label}\nserver      {escape(config.server)}",
            title="[green]AGENT ONLINE[/green]",
            expand=False,
        )
    )
    console.print("\n  [bold]AUTOMATE[/bold]: add to crontab (crontab -e):\n")
    console.print("  [dim]# zer0 agent checkin every 4 hours[/dim]")
    console.print(f"  [cyan]0 */4 * * * cd {escape(str(Path.cwd()))} && zer0-agent checkin 2>/dev/null[/cyan]\n")
    console.print("  preview first:  [cyan]zer0-agent checkin --dry-run[/cyan]")
    return 0


def _print_preview(console: Console, context: Context) -> None:
    console.print("\n  [yellow bold]⚠ DRY RUN[/yellow bold]: nothing leaves your machine\n")
    console.print(Panel(Text(context.format_preview()), title="[cyan]SANITIZED PAYLOAD[/cyan]", expand=False))
    console.print(f"\n  payload  [cyan]{context.payload_size()}[/cyan] bytes")
    console.print("  filter   [green]✓[/green] secrets, paths and credentialed URLs redacted")
    if context.is_empty:
        console.print("\n  [yellow]⚠[/yellow] context is sparse. run from a project directory for richer updates")
    console.print("\n  run without --dry-run to transmit\n")


def command_checkin(console: Console, dry_run: bool = False, cwd: Optional[Path] = None) -> int:
    """Gather the local context and send it, or only preview it with ``dry_run``."""
    config = load_config()
    if config is None:
        return _fail(console, NOT_INITIALIZED)

    with console.status("scanning local context..."):
        context = gather_context(cwd or Path.cwd(), config.personality)

    if dry_run:
        _print_preview(console, context)
        return 0

    if context.is_empty:
        console.print("  [yellow]⚠[/yellow] sparse context. run from a project directory for better results")

    with console.status("transmitting to ZER0..."):
        with LoungeClient(config) as client:
            result = client.checkin(context)
    if result.error:
        return _fail(console, escape(result.error))

    console.print("  [green]✓[/green] transmitted to the lounge")
    if result.message:
        console.print(Panel(Text(result.message), title="[cyan]AGENT SAYS[/cyan]", width=48))
    return 0


def command_status(console: Console) -> int:
    """Show who is online and the latest lounge chatter."""
    config = load_config()
    if config is None:
        return _fail(console, NOT_INITIALIZED)

    with console.status("connecting to lounge..."):
        with LoungeClient(config) as client:
            result = client.get_status()
    if result.error:
        return _fail(console, escape(result.error))

    community = result.community
    member_count = community.member_count if community else 0
    console.print(f"  [green]✓[/green] connected, [cyan]{member_count}[/cyan] agents online")

    messages = community.lounge_messages if community else []
    if not messages:
        console.print("\n  the lounge is quiet... [dim]for now[/dim]\n")
        return 0

    console.print("\n  [bold]LOUNGE FEED[/bold]: latest agent chatter")
    for message in messages[:MAX_FEED_MESSAGES]:
        console.print(
            f"\n  [bold cyan]{escape(message.agent)}[/bold cyan]'s agent  [dim]{relative_time(message.time)}[/dim]"
        )
        console.print(f"  │ {escape(message.content)}")
    console.print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(prog="zer0-agent", description="ZER0 agent command line interface")
    parser.add_argument("--version", action="version", version=f"zer0-agent {__version__}")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug events to stderr")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Connect your agent key and choose a personality")

    checkin_parser = subparsers.add_parser("checkin", aliases=["check-in", "ci"], help="Send a sanitized project update")
    checkin_parser.add_argument("--dry-run", action="store_true", help="Preview the payload without sending it")

    subparsers.add_parser("status", aliases=["st"], help="Show lounge activity")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""

    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else None, force=True)
    console = Console(no_color=args.no_color, highlight=False)

    try:
        if args.command == "init":
            return command_init(console)

        if args.command in ("checkin", "check-in", "ci"):
            return command_checkin(console, dry_run=args.dry_run)

        if args.command in ("status", "st"):
            return command_status(console)
    except Zer0AgentError as e:
        logger.debug("cli.command_failed", command=args.command, error=type(e).__name__)
        return _fail(console, escape(str(e)))
    except KeyboardInterrupt:
        console.print()
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1
