"""agentctl CLI — manage the monitoring agents declared in agent.conf.

`agentctl start`, `agentctl stop web`, `agentctl status` and friends.
Targets default to every agent; `all` means the same thing.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console

from agentctl.cli import agents
from agentctl.cli.context import AgentctlContext
from agentctl.config import settings
from agentctl.log import configure_logging

console = Console()

_app = typer.Typer(
    name="agentctl",
    help="agentctl -- start, stop and inspect local monitoring agents.",
    no_args_is_help=True,
)

_TARGETS_HELP = "Agent names, or 'all' (default: all agents)"


@_app.callback()
def main(
    ctx: typer.Context,
    base_path: Path | None = typer.Option(
        None, "--base-path", "-b",
        help="Directory holding agent.conf, lib/, configs/, logs/ and pids/ (default: the executable's directory)",
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Agent config file, relative to the base path",
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="debug, info, warning or error",
    ),
):
    """Resolve global options before any command runs."""
    try:
        configure_logging(log_level or settings.log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")
    ctx.obj = AgentctlContext.create(base_path=base_path, config_file=config_file)


@_app.command("list")
def list_cmd(ctx: typer.Context):
    """Show the launch configuration of every agent."""
    agents.list_agents(ctx.obj)


@_app.command("status")
def status(ctx: typer.Context):
    """Show whether each agent is running."""
    agents.status(ctx.obj)


@_app.command("start")
def start(
    ctx: typer.Context,
    names: list[str] | None = typer.Argument(None, help=_TARGETS_HELP),
    keep_going: bool = typer.Option(
        False, "--keep-going", "-k", help="Keep starting other agents after a spawn failure",
    ),
):
    """Start agents that are not already running."""
    agents.start(ctx.obj, names or [], keep_going=keep_going)


@_app.command("stop")
def stop(
    ctx: typer.Context,
    names: list[str] | None = typer.Argument(None, help=_TARGETS_HELP),
):
    """Kill running agents."""
    agents.stop(ctx.obj, names or [])


@_app.command("restart")
def restart(
    ctx: typer.Context,
    names: list[str] | None = typer.Argument(None, help=_TARGETS_HELP),
    keep_going: bool = typer.Option(
        False, "--keep-going", "-k", help="Keep starting other agents after a spawn failure",
    ),
):
    """Stop agents, pause briefly, then start them again."""
    agents.restart(ctx.obj, names or [], keep_going=keep_going)


@_app.command("version")
def version_cmd():
    """Show agentctl version."""
    from agentctl import __version__
    console.print(f"agentctl v{__version__}")


def app(args: list[str] | None = None) -> None:
    """Console-script entry point."""
    argv = args if args is not None else sys.argv[1:]
    _app(args=argv, prog_name="agentctl")
