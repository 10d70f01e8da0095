"""Agent commands — agentctl list, status, start, stop, restart."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from agentctl.cli.context import AgentctlContext
from agentctl.processes.controller import AgentState, Outcome

console = Console()

_STATE_STYLE = {
    AgentState.RUNNING: "bold green",
    AgentState.STOPPED: "bold red",
}


def list_agents(ctx: AgentctlContext) -> None:
    """Print every agent's launch configuration."""
    controller = ctx.controller()
    agents = controller.list_agents()

    if not agents:
        console.print("[dim]No agents configured.[/dim]")
        return

    table = Table(title="Agent launch configuration")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Base path", style="dim")
    table.add_column("Config file", style="white")
    table.add_column("Input filter", style="blue")
    table.add_column("Output filter", style="blue")
    table.add_column("Log file", style="white")
    table.add_column("Pid file", style="white")

    for a in agents:
        table.add_row(
            a.name,
            str(a.base_path),
            f"configs/{a.config_file}",
            a.input_filter,
            a.output_filter,
            f"logs/{a.log_file}",
            f"pids/{a.pid_file}",
        )

    console.print(table)


def status(ctx: AgentctlContext) -> None:
    """Print whether each agent is running."""
    controller = ctx.controller()
    rows = controller.status()

    if not rows:
        console.print("[dim]No agents configured.[/dim]")
        return

    table = Table(title="Agent status")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("PID", justify="right", style="yellow")
    table.add_column("State")

    for row in rows:
        style = _STATE_STYLE[row.state]
        table.add_row(
            row.name,
            str(row.pid) if row.pid is not None else "-",
            f"[{style}]{row.state.value.upper()}[/{style}]",
        )

    console.print(table)


def start(ctx: AgentctlContext, names: list[str], keep_going: bool = False) -> None:
    """Start the named agents, or all of them."""
    controller = ctx.controller(fail_fast=False if keep_going else None)
    _exit_on_failure(controller.start(names))


def stop(ctx: AgentctlContext, names: list[str]) -> None:
    """Stop the named agents, or all of them."""
    controller = ctx.controller()
    _exit_on_failure(controller.stop(names))


def restart(ctx: AgentctlContext, names: list[str], keep_going: bool = False) -> None:
    """Restart the named agents, or all of them."""
    controller = ctx.controller(fail_fast=False if keep_going else None)
    _exit_on_failure(controller.restart(names))


def _exit_on_failure(outcomes: dict[str, Outcome]) -> None:
    if Outcome.FAILED in outcomes.values():
        raise typer.Exit(1)
