"""CLI runtime context — resolves paths and builds the controller."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from agentctl.config import settings
from agentctl.exceptions import ConfigError
from agentctl.processes.controller import AgentController
from agentctl.processes.registry import load_agents, resolve_base_path

logger = structlog.get_logger()
err_console = Console(stderr=True)


@dataclass
class AgentctlContext:
    """Options shared by every command of one invocation."""

    base_path: Path
    config_file: Path

    @classmethod
    def create(
        cls,
        base_path: Path | None = None,
        config_file: str | None = None,
    ) -> AgentctlContext:
        base = resolve_base_path(base_path or settings.base_path)
        # Absolute config paths are kept as-is by the join
        return cls(base_path=base, config_file=base / (config_file or settings.config_file))

    def controller(self, fail_fast: bool | None = None) -> AgentController:
        """Load agent.conf and return a controller over its agents.

        A configuration error ends the program with exit code 1.
        """
        try:
            agents = load_agents(self.config_file, self.base_path)
        except ConfigError as e:
            logger.error("cannot load agent config", path=str(self.config_file), error=str(e))
            err_console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(1)

        return AgentController(
            agents,
            agent_binary=settings.agent_binary,
            restart_delay=settings.restart_delay,
            fail_fast=settings.start_fail_fast if fail_fast is None else fail_fast,
        )
