"""AgentController — start, stop, restart and inspect configured agents.

Every operation works on one named agent, several, or all of them, one
agent at a time. State is derived freshly from pid files on each call;
nothing is cached between commands. The agent binary writes its own pid
file, the controller only reads it.
"""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Mapping

import psutil
import structlog

from agentctl.exceptions import PidFileError, ProcessError
from agentctl.processes.liveness import is_alive, read_recorded_pid
from agentctl.processes.registry import AgentSpec

logger = structlog.get_logger()

ALL = "all"

# sh backgrounds the agent and exits, so the agent is re-parented away
# from us and keeps running after agentctl exits.
_LAUNCHER = ["sh", "-c", '"$@" &', "agentctl-launch"]


class AgentState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class Outcome(str, Enum):
    STARTED = "started"
    ALREADY_RUNNING = "already_running"
    STOPPED = "stopped"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    UNKNOWN_AGENT = "unknown_agent"
    SKIPPED = "skipped"  # not attempted after an earlier fail-fast abort


@dataclass(frozen=True)
class AgentStatus:
    """One row of `agentctl status`."""

    name: str
    state: AgentState
    pid: int | None = None


class AgentController:
    """Runs lifecycle commands over an explicit set of AgentSpecs."""

    def __init__(
        self,
        agents: Mapping[str, AgentSpec],
        *,
        agent_binary: str | Path = "lib/agent",
        restart_delay: float = 1.0,
        fail_fast: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._agents = dict(agents)
        self._agent_binary = Path(agent_binary)
        self._restart_delay = restart_delay
        self._fail_fast = fail_fast
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_agents(self) -> list[AgentSpec]:
        """Return every configured agent."""
        return list(self._agents.values())

    def status(self, names: Iterable[str] | None = None) -> list[AgentStatus]:
        """Report RUNNING (with pid) or STOPPED for each target agent."""
        result = []
        for name, spec in self._targets(names):
            if spec is None:
                continue
            pid = self._live_pid(spec)
            if pid is None:
                result.append(AgentStatus(name=name, state=AgentState.STOPPED))
            else:
                result.append(AgentStatus(name=name, state=AgentState.RUNNING, pid=pid))
        return result

    def start(self, names: Iterable[str] | None = None) -> dict[str, Outcome]:
        """Start each target agent that is not already running.

        A spawn failure aborts the remaining agents when fail-fast is on;
        pid file errors only ever affect the agent they belong to.
        """
        outcomes: dict[str, Outcome] = {}
        aborted = False
        for name, spec in self._targets(names):
            if spec is None:
                outcomes[name] = Outcome.UNKNOWN_AGENT
                continue
            if aborted:
                outcomes[name] = Outcome.SKIPPED
                continue

            try:
                pid = read_recorded_pid(spec.pid_path)
            except PidFileError as e:
                logger.error("cannot read pid file", agent=name, error=str(e))
                outcomes[name] = Outcome.FAILED
                continue

            if pid is not None and is_alive(pid):
                logger.warning("agent already running", agent=name, pid=pid)
                outcomes[name] = Outcome.ALREADY_RUNNING
                continue

            try:
                self._launch(spec)
            except ProcessError as e:
                logger.error("agent failed to start", agent=name, error=str(e))
                outcomes[name] = Outcome.FAILED
                if self._fail_fast:
                    logger.error("aborting remaining starts", agent=name)
                    aborted = True
                continue

            logger.info("agent started", agent=name)
            outcomes[name] = Outcome.STARTED
        return outcomes

    def stop(self, names: Iterable[str] | None = None) -> dict[str, Outcome]:
        """Force-kill each target agent's recorded process.

        Failures are isolated: every target is attempted.
        """
        outcomes: dict[str, Outcome] = {}
        for name, spec in self._targets(names):
            if spec is None:
                outcomes[name] = Outcome.UNKNOWN_AGENT
                continue

            try:
                pid = read_recorded_pid(spec.pid_path)
            except PidFileError as e:
                logger.error("cannot read pid file", agent=name, error=str(e))
                outcomes[name] = Outcome.FAILED
                continue

            if pid is None or not is_alive(pid):
                logger.warning("agent process not found", agent=name, pid=pid)
                outcomes[name] = Outcome.NOT_FOUND
                continue

            try:
                self._kill(pid)
            except ProcessLookupError:
                logger.warning("agent process not found", agent=name, pid=pid)
                outcomes[name] = Outcome.NOT_FOUND
                continue
            except ProcessError as e:
                logger.error("agent failed to stop", agent=name, pid=pid, error=str(e))
                outcomes[name] = Outcome.FAILED
                continue

            logger.info("agent stopped", agent=name, pid=pid)
            outcomes[name] = Outcome.STOPPED
        return outcomes

    def restart(self, names: Iterable[str] | None = None) -> dict[str, Outcome]:
        """Stop, wait a fixed delay, then start. Returns the start outcomes."""
        targets = list(names) if names is not None else None
        self.stop(targets)
        self._sleep(self._restart_delay)
        return self.start(targets)

    def command_for(self, spec: AgentSpec) -> list[str]:
        """Build the agent binary's argv for *spec*."""
        return [
            str(spec.base_path / self._agent_binary),
            "--config", str(spec.config_path),
            "--input-filter", spec.input_filter,
            "--output-filter", spec.output_filter,
            "--pidfile", str(spec.pid_path),
        ]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _targets(self, names: Iterable[str] | None) -> list[tuple[str, AgentSpec | None]]:
        """Resolve CLI names to specs. Unknown names map to None."""
        wanted = list(names or [])
        if not wanted or ALL in wanted:
            return list(self._agents.items())

        targets: list[tuple[str, AgentSpec | None]] = []
        for name in wanted:
            spec = self._agents.get(name)
            if spec is None:
                logger.warning("unknown agent, check the name", agent=name)
            targets.append((name, spec))
        return targets

    @staticmethod
    def _live_pid(spec: AgentSpec) -> int | None:
        try:
            pid = read_recorded_pid(spec.pid_path)
        except PidFileError as e:
            logger.error("cannot read pid file", agent=spec.name, error=str(e))
            return None
        if pid is None or not is_alive(pid):
            return None
        return pid

    def _launch(self, spec: AgentSpec) -> None:
        """Spawn the agent detached, appending its output to its log file.

        Returns once the launcher has exited, not when the agent does.
        """
        argv = self.command_for(spec)
        exe = argv[0]
        if not os.access(exe, os.X_OK):
            raise ProcessError(f"Agent binary is missing or not executable: {exe}")

        try:
            log_fh = open(spec.log_path, "ab")
        except OSError as e:
            raise ProcessError(f"Cannot open log file {spec.log_path}: {e}") from e

        with log_fh:
            try:
                proc = subprocess.run(
                    _LAUNCHER + argv,
                    stdin=subprocess.DEVNULL,
                    stdout=log_fh,
                    stderr=subprocess.STDOUT,
                    cwd=spec.base_path,
                    start_new_session=True,
                    check=False,
                )
            except OSError as e:
                raise ProcessError(f"Cannot spawn {exe}: {e}") from e

        if proc.returncode != 0:
            raise ProcessError(f"Launcher exited with status {proc.returncode}")

    @staticmethod
    def _kill(pid: int) -> None:
        """Send SIGKILL to *pid*. Does not wait for it to exit."""
        try:
            psutil.Process(pid).kill()
        except psutil.NoSuchProcess as e:
            raise ProcessLookupError(pid) from e
        except psutil.Error as e:
            raise ProcessError(f"Cannot kill pid {pid}: {e}") from e
