"""Shared test fixtures — a throwaway agent home with a fake agent binary."""

from __future__ import annotations

import subprocess
import sys
import textwrap
import time
from pathlib import Path

import psutil
import pytest
import structlog

# Stands in for lib/agent: records its pid atomically, logs a line, idles.
_FAKE_AGENT = textwrap.dedent("""\
    import argparse
    import os
    import time

    parser = argparse.ArgumentParser()
    parser.add_argument("--config", required=True)
    parser.add_argument("--input-filter", required=True)
    parser.add_argument("--output-filter", required=True)
    parser.add_argument("--pidfile", required=True)
    args = parser.parse_args()

    tmp = args.pidfile + ".tmp"
    with open(tmp, "w") as f:
        f.write(f"{os.getpid()}\\n")
    os.replace(tmp, args.pidfile)
    print(f"agent up input={args.input_filter} output={args.output_filter}", flush=True)
    time.sleep(300)
""")

AGENT_CONF = textwrap.dedent("""\
    [worker:example1]
    config_path = monitor.example.1.conf
    input_filter = net:disk:diskio
    output_filter = kafka
    log_path = example1.log
    pid_file = example1.pid

    [worker:example2]
    config_path = monitor.example.2.conf
    input_filter = net:disk
    output_filter = kafka
    log_path = example2.log
    pid_file = example2.pid
""")


def _kill_fake_agents(home: Path) -> None:
    """Kill fake agents recorded under *home*, leaving any other pid alone."""
    for pid_file in (home / "pids").glob("*.pid"):
        try:
            proc = psutil.Process(int(pid_file.read_text().strip()))
            if str(home) in " ".join(proc.cmdline()):
                proc.kill()
        except (ValueError, OSError, psutil.Error):
            continue


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def agent_home(tmp_path):
    """Base directory laid out like an agentctl install, with two agents."""
    for sub in ("lib", "configs", "logs", "pids"):
        (tmp_path / sub).mkdir()

    script = tmp_path / "lib" / "fake_agent.py"
    script.write_text(_FAKE_AGENT)
    binary = tmp_path / "lib" / "agent"
    binary.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
    binary.chmod(0o755)

    (tmp_path / "agent.conf").write_text(AGENT_CONF)

    yield tmp_path

    _kill_fake_agents(tmp_path)


@pytest.fixture
def write_conf(tmp_path):
    """Write an agent.conf with the given body and return its path."""
    def _write(body: str, name: str = "agent.conf") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(body))
        return path
    return _write


@pytest.fixture
def sleeper():
    """Spawn a plain child process that idles; killed on teardown."""
    procs: list[subprocess.Popen] = []

    def _spawn() -> subprocess.Popen:
        proc = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
        procs.append(proc)
        return proc

    yield _spawn

    for proc in procs:
        if proc.poll() is None:
            proc.kill()
        proc.wait()


@pytest.fixture
def wait_for_pid():
    """Poll a pid file until it holds a pid (different from *previous*)."""
    def _wait(pid_path: Path, previous: int | None = None, timeout: float = 10.0) -> int:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            try:
                pid = int(pid_path.read_text().strip())
            except (OSError, ValueError):
                pid = None
            if pid is not None and pid != previous:
                return pid
            time.sleep(0.05)
        raise AssertionError(f"no new pid in {pid_path} after {timeout}s")
    return _wait


@pytest.fixture
def wait_until():
    """Poll *predicate* until it is true or *timeout* elapses."""
    def _wait(predicate, timeout: float = 10.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.05)
        return predicate()
    return _wait


@pytest.fixture
def reaped_pid():
    """Pid of a process that has exited and been reaped."""
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    return proc.pid
