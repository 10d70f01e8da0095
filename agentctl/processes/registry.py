"""Agent Registry — turns agent.conf into the set of managed agents.

Each ``[worker:<name>]`` section of the configuration describes one
agent binary invocation. Loading is all-or-nothing: any problem with
the file raises ConfigError and no agents are returned.
"""

from __future__ import annotations

import configparser
import os
import shutil
import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from agentctl.exceptions import ConfigError

SECTION_PREFIX = "worker:"

# agent.conf key -> AgentSpec field
_REQUIRED_KEYS = {
    "config_path": "config_file",
    "input_filter": "input_filter",
    "output_filter": "output_filter",
    "log_path": "log_file",
    "pid_file": "pid_file",
}


class AgentSpec(BaseModel):
    """Launch parameters for one configured agent."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    base_path: Path
    config_file: str = Field(min_length=1)
    input_filter: str = Field(min_length=1)
    output_filter: str = Field(min_length=1)
    log_file: str = Field(min_length=1)
    pid_file: str = Field(min_length=1)

    @property
    def config_path(self) -> Path:
        return self.base_path / "configs" / self.config_file

    @property
    def log_path(self) -> Path:
        return self.base_path / "logs" / self.log_file

    @property
    def pid_path(self) -> Path:
        return self.base_path / "pids" / self.pid_file


def resolve_base_path(override: str | Path | None = None) -> Path:
    """Return the directory agents are resolved under.

    An explicit override wins. Otherwise this is the directory holding
    the running executable, looked up on PATH for bare command names.
    """
    if override:
        return Path(override).expanduser().resolve()
    exe = sys.argv[0]
    if exe and not Path(exe).parent.parts:
        exe = shutil.which(exe) or exe
    # Keep a symlinked executable's own directory
    return Path(os.path.abspath(exe)).parent


def load_agents(config_path: str | Path, base_path: str | Path) -> dict[str, AgentSpec]:
    """Load every ``worker:`` section of *config_path* into an AgentSpec.

    Raises ConfigError if the file cannot be read or parsed, if a section
    is not named ``worker:<name>``, or if a required key is missing or empty.
    """
    path = Path(config_path)
    parser = configparser.ConfigParser(interpolation=None, strict=True)
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f)
    except OSError as e:
        raise ConfigError(f"Cannot open agent config {path}: {e}") from e
    except configparser.Error as e:
        raise ConfigError(f"Cannot parse agent config {path}: {e}") from e

    base = Path(base_path)
    agents: dict[str, AgentSpec] = {}
    for section in parser.sections():
        if not section.startswith(SECTION_PREFIX):
            raise ConfigError(
                f"Section [{section}] in {path} is not of the form [{SECTION_PREFIX}<name>]"
            )
        name = section[len(SECTION_PREFIX):].strip()
        if not name:
            raise ConfigError(f"Section [{section}] in {path} has an empty agent name")
        if name in agents:
            raise ConfigError(f"Agent '{name}' is defined more than once in {path}")

        fields: dict[str, str] = {}
        for key, field_name in _REQUIRED_KEYS.items():
            value = parser.get(section, key, fallback="").strip()
            if not value:
                raise ConfigError(f"Missing required key '{key}' in section [{section}]")
            fields[field_name] = value

        agents[name] = AgentSpec(name=name, base_path=base, **fields)

    return agents
