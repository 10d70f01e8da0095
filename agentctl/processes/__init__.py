"""Process management — pid-file based supervision of agent binaries.

This module provides:
- AgentSpec / load_agents: the agent set declared in agent.conf
- is_alive / read_recorded_pid: liveness from pid files and the OS process table
- AgentController: list, status, start, stop, restart
"""

from agentctl.processes.controller import AgentController, AgentState, AgentStatus, Outcome
from agentctl.processes.registry import AgentSpec, load_agents, resolve_base_path

__all__ = [
    "AgentController",
    "AgentSpec",
    "AgentState",
    "AgentStatus",
    "Outcome",
    "load_agents",
    "resolve_base_path",
]
