"""Global configuration — loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class AgentctlSettings(BaseSettings):
    base_path: Path | None = None  # defaults to the executable's directory
    config_file: str = "agent.conf"
    agent_binary: str = "lib/agent"
    log_level: str = "INFO"

    # Lifecycle settings
    restart_delay: float = 1.0  # seconds between stop and start
    start_fail_fast: bool = True  # abort a start batch on the first spawn failure

    model_config = {"env_prefix": "AGENTCTL_"}


settings = AgentctlSettings()
