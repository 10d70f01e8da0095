"""Custom exception hierarchy for agentctl."""


class AgentctlError(Exception):
    """Base for all agentctl errors."""


class ConfigError(AgentctlError):
    """The agent configuration could not be loaded."""


class PidFileError(AgentctlError):
    """A pid file exists but could not be read or parsed."""


class ProcessError(AgentctlError):
    """An agent process could not be spawned or killed."""
