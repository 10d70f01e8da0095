"""agentctl — start, stop and inspect local monitoring agents."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("agentctl")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
