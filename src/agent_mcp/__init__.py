"""agent-mcp: JIRA and GitHub MCP servers.

Exposes the JIRA Cloud and GitHub REST APIs as MCP tools over stdio,
rendering API responses as plain text.

Logging:
    Use configure_logging() once at startup (the CLI entry points do).
"""

from .__version__ import __version__
from .config import AgentMcpConfig, ConfigError, get_config, reset_config
from .logging_config import StructuredFormatter, configure_logging

__all__ = [
    "AgentMcpConfig",
    "ConfigError",
    "StructuredFormatter",
    "__version__",
    "configure_logging",
    "get_config",
    "reset_config",
]
