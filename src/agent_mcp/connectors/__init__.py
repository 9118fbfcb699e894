"""API connectors for agent-mcp.

Provides the JIRA and GitHub clients, text composers and MCP tool sets.
"""

from .http import ApiClientError

__all__ = ["ApiClientError"]
