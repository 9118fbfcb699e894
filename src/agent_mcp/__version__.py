"""Version information for agent-mcp.

Single source of truth for version number.
Follows PEP 440 and semantic versioning principles.
"""

__version__ = "0.1.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Version history:
# 0.1.0 - JIRA and GitHub MCP servers, ADF text conversion
