"""JIRA Cloud integration package.

Provides client, ADF converter, text composers and MCP tools for JIRA issues
and comments.
"""

from .adf_converter import AdfNode, adf_to_text, text_to_adf
from .client import JiraClient, JiraClientError
from .server import JiraTools, build_jira_server

__all__ = [
    "AdfNode",
    "JiraClient",
    "JiraClientError",
    "JiraTools",
    "adf_to_text",
    "build_jira_server",
    "text_to_adf",
]
