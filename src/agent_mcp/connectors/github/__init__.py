"""GitHub integration package.

Provides async API client for the GitHub REST API pull request endpoints,
text composers and MCP tools.
"""

from .client import GitHubClient, GitHubClientError, RateLimitExceeded
from .composer import build_pr_body
from .server import GitHubTools, build_github_server

__all__ = [
    "GitHubClient",
    "GitHubClientError",
    "GitHubTools",
    "RateLimitExceeded",
    "build_github_server",
    "build_pr_body",
]
