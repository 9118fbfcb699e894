"""GitHub MCP tools.

GitHubTools holds the tool implementations (plain async methods returning
text); build_github_server() registers them on a FastMCP server.
"""

import logging
from typing import Annotated, Literal

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from .client import GitHubClient, GitHubClientError
from .composer import (
    build_pr_body,
    compose_created_pr,
    compose_pr_details,
    compose_updated_pr,
)

logger = logging.getLogger("agent_mcp.github.server")

SERVER_NAME = "github"
SERVER_INSTRUCTIONS = (
    "GitHub MCP server providing tools for creating, updating, and viewing pull requests."
)

TOOL_DESCRIPTIONS: dict[str, str] = {
    "github_create_pr": "Create a new GitHub pull request",
    "github_update_pr": "Update an existing GitHub pull request (title, body, or state)",
    "github_get_pr": "Get detailed information about a GitHub pull request",
}

Owner = Annotated[str, Field(description="Repository owner (user or organization)")]
Repo = Annotated[str, Field(description="Repository name")]
PullNumber = Annotated[int, Field(ge=1, description="PR number")]


class GitHubTools:
    """GitHub tool implementations bound to one client."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    async def github_create_pr(
        self,
        owner: Owner,
        repo: Repo,
        title: Annotated[str, Field(description="PR title")],
        head: Annotated[str, Field(description="Branch containing changes")],
        base: Annotated[str, Field(description="Branch to merge into (e.g. main)")],
        body: Annotated[
            str | None,
            Field(description="PR description/body (markdown), appended after the resolves line"),
        ] = None,
        draft: Annotated[bool | None, Field(description="Create as draft PR")] = None,
        issue_number: Annotated[
            int | None,
            Field(ge=1, description="GitHub issue number to resolve (prepends 'resolves #N' to body)"),
        ] = None,
        jira_key: Annotated[
            str | None,
            Field(description="JIRA issue key (e.g. BA-1234), shown alongside the resolves line"),
        ] = None,
    ) -> str:
        pr_body = build_pr_body(body, issue_number, jira_key)
        try:
            pr = await self.client.create_pr(
                owner, repo, title, head, base, body=pr_body, draft=draft
            )
        except GitHubClientError as e:
            logger.error(
                "github_create_pr_failed",
                extra={"repo": f"{owner}/{repo}", "head": head, "error": str(e)},
            )
            raise ToolError(str(e)) from e
        return compose_created_pr(pr)

    async def github_update_pr(
        self,
        owner: Owner,
        repo: Repo,
        pull_number: PullNumber,
        title: Annotated[str | None, Field(description="New PR title")] = None,
        body: Annotated[str | None, Field(description="New PR body (markdown)")] = None,
        state: Annotated[
            Literal["open", "closed"] | None,
            Field(description="New state: open or closed"),
        ] = None,
    ) -> str:
        try:
            pr = await self.client.update_pr(
                owner, repo, pull_number, title=title, body=body, state=state
            )
        except GitHubClientError as e:
            logger.error(
                "github_update_pr_failed",
                extra={"repo": f"{owner}/{repo}", "number": pull_number, "error": str(e)},
            )
            raise ToolError(str(e)) from e
        return compose_updated_pr(pr)

    async def github_get_pr(
        self,
        owner: Owner,
        repo: Repo,
        pull_number: PullNumber,
    ) -> str:
        try:
            pr = await self.client.get_pr(owner, repo, pull_number)
        except GitHubClientError as e:
            logger.error(
                "github_get_pr_failed",
                extra={"repo": f"{owner}/{repo}", "number": pull_number, "error": str(e)},
            )
            raise ToolError(str(e)) from e
        return compose_pr_details(pr)


def build_github_server(tools: GitHubTools) -> FastMCP:
    """Create a FastMCP server exposing every GitHubTools method as a tool."""
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    for name, description in TOOL_DESCRIPTIONS.items():
        server.add_tool(getattr(tools, name), name=name, description=description)
    return server
