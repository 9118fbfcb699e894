"""JIRA MCP tools.

JiraTools holds the tool implementations (plain async methods returning
text); build_jira_server() registers them on a FastMCP server.
"""

import logging
from collections.abc import Iterable
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from .client import JiraClient, JiraClientError
from .composer import (
    compose_comment_list,
    compose_created_issue,
    compose_issue_details,
    compose_search_results,
    compose_user_list,
)

logger = logging.getLogger("agent_mcp.jira.server")

SERVER_NAME = "jira"
SERVER_INSTRUCTIONS = (
    "JIRA MCP server providing tools for searching, creating, and managing JIRA issues."
)

DEFAULT_MAX_RESULTS = 20
MAX_RESULTS_CAP = 50

# Assignee alias resolved to JIRA_MY_ACCOUNT_ID
ASSIGNEE_ME = "me"

TOOL_DESCRIPTIONS: dict[str, str] = {
    "jira_search_issues": "Search JIRA issues using JQL query language",
    "jira_get_issue": "Get detailed information about a JIRA issue by its key",
    "jira_create_issue": "Create a new JIRA issue",
    "jira_update_issue": (
        "Update a JIRA issue (summary, description, assignee, priority, custom fields). "
        "Use 'me' as assignee to assign to the configured user, 'none' to unassign."
    ),
    "jira_find_user": (
        "Search for JIRA users by name or email to get their account ID (needed for assignee)"
    ),
    "jira_transition_issue": (
        "Transition a JIRA issue to a new status "
        "(use jira_get_issue to see available transitions)"
    ),
    "jira_add_comment": "Add a comment to a JIRA issue",
    "jira_list_comments": "List all comments on a JIRA issue",
}

IssueKey = Annotated[str, Field(description="Issue key (e.g. PROJ-123)")]
CustomFields = Annotated[
    dict[str, Any] | None,
    Field(
        description=(
            'Custom fields as JSON object (e.g. {"customfield_10001": "value", '
            '"customfield_10002": {"id": "10100"}})'
        )
    ),
]


def _tool_error(event: str, error: JiraClientError, **context: Any) -> ToolError:
    logger.error(event, extra={**context, "error": str(error)})
    return ToolError(str(error))


class JiraTools:
    """JIRA tool implementations bound to one client.

    Args:
        client: Authenticated JiraClient
        my_account_id: Account ID substituted for the "me" assignee
        block_types: ADF node types that end a line when rendering rich text
    """

    def __init__(
        self,
        client: JiraClient,
        my_account_id: str | None = None,
        block_types: Iterable[str] | None = None,
    ) -> None:
        self.client = client
        self.my_account_id = my_account_id
        self.block_types = frozenset(block_types) if block_types is not None else None

    async def jira_search_issues(
        self,
        jql: Annotated[str, Field(description="JQL query string")],
        max_results: Annotated[
            int,
            Field(ge=1, description="Maximum number of results (default: 20, max: 50)"),
        ] = DEFAULT_MAX_RESULTS,
    ) -> str:
        max_results = min(max_results, MAX_RESULTS_CAP)
        try:
            data = await self.client.search_issues(jql, max_results)
        except JiraClientError as e:
            raise _tool_error("jira_search_issues_failed", e, jql=jql) from e
        return compose_search_results(data, max_results)

    async def jira_get_issue(self, issue_key: IssueKey) -> str:
        try:
            issue = await self.client.get_issue(issue_key)
        except JiraClientError as e:
            raise _tool_error("jira_get_issue_failed", e, issue_key=issue_key) from e

        # Transitions are supplementary: a failure here still returns the issue
        try:
            transitions = await self.client.get_transitions(issue_key)
        except JiraClientError as e:
            logger.warning(
                "jira_get_transitions_failed",
                extra={"issue_key": issue_key, "error": str(e)},
            )
            transitions = None

        return compose_issue_details(issue, transitions, self.block_types)

    async def jira_create_issue(
        self,
        project_key: Annotated[str, Field(description="Project key (e.g. PROJ)")],
        issue_type: Annotated[
            str, Field(description="Issue type name (e.g. Task, Bug, Story)")
        ],
        summary: Annotated[str, Field(description="Issue summary/title")],
        description: Annotated[
            str | None,
            Field(description="Issue description in plain text (will be converted to ADF)"),
        ] = None,
        parent_key: Annotated[
            str | None,
            Field(description="Parent issue key for sub-tasks or child issues (e.g. PROJ-100)"),
        ] = None,
        custom_fields: CustomFields = None,
    ) -> str:
        try:
            data = await self.client.create_issue(
                project_key,
                issue_type,
                summary,
                description=description,
                parent_key=parent_key,
                custom_fields=custom_fields,
            )
        except JiraClientError as e:
            raise _tool_error(
                "jira_create_issue_failed", e, project_key=project_key
            ) from e
        return compose_created_issue(data)

    async def jira_update_issue(
        self,
        issue_key: IssueKey,
        summary: Annotated[str | None, Field(description="New summary/title")] = None,
        description: Annotated[
            str | None,
            Field(description="New description in plain text (will be converted to ADF)"),
        ] = None,
        assignee: Annotated[
            str | None,
            Field(
                description=(
                    "Assignee account ID ('me' for the configured user, 'none' to unassign)"
                )
            ),
        ] = None,
        priority: Annotated[
            str | None, Field(description="Priority name (e.g. High, Medium, Low)")
        ] = None,
        custom_fields: CustomFields = None,
    ) -> str:
        if assignee == ASSIGNEE_ME and self.my_account_id:
            assignee = self.my_account_id
        try:
            await self.client.update_issue(
                issue_key,
                summary=summary,
                description=description,
                assignee=assignee,
                priority=priority,
                custom_fields=custom_fields,
            )
        except JiraClientError as e:
            raise _tool_error("jira_update_issue_failed", e, issue_key=issue_key) from e
        return f"Issue {issue_key} updated successfully"

    async def jira_find_user(
        self,
        query: Annotated[str, Field(description="Search query (name or email address)")],
    ) -> str:
        try:
            users = await self.client.find_user(query)
        except JiraClientError as e:
            raise _tool_error("jira_find_user_failed", e) from e
        return compose_user_list(users, self.my_account_id)

    async def jira_transition_issue(
        self,
        issue_key: IssueKey,
        transition_id: Annotated[
            str,
            Field(description="Transition ID (get available transitions from issue details)"),
        ],
    ) -> str:
        try:
            await self.client.transition_issue(issue_key, transition_id)
        except JiraClientError as e:
            raise _tool_error(
                "jira_transition_issue_failed",
                e,
                issue_key=issue_key,
                transition_id=transition_id,
            ) from e
        return (
            f"Issue {issue_key} transitioned successfully "
            f"(transition id: {transition_id})"
        )

    async def jira_add_comment(
        self,
        issue_key: IssueKey,
        body: Annotated[
            str, Field(description="Comment body in plain text (will be converted to ADF)")
        ],
    ) -> str:
        try:
            comment = await self.client.add_comment(issue_key, body)
        except JiraClientError as e:
            raise _tool_error("jira_add_comment_failed", e, issue_key=issue_key) from e
        return (
            f"Comment added successfully to {issue_key}!\n"
            f"Comment ID: {comment.get('id', 'UNKNOWN')}"
        )

    async def jira_list_comments(self, issue_key: IssueKey) -> str:
        try:
            data = await self.client.list_comments(issue_key)
        except JiraClientError as e:
            raise _tool_error("jira_list_comments_failed", e, issue_key=issue_key) from e
        return compose_comment_list(issue_key, data, self.block_types)


def build_jira_server(tools: JiraTools) -> FastMCP:
    """Create a FastMCP server exposing every JiraTools method as a tool."""
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    for name, description in TOOL_DESCRIPTIONS.items():
        server.add_tool(getattr(tools, name), name=name, description=description)
    return server
