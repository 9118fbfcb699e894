"""Unit tests for the JIRA MCP tools.

JiraTools is exercised directly against an AsyncMock client; the FastMCP
registration is checked through the server's tool listing.
"""

from unittest.mock import AsyncMock

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from agent_mcp.connectors.jira.client import JiraClient, JiraClientError
from agent_mcp.connectors.jira.server import (
    TOOL_DESCRIPTIONS,
    JiraTools,
    build_jira_server,
)


@pytest.fixture
def mock_client():
    """JiraClient double with every API method mocked."""
    return AsyncMock(spec=JiraClient)


@pytest.fixture
def tools(mock_client):
    return JiraTools(mock_client, my_account_id="acc-me")


class TestSearchIssues:
    """Test jira_search_issues."""

    @pytest.mark.asyncio
    async def test_default_page_size(self, tools, mock_client):
        mock_client.search_issues.return_value = {"issues": [], "total": 0}

        result = await tools.jira_search_issues("project = PROJ")

        mock_client.search_issues.assert_awaited_once_with("project = PROJ", 20)
        assert result.startswith("Found 0 issues (showing up to 20):")

    @pytest.mark.asyncio
    async def test_page_size_capped(self, tools, mock_client):
        mock_client.search_issues.return_value = {"issues": []}

        result = await tools.jira_search_issues("project = PROJ", max_results=500)

        mock_client.search_issues.assert_awaited_once_with("project = PROJ", 50)
        assert "showing up to 50" in result

    @pytest.mark.asyncio
    async def test_error_becomes_tool_error(self, tools, mock_client):
        mock_client.search_issues.side_effect = JiraClientError(
            "API error (400): bad jql", status_code=400
        )

        with pytest.raises(ToolError, match=r"API error \(400\): bad jql"):
            await tools.jira_search_issues("nonsense")


class TestGetIssue:
    """Test jira_get_issue."""

    @pytest.mark.asyncio
    async def test_issue_with_transitions(self, tools, mock_client, sample_jira_issue):
        mock_client.get_issue.return_value = sample_jira_issue
        mock_client.get_transitions.return_value = {
            "transitions": [{"id": "31", "name": "Done"}]
        }

        result = await tools.jira_get_issue("PROJ-123")

        assert result.startswith("Key: PROJ-123\n")
        assert "Description:\nSteps\nLogin fails with SSO\nopen app\nclick login\n" in result
        assert result.endswith("Available Transitions:\n  - Done (id: 31)")

    @pytest.mark.asyncio
    async def test_transitions_failure_not_fatal(
        self, tools, mock_client, sample_jira_issue, caplog
    ):
        mock_client.get_issue.return_value = sample_jira_issue
        mock_client.get_transitions.side_effect = JiraClientError("HTTP request failed: boom")

        with caplog.at_level("WARNING", logger="agent_mcp.jira.server"):
            result = await tools.jira_get_issue("PROJ-123")

        assert result.endswith("Available Transitions:\n  (failed to fetch)")
        assert "jira_get_transitions_failed" in caplog.text

    @pytest.mark.asyncio
    async def test_issue_failure(self, tools, mock_client):
        mock_client.get_issue.side_effect = JiraClientError("API error (404): missing")

        with pytest.raises(ToolError, match="missing"):
            await tools.jira_get_issue("PROJ-999")
        mock_client.get_transitions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_configured_block_types(self, mock_client, sample_jira_issue):
        tools = JiraTools(mock_client, block_types=["heading"])
        mock_client.get_issue.return_value = sample_jira_issue
        mock_client.get_transitions.return_value = {"transitions": []}

        result = await tools.jira_get_issue("PROJ-123")

        assert "Steps\nLogin fails with SSOopen appclick login" in result


class TestCreateIssue:
    """Test jira_create_issue."""

    @pytest.mark.asyncio
    async def test_create(self, tools, mock_client):
        mock_client.create_issue.return_value = {
            "id": "10001",
            "key": "PROJ-2",
            "self": "https://test.atlassian.net/rest/api/3/issue/10001",
        }

        result = await tools.jira_create_issue(
            "PROJ", "Task", "Do it", description="details", parent_key="PROJ-1"
        )

        mock_client.create_issue.assert_awaited_once_with(
            "PROJ",
            "Task",
            "Do it",
            description="details",
            parent_key="PROJ-1",
            custom_fields=None,
        )
        assert result.startswith("Issue created successfully!\nKey: PROJ-2\n")


class TestUpdateIssue:
    """Test jira_update_issue."""

    @pytest.mark.asyncio
    async def test_me_resolved(self, tools, mock_client):
        result = await tools.jira_update_issue("PROJ-1", assignee="me")

        assert mock_client.update_issue.await_args.kwargs["assignee"] == "acc-me"
        assert result == "Issue PROJ-1 updated successfully"

    @pytest.mark.asyncio
    async def test_me_passed_through_without_account(self, mock_client):
        tools = JiraTools(mock_client)

        await tools.jira_update_issue("PROJ-1", assignee="me")

        assert mock_client.update_issue.await_args.kwargs["assignee"] == "me"

    @pytest.mark.asyncio
    async def test_unassign_passed_through(self, tools, mock_client):
        await tools.jira_update_issue("PROJ-1", assignee="none", priority="Low")

        kwargs = mock_client.update_issue.await_args.kwargs
        assert kwargs["assignee"] == "none"
        assert kwargs["priority"] == "Low"


class TestOtherTools:
    """Test transition, comment and user tools."""

    @pytest.mark.asyncio
    async def test_transition(self, tools, mock_client):
        result = await tools.jira_transition_issue("PROJ-1", "31")

        mock_client.transition_issue.assert_awaited_once_with("PROJ-1", "31")
        assert result == "Issue PROJ-1 transitioned successfully (transition id: 31)"

    @pytest.mark.asyncio
    async def test_add_comment(self, tools, mock_client):
        mock_client.add_comment.return_value = {"id": "100"}

        result = await tools.jira_add_comment("PROJ-1", "hello")

        assert result == "Comment added successfully to PROJ-1!\nComment ID: 100"

    @pytest.mark.asyncio
    async def test_list_comments(self, tools, mock_client):
        mock_client.list_comments.return_value = {"comments": [], "total": 0}

        result = await tools.jira_list_comments("PROJ-1")

        assert result == "Comments on PROJ-1 (0 total):\n\n"

    @pytest.mark.asyncio
    async def test_find_user_note(self, tools, mock_client):
        mock_client.find_user.return_value = [{"accountId": "a1", "displayName": "Alice"}]

        result = await tools.jira_find_user("alice")

        assert result.startswith("Found 1 user(s):")
        assert result.endswith("Note: Your configured account ID is: acc-me")

    @pytest.mark.asyncio
    async def test_comment_failure(self, tools, mock_client):
        mock_client.add_comment.side_effect = JiraClientError("API error (403): nope")

        with pytest.raises(ToolError, match="nope"):
            await tools.jira_add_comment("PROJ-1", "hello")


class TestBuildServer:
    """Test FastMCP registration."""

    @pytest.mark.asyncio
    async def test_all_tools_registered(self, tools):
        server = build_jira_server(tools)

        listed = {tool.name: tool for tool in await server.list_tools()}

        assert set(listed) == set(TOOL_DESCRIPTIONS)
        assert listed["jira_add_comment"].description == TOOL_DESCRIPTIONS["jira_add_comment"]

    @pytest.mark.asyncio
    async def test_input_schema(self, tools):
        server = build_jira_server(tools)

        listed = {tool.name: tool for tool in await server.list_tools()}
        schema = listed["jira_create_issue"].inputSchema

        assert set(schema["required"]) == {"project_key", "issue_type", "summary"}
        assert "custom_fields" in schema["properties"]
