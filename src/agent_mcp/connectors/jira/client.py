"""JIRA Cloud REST API client.

Provides async httpx-based client for JIRA Cloud API v3 with Basic Auth.
Issue descriptions and comment bodies are sent as ADF built from plain text.

Reference: https://developer.atlassian.com/cloud/jira/platform/rest/v3/intro/
"""

import base64
import logging
from typing import Any

import httpx

from ..http import ApiClientError, build_http_client, parse_json_response
from .adf_converter import text_to_adf

logger = logging.getLogger("agent_mcp.jira.client")

# Fields requested for search results (the rest of the issue is not rendered)
SEARCH_FIELDS = "summary,status,assignee,reporter,priority,issuetype,created,updated"

# Assignee value that clears the assignee
UNASSIGN = "none"


class JiraClientError(ApiClientError):
    """Raised when a JIRA API request fails.

    Wraps httpx errors, non-2xx responses and undecodable bodies.
    """

    pass


class JiraClient:
    """JIRA Cloud REST API client using httpx with Basic Auth.

    Uses a long-lived httpx.AsyncClient with connection pooling. Every
    method raises JiraClientError on failure; callers decide how to
    report it.

    Attributes:
        base_url: JIRA instance URL (e.g., https://company.atlassian.net)
        auth_header: Basic Auth header (base64 encoded email:api_token)

    Example:
        >>> async with JiraClient("https://company.atlassian.net", "user@example.com", "token") as client:
        ...     issue = await client.get_issue("PROJ-123")
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        timeout: float = 30.0,
    ) -> None:
        """Initialize JIRA client with authentication.

        Args:
            base_url: JIRA instance URL (trailing slash is stripped)
            email: JIRA account email for Basic Auth
            api_token: JIRA API token for authentication
            timeout: Read timeout in seconds
        """
        self.base_url = base_url.rstrip("/")

        credentials = f"{email}:{api_token}"
        encoded = base64.b64encode(credentials.encode()).decode()
        self.auth_header = f"Basic {encoded}"

        self.client = build_http_client(
            headers={
                "Authorization": self.auth_header,
                "Accept": "application/json",
            },
            read_timeout=timeout,
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        expect_body: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: API path below base_url (e.g., /rest/api/3/myself)
            params: Query parameters
            json_body: JSON request body
            expect_body: False for endpoints that answer 204 No Content

        Returns:
            Decoded JSON, or None when expect_body is False

        Raises:
            JiraClientError: On transport failure, non-2xx status or bad JSON
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.request(
                method, url, params=params, json=json_body
            )
        except httpx.HTTPError as e:
            logger.error(
                "jira_request_failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise JiraClientError.from_transport(e) from e

        if not response.is_success:
            error = JiraClientError.from_response(response)
            logger.error(
                "jira_api_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                },
            )
            raise error

        if not expect_body:
            return None
        return parse_json_response(response, JiraClientError)

    async def test_connection(self) -> dict[str, Any]:
        """Test JIRA API connectivity and authentication.

        Sends GET request to /rest/api/3/myself to verify credentials.

        Returns:
            dict with keys:
                - success (bool): True if authenticated successfully
                - account_id (str | None): Authenticated user's account ID
                - error (str | None): Error message if failed
        """
        try:
            data = await self._request("GET", "/rest/api/3/myself")
        except JiraClientError as e:
            return {"success": False, "account_id": None, "error": str(e)}
        return {"success": True, "account_id": data.get("accountId"), "error": None}

    async def search_issues(self, jql: str, max_results: int) -> dict[str, Any]:
        """Search issues with a JQL query.

        Uses /rest/api/3/search/jql (the deprecated /search returns 410).
        Only the first page is fetched; max_results bounds its size.

        Args:
            jql: JQL query string
            max_results: Page size requested from JIRA

        Returns:
            Search response dict with "issues" and, when JIRA reports it, "total"
        """
        params = {
            "jql": jql,
            "maxResults": max_results,
            "fields": SEARCH_FIELDS,
        }
        data = await self._request("GET", "/rest/api/3/search/jql", params=params)
        logger.info(
            "jira_search_issues_complete",
            extra={"jql": jql, "returned": len(data.get("issues", []))},
        )
        return data

    async def get_issue(self, issue_key: str) -> dict[str, Any]:
        """Get a single issue with all navigable fields."""
        return await self._request("GET", f"/rest/api/3/issue/{issue_key}")

    async def create_issue(
        self,
        project_key: str,
        issue_type: str,
        summary: str,
        description: str | None = None,
        parent_key: str | None = None,
        custom_fields: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create an issue.

        Args:
            project_key: Project key (e.g., 'PROJ')
            issue_type: Issue type name (e.g., 'Task', 'Bug')
            summary: Issue summary
            description: Plain text description, sent as ADF
            parent_key: Parent issue key for sub-tasks and child issues
            custom_fields: Extra fields merged into the request as-is
                (e.g., {"customfield_10001": "value"})

        Returns:
            Create response dict with "id", "key" and "self"
        """
        fields: dict[str, Any] = {
            "project": {"key": project_key},
            "issuetype": {"name": issue_type},
            "summary": summary,
        }
        if description is not None:
            fields["description"] = text_to_adf(description)
        if parent_key is not None:
            fields["parent"] = {"key": parent_key}
        if custom_fields:
            fields.update(custom_fields)

        data = await self._request(
            "POST", "/rest/api/3/issue", json_body={"fields": fields}
        )
        logger.info(
            "jira_issue_created",
            extra={"project_key": project_key, "issue_key": data.get("key")},
        )
        return data

    async def update_issue(
        self,
        issue_key: str,
        summary: str | None = None,
        description: str | None = None,
        assignee: str | None = None,
        priority: str | None = None,
        custom_fields: dict[str, Any] | None = None,
    ) -> None:
        """Update issue fields. Only the given fields are sent.

        Args:
            issue_key: Issue key (e.g., 'PROJ-123')
            summary: New summary
            description: New plain text description, sent as ADF
            assignee: Account ID, or "none" to unassign
            priority: Priority name (e.g., 'High')
            custom_fields: Extra fields merged into the request as-is
        """
        fields: dict[str, Any] = {}
        if summary is not None:
            fields["summary"] = summary
        if description is not None:
            fields["description"] = text_to_adf(description)
        if assignee is not None:
            fields["assignee"] = None if assignee == UNASSIGN else {"accountId": assignee}
        if priority is not None:
            fields["priority"] = {"name": priority}
        if custom_fields:
            fields.update(custom_fields)

        await self._request(
            "PUT",
            f"/rest/api/3/issue/{issue_key}",
            json_body={"fields": fields},
            expect_body=False,
        )
        logger.info(
            "jira_issue_updated",
            extra={"issue_key": issue_key, "fields": sorted(fields)},
        )

    async def get_transitions(self, issue_key: str) -> dict[str, Any]:
        """List the workflow transitions available for an issue."""
        return await self._request(
            "GET", f"/rest/api/3/issue/{issue_key}/transitions"
        )

    async def transition_issue(self, issue_key: str, transition_id: str) -> None:
        """Move an issue through a workflow transition."""
        await self._request(
            "POST",
            f"/rest/api/3/issue/{issue_key}/transitions",
            json_body={"transition": {"id": transition_id}},
            expect_body=False,
        )
        logger.info(
            "jira_issue_transitioned",
            extra={"issue_key": issue_key, "transition_id": transition_id},
        )

    async def add_comment(self, issue_key: str, body: str) -> dict[str, Any]:
        """Add a plain text comment (sent as ADF) to an issue."""
        return await self._request(
            "POST",
            f"/rest/api/3/issue/{issue_key}/comment",
            json_body={"body": text_to_adf(body)},
        )

    async def list_comments(self, issue_key: str) -> dict[str, Any]:
        """List comments on an issue (first page, JIRA default size)."""
        return await self._request("GET", f"/rest/api/3/issue/{issue_key}/comment")

    async def find_user(self, query: str) -> list[dict[str, Any]]:
        """Search users by display name or email address."""
        return await self._request(
            "GET", "/rest/api/3/user/search", params={"query": query}
        )

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if getattr(self, "client", None) is not None:
            await self.client.aclose()

    async def __aenter__(self) -> "JiraClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager and close client."""
        await self.close()
