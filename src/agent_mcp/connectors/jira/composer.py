"""Text summaries for JIRA API responses.

Transforms raw JIRA API response data into the plain text returned by the
MCP tools. Handles nullable fields gracefully for team-managed projects,
where priority, assignee and reporter are frequently null.
"""

from collections.abc import Iterable
from typing import Any

from .adf_converter import adf_to_text


def _name(obj: dict[str, Any] | None, default: str, key: str = "name") -> str:
    """Read a name field from a nullable nested object."""
    if not obj:
        return default
    return obj.get(key) or default


def compose_search_results(data: dict[str, Any], max_results: int) -> str:
    """Compose the result of a JQL search.

    Format:
        Found 42 issues (showing up to 20):

        - PROJ-1 [In Progress] Fix login bug
          Assignee: Alice

    JIRA's /search/jql endpoint may omit "total"; the count then reads
    "N+" where N is the number of issues returned.
    """
    issues = data.get("issues") or []
    total = data.get("total")
    total_str = str(total) if total is not None else f"{len(issues)}+"

    lines = [f"Found {total_str} issues (showing up to {max_results}):", ""]
    for issue in issues:
        fields = issue.get("fields") or {}
        status = _name(fields.get("status"), "Unknown")
        summary = fields.get("summary") or "(no summary)"
        assignee = _name(fields.get("assignee"), "Unassigned", key="displayName")
        lines.append(f"- {issue.get('key', 'UNKNOWN')} [{status}] {summary}")
        lines.append(f"  Assignee: {assignee}")

    return "\n".join(lines) + "\n"


def compose_transitions(transitions: dict[str, Any] | None) -> str:
    """Compose the available-transitions block of an issue.

    Args:
        transitions: /transitions response, or None when fetching failed
    """
    if transitions is None:
        return "  (failed to fetch)"
    items = [
        f"  - {t.get('name', 'Unknown')} (id: {t.get('id', '?')})"
        for t in transitions.get("transitions") or []
    ]
    if not items:
        return "  (none)"
    return "\n".join(items)


def compose_issue_details(
    issue: dict[str, Any],
    transitions: dict[str, Any] | None = None,
    block_types: Iterable[str] | None = None,
) -> str:
    """Compose full details of a single issue.

    Format:
        Key: PROJ-123
        Type: Bug
        Summary: Fix login bug
        Status: In Progress
        Priority: High
        Assignee: Bob
        Reporter: Alice
        Created: 2026-02-01T10:00:00.000+0000
        Updated: 2026-02-07T15:30:00.000+0000

        Description:
        {ADF-converted description text}

        Available Transitions:
          - Done (id: 31)

    Args:
        issue: Raw JIRA API issue response dict
        transitions: /transitions response, or None when fetching failed
        block_types: ADF node types that end a line (see adf_to_text)

    Returns:
        Formatted issue text
    """
    fields = issue.get("fields") or {}

    description_adf = fields.get("description")
    if description_adf is not None:
        description = adf_to_text(description_adf, block_types)
    else:
        description = "(no description)"

    lines = [
        f"Key: {issue.get('key', 'UNKNOWN')}",
        f"Type: {_name(fields.get('issuetype'), 'Unknown')}",
        f"Summary: {fields.get('summary') or '(no summary)'}",
        f"Status: {_name(fields.get('status'), 'Unknown')}",
        f"Priority: {_name(fields.get('priority'), 'None')}",
        f"Assignee: {_name(fields.get('assignee'), 'Unassigned', key='displayName')}",
        f"Reporter: {_name(fields.get('reporter'), 'Unknown', key='displayName')}",
        f"Created: {fields.get('created') or 'Unknown'}",
        f"Updated: {fields.get('updated') or 'Unknown'}",
        "",
        "Description:",
        description,
        "",
        "Available Transitions:",
        compose_transitions(transitions),
    ]
    return "\n".join(lines)


def compose_created_issue(data: dict[str, Any]) -> str:
    """Compose the response of a successful issue creation."""
    return (
        "Issue created successfully!\n"
        f"Key: {data.get('key', 'UNKNOWN')}\n"
        f"ID: {data.get('id', 'UNKNOWN')}\n"
        f"URL: {data.get('self', '')}"
    )


def compose_user_list(
    users: list[dict[str, Any]], my_account_id: str | None = None
) -> str:
    """Compose user search results.

    Format:
        Found 1 user(s):

        - Alice <alice@example.com> [active]
          Account ID: 5b10a2844c20165700ede21g

    The configured account ID is appended as a note when known.
    """
    if not users:
        return "No users found"

    lines = [f"Found {len(users)} user(s):", ""]
    for user in users:
        name = user.get("displayName") or "(unknown)"
        email = user.get("emailAddress") or "(no email)"
        active = "active" if user.get("active", True) is not False else "inactive"
        lines.append(f"- {name} <{email}> [{active}]")
        lines.append(f"  Account ID: {user.get('accountId', '')}")

    if my_account_id:
        lines.append("")
        lines.append(f"Note: Your configured account ID is: {my_account_id}")
    return "\n".join(lines)


def compose_comment_list(
    issue_key: str,
    data: dict[str, Any],
    block_types: Iterable[str] | None = None,
) -> str:
    """Compose the comments on an issue.

    Format:
        Comments on PROJ-123 (2 total):

        --- Comment 10001 ---
        Author: Mike
        Created: 2026-02-07T14:00:00.000+0000
        {ADF-converted comment text}
    """
    comments = data.get("comments") or []
    total = data.get("total")
    if total is None:
        total = len(comments)

    parts = [f"Comments on {issue_key} ({total} total):\n\n"]
    for comment in comments:
        author = _name(comment.get("author"), "Unknown", key="displayName")
        body_adf = comment.get("body")
        body = adf_to_text(body_adf, block_types) if body_adf else "(empty)"
        created = comment.get("created") or "Unknown"
        parts.append(
            f"--- Comment {comment.get('id', '?')} ---\n"
            f"Author: {author}\n"
            f"Created: {created}\n"
            f"{body}\n\n"
        )
    return "".join(parts)
