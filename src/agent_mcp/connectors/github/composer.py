"""Text composition for GitHub pull request responses.

Transforms raw GitHub API responses into the plain text returned by the
MCP tools, and builds PR bodies that link back to the issues they resolve.
"""


def build_pr_body(
    body: str | None,
    issue_number: int | None = None,
    jira_key: str | None = None,
) -> str | None:
    """Build a PR body with an optional resolves line.

    Format:
        resolves #12 (JIRA: PROJ-123)

        {body}

    With only a JIRA key the first line is "JIRA: PROJ-123". With neither,
    the body is returned unchanged (None stays None).

    Args:
        body: User-supplied PR description (markdown)
        issue_number: GitHub issue closed by this PR
        jira_key: JIRA issue key shown alongside the resolves line

    Returns:
        Composed PR body
    """
    if issue_number is not None:
        header = f"resolves #{issue_number}"
        if jira_key:
            header += f" (JIRA: {jira_key})"
    elif jira_key:
        header = f"JIRA: {jira_key}"
    else:
        return body

    if body:
        return f"{header}\n\n{body}"
    return header


def compose_created_pr(pr: dict) -> str:
    """Compose the response of a successful PR creation."""
    return (
        "PR created successfully!\n"
        f"Number: #{pr.get('number', 0)}\n"
        f"Title: {pr.get('title', 'Untitled')}\n"
        f"URL: {pr.get('html_url', '')}\n"
        f"State: {pr.get('state', 'unknown')}\n"
        f"Draft: {_bool(pr.get('draft'))}"
    )


def compose_updated_pr(pr: dict) -> str:
    """Compose the response of a successful PR update."""
    return (
        "PR updated successfully!\n"
        f"Number: #{pr.get('number', 0)}\n"
        f"Title: {pr.get('title', 'Untitled')}\n"
        f"URL: {pr.get('html_url', '')}\n"
        f"State: {pr.get('state', 'unknown')}"
    )


def compose_pr_details(pr: dict) -> str:
    """Compose full details of a pull request.

    Diff stats (additions, deletions, changed files) are only present on
    the single-PR endpoint; missing values render as N/A.

    Args:
        pr: GitHub PRs API response dict

    Returns:
        Formatted PR text
    """
    author = (pr.get("user") or {}).get("login") or "Unknown"
    head_ref = (pr.get("head") or {}).get("ref") or "Unknown"
    base_ref = (pr.get("base") or {}).get("ref") or "Unknown"

    lines = [
        f"PR #{pr.get('number', 0)}: {pr.get('title', 'Untitled')}",
        f"URL: {pr.get('html_url', '')}",
        f"State: {pr.get('state', 'unknown')}",
        f"Draft: {_bool(pr.get('draft'))}",
        f"Merged: {_bool(pr.get('merged'))}",
        f"Author: {author}",
        f"Branch: {head_ref} → {base_ref}",
        f"Additions: {_stat(pr.get('additions'))}",
        f"Deletions: {_stat(pr.get('deletions'))}",
        f"Changed files: {_stat(pr.get('changed_files'))}",
        f"Created: {pr.get('created_at') or 'Unknown'}",
        f"Updated: {pr.get('updated_at') or 'Unknown'}",
        "",
        "Body:",
        pr.get("body") or "(no description)",
    ]
    return "\n".join(lines)


def _bool(value: bool | None) -> str:
    return "true" if value else "false"


def _stat(value: int | None) -> str:
    return "N/A" if value is None else str(value)
