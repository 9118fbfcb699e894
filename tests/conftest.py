"""Shared pytest fixtures for agent-mcp tests.

Fixture Organization:
    - Environment fixtures: isolate settings from the developer's shell and .env
    - Response fixtures: build httpx.Response objects for mocked API calls
    - Sample data fixtures: realistic JIRA and GitHub API payloads
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from agent_mcp.config import reset_config

ENV_PREFIXES = ("JIRA_", "GITHUB_", "LOG_", "HTTP_")


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove agent-mcp settings from the environment.

    Also switches to an empty working directory so a local .env file is
    not picked up, and clears the cached config before and after the test.
    """
    import os

    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield monkeypatch
    reset_config()


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset agent_mcp logger handlers so caplog can capture records.

    configure_logging() attaches a stderr handler and disables propagation;
    undo that before and after every test.
    """

    def _reset():
        for name in list(logging.Logger.manager.loggerDict):
            if name.startswith("agent_mcp"):
                child_logger = logging.getLogger(name)
                child_logger.handlers.clear()
                child_logger.propagate = True

    _reset()
    yield
    _reset()


# =============================================================================
# HTTP Response Factory
# =============================================================================


@pytest.fixture
def make_response() -> Callable[..., httpx.Response]:
    """Factory for httpx.Response objects used as mocked API replies.

    Example:
        def test_get(make_response):
            resp = make_response(200, {"key": "PROJ-1"})
    """

    def _make(
        status_code: int = 200,
        json_data: Any = None,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        if content is not None:
            return httpx.Response(status_code, content=content, headers=headers)
        if json_data is None:
            return httpx.Response(status_code, headers=headers)
        return httpx.Response(status_code, json=json_data, headers=headers)

    return _make


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def sample_description_adf() -> dict[str, Any]:
    """ADF description with a heading, a paragraph and a bullet list."""
    return {
        "version": 1,
        "type": "doc",
        "content": [
            {
                "type": "heading",
                "attrs": {"level": 2},
                "content": [{"type": "text", "text": "Steps"}],
            },
            {
                "type": "paragraph",
                "content": [
                    {"type": "text", "text": "Login fails with "},
                    {"type": "text", "text": "SSO", "marks": [{"type": "strong"}]},
                ],
            },
            {
                "type": "bulletList",
                "content": [
                    {
                        "type": "listItem",
                        "content": [
                            {
                                "type": "paragraph",
                                "content": [{"type": "text", "text": "open app"}],
                            }
                        ],
                    },
                    {
                        "type": "listItem",
                        "content": [
                            {
                                "type": "paragraph",
                                "content": [{"type": "text", "text": "click login"}],
                            }
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def sample_jira_issue(sample_description_adf) -> dict[str, Any]:
    """Issue as returned by GET /rest/api/3/issue/{key}."""
    return {
        "id": "10042",
        "key": "PROJ-123",
        "self": "https://test.atlassian.net/rest/api/3/issue/10042",
        "fields": {
            "summary": "Fix login bug",
            "issuetype": {"name": "Bug"},
            "status": {"name": "In Progress"},
            "priority": {"name": "High"},
            "assignee": {"displayName": "Bob", "emailAddress": "bob@example.com"},
            "reporter": {"displayName": "Alice"},
            "created": "2026-02-01T10:00:00.000+0000",
            "updated": "2026-02-07T15:30:00.000+0000",
            "description": sample_description_adf,
        },
    }


@pytest.fixture
def sample_github_pr() -> dict[str, Any]:
    """Pull request as returned by GET /repos/{owner}/{repo}/pulls/{number}."""
    return {
        "number": 42,
        "title": "Add retry to sync",
        "state": "open",
        "html_url": "https://github.com/owner/repo/pull/42",
        "body": "Retries failed requests.",
        "draft": False,
        "merged": False,
        "user": {"login": "octocat"},
        "head": {"ref": "feature/retry", "sha": "abc123"},
        "base": {"ref": "main", "sha": "def456"},
        "created_at": "2026-03-01T09:00:00Z",
        "updated_at": "2026-03-02T09:00:00Z",
        "additions": 120,
        "deletions": 8,
        "changed_files": 4,
    }
