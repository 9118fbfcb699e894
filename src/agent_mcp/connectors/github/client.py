"""GitHub REST API client.

Provides async httpx-based client for the GitHub REST API with token auth,
covering the pull request endpoints the MCP tools need. Requests are
retried with exponential backoff on server errors and timeouts, and wait
out primary (403) and secondary (429) rate limits.

Reference: https://docs.github.com/en/rest/pulls/pulls
Rate limits: https://docs.github.com/en/rest/using-the-rest-api/rate-limits-for-the-rest-api
"""

import asyncio
import logging
import random
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from ...config import DEFAULT_GITHUB_API_URL
from ..http import ApiClientError, build_http_client, parse_json_response

logger = logging.getLogger("agent_mcp.github.client")

# Seconds to wait on a 429 without a usable Retry-After header
DEFAULT_RETRY_AFTER = 60


class GitHubClientError(ApiClientError):
    """Raised when GitHub API request fails.

    Wraps httpx errors, non-2xx responses and undecodable bodies.
    """

    pass


class RateLimitExceeded(GitHubClientError):
    """Raised when GitHub rate limit is exhausted."""

    def __init__(self, reset_at: datetime, message: str = "Rate limit exceeded"):
        self.reset_at = reset_at
        super().__init__(f"{message}. Resets at {reset_at.isoformat()}", status_code=403)


class GitHubClient:
    """Pull request client for the GitHub REST API (Bearer token).

    One pooled httpx.AsyncClient per instance, addressed by relative paths.
    Every method raises GitHubClientError on failure.

    Attributes:
        base_url: API root, without trailing slash
        _rate_limit_remaining: Last X-RateLimit-Remaining seen
        _rate_limit_reset: Last X-RateLimit-Reset seen (epoch seconds)

    Example:
        >>> async with GitHubClient("ghp_token") as client:
        ...     pr = await client.get_pr("owner", "repo", 42)
    """

    # Retry configuration
    MAX_RETRIES = 3
    BASE_BACKOFF = 2  # seconds, exponential: min(60, 2^attempt)
    MAX_BACKOFF = 60  # seconds

    # Server errors and timeouts are only retried for these methods.
    # A retried POST could open a second pull request.
    RETRYABLE_METHODS = frozenset({"GET", "PATCH"})

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Args:
            token: Personal access token with pull request read/write
            base_url: API root; GitHub Enterprise uses https://host/api/v3
            timeout: Read timeout in seconds
        """
        self.base_url = (base_url or DEFAULT_GITHUB_API_URL).rstrip("/")

        self._rate_limit_remaining: int | None = None
        self._rate_limit_reset: float | None = None

        self._client = build_http_client(
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            base_url=self.base_url,
            read_timeout=timeout,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()

    # --- Connection check ---

    async def test_connection(self) -> dict[str, Any]:
        """Validate token and report rate limit status.

        Returns:
            dict with keys: success (bool), user (str) and rate_limit
            (dict with remaining, reset), or success and error
        """
        try:
            data = await self._request("GET", "/user")
        except GitHubClientError as e:
            return {"success": False, "error": str(e)}
        return {
            "success": True,
            "user": data.get("login", "unknown"),
            "rate_limit": {
                "remaining": self._rate_limit_remaining,
                "reset": self._rate_limit_reset,
            },
        }

    # --- Pull Requests ---

    async def create_pr(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str | None = None,
        draft: bool | None = None,
    ) -> dict[str, Any]:
        """Open a pull request.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            title: PR title
            head: Branch containing the changes
            base: Branch to merge into
            body: PR description (markdown)
            draft: Open as a draft PR

        Returns:
            Pull request dict from GitHub API
        """
        payload: dict[str, Any] = {"title": title, "head": head, "base": base}
        if body is not None:
            payload["body"] = body
        if draft is not None:
            payload["draft"] = draft

        pr = await self._request("POST", f"/repos/{owner}/{repo}/pulls", json_body=payload)
        logger.info(
            "github_pr_created",
            extra={"repo": f"{owner}/{repo}", "number": pr.get("number")},
        )
        return pr

    async def update_pr(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        title: str | None = None,
        body: str | None = None,
        state: str | None = None,
    ) -> dict[str, Any]:
        """Update title, body or state (open/closed) of a pull request."""
        payload: dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if body is not None:
            payload["body"] = body
        if state is not None:
            payload["state"] = state

        pr = await self._request(
            "PATCH", f"/repos/{owner}/{repo}/pulls/{pull_number}", json_body=payload
        )
        logger.info(
            "github_pr_updated",
            extra={
                "repo": f"{owner}/{repo}",
                "number": pull_number,
                "fields": sorted(payload),
            },
        )
        return pr

    async def get_pr(self, owner: str, repo: str, pull_number: int) -> dict[str, Any]:
        """Get a pull request, including merge status and diff stats."""
        return await self._request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")

    # --- Request handling ---

    def _update_rate_limits(self, response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")
        try:
            if remaining is not None:
                self._rate_limit_remaining = int(remaining)
            if reset is not None:
                self._rate_limit_reset = float(reset)
        except ValueError:
            logger.warning(
                "github_rate_limit_header_invalid",
                extra={"remaining": remaining, "reset": reset},
            )

    def _parse_reset(self, value: str | None) -> float:
        """X-RateLimit-Reset as epoch seconds; now + MAX_BACKOFF if unusable."""
        try:
            return float(value)
        except (TypeError, ValueError):
            if value is not None:
                logger.warning("github_rate_limit_header_invalid", extra={"reset": value})
            return time.time() + self.MAX_BACKOFF

    def _parse_retry_after(self, value: str | None) -> int:
        """Retry-After as seconds; accepts delta-seconds or an HTTP-date, else 60."""
        if value is None:
            return DEFAULT_RETRY_AFTER
        try:
            return max(0, int(value))
        except ValueError:
            pass
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            logger.warning("github_retry_after_invalid", extra={"retry_after": value})
            return DEFAULT_RETRY_AFTER
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return max(0, int(when.timestamp() - time.time()))

    def _backoff(self, attempt: int) -> float:
        return min(self.MAX_BACKOFF, self.BASE_BACKOFF ** (attempt + 1)) + random.uniform(0, 1)

    async def _wait_before_retry(
        self, reason: str, delay: float, attempt: int, method: str, path: str
    ) -> None:
        logger.warning(
            "github_request_retry",
            extra={
                "reason": reason,
                "delay_seconds": round(delay, 1),
                "attempt": attempt + 1,
                "max_retries": self.MAX_RETRIES,
                "method": method,
                "path": path,
            },
        )
        await asyncio.sleep(delay)

    async def _request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request, retrying where it is safe, and decode the JSON reply.

        Rate limits (403 with X-RateLimit-Remaining: 0, or 429) are waited
        out for every method. Timeouts and 5xx responses are retried with
        exponential backoff only for RETRYABLE_METHODS.

        Args:
            method: HTTP method (GET, POST, PATCH)
            path: Path below base_url (e.g., /repos/owner/repo/pulls/1)
            json_body: JSON request body

        Raises:
            RateLimitExceeded: Still rate limited after MAX_RETRIES waits
            GitHubClientError: Any other failure
        """
        retryable = method in self.RETRYABLE_METHODS

        for attempt in range(self.MAX_RETRIES + 1):
            can_retry = attempt < self.MAX_RETRIES
            try:
                response = await self._client.request(method, path, json=json_body)
            except httpx.TimeoutException as e:
                if retryable and can_retry:
                    await self._wait_before_retry(
                        "timeout", self._backoff(attempt), attempt, method, path
                    )
                    continue
                raise GitHubClientError.from_transport(e) from e
            except httpx.HTTPError as e:
                raise GitHubClientError.from_transport(e) from e

            self._update_rate_limits(response)
            status = response.status_code

            if status == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
                reset = self._parse_reset(response.headers.get("X-RateLimit-Reset"))
                if not can_retry:
                    raise RateLimitExceeded(datetime.fromtimestamp(reset, tz=timezone.utc))
                wait = max(1, reset - time.time())
                await self._wait_before_retry(
                    "rate_limit", min(wait, self.MAX_BACKOFF), attempt, method, path
                )
                continue

            if status == 429:
                retry_after = self._parse_retry_after(response.headers.get("Retry-After"))
                if not can_retry:
                    raise RateLimitExceeded(
                        datetime.fromtimestamp(time.time() + retry_after, tz=timezone.utc),
                        "Secondary rate limit exceeded",
                    )
                await self._wait_before_retry(
                    "secondary_rate_limit",
                    min(retry_after, self.MAX_BACKOFF),
                    attempt,
                    method,
                    path,
                )
                continue

            if status >= 500 and retryable and can_retry:
                await self._wait_before_retry(
                    f"server_error_{status}", self._backoff(attempt), attempt, method, path
                )
                continue

            if not response.is_success:
                logger.error(
                    "github_api_error",
                    extra={"method": method, "path": path, "status_code": status},
                )
                raise GitHubClientError.from_response(response)

            return parse_json_response(response, GitHubClientError)

        # Unreachable: the final attempt always returns or raises
        raise GitHubClientError("Request failed after all retries")
