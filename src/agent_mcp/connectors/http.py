"""Shared HTTP plumbing for the JIRA and GitHub connectors.

Provides the httpx.AsyncClient factory (timeouts, pooling, user agent) and
the ApiClientError hierarchy both clients raise.
"""

import json
import logging
from typing import Any

import httpx

from ..__version__ import __version__

logger = logging.getLogger("agent_mcp.http")

USER_AGENT = f"agent-mcp/{__version__}"

# Maximum characters of a response body kept in errors and logs
MAX_BODY_CHARS = 2000


class ApiClientError(Exception):
    """Raised when a remote API request fails.

    Attributes:
        status_code: HTTP status of the failed response, if one was received
        body: Response body text, if one was received
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_transport(cls, error: Exception) -> "ApiClientError":
        """Wrap a transport-level failure (timeout, connection refused)."""
        return cls(f"HTTP request failed: {error}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiClientError":
        """Wrap a non-2xx response."""
        body = _response_text(response)
        return cls(
            f"API error ({response.status_code}): {body}",
            status_code=response.status_code,
            body=body,
        )

    @classmethod
    def from_decode(cls, message: str, body: str) -> "ApiClientError":
        """Wrap a response body that could not be parsed as JSON."""
        return cls(
            f"Failed to deserialize response: {message}\nBody: {body}",
            body=body,
        )


def _response_text(response: httpx.Response) -> str:
    # Decode bytes leniently rather than trusting the declared charset
    return response.content.decode("utf-8", errors="replace")[:MAX_BODY_CHARS]


def build_http_client(
    headers: dict[str, str],
    base_url: str = "",
    read_timeout: float = 30.0,
) -> httpx.AsyncClient:
    """Create a long-lived httpx.AsyncClient with pooling and timeouts.

    Args:
        headers: Default headers (auth, accept) sent on every request
        base_url: Base URL prepended to relative request paths
        read_timeout: Read timeout in seconds for API responses

    Returns:
        Configured httpx.AsyncClient. Caller owns it and must aclose() it.
    """
    timeout_config = httpx.Timeout(
        connect=5.0,
        read=read_timeout,
        write=10.0,
        pool=5.0,
    )

    limits = httpx.Limits(
        max_keepalive_connections=10,
        max_connections=20,
        keepalive_expiry=30.0,
    )

    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout_config,
        limits=limits,
        headers={"User-Agent": USER_AGENT, **headers},
    )


def parse_json_response(
    response: httpx.Response,
    error_cls: type[ApiClientError] = ApiClientError,
) -> Any:
    """Parse a successful response body as JSON.

    Args:
        response: httpx response with a 2xx status
        error_cls: ApiClientError subclass to raise on failure

    Returns:
        Decoded JSON value

    Raises:
        ApiClientError: (as error_cls) if the body is not valid JSON
    """
    body = response.content.decode("utf-8", errors="replace")
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        logger.error(
            "response_deserialize_failed",
            extra={
                "status_code": response.status_code,
                "error": str(e),
                "body": body[:MAX_BODY_CHARS],
            },
        )
        raise error_cls.from_decode(str(e), body[:MAX_BODY_CHARS]) from e
