"""Command-line entry points for the MCP servers.

Usage:
    mcp-jira                     # Serve JIRA tools over stdio
    mcp-jira --check             # Verify credentials and exit
    mcp-github --log-format text # Serve GitHub tools, human-readable logs

Configuration comes from environment variables (or .env), see config.py.
stdout is reserved for the MCP protocol; everything else goes to stderr.
"""

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from .__version__ import __version__
from .config import AgentMcpConfig, ConfigError, get_config
from .connectors.github import GitHubClient, GitHubTools, build_github_server
from .connectors.jira import JiraClient, JiraTools, build_jira_server
from .logging_config import configure_logging

logger = logging.getLogger("agent_mcp.cli")


def build_parser(prog: str, description: str, env_help: str) -> argparse.ArgumentParser:
    """Create the argument parser shared by both servers."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=env_help,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Override LOG_LEVEL",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        help="Override LOG_FORMAT",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Test API credentials and exit (no server started)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config() -> AgentMcpConfig:
    """Load settings, exiting with status 1 if they are invalid."""
    try:
        return get_config()
    except ValidationError as e:
        print(f"Error: Failed to load configuration: {e}", file=sys.stderr)
        sys.exit(1)


def _setup(args: argparse.Namespace, config: AgentMcpConfig, validate) -> None:
    try:
        validate()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    configure_logging(
        level=args.log_level or config.log_level,
        log_format=args.log_format or config.log_format,
    )


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        logger.info("server_interrupted")
        sys.exit(130)


async def serve_jira(config: AgentMcpConfig, check: bool = False) -> None:
    """Run the JIRA MCP server on stdio until the client disconnects.

    Args:
        config: Validated settings
        check: Only test the connection and exit (status 1 on failure)
    """
    async with JiraClient(
        config.jira_base_url,
        config.jira_email,
        config.jira_api_token.get_secret_value(),
        timeout=config.http_timeout,
    ) as client:
        if check:
            result = await client.test_connection()
            if not result["success"]:
                print(f"Error: {result['error']}", file=sys.stderr)
                sys.exit(1)
            print(f"Connected to {client.base_url} as {result['account_id']}", file=sys.stderr)
            return

        tools = JiraTools(
            client,
            my_account_id=config.jira_my_account_id,
            block_types=config.get_adf_block_types(),
        )
        server = build_jira_server(tools)
        logger.info("jira_server_starting", extra={"base_url": client.base_url})
        await server.run_stdio_async()


async def serve_github(config: AgentMcpConfig, check: bool = False) -> None:
    """Run the GitHub MCP server on stdio until the client disconnects.

    Args:
        config: Validated settings
        check: Only test the connection and exit (status 1 on failure)
    """
    async with GitHubClient(
        config.github_token.get_secret_value(),
        base_url=config.github_api_url,
        timeout=config.http_timeout,
    ) as client:
        if check:
            result = await client.test_connection()
            if not result["success"]:
                print(f"Error: {result['error']}", file=sys.stderr)
                sys.exit(1)
            print(f"Connected to {client.base_url} as {result['user']}", file=sys.stderr)
            return

        server = build_github_server(GitHubTools(client))
        logger.info("github_server_starting", extra={"base_url": client.base_url})
        await server.run_stdio_async()


def jira_main(argv: list[str] | None = None) -> None:
    """Entry point for mcp-jira."""
    parser = build_parser(
        "mcp-jira",
        "Serve JIRA Cloud tools over MCP stdio",
        """
Configuration (environment or .env):
  JIRA_BASE_URL=https://company.atlassian.net
  JIRA_EMAIL=user@example.com
  JIRA_API_TOKEN=your_api_token
  JIRA_MY_ACCOUNT_ID=optional account ID used for assignee 'me'
        """,
    )
    args = parser.parse_args(argv)
    config = load_config()
    _setup(args, config, config.validate_jira)
    _run(serve_jira(config, check=args.check))


def github_main(argv: list[str] | None = None) -> None:
    """Entry point for mcp-github."""
    parser = build_parser(
        "mcp-github",
        "Serve GitHub pull request tools over MCP stdio",
        """
Configuration (environment or .env):
  GITHUB_TOKEN=ghp_your_token
  GITHUB_API_URL=https://api.github.com (optional, for GitHub Enterprise)
        """,
    )
    args = parser.parse_args(argv)
    config = load_config()
    _setup(args, config, config.validate_github)
    _run(serve_github(config, check=args.check))
