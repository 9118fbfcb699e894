"""Configuration management with pydantic-settings for agent-mcp.

- Type-safe settings loaded from environment variables and .env
- SecretStr for API credentials
- Frozen config (immutable after load)
- Per-server validation: the JIRA and GitHub servers share one settings
  object but only require their own credentials
"""

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "DEFAULT_ADF_BLOCK_TYPES",
    "DEFAULT_GITHUB_API_URL",
    "AgentMcpConfig",
    "ConfigError",
    "get_config",
    "reset_config",
]

# ADF node types that end a line when flattened to plain text
DEFAULT_ADF_BLOCK_TYPES = (
    "paragraph",
    "heading",
    "bulletList",
    "orderedList",
    "listItem",
    "blockquote",
    "codeBlock",
    "table",
    "tableRow",
)

DEFAULT_GITHUB_API_URL = "https://api.github.com"


class ConfigError(Exception):
    """Raised when a server is started without its required settings."""

    pass


class AgentMcpConfig(BaseSettings):
    """Configuration for the agent-mcp servers.

    Loads from (in order of precedence):
    1. Environment variables (highest priority)
    2. .env file in the working directory
    3. Default values (lowest priority)

    Attributes:
        jira_base_url: JIRA Cloud instance URL (e.g., https://company.atlassian.net)
        jira_email: JIRA account email for Basic Auth
        jira_api_token: JIRA API token (stored as SecretStr)
        jira_my_account_id: Account ID substituted for the "me" assignee
        jira_adf_block_types: Comma-separated ADF node types that end a line
        github_token: GitHub token for Bearer auth (stored as SecretStr)
        github_api_url: GitHub REST API base URL
        http_timeout: Read timeout in seconds for API calls
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for production, text for development)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,  # Use defaults instead of empty strings
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    # JIRA Cloud
    jira_base_url: str = Field(
        default="",
        description="JIRA Cloud instance URL (e.g., https://company.atlassian.net)",
    )

    jira_email: str = Field(
        default="",
        description="JIRA account email for Basic Auth",
    )

    jira_api_token: SecretStr = Field(
        default=SecretStr(""),
        description="JIRA API token for authentication (stored securely)",
    )

    jira_my_account_id: str | None = Field(
        default=None,
        description="Account ID used when a tool is asked to assign to 'me'",
    )

    jira_adf_block_types: str = Field(
        default=",".join(DEFAULT_ADF_BLOCK_TYPES),
        description="Comma-separated ADF node types followed by a line break in plain text",
    )

    # GitHub
    github_token: SecretStr = Field(
        default=SecretStr(""),
        description="GitHub token for API access (needs pull request read/write)",
    )

    github_api_url: str = Field(
        default=DEFAULT_GITHUB_API_URL,
        description="GitHub REST API base URL (override for GitHub Enterprise)",
    )

    # HTTP
    http_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Read timeout in seconds for JIRA and GitHub API calls",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    log_format: str = Field(
        default="json",
        pattern="^(json|text)$",
        description="Log format: json (production), text (development)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase log levels (LOG_LEVEL=debug)."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("jira_base_url", "github_api_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require http(s) URLs and drop trailing slashes."""
        if not v:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid URL '{v}': expected http(s)://host")
        return v.rstrip("/")

    @field_validator("jira_adf_block_types")
    @classmethod
    def validate_block_types(cls, v: str) -> str:
        """Reject a block-type list with no entries."""
        if not [t for t in v.split(",") if t.strip()]:
            raise ValueError("JIRA_ADF_BLOCK_TYPES must name at least one node type")
        return v

    def get_adf_block_types(self) -> frozenset[str]:
        """Parse jira_adf_block_types into a set of node type names."""
        return frozenset(t.strip() for t in self.jira_adf_block_types.split(",") if t.strip())

    def validate_jira(self) -> None:
        """Check the settings the JIRA server needs.

        Raises:
            ConfigError: Naming the first missing environment variable.
        """
        required = [
            ("JIRA_BASE_URL", self.jira_base_url),
            ("JIRA_EMAIL", self.jira_email),
            ("JIRA_API_TOKEN", self.jira_api_token.get_secret_value()),
        ]
        for env_name, value in required:
            if not value:
                raise ConfigError(f"Missing environment variable: {env_name}")

    def validate_github(self) -> None:
        """Check the settings the GitHub server needs.

        Raises:
            ConfigError: If GITHUB_TOKEN is not set.
        """
        if not self.github_token.get_secret_value():
            raise ConfigError("Missing environment variable: GITHUB_TOKEN")


@lru_cache(maxsize=1)
def get_config() -> AgentMcpConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If configuration values are invalid.
    """
    return AgentMcpConfig()


def reset_config() -> None:
    """Reset configuration singleton for testing.

    Warning:
        Only use in test code. Production code should not reset config.
    """
    get_config.cache_clear()
