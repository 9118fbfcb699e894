"""Unit tests for the agent-mcp configuration module (pydantic-settings)."""

import pytest
from pydantic import ValidationError

from agent_mcp.config import (
    DEFAULT_ADF_BLOCK_TYPES,
    AgentMcpConfig,
    ConfigError,
    get_config,
    reset_config,
)


class TestDefaults:
    """Default values with an empty environment."""

    def test_default_config_values(self, clean_env):
        config = get_config()

        assert config.jira_base_url == ""
        assert config.jira_email == ""
        assert config.jira_api_token.get_secret_value() == ""
        assert config.jira_my_account_id is None
        assert config.github_api_url == "https://api.github.com"
        assert config.http_timeout == 30.0
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.get_adf_block_types() == frozenset(DEFAULT_ADF_BLOCK_TYPES)


class TestEnvironmentOverrides:
    """Environment variables override defaults."""

    def test_jira_settings(self, clean_env):
        clean_env.setenv("JIRA_BASE_URL", "https://company.atlassian.net/")
        clean_env.setenv("JIRA_EMAIL", "user@example.com")
        clean_env.setenv("JIRA_API_TOKEN", "secret")
        clean_env.setenv("JIRA_MY_ACCOUNT_ID", "acc-1")

        config = AgentMcpConfig()

        assert config.jira_base_url == "https://company.atlassian.net"
        assert config.jira_api_token.get_secret_value() == "secret"
        assert "secret" not in repr(config)
        assert config.jira_my_account_id == "acc-1"

    def test_empty_values_use_defaults(self, clean_env):
        clean_env.setenv("GITHUB_API_URL", "")
        assert AgentMcpConfig().github_api_url == "https://api.github.com"

    def test_lowercase_log_level(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")
        assert AgentMcpConfig().log_level == "DEBUG"

    def test_block_types_parsed(self, clean_env):
        clean_env.setenv("JIRA_ADF_BLOCK_TYPES", "paragraph, heading ,panel,")
        assert AgentMcpConfig().get_adf_block_types() == frozenset(
            {"paragraph", "heading", "panel"}
        )

    def test_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("GITHUB_TOKEN=from-dotenv\n")
        assert AgentMcpConfig().github_token.get_secret_value() == "from-dotenv"


class TestValidation:
    """Invalid values raise ValidationError."""

    @pytest.mark.parametrize(
        "env, value",
        [
            ("JIRA_BASE_URL", "company.atlassian.net"),
            ("GITHUB_API_URL", "ftp://example.com"),
            ("HTTP_TIMEOUT", "0"),
            ("HTTP_TIMEOUT", "301"),
            ("LOG_LEVEL", "VERBOSE"),
            ("LOG_FORMAT", "xml"),
            ("JIRA_ADF_BLOCK_TYPES", " , "),
        ],
    )
    def test_invalid_values(self, clean_env, env, value):
        clean_env.setenv(env, value)
        with pytest.raises(ValidationError):
            AgentMcpConfig()

    def test_frozen(self, clean_env):
        config = AgentMcpConfig()
        with pytest.raises(ValidationError):
            config.log_level = "DEBUG"


class TestServerRequirements:
    """Per-server credential checks."""

    def test_jira_missing_first_variable(self, clean_env):
        with pytest.raises(ConfigError, match="Missing environment variable: JIRA_BASE_URL"):
            AgentMcpConfig().validate_jira()

    def test_jira_missing_token(self, clean_env):
        clean_env.setenv("JIRA_BASE_URL", "https://company.atlassian.net")
        clean_env.setenv("JIRA_EMAIL", "user@example.com")
        with pytest.raises(ConfigError, match="Missing environment variable: JIRA_API_TOKEN"):
            AgentMcpConfig().validate_jira()

    def test_jira_complete(self, clean_env):
        clean_env.setenv("JIRA_BASE_URL", "https://company.atlassian.net")
        clean_env.setenv("JIRA_EMAIL", "user@example.com")
        clean_env.setenv("JIRA_API_TOKEN", "t")
        AgentMcpConfig().validate_jira()

    def test_github_missing_token(self, clean_env):
        with pytest.raises(ConfigError, match="Missing environment variable: GITHUB_TOKEN"):
            AgentMcpConfig().validate_github()

    def test_github_does_not_need_jira(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "ghp_x")
        AgentMcpConfig().validate_github()


class TestSingleton:
    """get_config caching."""

    def test_cached_until_reset(self, clean_env):
        first = get_config()
        assert get_config() is first

        reset_config()
        assert get_config() is not first
