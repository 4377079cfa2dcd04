"""
Tests for server configuration.

Tests cover:
- Defaults and validation
- Loading from opsgenie-mcp.yaml
- Environment variable overrides
- Saving without the API key
"""

from pathlib import Path

import pytest
import yaml

from opsgenie_mcp.config import ServerConfig


class TestServerConfigDefaults:
    """Test defaults and validation."""

    def test_defaults(self):
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.transport == "stdio"
        assert config.api_key is None
        assert config.api_url == "https://api.opsgenie.com"
        assert config.timeout == 30.0
        assert config.json_response is False

    def test_transport_normalized(self):
        assert ServerConfig(transport="HTTP").transport == "http"

    def test_invalid_transport(self):
        with pytest.raises(ValueError, match="Invalid transport"):
            ServerConfig(transport="sse")

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="Invalid port"):
            ServerConfig(port=70000)

    def test_invalid_timeout(self):
        with pytest.raises(ValueError, match="Invalid timeout"):
            ServerConfig(timeout=0)

    def test_log_level_normalized(self):
        assert ServerConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="Invalid log level 'LOUD'"):
            ServerConfig(log_level="loud")


class TestServerConfigCoercion:
    """YAML scalars with the wrong type are coerced or rejected."""

    def test_quoted_port_coerced(self, tmp_path):
        config_file = tmp_path / "opsgenie-mcp.yaml"
        config_file.write_text('port: "8080"\ntimeout: "12"\n')

        config = ServerConfig.load(config_file)

        assert config.port == 8080
        assert isinstance(config.port, int)
        assert config.timeout == 12.0

    def test_numeric_api_key_coerced(self, tmp_path):
        config_file = tmp_path / "opsgenie-mcp.yaml"
        config_file.write_text("api_key: 12345\n")

        assert ServerConfig.load(config_file).api_key == "12345"

    def test_non_numeric_port_rejected(self, tmp_path):
        config_file = tmp_path / "opsgenie-mcp.yaml"
        config_file.write_text("port: http\n")

        with pytest.raises(ValueError, match="Invalid port 'http'"):
            ServerConfig.load(config_file)

    def test_non_numeric_timeout_rejected(self, tmp_path):
        config_file = tmp_path / "opsgenie-mcp.yaml"
        config_file.write_text("timeout: [1, 2]\n")

        with pytest.raises(ValueError, match="Invalid timeout"):
            ServerConfig.load(config_file)

    def test_invalid_log_level_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("OPSGENIE_MCP_LOG_LEVEL", "chatty")

        with pytest.raises(ValueError, match="Invalid log level"):
            ServerConfig.load()


class TestServerConfigLoad:
    """Test loading from file and environment."""

    def test_load_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert ServerConfig.load() == ServerConfig()

    def test_load_default_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "opsgenie-mcp.yaml").write_text(
            "transport: http\nport: 8080\napi_url: https://api.eu.opsgenie.com\nunknown: 1\n"
        )

        config = ServerConfig.load()

        assert config.transport == "http"
        assert config.port == 8080
        assert config.api_url == "https://api.eu.opsgenie.com"

    def test_load_explicit_file(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("json_response: true\n")

        assert ServerConfig.load(config_file).json_response is True

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ValueError, match="Config file not found"):
            ServerConfig.load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("port: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid bad.yaml"):
            ServerConfig.load(config_file)

    def test_non_mapping_yaml(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="expected a mapping"):
            ServerConfig.load(config_file)

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "opsgenie-mcp.yaml").write_text("port: 8080\ntransport: stdio\n")
        monkeypatch.setenv("OPSGENIE_MCP_PORT", "9090")
        monkeypatch.setenv("OPSGENIE_MCP_TRANSPORT", "http")
        monkeypatch.setenv("OPSGENIE_API_KEY", "env-key")
        monkeypatch.setenv("OPSGENIE_TIMEOUT", "5")
        monkeypatch.setenv("OPSGENIE_MCP_JSON_RESPONSE", "yes")

        config = ServerConfig.load()

        assert config.port == 9090
        assert config.transport == "http"
        assert config.api_key == "env-key"
        assert config.timeout == 5.0
        assert config.json_response is True

    def test_blank_env_key_keeps_file_key(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "opsgenie-mcp.yaml").write_text("api_key: file-key\n")
        monkeypatch.setenv("OPSGENIE_API_KEY", "   ")

        assert ServerConfig.load().api_key == "file-key"

    def test_invalid_port_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("OPSGENIE_MCP_PORT", "not-a-number")

        with pytest.raises(ValueError, match="Invalid OPSGENIE_MCP_PORT"):
            ServerConfig.load()

    def test_invalid_timeout_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("OPSGENIE_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="Invalid OPSGENIE_TIMEOUT"):
            ServerConfig.load()


class TestServerConfigSave:
    """Test saving configuration."""

    def test_save_omits_api_key(self, tmp_path):
        config_path = tmp_path / "nested" / "opsgenie-mcp.yaml"
        ServerConfig(transport="http", port=8123, api_key="secret").save(config_path)

        saved = yaml.safe_load(config_path.read_text())
        assert "api_key" not in saved
        assert saved["port"] == 8123
        assert saved["transport"] == "http"

    def test_save_then_load(self, tmp_path):
        config_path = tmp_path / "opsgenie-mcp.yaml"
        expected = ServerConfig(transport="http", port=8123, json_response=True)
        expected.save(config_path)

        assert ServerConfig.load(Path(config_path)) == expected
