"""
Opsgenie MCP server configuration.

Handles configuration file loading (opsgenie-mcp.yaml) and environment
variable overrides. CLI options are applied on top by the CLI layer.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

import yaml

from opsgenie_mcp.auth import load_api_key_from_env
from opsgenie_mcp.opsgenie.client import DEFAULT_TIMEOUT, OPSGENIE_API_BASE

DEFAULT_CONFIG_FILE = "opsgenie-mcp.yaml"
TRANSPORTS = ("stdio", "http")


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


@dataclass
class ServerConfig:
    """
    Server configuration loaded from opsgenie-mcp.yaml and the environment.

    Attributes:
        host: HTTP bind address (default: "127.0.0.1")
        port: HTTP port (default: 3000)
        transport: Transport mode ("stdio" or "http", default: "stdio")
        api_key: Process-wide default Opsgenie API key
        api_url: Opsgenie API root (default: https://api.opsgenie.com)
        timeout: Opsgenie request timeout in seconds
        json_response: Answer HTTP POSTs with JSON instead of SSE streams
        log_level: Root log level name
    """

    host: str = "127.0.0.1"
    port: int = 3000
    transport: Literal["stdio", "http"] = "stdio"
    api_key: Optional[str] = None
    api_url: str = OPSGENIE_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    json_response: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate and normalize configuration after initialization.

        Values read from YAML may arrive with the wrong scalar type
        (e.g. port: "3000", api_key: 12345); they are coerced here so that
        everything downstream sees the declared types.

        Raises:
            ValueError: If any field is out of range or cannot be coerced
        """
        self.transport = str(self.transport).lower()
        if self.transport not in TRANSPORTS:
            raise ValueError(
                f"Invalid transport '{self.transport}'. "
                "Must be 'stdio' or 'http'."
            )

        try:
            self.port = int(self.port)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid port {self.port!r}. Must be an integer.")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port {self.port}. Must be between 1 and 65535.")

        try:
            self.timeout = float(self.timeout)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid timeout {self.timeout!r}. Must be a number.")
        if self.timeout <= 0:
            raise ValueError(f"Invalid timeout {self.timeout}. Must be positive.")

        if self.api_key is not None:
            self.api_key = str(self.api_key)

        self.log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(
                f"Invalid log level '{self.log_level}'. "
                "Must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
            )

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "ServerConfig":
        """
        Load configuration from a YAML file and the environment.

        Falls back to defaults if no file exists. Environment variables
        override config file values.

        Args:
            config_path: Explicit config file. Defaults to ./opsgenie-mcp.yaml
                when present.

        Returns:
            ServerConfig instance with loaded/default values

        Raises:
            ValueError: If the config file is missing (when given explicitly),
                has invalid format, or an environment value is malformed
        """
        config_dict = {}

        if config_path is not None and not config_path.exists():
            raise ValueError(f"Config file not found: {config_path}")
        config_file = config_path or Path.cwd() / DEFAULT_CONFIG_FILE

        if config_file.exists():
            try:
                with open(config_file) as f:
                    loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid {config_file.name}: {e}") from e
            if not isinstance(loaded, dict):
                raise ValueError(f"Invalid {config_file.name}: expected a mapping at top level")
            config_dict.update(loaded)

        # Environment variables override config file
        env_api_key = load_api_key_from_env()
        if env_api_key:
            config_dict["api_key"] = env_api_key

        if "OPSGENIE_API_URL" in os.environ:
            config_dict["api_url"] = os.environ["OPSGENIE_API_URL"]

        if "OPSGENIE_TIMEOUT" in os.environ:
            try:
                config_dict["timeout"] = float(os.environ["OPSGENIE_TIMEOUT"])
            except ValueError:
                raise ValueError(
                    f"Invalid OPSGENIE_TIMEOUT: {os.environ['OPSGENIE_TIMEOUT']}. "
                    "Must be a number."
                )

        if "OPSGENIE_MCP_HOST" in os.environ:
            config_dict["host"] = os.environ["OPSGENIE_MCP_HOST"]

        if "OPSGENIE_MCP_PORT" in os.environ:
            try:
                config_dict["port"] = int(os.environ["OPSGENIE_MCP_PORT"])
            except ValueError:
                raise ValueError(
                    f"Invalid OPSGENIE_MCP_PORT: {os.environ['OPSGENIE_MCP_PORT']}. "
                    "Must be an integer."
                )

        if "OPSGENIE_MCP_TRANSPORT" in os.environ:
            config_dict["transport"] = os.environ["OPSGENIE_MCP_TRANSPORT"]

        if "OPSGENIE_MCP_JSON_RESPONSE" in os.environ:
            config_dict["json_response"] = _env_flag(os.environ["OPSGENIE_MCP_JSON_RESPONSE"])

        if "OPSGENIE_MCP_LOG_LEVEL" in os.environ:
            config_dict["log_level"] = os.environ["OPSGENIE_MCP_LOG_LEVEL"]

        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

    def save(self, config_path: Path):
        """
        Save configuration to a YAML file.

        Does NOT save api_key (keys should come from env vars or the CLI).

        Args:
            config_path: Target file
        """
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = {
            "host": self.host,
            "port": self.port,
            "transport": self.transport,
            "api_url": self.api_url,
            "timeout": self.timeout,
            "json_response": self.json_response,
            "log_level": self.log_level,
        }

        with open(config_path, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
