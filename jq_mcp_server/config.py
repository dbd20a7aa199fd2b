"""
Configuration management for the jq MCP Server.

Handles loading, validation, and access to configuration settings
from environment variables and config files.
"""
import json
import logging
import os
import sys
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from jq_mcp_server.constants import DEFAULT_JQ_BINARY

# Default configuration file paths
DEFAULT_CONFIG_PATHS = [
    "./jq_mcp_config.yaml",
    "./jq_mcp_config.yml",
    "./jq_mcp_config.json",
    "~/.config/jq_mcp_server/config.yaml",
]

# Environment variable prefix
ENV_PREFIX = "JQ_MCP_"

# Global configuration instance
_config = None

# Basic logger for config loading issues before full logging is set up
config_logger = logging.getLogger("jq_mcp_server.config")
handler = logging.StreamHandler(sys.stderr)  # stdout belongs to the stdio transport
if not config_logger.hasHandlers():
    config_logger.addHandler(handler)
    config_logger.setLevel(logging.INFO)

_LOG_LEVELS = ['debug', 'info', 'warning', 'error', 'critical']


class ServerConfig(BaseModel):
    """Server configuration settings."""
    name: str = Field("JSON Processing & Transformation Tools", description="Name of the server")
    host: str = Field("127.0.0.1", description="Host to bind the server to (sse mode)")
    port: int = Field(8013, description="Port to bind the server to (sse mode)")
    transport_mode: Literal["stdio", "sse"] = Field("stdio", description="Transport used by start_server")


class JqConfig(BaseModel):
    """Settings for the jq subprocess."""
    binary: str = Field(DEFAULT_JQ_BINARY, description="jq executable name or path")
    timeout: Optional[float] = Field(None, gt=0, description="Per-invocation deadline in seconds (None waits forever)")
    probe_timeout: float = Field(10.0, gt=0, description="Deadline for the --version/--help probes")
    help_excerpt_length: int = Field(1000, ge=0, description="Characters of `jq --help` shown by tool-info")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field("info", description="Default level for the package loggers")
    file: Optional[str] = Field(None, description="Optional rotating log file path")
    emoji_enabled: bool = Field(True, description="Prefix log lines with emojis")
    show_timestamps: bool = Field(True, description="Show timestamps on console log lines")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        level_lower = v.lower()
        if level_lower not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {_LOG_LEVELS}")
        return level_lower


class ToolRegistrationConfig(BaseModel):
    """Which tools get registered with the MCP server."""
    filter_enabled: bool = Field(False, description="Apply the include/exclude lists")
    included_tools: List[str] = Field(default_factory=list, description="Only register these tools")
    excluded_tools: List[str] = Field(default_factory=list, description="Never register these tools")


class JqServerConfig(BaseSettings):
    """Main jq MCP Server configuration model."""
    model_config = SettingsConfigDict(
        env_nested_delimiter='__',  # JQ_MCP_JQ__TIMEOUT=5
        env_prefix=ENV_PREFIX,
        extra='allow',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    jq: JqConfig = Field(default_factory=JqConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tool_registration: ToolRegistrationConfig = Field(default_factory=ToolRegistrationConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Init kwargs carry config file data, which env vars and .env override
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def expand_path(path: str) -> str:
    """Expand user and variables in path."""
    expanded = os.path.expanduser(path)
    expanded = os.path.expandvars(expanded)
    return os.path.abspath(expanded)


def find_config_file() -> Optional[str]:
    """Find the first available configuration file from default paths."""
    for path in DEFAULT_CONFIG_PATHS:
        expanded_path = expand_path(path)
        if os.path.isfile(expanded_path):
            config_logger.debug(f"Found config file: {expanded_path}")
            return expanded_path
    config_logger.debug("No default config file found in standard locations.")
    return None


def load_config_from_file(path: str) -> Dict[str, Any]:
    """Load configuration from a file (YAML or JSON)."""
    path = expand_path(path)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")

    config_logger.debug(f"Loading configuration from file: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.endswith(('.yaml', '.yml')):
                config_data = yaml.safe_load(f)
            elif path.endswith('.json'):
                config_data = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {path}. Use .yaml or .json.")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid format in configuration file {path}: {e}") from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at the top level")
    return config_data


def load_config(
    config_file_path: Optional[str] = None,
    load_default_files: bool = True,
) -> JqServerConfig:
    """Load configuration from defaults, file, and environment variables.

    Priority: Env Vars > .env > Specific or Default Config File > Pydantic Defaults

    Args:
        config_file_path: Explicit path to a config file.
        load_default_files: Whether to search for default config files.

    Returns:
        Validated JqServerConfig object.

    Raises:
        FileNotFoundError: A specific config file was given but does not exist.
        ValueError: A specific config file could not be parsed.
    """
    global _config

    file_config_data: Dict[str, Any] = {}

    chosen_file_path = None
    if config_file_path:
        chosen_file_path = expand_path(config_file_path)
        if not os.path.isfile(chosen_file_path):
            raise FileNotFoundError(f"Specified configuration file not found: {config_file_path}")
    elif load_default_files:
        chosen_file_path = find_config_file()

    if chosen_file_path:
        try:
            file_config_data = load_config_from_file(chosen_file_path)
        except ValueError as e:
            if config_file_path:
                raise ValueError(f"Failed to load specified config: {chosen_file_path}") from e
            config_logger.warning(f"Could not load config file {chosen_file_path}: {e}")

    try:
        loaded_config = JqServerConfig(**file_config_data)
    except ValidationError as e:
        config_logger.error("Configuration validation failed. Details below:")
        config_logger.error(str(e))
        config_logger.warning("Returning default configuration due to validation errors.")
        loaded_config = JqServerConfig.model_construct()

    if loaded_config.logging.file:
        loaded_config.logging.file = expand_path(loaded_config.logging.file)

    _config = loaded_config
    config_logger.debug("Configuration loaded successfully.")
    return _config


def get_config() -> JqServerConfig:
    """Get the globally loaded configuration, loading it on first use."""
    global _config
    if _config is None:
        load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration so the next get_config() reloads it."""
    global _config
    _config = None


def get_config_as_dict() -> Dict[str, Any]:
    """Get the current configuration as a dictionary."""
    return get_config().model_dump()
