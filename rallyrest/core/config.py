"""Configuration management with environment overrides."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field
import logging

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "https://rally1.rallydev.com"
DEFAULT_API_VERSION = "v2.0"

# Alternate spellings accepted for configuration keys
OPTION_ALIASES = {
    "apiKey": "api_key",
    "apiVersion": "api_version",
    "userName": "user",
    "username": "user",
    "pass": "password",
    "pass_": "password",
    "requestOptions": "request_options",
}

ENV_VARS = {
    "server": "RALLY_SERVER",
    "api_version": "RALLY_API_VERSION",
    "api_key": "RALLY_API_KEY",
    "user": "RALLY_USERNAME",
    "password": "RALLY_PASSWORD",
    "debug": "RALLY_DEBUG",
}


class ClientConfig(BaseModel):
    """WSAPI client configuration."""
    model_config = ConfigDict(frozen=True)

    server: str = Field(default=DEFAULT_SERVER, description="Rally server base URL")
    api_version: str = Field(default=DEFAULT_API_VERSION, description="WSAPI version segment")
    api_key: Optional[str] = Field(None, description="API key sent as zsessionid header")
    user: Optional[str] = Field(None, description="Username for basic auth")
    password: Optional[str] = Field(None, description="Password for basic auth")
    request_options: Dict[str, Any] = Field(
        default_factory=dict, description="Default httpx request options"
    )
    debug: bool = Field(default=False, description="Log every request at DEBUG")

    @property
    def wsapi_url(self) -> str:
        return f"{self.server.rstrip('/')}/slm/webservice/{self.api_version}"

    @property
    def uses_api_key(self) -> bool:
        return bool(self.api_key)


def _normalize_keys(options: Dict[str, Any]) -> Dict[str, Any]:
    normalized = {}
    for key, value in options.items():
        if value is None:
            continue
        normalized[OPTION_ALIASES.get(key, key)] = value
    return normalized


def load_config(config_path: Optional[str] = None, **options: Any) -> ClientConfig:
    """Load client configuration.

    Explicit options win over the YAML file, which wins over environment
    variables.

    Args:
        config_path: Optional YAML file (default: $RALLY_CONFIG if set)
        **options: Explicit settings, e.g. server, api_key, user, password

    Returns:
        Loaded configuration
    """
    config_dict: Dict[str, Any] = {}

    for field, env_var in ENV_VARS.items():
        if value := os.getenv(env_var):
            config_dict[field] = value

    config_path = config_path or os.getenv("RALLY_CONFIG")
    if config_path:
        if Path(config_path).exists():
            with open(config_path, "r") as f:
                file_dict = yaml.safe_load(f) or {}
            # Allow the settings to live under a top-level "rally" section
            file_dict = file_dict.get("rally", file_dict)
            config_dict.update(_normalize_keys(file_dict))
        else:
            logger.warning(f"Config file {config_path} not found, ignoring")

    config_dict.update(_normalize_keys(options))

    return ClientConfig(**config_dict)
