"""
Configuration - Where the server finds its CiviCRM.

Three places are checked, later ones winning:
1. Built-in defaults
2. A YAML file (~/.civicrm-mcp/config.yaml, or the path in CIVICRM_MCP_CONFIG)
3. Environment variables (CIVICRM_BASE_URL, CIVICRM_API_KEY, ...)

The MCP host usually passes credentials through the environment block of its
server entry, so env vars are the common case. The file is handy when several
hosts share one CiviCRM.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

import yaml

from civicrm_mcp.errors import ConfigurationError

logger = logging.getLogger("civicrm_mcp.config")

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.civicrm-mcp/config.yaml")
DEFAULT_TIMEOUT_SECONDS = 30.0

# env var -> config key
ENV_VARS = {
    "CIVICRM_BASE_URL": "base_url",
    "CIVICRM_API_KEY": "api_key",
    "CIVICRM_SITE_KEY": "site_key",
    "CIVICRM_TIMEOUT": "request_timeout_seconds",
    "CIVICRM_LOG_LEVEL": "log_level",
}


@dataclass
class Config:
    """Settings for one CiviCRM connection."""
    base_url: str = ""
    api_key: str = ""
    site_key: str = ""
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"

    def __post_init__(self):
        self.base_url = (self.base_url or "").strip().rstrip("/")
        self.request_timeout_seconds = float(self.request_timeout_seconds)
        self.log_level = str(self.log_level).upper()

    def validate(self) -> "Config":
        """Check the settings the server can't run without.

        Both the API key and the base URL are required. There is no
        placeholder URL: a server pointed at the wrong site is worse than
        one that refuses to start.
        """
        missing = []
        if not self.base_url:
            missing.append("CIVICRM_BASE_URL")
        if not self.api_key:
            missing.append("CIVICRM_API_KEY")
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )
        if self.request_timeout_seconds <= 0:
            raise ConfigurationError("request_timeout_seconds must be positive")
        return self


def _load_file(path: str) -> Dict[str, Any]:
    """Read the YAML config file, if there is one."""
    if not os.path.exists(path):
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    logger.debug(f"Loaded config file {path}")
    return data


def load_config(
    overrides: Optional[Dict[str, Any]] = None,
    config_path: Optional[str] = None,
) -> Config:
    """Build a Config from defaults, file, environment and overrides.

    Args:
        overrides: Highest-precedence values (used by tests and embedders)
        config_path: YAML file to read. Defaults to CIVICRM_MCP_CONFIG or
            ~/.civicrm-mcp/config.yaml

    Returns:
        An unvalidated Config. Call .validate() before serving.
    """
    path = config_path or os.environ.get("CIVICRM_MCP_CONFIG") or DEFAULT_CONFIG_PATH

    try:
        settings = _load_file(path)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse config file {path}: {e}") from e

    for env_name, key in ENV_VARS.items():
        value = os.environ.get(env_name)
        if value:
            settings[key] = value

    if overrides:
        settings.update(overrides)

    known = {k: v for k, v in settings.items() if k in Config.__dataclass_fields__}
    unknown = set(settings) - set(known)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

    try:
        return Config(**known)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
