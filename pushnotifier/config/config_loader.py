"""
YAML configuration for the pushnotifier CLI, with environment variable
interpolation and overrides.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ValidationError

from pushnotifier.transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

PROJECT_NAME = "pushnotifier"
CONFIG_FILE_NAME = f"{PROJECT_NAME}.yaml"
CONFIG_PATH_ENV = "PUSHNOTIFIER_CONFIG"

# YAML key -> config field
_FILE_KEYS = {
    "PACKAGE_NAME": "package_name",
    "API_TOKEN": "api_token",
    "APP_TOKEN": "app_token",
    "BASE_URL": "base_url",
    "TIMEOUT": "timeout",
}

_STRING_FIELDS = {"package_name", "api_token", "app_token", "base_url"}

# Environment variable -> config field, applied over the file
_ENV_OVERRIDES = {
    "PUSHNOTIFIER_PACKAGE_NAME": "package_name",
    "PUSHNOTIFIER_API_TOKEN": "api_token",
    "PUSHNOTIFIER_APP_TOKEN": "app_token",
}


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class PushNotifierConfig(BaseModel):
    """Settings needed to construct a client."""

    package_name: str = ""
    api_token: str = ""
    app_token: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def is_registered(self) -> bool:
        return bool(self.package_name and self.api_token)

    def to_file_dict(self) -> Dict[str, Any]:
        """Mapping written to the YAML file; unset app token and defaults are omitted."""
        data: Dict[str, Any] = {
            "PACKAGE_NAME": escape_value(self.package_name),
            "API_TOKEN": escape_value(self.api_token),
        }
        if self.app_token:
            data["APP_TOKEN"] = escape_value(self.app_token)
        if self.base_url != DEFAULT_BASE_URL:
            data["BASE_URL"] = escape_value(self.base_url)
        if self.timeout != DEFAULT_TIMEOUT:
            data["TIMEOUT"] = self.timeout
        return data


def escape_value(value: Any) -> Any:
    """Escape ``$`` as ``$$`` so a literal value survives interpolation on load."""
    if isinstance(value, str):
        return value.replace("$", "$$")
    return value


def default_config_path() -> Path:
    """``$XDG_CONFIG_HOME/pushnotifier/pushnotifier.yaml``, ``~/.config`` if unset."""
    config_home = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / PROJECT_NAME / CONFIG_FILE_NAME


class ConfigLoader:
    """
    Loads and saves the pushnotifier YAML configuration file.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Args:
            config_path: Optional explicit path to the YAML file
        """
        self.config_path = self._find_config_path(config_path)
        logger.debug(f"ConfigLoader: config={self.config_path}")

    def _find_config_path(self, config_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Resolve the configuration file path.

        In order: the explicit path, the ``PUSHNOTIFIER_CONFIG`` environment
        variable, then the XDG config directory. The file need not exist yet.
        """
        if config_path:
            return Path(config_path).expanduser()

        env_path = os.getenv(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path).expanduser()

        return default_config_path()

    def _interpolate_env_vars(self, value: Any) -> Any:
        """
        Recursively interpolate environment variables in configuration values.

        Replaces "${ENV_VAR}" or "$ENV_VAR" with the value of the environment
        variable and "$$" with a literal "$"; unknown variables are left
        exactly as written.
        """
        if isinstance(value, str):
            pattern = r"\$\$|\${([^}]+)}|\$([a-zA-Z0-9_]+)"

            def replace_env_var(match):
                if match.group(0) == "$$":
                    return "$"
                env_var = match.group(1) or match.group(2)
                return os.environ.get(env_var, match.group(0))

            return re.sub(pattern, replace_env_var, value)
        elif isinstance(value, list):
            return [self._interpolate_env_vars(item) for item in value]
        elif isinstance(value, dict):
            return {k: self._interpolate_env_vars(v) for k, v in value.items()}
        else:
            return value

    def read_raw(self) -> Dict[str, Any]:
        """The file's mapping as written, without interpolation or overrides."""
        if not self.config_path.exists():
            logger.info(f"Configuration file not found: {self.config_path}")
            return {}

        try:
            with open(self.config_path, "r") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            error_msg = f"Error parsing {self.config_path}: {e}"
            logger.error(error_msg)
            raise ConfigError(error_msg) from e
        except OSError as e:
            raise ConfigError(f"Error reading {self.config_path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"{self.config_path} must contain a mapping of settings")

        return raw

    def load(self) -> PushNotifierConfig:
        """
        Build the configuration from the file, then environment overrides.

        Raises:
            ConfigError: The file is unreadable, malformed or has invalid values.
        """
        values: Dict[str, Any] = {}
        for key, value in self._interpolate_env_vars(self.read_raw()).items():
            field = _FILE_KEYS.get(str(key).upper())
            if field is None:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            if value is None:
                continue
            # YAML reads all-digit tokens as numbers
            if field in _STRING_FIELDS and isinstance(value, (int, float)):
                value = str(value)
            values[field] = value

        for env_var, field in _ENV_OVERRIDES.items():
            env_value = os.getenv(env_var)
            if env_value:
                values[field] = env_value

        try:
            return PushNotifierConfig(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}") from e

    def _write(self, data: Dict[str, Any]) -> Path:
        self.config_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        content = yaml.safe_dump(data, default_flow_style=False)

        fd = os.open(self.config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.chmod(self.config_path, 0o600)

        logger.info(f"Configuration written to {self.config_path}")
        return self.config_path

    def save(self, config: PushNotifierConfig) -> Path:
        """Write ``config`` to the file, readable by the owner only."""
        return self._write(config.to_file_dict())

    def update(self, values: Dict[str, Any]) -> Path:
        """
        Set literal values for file keys (``PACKAGE_NAME``, ``APP_TOKEN``, ...).

        Other entries are kept as written, including ``${VAR}`` references,
        and environment overrides never reach the file. A value of None
        removes the key.
        """
        data = self.read_raw()
        for key, value in values.items():
            key = key.upper()
            if key not in _FILE_KEYS:
                raise ConfigError(f"Unknown config key: {key}")
            for existing in [k for k in data if str(k).upper() == key]:
                del data[existing]
            if value is not None:
                data[key] = escape_value(value)
        return self._write(data)


def load_config(config_path: Optional[Union[str, Path]] = None) -> PushNotifierConfig:
    return ConfigLoader(config_path).load()


def save_config(
    config: PushNotifierConfig, config_path: Optional[Union[str, Path]] = None
) -> Path:
    return ConfigLoader(config_path).save(config)
