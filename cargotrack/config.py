"""
Cargotrack Settings - provider selection, credentials and refresh limits

Settings are an explicit object handed to the provider factory and the
orchestrator. They load from a YAML file with ${VAR} substitution, and a
few environment variables override the file.

Example cargotrack.yaml:
    provider_mode: afterShip
    aftership_api_key: ${AFTERSHIP_API_KEY}
    max_concurrency: 5
    snapshot_dir: ~/.cargotrack/widget
"""

import logging
import os
import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from .errors import ConfigurationError
from .constants import AFTERSHIP_BASE_URL, TRACK17_BASE_URL, is_placeholder_url

logger = logging.getLogger(__name__)


class ProviderMode(str, Enum):
    """Which tracking backend to use."""
    MOCK = "mock"
    AFTERSHIP = "afterShip"
    TRACK17 = "t17"
    CORREIOS_BACKEND = "correiosBackend"

    @property
    def display_name(self) -> str:
        return {
            ProviderMode.MOCK: "Mock (Desenvolvimento)",
            ProviderMode.AFTERSHIP: "AfterShip",
            ProviderMode.TRACK17: "17Track",
            ProviderMode.CORREIOS_BACKEND: "Correios (Backend)",
        }[self]


# Environment variables that override file values
ENV_OVERRIDES: Dict[str, str] = {
    "CARGOTRACK_PROVIDER_MODE": "provider_mode",
    "AFTERSHIP_API_KEY": "aftership_api_key",
    "TRACK17_API_KEY": "track17_api_key",
    "CARGOTRACK_RELAY_URL": "relay_base_url",
}


class Settings(BaseModel):
    """Runtime configuration for providers and refresh behaviour."""
    provider_mode: ProviderMode = ProviderMode.MOCK

    aftership_api_key: str = ""
    aftership_base_url: str = AFTERSHIP_BASE_URL
    track17_api_key: str = ""
    track17_base_url: str = TRACK17_BASE_URL
    relay_base_url: str = ""

    notifications_enabled: bool = True
    background_refresh_enabled: bool = True

    max_concurrency: int = 5
    background_batch_limit: int = 5
    request_timeout: float = 30.0
    simulated_latency: float = 1.0

    snapshot_dir: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_configuration_valid(self) -> bool:
        """Whether the selected mode has the credentials or URL it needs."""
        if self.provider_mode == ProviderMode.AFTERSHIP:
            return bool(self.aftership_api_key.strip())
        if self.provider_mode == ProviderMode.TRACK17:
            return bool(self.track17_api_key.strip())
        if self.provider_mode == ProviderMode.CORREIOS_BACKEND:
            return not is_placeholder_url(self.relay_base_url)
        return True


def _substitute_env(raw: str, path: str, env: Mapping[str, str]) -> str:
    """Replace ${VAR} with environment variable values."""
    def _replace_env(match):
        var_name = match.group(1)
        value = env.get(var_name)
        if value is None:
            raise ConfigurationError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    return re.sub(r"\$\{(\w+)\}", _replace_env, raw)


def load_settings(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Load settings from a YAML file and the environment.

    Args:
        path: YAML file; when None only defaults and the environment are used
        environ: Environment mapping for overrides (defaults to os.environ)

    Returns:
        Settings instance

    Raises:
        ConfigurationError: file unreadable, invalid YAML, or unset ${VAR}
    """
    import yaml

    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    if path:
        try:
            with open(os.path.expanduser(path), "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file '{path}': {e}") from e

        try:
            loaded = yaml.safe_load(_substitute_env(raw, path, env))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in '{path}': {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file '{path}' must contain a mapping")
        values.update(loaded or {})

    for var_name, key in ENV_OVERRIDES.items():
        if env.get(var_name):
            values[key] = env[var_name]

    try:
        settings = Settings(**values)
    except ValueError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e

    logger.info(f"Loaded settings (provider_mode={settings.provider_mode.value})")
    return settings
