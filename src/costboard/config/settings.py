"""
Configuration management for the cost dashboard.

Uses dynaconf for flexible configuration with YAML files and environment overrides.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from dynaconf import Dynaconf, Validator
from dynaconf.validator import ValidationError

logger = logging.getLogger(__name__)

# Get the project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# Initialize dynaconf with multiple configuration sources
settings = Dynaconf(
    envvar_prefix="COSTBOARD",
    settings_files=[
        str(CONFIG_DIR / "config.yaml"),        # Base configuration
        str(CONFIG_DIR / "config.local.yaml"),  # Local overrides (git-ignored)
        str(CONFIG_DIR / ".secrets.yaml"),      # Secrets file (git-ignored)
    ],
    environments=False,
    load_dotenv=True,
    merge_enabled=True,
    envvar_separator="__",  # Support nested config via COSTBOARD_SERVER__PORT=8080
    validators=[
        Validator("server.port", default=3001, gte=1, lte=65535),
        Validator("server.host", default="0.0.0.0"),
        Validator("client.base_url", default="http://localhost:3001"),
        Validator("client.timeout", default=30, gt=0),
        Validator("sample_data.count", default=500, gte=0),
    ],
)


class DashboardConfig:
    """Configuration wrapper for proxy, client and provider settings."""

    def __init__(self):
        self.settings = settings
        self._validate_config()

    def _validate_config(self):
        """Validate the configuration on initialization."""
        try:
            self.settings.validators.validate()
        except ValidationError as e:
            logger.warning(f"Configuration validation warning: {e}")

    @property
    def server(self) -> Dict[str, Any]:
        """Proxy server settings (host, port, CORS origins)."""
        return self.settings.get("server", {})

    @property
    def providers(self) -> Dict[str, Any]:
        """Per-provider defaults such as base URLs and timeouts."""
        return self.settings.get("providers", {})

    @property
    def client(self) -> Dict[str, Any]:
        """Provider client settings (proxy base URL, timeout)."""
        return self.settings.get("client", {})

    @property
    def logging(self) -> Dict[str, Any]:
        """Logging settings."""
        return self.settings.get("logging", {})

    @property
    def sample_data(self) -> Dict[str, Any]:
        """Sample expense generation settings."""
        return self.settings.get("sample_data", {})

    def get_provider_config(self, provider: str) -> Dict[str, Any]:
        """Get configuration for a specific billing provider."""
        provider_config = self.providers.get(provider.lower(), {})
        return dict(provider_config) if provider_config else {}


# Global configuration instance
config = DashboardConfig()


def get_config() -> DashboardConfig:
    """Get the global configuration instance."""
    return config


def reload_config():
    """Reload configuration from files."""
    global config
    settings.reload()
    config = DashboardConfig()
    return config
