"""
Configuration Loader for the Inbox Application Tracker
Loads and validates configuration from config.yaml
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Project root (one level above the package)
APP_DIR = Path(__file__).parent.parent

SUPPORTED_PROVIDERS = ("claude", "openai")

POSITIVE_INT_SETTINGS = (
    "ai.body_chars",
    "gmail.full_sync_limit",
    "gmail.incremental_sync_limit",
    "gmail.max_workers",
    "sync.poll_interval_minutes",
)


def default_config_path() -> Path:
    """Config path from APPTRACK_CONFIG, else config.yaml in the project root."""
    return Path(os.environ.get("APPTRACK_CONFIG", APP_DIR / "config.yaml"))


class Config:
    """Configuration manager for the Inbox Application Tracker."""

    def __init__(self, config_path: Optional[Path] = None, data: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration from a YAML file or an in-memory dict.

        Args:
            config_path: Path to config.yaml (defaults to default_config_path())
            data: Raw configuration; when given, no file is read
        """
        self.config_path = Path(config_path) if config_path else default_config_path()
        if data is not None:
            self._validate_config(data)
            self._config = data
        else:
            self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {self.config_path}\n"
                f"Copy config.example.yaml to config.yaml and adjust it."
            )

        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        self._validate_config(config)
        return config

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate provider name and numeric limits."""
        if not isinstance(config, dict):
            raise ValueError("Config must be a mapping")

        provider = (config.get('ai') or {}).get('provider')
        if provider and provider.lower() not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unsupported ai.provider: {provider} "
                f"(expected one of: {', '.join(SUPPORTED_PROVIDERS)})"
            )

        for key in POSITIVE_INT_SETTINGS:
            value = _lookup(config, key)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{key} must be a positive integer, got {value!r}")

    # ===== AI CONFIGURATION =====

    @property
    def ai_provider(self) -> str:
        """Get AI provider to use."""
        return (self._config.get('ai') or {}).get('provider', 'claude')

    @property
    def ai_model(self) -> Optional[str]:
        """Get AI model override (None uses the provider default)."""
        return (self._config.get('ai') or {}).get('model')

    @property
    def ai_body_chars(self) -> int:
        """Get number of body characters sent to the AI provider."""
        return (self._config.get('ai') or {}).get('body_chars', 1000)

    # ===== GMAIL CONFIGURATION =====

    @property
    def full_sync_limit(self) -> int:
        """Get maximum messages fetched by a full sync."""
        return (self._config.get('gmail') or {}).get('full_sync_limit', 100)

    @property
    def incremental_sync_limit(self) -> int:
        """Get maximum messages fetched by an incremental sync."""
        return (self._config.get('gmail') or {}).get('incremental_sync_limit', 1000)

    @property
    def max_workers(self) -> int:
        """Get concurrent Gmail detail fetches per pass."""
        return (self._config.get('gmail') or {}).get('max_workers', 8)

    @property
    def token_file(self) -> Optional[Path]:
        """Get authorized-user token file for background polling, if configured."""
        value = (self._config.get('gmail') or {}).get('token_file')
        if not value:
            return None
        path = Path(value)
        return path if path.is_absolute() else APP_DIR / path

    # ===== SYNC / STORAGE =====

    @property
    def poll_interval_minutes(self) -> int:
        """Get minutes between background incremental syncs."""
        return (self._config.get('sync') or {}).get('poll_interval_minutes', 5)

    @property
    def db_path(self) -> Path:
        """Get SQLite path for stored applications."""
        value = (self._config.get('storage') or {}).get('db_path', 'applications.db')
        path = Path(value)
        return path if path.is_absolute() else APP_DIR / path

    # ===== UTILITY METHODS =====

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = self._load_config()

    def to_dict(self) -> Dict[str, Any]:
        """
        Return a copy of the raw configuration dictionary.

        Returns:
            Dict containing all configuration values
        """
        return dict(self._config)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key.

        Example: config.get('gmail.max_workers')
        """
        value = _lookup(self._config, key)
        return default if value is None else value


def _lookup(config: Dict[str, Any], key: str) -> Any:
    value: Any = config
    for k in key.split('.'):
        if not isinstance(value, dict):
            return None
        value = value.get(k)
        if value is None:
            return None
    return value


# Global config instance
_config: Optional[Config] = None


def get_config(config_path: Optional[Path] = None) -> Config:
    """
    Get global configuration instance.
    Creates instance on first call, then returns cached instance.
    """
    global _config
    if _config is None:
        _config = Config(config_path)
    return _config


def reload_config() -> None:
    """Reload configuration from file."""
    global _config
    if _config is not None:
        _config.reload()
    else:
        _config = Config()
