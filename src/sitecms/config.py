"""
Configuration management for the site content client.
Loads settings from a YAML file and applies environment overrides.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from sitecms.client.broadcaster import UpdateBroadcaster
from sitecms.client.cache_store import CacheStore, InMemoryCacheStore, SQLiteCacheStore
from sitecms.client.content_api import DEFAULT_TIMEOUT, ContentAPIClient
from sitecms.client.coordinator import ContentCoordinator


DEFAULT_CONFIG = {
    'api': {
        'base_url': 'http://localhost:8080',
        'timeout': DEFAULT_TIMEOUT,
    },
    'cache': {
        'path': None,
    },
    'logging': {
        'level': 'INFO',
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ClientConfig:
    """Manages client configuration from YAML files."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, uses
                         config/default_config.yaml when it exists
        """
        if config_path is None:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "default_config.yaml"

        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = _merge({}, DEFAULT_CONFIG)
        self.load()

    def load(self) -> None:
        """Load configuration from the YAML file, if present."""
        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
            if not isinstance(file_config, dict):
                raise ValueError(f"Config file must contain a mapping: {self.config_path}")
            self._config = _merge(self._config, file_config)

        self._apply_env_overrides()

    def _apply_env_overrides(self) -> None:
        """Override config values from environment variables."""
        if 'SITECMS_API_URL' in os.environ:
            self.set('api.base_url', os.environ['SITECMS_API_URL'])

        if 'SITECMS_TIMEOUT' in os.environ:
            self.set('api.timeout', float(os.environ['SITECMS_TIMEOUT']))

        if 'SITECMS_CACHE_PATH' in os.environ:
            self.set('cache.path', os.environ['SITECMS_CACHE_PATH'])

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'api.base_url')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config = ClientConfig()
            >>> config.get('api.base_url')
            'http://localhost:8080'
        """
        value = self._config
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'cache.path')
            value: Value to set
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def save(self, path: Optional[str] = None) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to save to. If None, uses original config_path
        """
        save_path = Path(path) if path else self.config_path
        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, 'w') as f:
            yaml.dump(self._config, f, default_flow_style=False, indent=2)

    @property
    def api_base_url(self) -> str:
        """Get content store base URL."""
        return self.get('api.base_url', DEFAULT_CONFIG['api']['base_url'])

    @property
    def request_timeout(self) -> float:
        """Get request timeout in seconds."""
        return float(self.get('api.timeout', DEFAULT_TIMEOUT))

    @property
    def cache_path(self) -> Optional[str]:
        """Get cache database path, or None for an in-memory cache."""
        return self.get('cache.path')

    @property
    def log_level(self) -> str:
        """Get logging level name."""
        return str(self.get('logging.level', 'INFO')).upper()

    def __repr__(self) -> str:
        return f"ClientConfig(path={self.config_path})"


def build_coordinator(
    config: ClientConfig,
    broadcaster: Optional[UpdateBroadcaster] = None,
) -> ContentCoordinator:
    """
    Wire a coordinator from configuration.

    Uses a SQLite cache when ``cache.path`` is set, otherwise an
    in-memory cache.
    """
    cache: CacheStore
    if config.cache_path:
        cache = SQLiteCacheStore(config.cache_path)
    else:
        cache = InMemoryCacheStore()

    api = ContentAPIClient(config.api_base_url, timeout=config.request_timeout)
    return ContentCoordinator(api, cache=cache, broadcaster=broadcaster)


# Global config instance
_global_config: Optional[ClientConfig] = None


def get_config(config_path: Optional[str] = None) -> ClientConfig:
    """
    Get the global configuration instance.

    Args:
        config_path: Path to config file (only used on first call)

    Returns:
        ClientConfig instance
    """
    global _global_config

    if _global_config is None:
        _global_config = ClientConfig(config_path)

    return _global_config


def reset_config() -> None:
    """Reset the global config instance."""
    global _global_config
    _global_config = None
