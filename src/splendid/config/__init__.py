"""Configuration management for splendid.

Two layers: the ambient ``Settings`` (YAML + environment) describing
where things live, and the line-delimited relay files (endpoint,
credentials, authorized keys) loaded once at startup into an
immutable ``RelayConfig``.
"""

from splendid.config.loader import ConfigError, RelayConfig, load_relay_config
from splendid.config.settings import Settings, load_settings

__all__ = ["ConfigError", "RelayConfig", "Settings", "load_relay_config", "load_settings"]
