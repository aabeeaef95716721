"""Ambient settings for splendid.

Loads settings from an optional YAML file with environment variable
overrides (``SPLENDID_`` prefix, ``__`` for nested sections). Supports
.env files. These settings say where the relay files live and how to
reach the backend; the relay files themselves are handled by
:mod:`splendid.config.loader`.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path("/etc/splendid/splendid.yaml")


class FilesConfig(BaseModel):
    endpoint_file: Path = Field(default=Path("/etc/splendid/config"))
    credentials_file: Path = Field(default=Path("/etc/splendid/credentials"))
    authorized_keys_file: Path = Field(default=Path("/etc/splendid/authorized_keys"))
    default_cert_path: Path = Field(
        default=Path("/etc/splendid/cert.pem"),
        description="TLS certificate used when the endpoint file has a single line",
    )
    default_key_path: Path = Field(
        default=Path("/etc/splendid/key.pem"),
        description="TLS private key used when the endpoint file has a single line",
    )


class BackendConfig(BaseModel):
    url: str = Field(default="https://fritz.box")
    verify_tls: bool = Field(
        default=False,
        description=(
            "Verify the backend's TLS certificate. Off by default: the "
            "FRITZ!Box presents a self-signed certificate."
        ),
    )
    timeout: float = Field(default=10.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default="/var/log/splendid/splendid.log")


class Settings(BaseSettings):
    """Root settings for the splendid relay.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "SPLENDID_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    files: FilesConfig = Field(default_factory=FilesConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(settings_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables."""
    path = Path(settings_path) if settings_path else DEFAULT_SETTINGS_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded settings from %s", path)
    else:
        logger.warning("Settings file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
