"""Loader for the line-delimited relay configuration files.

Three plain text files are read once at startup:

    endpoint         host:port                 (default cert/key paths)
                     host:port, cert, key      (explicit TLS material)
    credentials      password                  (empty username)
                     username, password
    authorized_keys  one bearer key per line, at least one

Anything else is a ConfigError, which aborts startup.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from splendid.config.settings import FilesConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a relay configuration file is missing or malformed."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ListenAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=1, le=65535)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class RelayConfig(BaseModel):
    """Everything the relay needs for its lifetime. Immutable."""

    model_config = ConfigDict(frozen=True)

    listen_address: ListenAddress
    cert_path: Path
    key_path: Path
    username: str = ""
    password: SecretStr
    authorized_keys: frozenset[str] = Field(min_length=1)


def parse_listen_address(value: str) -> ListenAddress:
    """Parse ``host:port``. An empty host listens on all interfaces."""
    host, sep, port = value.strip().rpartition(":")
    if not sep:
        raise ConfigError(f"Listen address {value!r} is not of the form host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"Invalid port in listen address {value!r}") from None
    if not 1 <= port_number <= 65535:
        raise ConfigError(f"Port out of range in listen address {value!r}")
    return ListenAddress(host=host or "0.0.0.0", port=port_number)


def read_lines(path: Path | str) -> list[str]:
    """Read all lines of a text file, without line terminators."""
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}", path=path) from e


def load_endpoint(
    path: Path | str,
    default_cert: Path | str,
    default_key: Path | str,
) -> tuple[ListenAddress, Path, Path]:
    lines = read_lines(path)
    if len(lines) == 1:
        return parse_listen_address(lines[0]), Path(default_cert), Path(default_key)
    if len(lines) == 3:
        return parse_listen_address(lines[0]), Path(lines[1]), Path(lines[2])
    raise ConfigError(f"Invalid line count in config file: {len(lines)}", path=path)


def load_credentials(path: Path | str) -> tuple[str, SecretStr]:
    lines = read_lines(path)
    if len(lines) == 1:
        return "", SecretStr(lines[0])
    if len(lines) == 2:
        return lines[0], SecretStr(lines[1])
    raise ConfigError(f"Invalid line count in credentials file: {len(lines)}", path=path)


def load_authorized_keys(path: Path | str) -> frozenset[str]:
    # Blank lines would otherwise authorize requests without a key.
    keys = frozenset(line for line in read_lines(path) if line.strip())
    if not keys:
        raise ConfigError("No authorized keys available.", path=path)
    return keys


def load_relay_config(files: FilesConfig | None = None) -> RelayConfig:
    """Load all three relay files into a RelayConfig.

    Raises:
        ConfigError: If any file is unreadable or has the wrong shape.
    """
    files = files or FilesConfig()

    listen_address, cert_path, key_path = load_endpoint(
        files.endpoint_file, files.default_cert_path, files.default_key_path
    )
    username, password = load_credentials(files.credentials_file)
    authorized_keys = load_authorized_keys(files.authorized_keys_file)

    logger.info(
        "Loaded relay config: listen=%s cert=%s key=%s user=%r keys=%d",
        listen_address, cert_path, key_path, username, len(authorized_keys),
    )
    return RelayConfig(
        listen_address=listen_address,
        cert_path=cert_path,
        key_path=key_path,
        username=username,
        password=password,
        authorized_keys=authorized_keys,
    )
