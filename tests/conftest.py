"""Shared test fixtures for the splendid test suite.

Provides relay configuration files on disk, a mock backend whose
sessions record switch calls, and sample request bodies.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from splendid.backend.base import BackendSession, HomeAutomation
from splendid.config.settings import FilesConfig


# ---------------------------------------------------------------------------
# Relay file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def write_lines(tmp_path: Path):
    """Write a list of lines to a file under tmp_path and return its path."""

    def _write(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def relay_files(tmp_path: Path, write_lines) -> FilesConfig:
    """A complete, valid set of relay files."""
    return FilesConfig(
        endpoint_file=write_lines("config", [":8443"]),
        credentials_file=write_lines("credentials", ["admin", "s3cret"]),
        authorized_keys_file=write_lines("authorized_keys", ["k1", "k2"]),
        default_cert_path=tmp_path / "cert.pem",
        default_key_path=tmp_path / "key.pem",
    )


# ---------------------------------------------------------------------------
# Backend fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_session() -> AsyncMock:
    """A mock BackendSession with turn_on/turn_off/close stubbed."""
    return AsyncMock(spec=BackendSession)


@pytest.fixture
def mock_backend(mock_session: AsyncMock) -> AsyncMock:
    """A mock HomeAutomation whose login() returns mock_session."""
    backend = AsyncMock(spec=HomeAutomation)
    backend.login.return_value = mock_session
    return backend


# ---------------------------------------------------------------------------
# Request fixtures
# ---------------------------------------------------------------------------


def command_body(
    key: str = "k1",
    device: str = "switch",
    name: str = "Lamp",
    action: str = "set",
    value: str = "1",
) -> str:
    return json.dumps(
        {"Key": key, "Device": device, "Name": name, "Action": action, "Value": value}
    )


@pytest.fixture
def make_body():
    """Build a JSON command body; any field can be overridden."""
    return command_body


@pytest.fixture
def switch_on_body() -> str:
    return command_body(value="1")


@pytest.fixture
def switch_off_body() -> str:
    return command_body(value="0")
