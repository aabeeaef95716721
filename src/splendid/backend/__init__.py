"""Home-automation backend for splendid.

Public API:
    HomeAutomation -- Abstract login factory
    BackendSession -- Abstract authenticated session (turn_on / turn_off)
    FritzHomeAutomation -- FRITZ!Box AHA HTTP implementation
"""

from splendid.backend.base import (
    BackendActionError,
    BackendAuthError,
    BackendError,
    BackendSession,
    HomeAutomation,
)

__all__ = [
    "BackendActionError",
    "BackendAuthError",
    "BackendError",
    "BackendSession",
    "FritzHomeAutomation",
    "HomeAutomation",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "FritzHomeAutomation":
        from splendid.backend.fritz import FritzHomeAutomation
        return FritzHomeAutomation
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
