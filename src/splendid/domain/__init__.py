"""Domain models for splendid.

Commands as received, the closed enumerations they are validated
against, and the outcomes of validation.
"""

from splendid.domain.models import (
    Action,
    Authorized,
    Command,
    Device,
    Malformed,
    SwitchCommand,
    SwitchState,
    Unauthorized,
    Unsupported,
    ValidationOutcome,
)

__all__ = [
    "Action",
    "Authorized",
    "Command",
    "Device",
    "Malformed",
    "SwitchCommand",
    "SwitchState",
    "Unauthorized",
    "Unsupported",
    "ValidationOutcome",
]
