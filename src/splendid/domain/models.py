"""Core domain models for the splendid relay.

The raw ``Command`` mirrors the JSON body a client sends. Validation
turns it into one of a closed set of outcomes; only ``Authorized``
carries a ``SwitchCommand`` the backend can act on.
"""

from __future__ import annotations

import enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Device(str, enum.Enum):
    """Device types the relay knows how to drive."""

    SWITCH = "switch"


class Action(str, enum.Enum):
    SET = "set"


class SwitchState(str, enum.Enum):
    """Target state of a switch, keyed by its wire value."""

    OFF = "0"
    ON = "1"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class Command(BaseModel):
    """A parsed request body. All fields are strings; missing ones are empty."""

    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    key: str = ""
    device: str = ""
    name: str = ""
    action: str = ""
    value: str = ""

    @model_validator(mode="before")
    @classmethod
    def fold_field_names(cls, data: Any) -> Any:
        # JSON null is an empty command; field names match case-insensitively.
        if data is None:
            return {}
        if isinstance(data, dict):
            return {k.lower() if isinstance(k, str) else k: v for k, v in data.items()}
        return data

    def redacted(self, key_status: str = "<VALID>") -> str:
        """Render the command for logging, with the key replaced."""
        return (
            f'{{ "key": {key_status}, "device": "{self.device}", "name": "{self.name}", '
            f'"action": "{self.action}", "value": "{self.value}" }}'
        )


class SwitchCommand(BaseModel):
    """A validated request to switch the actor called ``name``."""

    model_config = ConfigDict(frozen=True)

    name: str
    state: SwitchState


# ---------------------------------------------------------------------------
# Validation outcomes
# ---------------------------------------------------------------------------


class Authorized(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: Command
    switch: SwitchCommand


class Unauthorized(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: Command


class Malformed(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str


class Unsupported(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: Command
    reason: str


ValidationOutcome = Union[Authorized, Unauthorized, Malformed, Unsupported]
