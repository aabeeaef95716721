"""Validation of inbound relay commands.

Pure functions: nothing here touches the backend or shared state. The
dispatcher decides what to do with each outcome.
"""

from __future__ import annotations

from collections.abc import Collection

from pydantic import ValidationError

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


class CommandParseError(ValueError):
    """Raised when a request body is not a valid command object."""


def parse_command(body: bytes | str) -> Command:
    """Parse a JSON request body into a Command.

    Raises:
        CommandParseError: If the body is not a JSON object with string fields.
    """
    try:
        return Command.model_validate_json(body)
    except ValidationError as e:
        raise CommandParseError(str(e)) from e


def is_authorized(command: Command, authorized_keys: Collection[str]) -> bool:
    return command.key in authorized_keys


def interpret(command: Command) -> SwitchCommand | str:
    """Map a command onto a SwitchCommand, or return why it is unsupported."""
    if command.device != Device.SWITCH.value:
        return f"unsupported device {command.device!r}"
    if command.action != Action.SET.value:
        return f"unsupported action {command.action!r} for device {command.device!r}"
    try:
        state = SwitchState(command.value)
    except ValueError:
        return f"unsupported value {command.value!r} for action {command.action!r}"
    return SwitchCommand(name=command.name, state=state)


def validate(body: bytes | str, authorized_keys: Collection[str]) -> ValidationOutcome:
    """Validate a raw request body against the accepted command grammar.

    The key is checked after the body parses and before the
    device/action/value fields are interpreted.
    """
    try:
        command = parse_command(body)
    except CommandParseError as e:
        return Malformed(reason=str(e))

    if not is_authorized(command, authorized_keys):
        return Unauthorized(command=command)

    result = interpret(command)
    if isinstance(result, str):
        return Unsupported(command=command, reason=result)
    return Authorized(command=command, switch=result)
