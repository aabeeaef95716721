"""Abstract interface to the home-automation backend.

The relay only needs three things from a backend: log in, switch a
named actor on, switch it off. Implementations hide the protocol
(currently the FRITZ!Box AHA HTTP interface) behind this interface so
the dispatcher can be tested with mocks.

Example usage::

    backend = FritzHomeAutomation(url="https://fritz.box", password="...")
    async with await backend.login() as session:
        await session.turn_on("Lamp")
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BackendError(Exception):
    """Base class for backend failures."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend


class BackendAuthError(BackendError):
    """Raised when the backend rejects or cannot complete a login."""

    def __init__(self, message: str, backend: str = "", block_time: int = 0) -> None:
        super().__init__(message, backend=backend)
        self.block_time = block_time


class BackendActionError(BackendError):
    """Raised when a device action fails."""


class BackendSession(ABC):
    """An authenticated session. Owned by whoever called ``login()``."""

    @abstractmethod
    async def turn_on(self, name: str) -> None:
        """Switch the actor called ``name`` on.

        Raises:
            BackendActionError: If the actor is unknown or the switch fails.
        """
        ...

    @abstractmethod
    async def turn_off(self, name: str) -> None:
        """Switch the actor called ``name`` off.

        Raises:
            BackendActionError: If the actor is unknown or the switch fails.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """End the session and release its connection. Safe to call twice."""
        ...

    async def __aenter__(self) -> BackendSession:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()


class HomeAutomation(ABC):
    """Holds backend credentials and hands out authenticated sessions.

    Instances are immutable and may be shared between concurrent
    requests; every ``login()`` returns a new, independent session.
    """

    @abstractmethod
    async def login(self) -> BackendSession:
        """Authenticate against the backend.

        Raises:
            BackendAuthError: If authentication fails.
        """
        ...
