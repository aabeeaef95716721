"""FRITZ!Box home-automation backend.

Talks to the AVM AHA HTTP interface:

    GET /login_sid.lua?version=2                    -> challenge
    GET /login_sid.lua?version=2&username&response  -> session id
    GET /webservices/homeautoswitch.lua?switchcmd=getdevicelistinfos
    GET /webservices/homeautoswitch.lua?switchcmd=setswitchon&ain=...
    GET /webservices/homeautoswitch.lua?switchcmd=setswitchoff&ain=...

The FRITZ!Box ships a self-signed certificate, so TLS verification is
controlled by an explicit ``verify_tls`` flag rather than left to the
default.
"""

from __future__ import annotations

import hashlib
import logging
import xml.etree.ElementTree as ET

import httpx

from splendid.backend.base import (
    BackendActionError,
    BackendAuthError,
    BackendSession,
    HomeAutomation,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login_sid.lua"
SWITCH_PATH = "/webservices/homeautoswitch.lua"

# SID returned while not (or no longer) logged in
INVALID_SID = "0" * 16


def md5_response(challenge: str, password: str) -> str:
    """Challenge response for the legacy MD5 scheme.

    Characters outside Latin-1 are replaced by '.' before hashing.
    """
    password = "".join(c if ord(c) <= 255 else "." for c in password)
    digest = hashlib.md5(f"{challenge}-{password}".encode("utf-16-le")).hexdigest()
    return f"{challenge}-{digest}"


def pbkdf2_response(challenge: str, password: str) -> str:
    """Challenge response for the ``2$iter1$salt1$iter2$salt2`` scheme."""
    try:
        _, iter1, salt1, iter2, salt2 = challenge.split("$")
        hash1 = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), bytes.fromhex(salt1), int(iter1)
        )
        hash2 = hashlib.pbkdf2_hmac("sha256", hash1, bytes.fromhex(salt2), int(iter2))
    except ValueError as e:
        raise BackendAuthError(
            f"Malformed PBKDF2 challenge {challenge!r}", backend="fritz"
        ) from e
    return f"{salt2}${hash2.hex()}"


def challenge_response(challenge: str, password: str) -> str:
    if challenge.startswith("2$"):
        return pbkdf2_response(challenge, password)
    return md5_response(challenge, password)


def _parse_session_info(text: str) -> tuple[str, str, int]:
    """Extract (SID, Challenge, BlockTime) from a SessionInfo document."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise BackendAuthError(f"Unreadable login response: {e}", backend="fritz") from e
    sid = root.findtext("SID", default=INVALID_SID).strip()
    challenge = root.findtext("Challenge", default="").strip()
    block_time = root.findtext("BlockTime", default="0").strip()
    return sid, challenge, int(block_time) if block_time.isdigit() else 0


class FritzSession(BackendSession):
    """An authenticated AHA session bound to one HTTP client."""

    def __init__(self, client: httpx.AsyncClient, sid: str) -> None:
        self._client = client
        self._sid = sid

    @property
    def sid(self) -> str:
        return self._sid

    @property
    def is_open(self) -> bool:
        return not self._client.is_closed

    async def turn_on(self, name: str) -> None:
        ain = await self.resolve_ain(name)
        await self._switch("setswitchon", ain, expected="1")
        logger.info("Switched %r (%s) on", name, ain)

    async def turn_off(self, name: str) -> None:
        ain = await self.resolve_ain(name)
        await self._switch("setswitchoff", ain, expected="0")
        logger.info("Switched %r (%s) off", name, ain)

    async def resolve_ain(self, name: str) -> str:
        """Look up the actor identification number of a device by name."""
        text = await self._command("getdevicelistinfos")
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise BackendActionError(f"Unreadable device list: {e}", backend="fritz") from e
        for device in root.iter("device"):
            if device.findtext("name", default="").strip() == name:
                return device.get("identifier", "").replace(" ", "")
        raise BackendActionError(f"No device named {name!r}", backend="fritz")

    async def close(self) -> None:
        if self._client.is_closed:
            return
        try:
            await self._client.get(LOGIN_PATH, params={"logout": "1", "sid": self._sid})
        except httpx.HTTPError as e:
            logger.debug("Logout failed: %s", e)
        await self._client.aclose()

    async def _switch(self, switchcmd: str, ain: str, expected: str) -> None:
        reply = (await self._command(switchcmd, ain=ain)).strip()
        if reply != expected:
            raise BackendActionError(
                f"{switchcmd} for {ain} returned {reply!r}", backend="fritz"
            )

    async def _command(self, switchcmd: str, **params: str) -> str:
        try:
            resp = await self._client.get(
                SWITCH_PATH, params={"switchcmd": switchcmd, "sid": self._sid, **params}
            )
            resp.raise_for_status()
            return resp.text
        except httpx.HTTPError as e:
            raise BackendActionError(
                f"AHA command {switchcmd} failed: {e}", backend="fritz"
            ) from e


class FritzHomeAutomation(HomeAutomation):
    """Credentials for a FRITZ!Box; every login opens a fresh session."""

    def __init__(
        self,
        url: str = "https://fritz.box",
        username: str = "",
        password: str = "",
        verify_tls: bool = False,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._username = username
        self._password = password
        self._verify_tls = verify_tls
        self._timeout = timeout
        self._transport = transport
        if not verify_tls:
            logger.warning("TLS certificate verification disabled for backend %s", self._url)

    @property
    def url(self) -> str:
        return self._url

    async def login(self) -> FritzSession:
        client = httpx.AsyncClient(
            base_url=self._url,
            verify=self._verify_tls,
            timeout=self._timeout,
            transport=self._transport,
        )
        try:
            sid = await self._authenticate(client)
        except BackendAuthError:
            await client.aclose()
            raise
        logger.debug("Logged in to %s as %r", self._url, self._username)
        return FritzSession(client, sid)

    async def _authenticate(self, client: httpx.AsyncClient) -> str:
        try:
            resp = await client.get(LOGIN_PATH, params={"version": "2"})
            resp.raise_for_status()
            sid, challenge, block_time = _parse_session_info(resp.text)
            if sid != INVALID_SID:
                return sid

            resp = await client.get(
                LOGIN_PATH,
                params={
                    "version": "2",
                    "username": self._username,
                    "response": challenge_response(challenge, self._password),
                },
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise BackendAuthError(f"Login request failed: {e}", backend="fritz") from e

        sid, _, block_time = _parse_session_info(resp.text)
        if sid == INVALID_SID:
            raise BackendAuthError(
                f"Login rejected for user {self._username!r} (blocked for {block_time}s)",
                backend="fritz",
                block_time=block_time,
            )
        return sid
