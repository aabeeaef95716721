"""FastAPI application for the relay endpoint.

Single route, POST only:

    POST /gghr/  <- {"Key": "...", "Device": "switch", "Name": "Lamp",
                     "Action": "set", "Value": "1"}

Every response is a plain text status line such as ``200 - Ok``. Each
request is handled to completion on its own: it validates the body,
logs in to the backend with a session it owns, performs at most one
switch action and closes the session again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect

from splendid.backend.base import BackendActionError, BackendAuthError, HomeAutomation
from splendid.config.loader import RelayConfig
from splendid.domain.models import (
    Malformed,
    SwitchState,
    Unauthorized,
    Unsupported,
)
from splendid.endpoint.validator import validate

logger = logging.getLogger(__name__)

ROUTE = "/gghr/"

STATUS_TEXT = {
    200: "200 - Ok",
    400: "400 - Bad request",
    403: "403 - Forbidden",
    405: "405 - Method not allowed",
    406: "406 - Not acceptable",
    500: "500 - Internal server error",
}


def respond(status_code: int) -> PlainTextResponse:
    text = STATUS_TEXT[status_code]
    logger.info(text)
    return PlainTextResponse(text, status_code=status_code)


def create_app(
    authorized_keys: Iterable[str],
    backend: HomeAutomation,
) -> FastAPI:
    """Create the relay application.

    Args:
        authorized_keys: Bearer keys allowed to issue commands.
        backend: Login factory for the home-automation backend. Shared
            by all requests; each request gets its own session from it.
    """
    app = FastAPI(
        title="splendid",
        description="Authenticated HTTPS relay for FRITZ!Box smart plugs",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.authorized_keys = frozenset(authorized_keys)
    app.state.backend = backend

    async def dispatch(request: Request) -> PlainTextResponse:
        try:
            return await relay(request)
        except Exception:
            logger.exception("Unexpected error while handling request")
            return respond(500)

    async def relay(request: Request) -> PlainTextResponse:
        client = request.client.host if request.client else "unknown"
        logger.info("Received %s request from %s.", request.method, client)

        if request.method != "POST":
            return respond(405)

        try:
            body = await request.body()
        except ClientDisconnect as e:
            logger.warning("Failed to read request body: %s", e)
            return respond(400)

        outcome = validate(body, app.state.authorized_keys)

        if isinstance(outcome, Malformed):
            logger.info("Malformed command: %s", outcome.reason)
            return respond(400)
        if isinstance(outcome, Unauthorized):
            logger.info("Command: %s", outcome.command.redacted("<INVALID>"))
            return respond(403)

        logger.info("Command: %s", outcome.command.redacted("<VALID>"))

        try:
            session = await app.state.backend.login()
        except BackendAuthError as e:
            logger.error("Backend login failed: %s", e)
            return respond(500)

        try:
            if isinstance(outcome, Unsupported):
                logger.info("Unsupported command: %s", outcome.reason)
                return respond(406)

            switch = outcome.switch
            try:
                if switch.state is SwitchState.ON:
                    await session.turn_on(switch.name)
                else:
                    await session.turn_off(switch.name)
            except BackendActionError as e:
                logger.error("Backend action failed: %s", e)
                return respond(406)
        finally:
            await session.close()

        return respond(200)

    # No method list: every verb reaches dispatch and non-POST gets the 405 text.
    app.add_route(ROUTE, dispatch)
    app.add_route(ROUTE + "{subpath:path}", dispatch)

    return app


def serve(app: FastAPI, config: RelayConfig) -> None:
    """Run the relay over TLS on the configured address."""
    uvicorn.run(
        app,
        host=config.listen_address.host,
        port=config.listen_address.port,
        ssl_certfile=str(config.cert_path),
        ssl_keyfile=str(config.key_path),
    )
