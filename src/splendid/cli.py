"""Command-line interface for the splendid relay.

Provides the main entry point for serving the relay and for checking
the relay configuration without binding a listener.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="splendid",
        description="Authenticated HTTPS relay for FRITZ!Box smart plugs",
    )
    parser.add_argument(
        "-s", "--settings",
        type=Path,
        default=None,
        help="Path to YAML settings file (default: /etc/splendid/splendid.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("serve", help="Start the HTTPS relay")
    subparsers.add_parser(
        "check-config",
        help="Validate the relay files and try one backend login",
    )

    return parser.parse_args(argv)


def _build_backend(settings, config):
    from splendid.backend.fritz import FritzHomeAutomation

    return FritzHomeAutomation(
        url=settings.backend.url,
        username=config.username,
        password=config.password.get_secret_value(),
        verify_tls=settings.backend.verify_tls,
        timeout=settings.backend.timeout,
    )


async def _check_login(backend) -> bool:
    """Log in once and close the session again."""
    from splendid.backend.base import BackendAuthError

    try:
        session = await backend.login()
    except BackendAuthError as e:
        logger.error("Backend login failed: %s", e)
        return False
    await session.close()
    logger.info("Backend login succeeded")
    return True


def _load_config(settings):
    from splendid.config.loader import ConfigError, load_relay_config

    try:
        return load_relay_config(settings.files)
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the splendid CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from splendid.config.settings import load_settings
    from splendid.utils.logging import setup_logging

    settings = load_settings(args.settings)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        logger.info("Starting up ...")
        config = _load_config(settings)
        backend = _build_backend(settings, config)
        if not asyncio.run(_check_login(backend)):
            sys.exit(1)

        from splendid.endpoint.server import create_app, serve

        app = create_app(config.authorized_keys, backend)
        logger.info("Listening on https://%s/", config.listen_address)
        serve(app, config)

    elif args.command == "check-config":
        config = _load_config(settings)
        print(f"Listen address:  {config.listen_address}")
        print(f"Certificate:     {config.cert_path}")
        print(f"Private key:     {config.key_path}")
        print(f"Username:        {config.username or '(none)'}")
        print(f"Authorized keys: {len(config.authorized_keys)}")
        print(f"Backend:         {settings.backend.url}")
        backend = _build_backend(settings, config)
        if not asyncio.run(_check_login(backend)):
            print("Backend login:   FAILED")
            sys.exit(1)
        print("Backend login:   ok")


if __name__ == "__main__":
    main()
