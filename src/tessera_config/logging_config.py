"""Logging setup shared by the CLI and any embedding application."""

import logging
import sys

from tessera_config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    settings: Settings | None = None,
    level: str | None = None,
) -> None:
    """Configure console logging for the tessera packages.

    Sets up:
    - Console output with timestamps and module names
    - Configurable log level for tessera modules (explicit, else from settings)
    - WARNING level for noisy third-party libraries
    """
    if level is None:
        level = (settings or get_settings()).log_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    for name in ("tessera_auth", "tessera_identity", "tessera_config"):
        logging.getLogger(name).setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
