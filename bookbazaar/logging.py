"""
Logging for BookBazaar.

Library modules only ask for a logger:

    from bookbazaar.logging import get_logger
    logger = get_logger(__name__)

Output is switched on by the ``bookbazaar`` CLI through ``configure_logging()``,
so embedding the client never touches the host application's root logger.
"""

import logging
import os
import sys

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Session tokens are bearer credentials; only a prefix may reach the logs
TOKEN_PREFIX_LENGTH = 8


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``bookbazaar`` hierarchy (pass ``__name__``)."""
    return logging.getLogger(name)


def configure_logging(verbose: bool = False) -> None:
    """
    Send ``bookbazaar.*`` records to stderr, keeping stdout for command output.

    Level is DEBUG when ``verbose``, else ``LOG_LEVEL`` (default WARNING).
    Calling it again only adjusts the level.
    """
    level = logging.DEBUG if verbose else _env_level()
    package_logger = logging.getLogger("bookbazaar")
    package_logger.setLevel(level)

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _env_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.WARNING


def redact_token(token: str | None) -> str:
    """``eyJhbGci...`` style prefix of a bearer token, or ``none``."""
    if not token:
        return "none"
    if len(token) <= TOKEN_PREFIX_LENGTH:
        return "***"
    return token[:TOKEN_PREFIX_LENGTH] + "..."


__all__ = [
    "LOG_FORMAT",
    "configure_logging",
    "get_logger",
    "redact_token",
]
