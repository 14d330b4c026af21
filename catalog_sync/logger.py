"""Logging for the CLI: one stdout handler on the root logger, plain or JSON."""
import logging
import sys
from typing import Iterable, Optional

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP and document-store clients are chatty below WARNING
QUIET_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.internal", "pymongo")


def _formatter(json_format: bool, command: Optional[str]) -> logging.Formatter:
    if not json_format:
        return logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT)

    from pythonjsonlogger.jsonlogger import JsonFormatter

    # Every JSON line names the sub-command so runs can be told apart downstream
    static_fields = {"command": command} if command else {}
    return JsonFormatter(JSON_FIELDS, static_fields=static_fields, json_ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    command: Optional[str] = None,
    quiet: Iterable[str] = QUIET_LOGGERS,
) -> logging.Handler:
    """
    Route every record to stdout, replacing handlers from any earlier call.

    Returns the installed handler.
    """
    root_logger = logging.getLogger()
    for old in root_logger.handlers[:]:
        root_logger.removeHandler(old)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_formatter(json_format, command))
    root_logger.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
