"""Log file setup for the Academia service.

Everything under the ``academia`` logger (store, capacity, enrollment
service) goes to one rotating file. When the API is served, uvicorn's
server and access logs are attached to the same handlers.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from academia.config import Settings, load_settings

ROOT_LOGGER = "academia"
SERVER_LOGGER = "uvicorn"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _reset(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


def _build_handlers(settings: Settings, console: bool) -> list[logging.Handler]:
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_dir / settings.log_file,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    settings: Settings | None = None,
    console: bool = True,
    include_server: bool = False,
) -> logging.Logger:
    """Attach the rotating log file (and optionally the console) to Academia's loggers.

    Calling it again replaces the previous handlers, so repeated setup never
    duplicates output.

    Args:
        settings: Resolved settings. Loaded from the YAML file and
            ``ACADEMIA_*`` environment when omitted.
        console: Also log to stderr.
        include_server: Route uvicorn's loggers to the same handlers.

    Returns:
        The ``academia`` logger.
    """
    if settings is None:
        settings = load_settings()
    level = logging.getLevelName(settings.log_level.upper())

    handlers = _build_handlers(settings, console)
    names = [ROOT_LOGGER, SERVER_LOGGER] if include_server else [ROOT_LOGGER]
    for name in names:
        logger = logging.getLogger(name)
        _reset(logger)
        logger.setLevel(level)
        for handler in handlers:
            logger.addHandler(handler)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.info(
        "Logging to %s (level=%s)", Path(settings.log_dir) / settings.log_file, settings.log_level
    )
    return logger
