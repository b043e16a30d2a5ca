"""Logging setup driven by the ``logging`` section of the configuration."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..config import LoggingConfig

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
ROOT_LOGGER = "bank_recon"


def resolve_level(name: str) -> int:
    """
    Map a level name such as ``"warning"`` to its numeric value.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {name!r}")
    return level


def setup_logging(
    config: Optional["LoggingConfig"] = None,
    level: Optional[int] = None,
) -> logging.Logger:
    """
    Configure the package logger from a logging configuration.

    Args:
        config: Logging section of the loaded configuration; defaults apply when omitted
        level: Explicit level that takes precedence over ``config.level``,
            e.g. logging.DEBUG for a ``--verbose`` run

    Returns:
        Configured ``bank_recon`` logger
    """
    log_format = config.format if config is not None else DEFAULT_FORMAT
    if level is None:
        level = resolve_level(config.level) if config is not None else logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # Drop handlers from a previous call
    logger.handlers = []
    logger.addHandler(_console_handler(level, log_format))

    if config is not None and config.file:
        logger.addHandler(_file_handler(Path(config.file)))

    return logger


def _console_handler(level: int, log_format: str) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(log_format))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
    # The file keeps everything so a quiet console still leaves a trail
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler
