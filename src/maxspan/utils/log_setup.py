"""Loguru sink setup for the command line entry points."""

import sys

from loguru import logger

from maxspan.config.span_config import LoggingConfig

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """
    Replace loguru's default handler with stderr (and optional file) sinks.

    Args:
        config: Logging section of SpanConfig
        verbose: Force DEBUG level on stderr
    """
    level = "DEBUG" if verbose else config.level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if config.file:
        logger.add(
            config.file,
            level=level,
            format=LOG_FORMAT,
            rotation=config.rotation,
            retention=config.retention,
            compression="zip",
        )
