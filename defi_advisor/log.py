"""Loguru sink setup for the entrypoint.

Library modules just do `from loguru import logger`; only the process that owns
stderr (run.py) decides where records go.
"""

from __future__ import annotations

import sys

from loguru import logger

from .config import LogConfig

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def configure_logging(config: LogConfig) -> None:
    logger.remove()
    logger.add(sys.stderr, level=config.level, format=_FORMAT)
    if config.file_path:
        logger.add(
            config.file_path,
            level=config.level,
            format=_FORMAT,
            rotation=config.rotation,
            retention=config.retention,
        )


__all__ = ["configure_logging"]
