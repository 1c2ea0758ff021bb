"""Loguru setup for workflow runs.

Engine classes log through `logger.bind(component=...)`. Records without a
component are shown as `revsync`.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_COMPONENT = 'revsync'

CONSOLE_FORMAT = (
    '<green>{time:HH:mm:ss}</green> | '
    '<level>{level: <8}</level> | '
    '<cyan>{extra[component]}</cyan> | '
    '<level>{message}</level>'
)

FILE_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} | '
    '{name}:{function}:{line} | {message}'
)


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """Replace the loguru sinks with a stderr sink and an optional file sink.

    Args:
        level: Minimum level for every sink
        log_file: Rotated log file, created with its parent directories
        log_format: Console format, CONSOLE_FORMAT if not set
    """
    logger.remove()
    logger.configure(extra={'component': DEFAULT_COMPONENT})

    logger.add(
        sys.stderr,
        format=log_format or CONSOLE_FORMAT,
        level=level,
        colorize=True,
        diagnose=False,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation='10 MB',
            retention='30 days',
            compression='gz',
            diagnose=False,
        )

    logger.bind(component='logging').debug(
        f'Logging at {level}' + (f' to {log_file}' if log_file else '')
    )
