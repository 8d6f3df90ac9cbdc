"""Log file setup.

The library only emits records through loguru; applications call
configure_logging() to route them to a file.
"""

import os
from pathlib import Path

from loguru import logger

SYSTEM_LOG_DIR = Path('/var') / 'log' / 'hue'
USER_LOG_DIR = Path.home() / '.hue-lib'
LOG_DIR_ENV = 'HUE_LIB_LOG_DIR'
LOG_FILENAME = 'hue-lib.log'
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"


def resolve_log_dir() -> Path:
    """Return the log directory, falling back to ~/.hue-lib without permission."""
    override = os.getenv(LOG_DIR_ENV)
    if override:
        log_dir = Path(override)
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir

    try:
        SYSTEM_LOG_DIR.mkdir(parents=True, exist_ok=True)
        if os.access(SYSTEM_LOG_DIR, os.W_OK):
            return SYSTEM_LOG_DIR
    except PermissionError:
        pass

    USER_LOG_DIR.mkdir(parents=True, exist_ok=True)
    return USER_LOG_DIR


def configure_logging(level: str = 'INFO', log_dir: Path | str | None = None) -> Path:
    """Add a rotating file sink for hue-lib log records.

    Args:
        level: Minimum level written to the file
        log_dir: Directory for hue-lib.log (resolved if not provided)

    Returns:
        Path of the log file
    """
    log_dir = Path(log_dir) if log_dir else resolve_log_dir()
    log_file = log_dir / LOG_FILENAME
    logger.add(
        log_file,
        level=level,
        format=LOG_FORMAT,
        rotation='10 MB',
        retention='1 week',
    )
    return log_file
