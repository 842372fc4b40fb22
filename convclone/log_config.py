"""Logging configuration for convclone.

Uses loguru with automatic rotation and structured logging.
Logs are stored in ~/.convclone/logs/ with:
- Rotation at 10 MB per file
- Retention of 7 days
- Compression of old logs

Environment variables for log level control:
- CONVCLONE_LOG_LEVEL: Console log level (default: INFO)
- CONVCLONE_LOG_DIR: Directory for log files (default: ~/.convclone/logs)
- CONVCLONE_LOG_REWRITER: Rewriter log level override
- CONVCLONE_LOG_LOCATOR: Locator log level override
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from time import perf_counter

from loguru import logger

_global_log_level = os.getenv("CONVCLONE_LOG_LEVEL", "INFO").upper()

# Component-specific log level overrides
_component_log_levels: dict[str, str] = {
    "rewriter": os.getenv("CONVCLONE_LOG_REWRITER", "").upper(),
    "locator": os.getenv("CONVCLONE_LOG_LOCATOR", "").upper(),
}


def _log_filter(record) -> bool:
    """Filter console records on global and component-specific log levels."""
    name = record["extra"].get("name", "")

    for component, level in _component_log_levels.items():
        if level and component in name:
            try:
                return record["level"].no >= logger.level(level).no
            except ValueError:
                pass  # Invalid level, fall through to global

    try:
        return record["level"].no >= logger.level(_global_log_level).no
    except ValueError:
        return True


logger.remove()

_log_dir = Path(os.getenv("CONVCLONE_LOG_DIR", str(Path.home() / ".convclone" / "logs")))
_log_dir.mkdir(parents=True, exist_ok=True)

logger.add(
    sys.stderr,
    level=0,  # Accept all, let filter decide
    filter=_log_filter,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    colorize=True,
)

logger.add(
    _log_dir / "convclone_{time:YYYY-MM-DD}.log",
    level="DEBUG",
    format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
    rotation="10 MB",
    retention="7 days",
    compression="zip",
)


def get_logger(name: str):
    """Get a logger with the given name bound to context.

    Args:
        name: Module or component name

    Returns:
        Logger instance with name bound
    """
    return logger.bind(name=name)


@contextmanager
def log_timing(operation: str, log):
    """Log how long the wrapped block took, in milliseconds, at DEBUG."""
    start = perf_counter()
    try:
        yield
    finally:
        log.debug(f"{operation}: {(perf_counter() - start) * 1000:.1f}ms")


__all__ = ["get_logger", "log_timing"]
