"""Logging configuration and utilities using Loguru.

This module provides centralized logging setup for Underplayed, including
structured logging with Loguru, an error handling decorator for external
API calls, and forwarding of uvicorn's standard-library logs.

Public API:
----------
setup_loguru_logger(verbose: bool = False) -> None
    Configure Loguru logger for the application

get_logger(name: str) -> Logger
    Get a context-aware logger for your module
    Usage: logger = get_logger(__name__)

log_startup_info() -> None
    Log configuration at startup (secrets masked)

@resilient_operation(operation_name: str)
    Decorator for handling errors in external API calls
    Usage: @resilient_operation("spotify_liked_tracks")

configure_uvicorn_logging() -> None
    Route uvicorn and FastAPI logging records through Loguru
"""

from collections.abc import Callable
import functools
import logging
from pathlib import Path
import sys
from typing import Any

from loguru import logger

from .settings import settings

SECRET_FIELDS = frozenset({"spotify_client_secret", "lastfm_secret", "lastfm_key"})

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def setup_loguru_logger(verbose: bool = False) -> None:
    """Configure Loguru logger for the application.

    Args:
        verbose: Enable verbose logging with debug level and detailed tracebacks

    Note:
        - Removes default logger and sets up console and file handlers
        - Console format is colorized and simplified
        - File format is serialized JSON with rotation and retention
    """
    logger.remove()

    log_file_path = Path(settings.logging.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    # Add contextual info to all log records
    logger.configure(extra={"service": "underplayed", "module": "root"})

    # -------------------------------------------------------------------------
    # Console Handler
    # -------------------------------------------------------------------------
    console_level = "DEBUG" if verbose else settings.logging.console_level
    logger.add(
        sink=sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:"
            "<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    # -------------------------------------------------------------------------
    # File Handler
    # -------------------------------------------------------------------------
    logger.add(
        sink=str(log_file_path),
        level=settings.logging.file_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[service]} | {extra[module]} | {name}:{function}:{line} | {message}",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        backtrace=True,
        diagnose=False,  # Tracebacks may otherwise capture credentials
        enqueue=not settings.logging.real_time_debug,
        catch=True,
        serialize=True,
    )


# =============================================================================
# LOGGER FACTORY
# =============================================================================


def get_logger(name: str) -> Any:  # Use Any for Loguru logger type
    """Get a pre-configured logger instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Loguru logger bound with module and service context

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Job finished", process_id=process_id)
        ```
    """
    return logger.bind(
        module=name,
        service="underplayed",
    )


# =============================================================================
# STARTUP LOGGING
# =============================================================================


def log_startup_info() -> None:
    """Log application configuration on startup.

    Displays a startup banner and logs all configuration values at debug
    level. Credential values are masked.
    """
    local_logger = get_logger(__name__)
    separator = "=" * 50

    local_logger.info(separator)
    local_logger.info("Underplayed: least-played-first liked songs shuffler")
    local_logger.info(separator)

    local_logger.debug("Configuration:")
    config_dict = settings.model_dump()
    for section_name, section_values in config_dict.items():
        if isinstance(section_values, dict):
            local_logger.debug("  {}:", section_name.upper())
            for key, value in section_values.items():
                local_logger.debug("    {}: {}", key.upper(), _display_value(key, value))
        else:
            local_logger.debug(
                "  {}: {}", section_name.upper(), _display_value(section_name, section_values)
            )


def _display_value(key: str, value: Any) -> str:
    if key in SECRET_FIELDS:
        return "****" if value else "<unset>"
    return str(value)


# =============================================================================
# ERROR HANDLING DECORATORS
# =============================================================================


def resilient_operation(operation_name: str | None = None) -> Callable:
    """Decorator for service boundary operations with standardized error logging.

    Use on external API calls so failures are logged once, with traceback,
    at the boundary. The exception is always re-raised; callers decide
    whether it is fatal.

    Args:
        operation_name: Optional name for the operation (defaults to function name)

    Example:
        >>> @resilient_operation("spotify_create_playlist")
        >>> async def create_playlist(name):
        >>>     return await asyncio.to_thread(client.user_playlist_create, ...)
    """

    def decorator(func: Callable) -> Callable:
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.opt(exception=e).error(f"Error in {op_name}: {e!s}")
                raise

        return wrapper

    return decorator


# =============================================================================
# THIRD-PARTY LOGGING INTEGRATION
# =============================================================================


class _LoguruForwardingHandler(logging.Handler):
    """Pass standard-library log records on to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.bind(module=record.name).opt(exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_uvicorn_logging() -> None:
    """Configure uvicorn and FastAPI to log through our Loguru setup.

    Note:
        - Replaces the handlers on the uvicorn loggers
        - Disables propagation to prevent duplicate logs
    """
    handler = _LoguruForwardingHandler()
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False
