"""Configuration module for Underplayed.

Public API:
----------
settings: Settings instance
    Pydantic settings object with nested configuration

load_settings(**overrides) -> Settings
    Build a fresh settings object (used by tests and the CLI)

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(verbose: bool = False) -> None
    Configure Loguru logger for the application

resilient_operation(operation_name: str)
    Decorator for handling errors in external API calls

log_startup_info() -> None
    Log system configuration at startup

configure_uvicorn_logging() -> None
    Route uvicorn logs through Loguru

Usage:
------
```python
from underplayed.config import settings
page_size = settings.api.lastfm_page_size

from underplayed.config import get_logger
logger = get_logger(__name__)
logger.info("Starting operation")
```
"""

from .logging import (
    configure_uvicorn_logging,
    get_logger,
    log_startup_info,
    resilient_operation,
    setup_loguru_logger,
)
from .settings import MEMORY_DATABASE_URL, Settings, load_settings, settings

__all__ = [
    "MEMORY_DATABASE_URL",
    "Settings",
    "configure_uvicorn_logging",
    "get_logger",
    "load_settings",
    "log_startup_info",
    "resilient_operation",
    "settings",
    "setup_loguru_logger",
]
