"""Core utilities and configuration."""

from internal_linker.core.config import Settings, get_settings
from internal_linker.core.database import Base, db_manager, transaction
from internal_linker.core.exceptions import (
    ArticleNotFoundError,
    ArticlePersistenceError,
    LinkingError,
    LinkingJobStateError,
)
from internal_linker.core.logging import (
    db_logger,
    get_logger,
    linking_logger,
    setup_logging,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Database
    "Base",
    "db_manager",
    "transaction",
    # Exceptions
    "ArticleNotFoundError",
    "ArticlePersistenceError",
    "LinkingError",
    "LinkingJobStateError",
    # Logging
    "db_logger",
    "get_logger",
    "linking_logger",
    "setup_logging",
]
