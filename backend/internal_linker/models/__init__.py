"""Models layer - SQLAlchemy ORM models.

Models define the database schema the engine reads and writes.
All models inherit from the Base class defined in core.database.
"""

from internal_linker.core.database import Base
from internal_linker.models.article import Article, ArticleStatus

__all__ = [
    "Article",
    "ArticleStatus",
    "Base",
]
