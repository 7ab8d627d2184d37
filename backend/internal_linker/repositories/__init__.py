"""Repositories layer - data access for the article store."""

from internal_linker.repositories.article import (
    ArticleRepository,
    ArticleStore,
    SqlArticleStore,
)

__all__ = [
    "ArticleRepository",
    "ArticleStore",
    "SqlArticleStore",
]
