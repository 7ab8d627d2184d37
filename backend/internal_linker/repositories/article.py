"""ArticleRepository and the article store interface consumed by the engine.

Handles all database operations for Article entities.
Follows the layered architecture pattern: Service -> Repository -> Database.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include entity IDs (article_id) in all logs
- Add timing logs for operations >1 second
"""

import time
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from internal_linker.core.database import DEFAULT_SLOW_QUERY_THRESHOLD_MS, transaction
from internal_linker.core.exceptions import ArticleNotFoundError
from internal_linker.core.logging import db_logger, get_logger
from internal_linker.models.article import Article, ArticleStatus

logger = get_logger(__name__)


class ArticleStore(Protocol):
    """Read/write interface the linking engine needs from the article store."""

    async def list_published_articles(self) -> list[Article]: ...

    async def get_article_by_id(self, article_id: int) -> Article | None: ...

    async def search_published_by_title(
        self,
        keywords: Sequence[str],
        exclude_id: int | None = None,
        limit: int = 10,
    ) -> list[Article]: ...

    async def update_article_body(
        self, article_id: int, body: str, updated_at: datetime
    ) -> Article: ...


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so a keyword only matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ArticleRepository:
    """Repository for Article queries used by the linking engine.

    All methods run on the session passed at construction and leave
    transaction boundaries to the caller.
    """

    TABLE_NAME = "blog_posts"
    SLOW_OPERATION_THRESHOLD_MS = 1000  # 1 second

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session for database operations
        """
        self.session = session
        logger.debug("ArticleRepository initialized")

    async def list_published(self) -> list[Article]:
        """Get all published articles, oldest id first.

        Returns:
            List of published Article instances

        Raises:
            SQLAlchemyError: On database errors
        """
        start_time = time.monotonic()
        logger.debug("Fetching published articles")

        try:
            result = await self.session.execute(
                select(Article)
                .where(Article.status == ArticleStatus.PUBLISHED.value)
                .order_by(Article.id)
            )
            articles = list(result.scalars().all())

            duration_ms = (time.monotonic() - start_time) * 1000
            logger.debug(
                "Published articles fetch completed",
                extra={
                    "count": len(articles),
                    "duration_ms": round(duration_ms, 2),
                },
            )

            if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
                db_logger.slow_query(
                    query="SELECT FROM blog_posts WHERE status='published'",
                    duration_ms=duration_ms,
                    table=self.TABLE_NAME,
                )

            return articles

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch published articles",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def get_by_id(self, article_id: int) -> Article | None:
        """Get an article by ID.

        Args:
            article_id: Integer id of the article

        Returns:
            Article instance if found, None otherwise

        Raises:
            SQLAlchemyError: On database errors
        """
        logger.debug(
            "Fetching article by ID",
            extra={"article_id": article_id},
        )

        try:
            result = await self.session.execute(
                select(Article).where(Article.id == article_id)
            )
            article = result.scalar_one_or_none()

            logger.debug(
                "Article fetch completed",
                extra={
                    "article_id": article_id,
                    "found": article is not None,
                },
            )
            return article

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch article by ID",
                extra={
                    "article_id": article_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def search_published_by_title(
        self,
        keywords: Sequence[str],
        exclude_id: int | None = None,
        limit: int = 10,
    ) -> list[Article]:
        """Find published articles whose title contains any keyword.

        Matching is a case-insensitive substring test against the title
        only. Results are ordered newest published first.

        Args:
            keywords: Keywords to look for in titles
            exclude_id: Article id to leave out (the article being rewritten)
            limit: Maximum number of articles to return

        Returns:
            List of matching Article instances (empty when keywords is empty)

        Raises:
            SQLAlchemyError: On database errors
        """
        if not keywords:
            return []

        start_time = time.monotonic()
        logger.debug(
            "Searching published articles by title",
            extra={
                "keyword_count": len(keywords),
                "exclude_id": exclude_id,
                "limit": limit,
            },
        )

        conditions = [
            Article.title.ilike(f"%{_escape_like(keyword)}%", escape="\\")
            for keyword in keywords
        ]
        stmt = select(Article).where(
            Article.status == ArticleStatus.PUBLISHED.value,
            or_(*conditions),
        )
        if exclude_id is not None:
            stmt = stmt.where(Article.id != exclude_id)
        stmt = stmt.order_by(
            Article.published_at.desc().nulls_last(), Article.id.desc()
        ).limit(limit)

        try:
            result = await self.session.execute(stmt)
            articles = list(result.scalars().all())

            duration_ms = (time.monotonic() - start_time) * 1000
            logger.debug(
                "Title search completed",
                extra={
                    "exclude_id": exclude_id,
                    "matches": len(articles),
                    "duration_ms": round(duration_ms, 2),
                },
            )

            if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
                db_logger.slow_query(
                    query=f"SELECT FROM blog_posts WHERE title ILIKE ({len(keywords)} keywords)",
                    duration_ms=duration_ms,
                    table=self.TABLE_NAME,
                )

            return articles

        except SQLAlchemyError as e:
            logger.error(
                "Failed to search articles by title",
                extra={
                    "exclude_id": exclude_id,
                    "keyword_count": len(keywords),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def update_body(
        self, article_id: int, body: str, updated_at: datetime
    ) -> Article:
        """Replace an article's body and bump its updated_at.

        Args:
            article_id: Integer id of the article
            body: New HTML body
            updated_at: Timestamp to record

        Returns:
            The updated Article instance

        Raises:
            ArticleNotFoundError: If no article has this id
            SQLAlchemyError: On database errors; the enclosing transaction()
                logs the failure when it rolls back
        """
        logger.debug(
            "Updating article body",
            extra={"article_id": article_id, "body_length": len(body)},
        )

        article = await self.session.get(Article, article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)

        article.body = body
        article.updated_at = updated_at
        await self.session.flush()

        logger.debug(
            "Article body updated",
            extra={"article_id": article_id},
        )
        return article


class SqlArticleStore:
    """ArticleStore backed by SQLAlchemy.

    Each store call runs in its own short-lived session so a failed write
    for one article never rolls back another.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        slow_query_threshold_ms: float = DEFAULT_SLOW_QUERY_THRESHOLD_MS,
    ) -> None:
        self._session_factory = session_factory
        self._slow_query_threshold_ms = slow_query_threshold_ms

    async def list_published_articles(self) -> list[Article]:
        async with self._session_factory() as session:
            return await ArticleRepository(session).list_published()

    async def get_article_by_id(self, article_id: int) -> Article | None:
        async with self._session_factory() as session:
            return await ArticleRepository(session).get_by_id(article_id)

    async def search_published_by_title(
        self,
        keywords: Sequence[str],
        exclude_id: int | None = None,
        limit: int = 10,
    ) -> list[Article]:
        async with self._session_factory() as session:
            return await ArticleRepository(session).search_published_by_title(
                keywords, exclude_id=exclude_id, limit=limit
            )

    async def update_article_body(
        self, article_id: int, body: str, updated_at: datetime
    ) -> Article:
        async with self._session_factory() as session:
            async with transaction(
                session,
                table=ArticleRepository.TABLE_NAME,
                threshold_ms=self._slow_query_threshold_ms,
            ):
                return await ArticleRepository(session).update_body(
                    article_id, body, updated_at
                )
