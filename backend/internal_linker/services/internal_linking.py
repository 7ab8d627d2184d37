"""Entry points exposed to the host CMS.

- rewrite_with_internal_links: rewrite one body (no persistence)
- rewrite_article_by_id: preview the rewrite of a stored article
- run_batch_internal_linking: sweep all published articles and persist

The engine performs no authorization; the host gates the batch sweep
behind its admin-only trigger.
"""

from internal_linker.core.config import Settings, get_settings
from internal_linker.core.database import db_manager
from internal_linker.core.exceptions import ArticleNotFoundError
from internal_linker.core.logging import get_logger
from internal_linker.repositories.article import ArticleStore, SqlArticleStore
from internal_linker.schemas.linking import RewritePreview, RunStats
from internal_linker.services.article_linking import ArticleLinkingService
from internal_linker.services.batch_linking import BatchLinkingJob
from internal_linker.services.keyword_extraction import KeywordExtractor
from internal_linker.services.link_insertion import LinkInserter

logger = get_logger(__name__)


def get_article_store(settings: Settings | None = None) -> SqlArticleStore:
    """Build the SQLAlchemy-backed store on the global database manager."""
    settings = settings or get_settings()
    if not db_manager.is_initialized:
        db_manager.init_db()
    return SqlArticleStore(
        db_manager.session_factory,
        slow_query_threshold_ms=settings.db_slow_query_threshold_ms,
    )


def build_linking_service(
    store: ArticleStore, settings: Settings | None = None
) -> ArticleLinkingService:
    """Build an ArticleLinkingService configured from settings."""
    settings = settings or get_settings()
    extractor = KeywordExtractor(min_length=settings.linking_min_keyword_length)
    inserter = LinkInserter(
        max_links=settings.linking_max_links,
        url_prefix=settings.linking_url_prefix,
        css_class=settings.linking_css_class or None,
        extractor=extractor,
    )
    return ArticleLinkingService(
        store,
        extractor=extractor,
        inserter=inserter,
        candidate_limit=settings.linking_candidate_limit,
        content_keyword_limit=settings.linking_content_keyword_limit,
    )


async def rewrite_with_internal_links(
    body: str,
    title: str,
    exclude_id: int | None = None,
    store: ArticleStore | None = None,
) -> str:
    """Return body with links to related published articles inserted.

    Reads candidates from the store; never writes. Returns body unchanged
    when nothing qualifies or anything goes wrong.
    """
    store = store or get_article_store()
    service = build_linking_service(store)
    return await service.rewrite(body, title, exclude_id)


async def rewrite_article_by_id(
    article_id: int, store: ArticleStore | None = None
) -> RewritePreview:
    """Preview the rewrite of a stored article without persisting it.

    Raises:
        ArticleNotFoundError: If no article has this id.
    """
    store = store or get_article_store()
    article = await store.get_article_by_id(article_id)
    if article is None:
        raise ArticleNotFoundError(article_id)

    service = build_linking_service(store)
    body = article.body or ""
    new_body = await service.rewrite(body, article.title, article.id)
    return RewritePreview(
        article_id=article.id,
        slug=article.slug,
        changed=new_body != body,
        body=new_body,
    )


async def run_batch_internal_linking(
    deadline_seconds: float | None = None,
    store: ArticleStore | None = None,
) -> RunStats:
    """Run one batch sweep over every published article.

    Raises:
        Exception: Whatever the store raises when listing articles.
    """
    store = store or get_article_store()
    job = BatchLinkingJob(store, build_linking_service(store))
    logger.info(
        "Running batch internal linking",
        extra={"deadline_seconds": deadline_seconds},
    )
    return await job.run(deadline_seconds=deadline_seconds)
