"""Single-article internal link rewriting.

ArticleLinkingService ties the pipeline together for one article:
KeywordExtractor -> CandidateFinder -> LinkInserter -> LinkAuditor.

The rewrite never corrupts content: any unexpected failure, or a result
that fails the audit, yields the original body unchanged.

ERROR LOGGING REQUIREMENTS:
- Log all exceptions with full stack trace and context
- Include entity IDs (article_id) in all service logs
- Add timing logs for operations >1 second
"""

import time
from dataclasses import dataclass, field

from internal_linker.core.logging import get_logger, linking_logger
from internal_linker.repositories.article import ArticleStore
from internal_linker.services.candidate_finder import (
    DEFAULT_CANDIDATE_LIMIT,
    CandidateFinder,
)
from internal_linker.services.keyword_extraction import (
    DEFAULT_CONTENT_KEYWORD_LIMIT,
    KeywordExtractor,
    get_keyword_extractor,
)
from internal_linker.services.link_audit import LinkAuditor
from internal_linker.services.link_insertion import LinkCandidate, LinkInserter

logger = get_logger(__name__)

# Threshold for logging slow operations
SLOW_OPERATION_THRESHOLD_MS = 1000  # 1 second


@dataclass
class RewriteResult:
    """Outcome of rewriting one body."""

    body: str
    links: list[LinkCandidate] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    @property
    def links_added(self) -> int:
        return len(self.links)


class ArticleLinkingService:
    """Rewrites one article body with links to related articles.

    Example usage:
        service = ArticleLinkingService(store)
        new_body = await service.rewrite(article.body, article.title, article.id)
    """

    def __init__(
        self,
        store: ArticleStore,
        extractor: KeywordExtractor | None = None,
        finder: CandidateFinder | None = None,
        inserter: LinkInserter | None = None,
        auditor: LinkAuditor | None = None,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
        content_keyword_limit: int = DEFAULT_CONTENT_KEYWORD_LIMIT,
    ) -> None:
        self.extractor = extractor or get_keyword_extractor()
        self.finder = finder or CandidateFinder(store)
        self.inserter = inserter or LinkInserter(extractor=self.extractor)
        self.auditor = auditor or LinkAuditor(max_links=self.inserter.max_links)
        self.candidate_limit = candidate_limit
        self.content_keyword_limit = content_keyword_limit

    async def rewrite(self, body: str, title: str, exclude_id: int | None) -> str:
        """Return body with internal links inserted (or body unchanged)."""
        result = await self.rewrite_with_report(body, title, exclude_id)
        return result.body

    async def rewrite_with_report(
        self, body: str, title: str, exclude_id: int | None
    ) -> RewriteResult:
        """Rewrite body and report the links that were placed.

        Args:
            body: HTML body of the article.
            title: Title of the article (biases candidate retrieval).
            exclude_id: Id of the article itself, or None for unsaved content.

        Returns:
            RewriteResult. On any failure the original body with no links.
        """
        start_time = time.monotonic()
        try:
            keywords = self.extractor.combined_keywords(
                title, body, self.content_keyword_limit
            )
            candidates = await self.finder.find_candidates(
                exclude_id, keywords, self.candidate_limit
            )
            if not candidates:
                return RewriteResult(body=body, keywords=keywords)

            new_body, links = self.inserter.insert_links_with_report(
                body, candidates, exclude_id
            )
            if not links:
                return RewriteResult(body=body, keywords=keywords)

            audit = self.auditor.audit(body, new_body, links, exclude_id)
            if not audit.passed:
                linking_logger.audit_failed(exclude_id, audit.failing_rules)
                return RewriteResult(body=body, keywords=keywords)

            logger.debug(
                "Article rewrite completed",
                extra={
                    "article_id": exclude_id,
                    "candidate_count": len(candidates),
                    "links_added": len(links),
                },
            )
            return RewriteResult(body=new_body, links=links, keywords=keywords)

        except Exception as e:
            linking_logger.rewrite_failed(exclude_id, e)
            return RewriteResult(body=body)

        finally:
            duration_ms = (time.monotonic() - start_time) * 1000
            if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
                linking_logger.slow_rewrite(exclude_id, duration_ms)
