"""Candidate retrieval for internal links.

Looks up published articles whose titles contain any of the keywords
extracted from the article being rewritten. Title-only substring
matching keeps the query cheap (no full-text index) and favours
articles that are named after the topic.
"""

import time
from collections.abc import Sequence

from internal_linker.core.logging import get_logger, linking_logger
from internal_linker.models.article import Article
from internal_linker.repositories.article import ArticleStore

logger = get_logger(__name__)

# Maximum candidate articles fetched per rewrite
DEFAULT_CANDIDATE_LIMIT = 10


class CandidateFinder:
    """Finds published articles that are eligible link targets."""

    def __init__(self, store: ArticleStore) -> None:
        self.store = store

    async def find_candidates(
        self,
        exclude_id: int | None,
        keywords: Sequence[str],
        limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> list[Article]:
        """Return published articles whose title contains any keyword.

        Args:
            exclude_id: Id of the article being rewritten (never returned).
            keywords: Keywords to match against titles.
            limit: Maximum number of candidates.

        Returns:
            Candidates ordered newest published first. Empty when there
            are no keywords or the store query fails.
        """
        if not keywords:
            return []

        start_time = time.monotonic()
        try:
            candidates = await self.store.search_published_by_title(
                keywords, exclude_id=exclude_id, limit=limit
            )
        except Exception as e:
            linking_logger.candidate_lookup_failed(exclude_id, len(keywords), e)
            return []

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            "Candidate lookup completed",
            extra={
                "exclude_id": exclude_id,
                "keyword_count": len(keywords),
                "candidate_count": len(candidates),
                "duration_ms": round(duration_ms, 2),
            },
        )
        return candidates
