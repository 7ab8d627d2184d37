"""Batch internal linking sweep over every published article.

BatchLinkingJob visits each published article in turn, rewrites its body
through ArticleLinkingService and persists the bodies that changed.

Sweep Strategy:
1. Fetch all published articles (a failure here aborts the run)
2. For each article, sequentially:
   - blank body -> skipped
   - rewrite unchanged -> skipped
   - persist new body + updated_at -> updated, or errors on failure
3. Return RunStats (total = updated + skipped + errors)

Articles are processed one at a time: the write for article N finishes
before article N+1 is rewritten. The store has no version column to
detect concurrent edits, so there is no fan-out.

ERROR LOGGING REQUIREMENTS:
- Log all exceptions with full stack trace and context
- Include entity IDs (article_id) in all service logs
- Log state transitions at INFO level
- Add timing logs for operations >1 second
"""

import time
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from internal_linker.core.exceptions import ArticlePersistenceError, LinkingJobStateError
from internal_linker.core.logging import get_logger, linking_logger
from internal_linker.repositories.article import ArticleStore
from internal_linker.schemas.linking import RunStats
from internal_linker.services.article_linking import ArticleLinkingService

logger = get_logger(__name__)


class JobState(str, Enum):
    """Lifecycle of a batch linking job."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BatchLinkingJob:
    """One on-demand sweep of the linking engine over all published articles.

    A job instance runs once. Create a new instance for the next sweep.

    Example usage:
        job = BatchLinkingJob(store, ArticleLinkingService(store))
        stats = await job.run()
    """

    def __init__(
        self,
        store: ArticleStore,
        linking_service: ArticleLinkingService | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.linking_service = linking_service or ArticleLinkingService(store)
        self.state = JobState.NOT_STARTED
        self.failures: list[ArticlePersistenceError] = []
        self._clock = clock
        self._now = now

    def _transition(self, new_state: JobState) -> None:
        logger.info(
            "Batch linking job state change",
            extra={"from_state": self.state.value, "to_state": new_state.value},
        )
        self.state = new_state

    async def run(self, deadline_seconds: float | None = None) -> RunStats:
        """Run the sweep.

        Args:
            deadline_seconds: Optional time budget. Once exceeded, no further
                articles are started and partial stats are returned with
                cancelled=True. Articles already persisted stay persisted.

        Returns:
            RunStats for the articles visited.

        Raises:
            LinkingJobStateError: If this job has already run.
            Exception: Whatever the store raises when listing articles.
        """
        if self.state != JobState.NOT_STARTED:
            raise LinkingJobStateError(self.state.value)

        self._transition(JobState.RUNNING)
        start_time = self._clock()

        try:
            articles = await self.store.list_published_articles()
        except Exception as e:
            logger.error(
                "Failed to list published articles, aborting batch",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            self._transition(JobState.COMPLETED)
            raise

        linking_logger.batch_start(len(articles), deadline_seconds)

        updated = skipped = errors = 0
        cancelled = False

        for index, article in enumerate(articles):
            if (
                deadline_seconds is not None
                and self._clock() - start_time >= deadline_seconds
            ):
                linking_logger.batch_deadline_reached(
                    processed=index,
                    remaining=len(articles) - index,
                    deadline_seconds=deadline_seconds,
                )
                cancelled = True
                break

            body = article.body or ""
            if not body.strip():
                skipped += 1
                linking_logger.article_skipped(article.id, "No content")
                continue

            result = await self.linking_service.rewrite_with_report(
                body, article.title, article.id
            )
            if result.body == body:
                skipped += 1
                linking_logger.article_skipped(article.id, "No changes")
                continue

            try:
                await self.store.update_article_body(
                    article.id, result.body, self._now()
                )
            except Exception as e:
                errors += 1
                self.failures.append(ArticlePersistenceError(article.id, e))
                linking_logger.article_error(article.id, e)
                continue

            updated += 1
            linking_logger.article_updated(article.id, result.links_added)

        duration_ms = (self._clock() - start_time) * 1000
        stats = RunStats(
            total=updated + skipped + errors,
            updated=updated,
            skipped=skipped,
            errors=errors,
            cancelled=cancelled,
            duration_ms=max(duration_ms, 0.0),
        )

        self._transition(JobState.COMPLETED)
        linking_logger.batch_complete(
            total=stats.total,
            updated=stats.updated,
            skipped=stats.skipped,
            errors=stats.errors,
            duration_ms=stats.duration_ms,
            cancelled=stats.cancelled,
        )
        return stats
