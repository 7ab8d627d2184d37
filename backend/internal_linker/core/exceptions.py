"""Exceptions raised by the internal linking engine."""


class LinkingError(Exception):
    """Base exception for internal linking errors."""

    def __init__(
        self,
        message: str,
        article_id: int | None = None,
    ) -> None:
        super().__init__(message)
        self.article_id = article_id


class ArticleNotFoundError(LinkingError):
    """Raised when an article id does not exist in the store."""

    def __init__(self, article_id: int) -> None:
        super().__init__(f"Article {article_id} not found", article_id=article_id)


class ArticlePersistenceError(LinkingError):
    """Raised when the store fails to persist an updated article body."""

    def __init__(self, article_id: int, cause: Exception) -> None:
        super().__init__(
            f"Failed to persist body for article {article_id}: {cause}",
            article_id=article_id,
        )
        self.cause = cause


class LinkingJobStateError(LinkingError):
    """Raised when a batch job is run outside its NOT_STARTED state."""

    def __init__(self, state: str) -> None:
        super().__init__(f"Batch linking job cannot run from state '{state}'")
        self.state = state
