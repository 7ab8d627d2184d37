"""Admin command for the internal linking engine.

Run via:
    python -m internal_linker.cli batch [--deadline SECONDS] [--dry-run]
    python -m internal_linker.cli preview ARTICLE_ID

Results are printed as JSON on stdout; logs go through setup_logging().
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from datetime import datetime

from internal_linker.core.database import db_manager
from internal_linker.core.exceptions import ArticleNotFoundError
from internal_linker.core.logging import get_logger, setup_logging
from internal_linker.models.article import Article
from internal_linker.repositories.article import ArticleStore
from internal_linker.services.internal_linking import (
    get_article_store,
    rewrite_article_by_id,
    run_batch_internal_linking,
)

logger = get_logger("internal_linker.cli")


class DryRunArticleStore:
    """Wraps a store and drops every write."""

    def __init__(self, store: ArticleStore) -> None:
        self._store = store

    async def list_published_articles(self) -> list[Article]:
        return await self._store.list_published_articles()

    async def get_article_by_id(self, article_id: int) -> Article | None:
        return await self._store.get_article_by_id(article_id)

    async def search_published_by_title(
        self,
        keywords: Sequence[str],
        exclude_id: int | None = None,
        limit: int = 10,
    ) -> list[Article]:
        return await self._store.search_published_by_title(
            keywords, exclude_id=exclude_id, limit=limit
        )

    async def update_article_body(
        self, article_id: int, body: str, updated_at: datetime
    ) -> Article:
        article = await self._store.get_article_by_id(article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)
        logger.info(
            "Dry run: not persisting article body",
            extra={"article_id": article_id, "body_length": len(body)},
        )
        return article


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="internal_linker",
        description="Insert internal links between published blog articles",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    batch = subparsers.add_parser("batch", help="Sweep all published articles")
    batch.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Stop starting new articles after this many seconds",
    )
    batch.add_argument(
        "--dry-run",
        action="store_true",
        help="Rewrite and count, but do not persist any body",
    )

    preview = subparsers.add_parser("preview", help="Show the rewrite of one article")
    preview.add_argument("article_id", type=int, help="Article id")

    return parser


async def async_main(args: argparse.Namespace) -> int:
    store: ArticleStore = get_article_store()
    try:
        if args.command == "batch":
            if args.dry_run:
                store = DryRunArticleStore(store)
            stats = await run_batch_internal_linking(
                deadline_seconds=args.deadline, store=store
            )
            print(json.dumps(stats.model_dump(), indent=2))
            return 0 if stats.errors == 0 else 1

        try:
            preview = await rewrite_article_by_id(args.article_id, store=store)
        except ArticleNotFoundError as e:
            logger.error(str(e), extra={"article_id": e.article_id})
            return 2
        print(json.dumps(preview.model_dump(), indent=2))
        return 0
    finally:
        await db_manager.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the admin command."""
    args = build_parser().parse_args(argv)
    setup_logging()
    return asyncio.run(async_main(args))


if __name__ == "__main__":
    sys.exit(main())
