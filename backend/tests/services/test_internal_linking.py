"""Tests for the host-facing entry points.

Tests cover:
- rewrite_with_internal_links: rewrite without persistence
- rewrite_article_by_id: preview, not-found error
- run_batch_internal_linking: sweep through an explicit store
- build_linking_service: settings flow into the components
"""

import pytest

from internal_linker.core.exceptions import ArticleNotFoundError
from internal_linker.services.internal_linking import (
    build_linking_service,
    rewrite_article_by_id,
    rewrite_with_internal_links,
    run_batch_internal_linking,
)


@pytest.fixture
def store(memory_store, make_article):
    memory_store.add(
        make_article(
            "Castle Siege Basics",
            body="<p>Every castle falls to a patient siege.</p>",
            article_id=1,
        )
    )
    memory_store.add(
        make_article(
            "Siege Engines Explained",
            body="<p>Trebuchets broke the castle walls.</p>",
            article_id=2,
        )
    )
    return memory_store


class TestRewriteWithInternalLinks:
    async def test_returns_linked_body(self, store) -> None:
        result = await rewrite_with_internal_links(
            "<p>A siege is coming.</p>", "Siege Warfare", exclude_id=None, store=store
        )

        assert 'href="/blog/siege-engines-explained"' in result
        assert store.update_calls == []

    async def test_unchanged_when_nothing_matches(self, store) -> None:
        body = "<p>Quiet meadow.</p>"
        assert await rewrite_with_internal_links(body, "", store=store) == body


class TestRewriteArticleById:
    async def test_preview(self, store) -> None:
        preview = await rewrite_article_by_id(1, store=store)

        assert preview.article_id == 1
        assert preview.slug == "castle-siege-basics"
        assert preview.changed is True
        assert 'href="/blog/siege-engines-explained"' in preview.body
        assert store.articles[1].body == "<p>Every castle falls to a patient siege.</p>"

    async def test_preview_unchanged(self, store, make_article) -> None:
        store.add(make_article("Meadow", body="<p>grass</p>", article_id=3))

        preview = await rewrite_article_by_id(3, store=store)

        assert preview.changed is False
        assert preview.body == "<p>grass</p>"

    async def test_not_found(self, store) -> None:
        with pytest.raises(ArticleNotFoundError) as exc_info:
            await rewrite_article_by_id(99, store=store)

        assert exc_info.value.article_id == 99


class TestRunBatchInternalLinking:
    async def test_sweep(self, store) -> None:
        stats = await run_batch_internal_linking(store=store)

        assert stats.total == 2
        assert stats.updated == 2
        assert stats.errors == 0
        assert 'href="/blog/castle-siege-basics"' in store.articles[2].body

    async def test_listing_failure_propagates(self, store) -> None:
        store.fail_list = True

        with pytest.raises(RuntimeError):
            await run_batch_internal_linking(store=store)


class TestBuildLinkingService:
    def test_settings_applied(self, store, test_settings) -> None:
        settings = test_settings.model_copy(
            update={
                "linking_max_links": 2,
                "linking_candidate_limit": 3,
                "linking_url_prefix": "/posts/",
                "linking_css_class": "",
                "linking_min_keyword_length": 5,
            }
        )

        service = build_linking_service(store, settings)

        assert service.inserter.max_links == 2
        assert service.auditor.max_links == 2
        assert service.candidate_limit == 3
        assert service.inserter.url_prefix == "/posts/"
        assert service.inserter.css_class is None
        assert service.extractor.min_length == 5
