"""Tests for the admin command.

Tests cover:
- Argument parsing for batch and preview
- DryRunArticleStore drops writes
- async_main output and exit codes
"""

import json
from datetime import UTC, datetime

import pytest

from internal_linker import cli
from internal_linker.cli import DryRunArticleStore, async_main, build_parser
from internal_linker.core.exceptions import ArticleNotFoundError

NOW = datetime(2025, 3, 1, tzinfo=UTC)


@pytest.fixture
def linked_store(memory_store, make_article):
    memory_store.add(
        make_article("Dragon Quest Review", body="<p>a dragon story</p>", article_id=1)
    )
    memory_store.add(
        make_article("Dragon Lore", body="<p>nothing related</p>", article_id=2)
    )
    return memory_store


@pytest.fixture
def cli_store(monkeypatch, linked_store):
    monkeypatch.setattr(cli, "get_article_store", lambda: linked_store)
    return linked_store


class TestParser:
    def test_batch_defaults(self) -> None:
        args = build_parser().parse_args(["batch"])

        assert args.command == "batch"
        assert args.deadline is None
        assert args.dry_run is False

    def test_batch_options(self) -> None:
        args = build_parser().parse_args(["batch", "--deadline", "30", "--dry-run"])

        assert args.deadline == 30.0
        assert args.dry_run is True

    def test_preview(self) -> None:
        args = build_parser().parse_args(["preview", "42"])

        assert args.command == "preview"
        assert args.article_id == 42

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestDryRunArticleStore:
    async def test_reads_pass_through(self, linked_store) -> None:
        store = DryRunArticleStore(linked_store)

        assert [a.id for a in await store.list_published_articles()] == [1, 2]
        assert (await store.get_article_by_id(2)).title == "Dragon Lore"
        assert [a.id for a in await store.search_published_by_title(["lore"])] == [2]

    async def test_update_does_not_write(self, linked_store) -> None:
        store = DryRunArticleStore(linked_store)

        article = await store.update_article_body(1, "<p>changed</p>", NOW)

        assert article.body == "<p>a dragon story</p>"
        assert linked_store.update_calls == []

    async def test_update_missing_article(self, linked_store) -> None:
        with pytest.raises(ArticleNotFoundError):
            await DryRunArticleStore(linked_store).update_article_body(99, "", NOW)


class TestAsyncMain:
    async def test_batch(self, cli_store, capsys) -> None:
        code = await async_main(build_parser().parse_args(["batch"]))

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["total"] == 2
        assert output["updated"] == 1
        assert "/blog/dragon-lore" in cli_store.articles[1].body

    async def test_batch_dry_run(self, cli_store, capsys) -> None:
        code = await async_main(build_parser().parse_args(["batch", "--dry-run"]))

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["updated"] == 1
        assert cli_store.articles[1].body == "<p>a dragon story</p>"

    async def test_batch_with_errors(self, cli_store, capsys) -> None:
        cli_store.fail_update_ids = {1}

        code = await async_main(build_parser().parse_args(["batch"]))

        assert code == 1
        assert json.loads(capsys.readouterr().out)["errors"] == 1

    async def test_preview(self, cli_store, capsys) -> None:
        code = await async_main(build_parser().parse_args(["preview", "1"]))

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["article_id"] == 1
        assert output["changed"] is True
        assert cli_store.update_calls == []

    async def test_preview_missing(self, cli_store, capsys) -> None:
        code = await async_main(build_parser().parse_args(["preview", "99"]))

        assert code == 2
        assert capsys.readouterr().out == ""
