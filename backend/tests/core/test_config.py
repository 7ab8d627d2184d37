"""Tests for engine settings.

Tests cover:
- Linking defaults
- Environment variable overrides
- database_url is required and validated
"""

import pytest
from pydantic import ValidationError

from internal_linker.core.config import Settings, get_settings


class TestDefaults:
    def test_linking_defaults(self, test_settings: Settings) -> None:
        assert test_settings.linking_max_links == 5
        assert test_settings.linking_candidate_limit == 10
        assert test_settings.linking_content_keyword_limit == 20
        assert test_settings.linking_min_keyword_length == 4
        assert test_settings.linking_url_prefix == "/blog/"
        assert test_settings.linking_css_class == "internal-link"

    def test_database_defaults(self, test_settings: Settings) -> None:
        assert test_settings.db_pool_size == 5
        assert test_settings.db_slow_query_threshold_ms == 100

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestEnvironment:
    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LINKING_MAX_LINKS", "3")
        monkeypatch.setenv("LINKING_URL_PREFIX", "/posts/")

        settings = Settings(_env_file=None)

        assert settings.linking_max_links == 3
        assert settings.linking_url_prefix == "/posts/"

    def test_database_url_required(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_database_url_must_be_postgres(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DATABASE_URL", "mysql://u:p@localhost/db")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
