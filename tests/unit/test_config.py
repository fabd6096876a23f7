from __future__ import annotations

import pytest
from pydantic import ValidationError
from src.core.config import Settings


class TestCorsOrigins:
    def test_comma_separated_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

        settings = Settings()

        assert settings.cors_origins == ("https://a.example", "https://b.example")

    def test_single_origin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", "https://app.example")

        assert Settings().cors_origins == ("https://app.example",)

    def test_json_array_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", '["https://a.example", "https://b.example"]')

        assert Settings().cors_origins == ("https://a.example", "https://b.example")

    def test_default_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CORS_ORIGINS", raising=False)

        assert Settings(_env_file=None).cors_origins == ("http://localhost:3000",)


class TestDatabaseUrl:
    def test_blank_database_url_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(DATABASE_URL="   ")

    @pytest.mark.parametrize(
        "url",
        ["postgres://u:p@db/app", "postgresql://u:p@db/app"],
    )
    def test_async_driver_is_selected(self, url: str) -> None:
        assert Settings(DATABASE_URL=url).async_database_url == "postgresql+asyncpg://u:p@db/app"
