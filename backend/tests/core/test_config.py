"""Settings: env-driven configuration and database URL normalization."""

from tradehub.config import Settings


def test_postgres_url_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_other_urls_untouched():
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
    assert settings.database_url == "sqlite+aiosqlite:///:memory:"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("BACKGROUND_POST_EFFECTS", "true")
    monkeypatch.setenv("PUSH_TIMEOUT_SECONDS", "2.5")
    settings = Settings()
    assert settings.background_post_effects is True
    assert settings.push_timeout_seconds == 2.5
