import pytest

from backend.nightnurse.core.settings import Settings, get_settings

ENV_NAMES = [
    "APP_ENV",
    "DATABASE_URL",
    "BASIC_AUTH_USER",
    "BASIC_AUTH_PASS",
    "RATE_LIMIT_MAX",
    "STRICT_RATE_LIMIT_MAX",
    "RATE_LIMIT_WINDOW_SECONDS",
    "SMTP_PORT",
    "THANK_YOU_URL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults(clean_env):
    settings = Settings()
    assert settings.app_name == "Tahoe Night Nurse"
    assert settings.environment == "development"
    assert settings.database_url.startswith("sqlite:///")
    assert settings.rate_limit_max == 10
    assert settings.strict_rate_limit_max == 5
    assert settings.rate_limit_window_seconds == 60
    assert settings.thank_you_url == "/thank-you"
    assert not settings.is_production
    assert not settings.admin_auth_configured


def test_settings_read_environment(clean_env, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("BASIC_AUTH_USER", "admin")
    monkeypatch.setenv("BASIC_AUTH_PASS", "hunter2")
    monkeypatch.setenv("RATE_LIMIT_MAX", "3")
    settings = Settings()
    assert settings.is_production
    assert settings.admin_auth_configured
    assert settings.rate_limit_max == 3


def test_settings_overrides_win_over_environment(clean_env, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_MAX", "3")
    settings = Settings(rate_limit_max=7)
    assert settings.rate_limit_max == 7


def test_settings_reject_unknown_override(clean_env):
    with pytest.raises(TypeError):
        Settings(not_a_setting=True)


def test_settings_reject_non_integer(clean_env, monkeypatch):
    monkeypatch.setenv("SMTP_PORT", "abc")
    with pytest.raises(ValueError):
        Settings()


def test_get_settings_is_singleton():
    assert get_settings() is get_settings()


def test_rate_limit_storage_defaults_to_memory(clean_env, monkeypatch):
    monkeypatch.delenv("RATELIMIT_STORAGE_URI", raising=False)
    assert Settings().rate_limit_storage_uri == "memory://"
    monkeypatch.setenv("RATELIMIT_STORAGE_URI", "redis://localhost:6379/1")
    assert Settings().rate_limit_storage_uri == "redis://localhost:6379/1"
