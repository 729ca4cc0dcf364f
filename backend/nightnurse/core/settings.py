import os

from dotenv import load_dotenv


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


class Settings:
    def __init__(self, **overrides):
        self.app_name = "Tahoe Night Nurse"
        self.api_version = "1.0.0"
        self.environment = os.getenv("APP_ENV", "development")
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./data/nightnurse.db")

        # Admin dashboard credentials (HTTP Basic)
        self.basic_auth_user = os.getenv("BASIC_AUTH_USER", "")
        self.basic_auth_pass = os.getenv("BASIC_AUTH_PASS", "")

        # Outbound email
        self.admin_email = os.getenv("ADMIN_EMAIL", "")
        self.from_email = os.getenv("FROM_EMAIL", "noreply@tahoenightnurse.com")
        self.bcc_archive_email = os.getenv("BCC_ARCHIVE_EMAIL", "")
        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = _env_int("SMTP_PORT", 587)
        self.smtp_user = os.getenv("SMTP_USER", "")
        self.smtp_pass = os.getenv("SMTP_PASS", "")
        self.smtp_timeout_seconds = _env_int("SMTP_TIMEOUT_SECONDS", 10)

        # Submission throttling
        self.rate_limit_window_seconds = _env_int("RATE_LIMIT_WINDOW_SECONDS", 60)
        self.rate_limit_max = _env_int("RATE_LIMIT_MAX", 10)
        self.strict_rate_limit_max = _env_int("STRICT_RATE_LIMIT_MAX", 5)
        self.rate_limit_storage_uri = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

        self.thank_you_url = os.getenv("THANK_YOU_URL", "/thank-you")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_file = os.getenv("LOG_FILE") or None

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise TypeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def admin_auth_configured(self) -> bool:
        return bool(self.basic_auth_user and self.basic_auth_pass)


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance, loading a local .env file first."""
    global _settings_instance
    if _settings_instance is None:
        load_dotenv()
        _settings_instance = Settings()
    return _settings_instance
