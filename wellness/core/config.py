from pydantic_settings import BaseSettings
from typing import Optional, List


def _parse_allowed_origins(v: str) -> List[str]:
    """Parse comma-separated origins string; strip whitespace; keep non-empty."""
    if not v or not v.strip():
        return []
    return [o.strip() for o in v.split(",") if o.strip()]


_DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:3001",
]


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "postgresql://postgres:postgres@db:5432/wellness"

    # Runtime
    ENVIRONMENT: str = "development"  # development, test or production
    LOG_LEVEL: str = "INFO"

    # CORS: comma-separated extra origins for production (e.g. https://app.example.com)
    ALLOWED_ORIGINS_EXTRA: str = ""

    def get_allowed_origins(self) -> List[str]:
        """Return CORS allowed origins: default localhost + ALLOWED_ORIGINS_EXTRA."""
        return _DEFAULT_CORS_ORIGINS + _parse_allowed_origins(self.ALLOWED_ORIGINS_EXTRA)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    # Auth
    SECRET_KEY: str = "supersecret_jwt_key_change_in_production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Habit tracking policy
    HABIT_EDIT_WINDOW_DAYS: int = 3  # How far back a client may record completions
    HABIT_CALENDAR_LOOKAHEAD_DAYS: int = 7  # How far ahead the calendar may be navigated

    # Gmail (Google OAuth)
    GOOGLE_GMAIL_CLIENT_ID: Optional[str] = None
    GOOGLE_GMAIL_CLIENT_SECRET: Optional[str] = None
    GOOGLE_GMAIL_REDIRECT_URI: str = "http://localhost:8000/integrations/gmail/callback"

    # Fitbit
    FITBIT_CLIENT_ID: Optional[str] = None
    FITBIT_CLIENT_SECRET: Optional[str] = None
    FITBIT_REDIRECT_URI: str = "http://localhost:8000/integrations/fitbit/callback"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"  # Frontend URL for OAuth redirects

    # Admin
    SUDO_ADMIN_EMAIL: str = "admin@wellness.local"
    SUDO_ADMIN_PASSWORD: str = "changeme"

    # Encryption
    ENCRYPTION_KEY: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
