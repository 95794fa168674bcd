"""Load settings from environment (.env supported). Defaults suit local development."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")


def _str(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _int(key: str, default: int = 0) -> int:
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


class Settings:
    # MongoDB
    MONGODB_URI: str = _str("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DB: str = _str("MONGODB_DB", "codetrac")

    # Identity provider (Supabase-style auth API). The anon key is sent as `apikey`
    # on token checks; the service role key is required for signup.
    AUTH_URL: str = _str("AUTH_URL", "").rstrip("/")
    AUTH_ANON_KEY: str = _str("AUTH_ANON_KEY", "")
    AUTH_SERVICE_ROLE_KEY: str = _str("AUTH_SERVICE_ROLE_KEY", "")
    AUTH_TIMEOUT: int = _int("AUTH_TIMEOUT", 10)

    # Judges
    CODEFORCES_API: str = _str("CODEFORCES_API", "https://codeforces.com/api").rstrip("/")
    JUDGE_TIMEOUT: int = _int("JUDGE_TIMEOUT", 15)

    # HTTP
    API_PREFIX: str = _str("API_PREFIX", "").rstrip("/")
    PORT: int = _int("PORT", 8000)

    # Logging
    LOG_LEVEL: str = _str("LOG_LEVEL", "INFO")


settings = Settings()
