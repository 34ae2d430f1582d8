from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Lifeboard"
    DEBUG: bool = False
    DATABASE_URL: str = "sqlite+aiosqlite:///./lifeboard.db"

    # Session
    SESSION_SECRET: str = "change-me-in-production-use-openssl-rand-hex-32"
    SESSION_COOKIE_NAME: str = "session"
    SESSION_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_SECURE: bool = False

    # Currency
    BASE_CURRENCY: str = "INR"
    FX_API_URL: str = "https://api.exchangerate-api.com/v4/latest"
    FX_TIMEOUT_SECONDS: float = 5.0
    FX_CACHE_TTL_SECONDS: int = 3600
    # Price of 1 unit of each currency in FX_FALLBACK_BASE; rebased when BASE_CURRENCY differs
    FX_FALLBACK_BASE: str = "INR"
    FX_FALLBACK_RATES: dict[str, float] = {"INR": 1.0, "USD": 83.0, "EUR": 90.0, "GBP": 105.0}

    DASHBOARD_RENEWAL_LIMIT: int = 5
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    SCHEDULER_ENABLED: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("DATABASE_URL")
    @classmethod
    def async_driver_url(cls, value: str) -> str:
        # Railway/Render provide postgres:// URLs; asyncpg needs postgresql+asyncpg://
        for prefix in ("postgresql://", "postgres://"):
            if value.startswith(prefix):
                return "postgresql+asyncpg://" + value[len(prefix):]
        return value


settings = Settings()
