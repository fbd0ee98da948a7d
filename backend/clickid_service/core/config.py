from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Internal domain-route lookup
    API_BASE_URL: str = "http://localhost:3000"
    LOOKUP_CONNECT_TIMEOUT: float = 2.0
    LOOKUP_TIMEOUT: float = 3.0
    LOOKUP_VERIFY_TLS: bool = False  # trusted infrastructure

    # Click-tracking provider (RedTrack)
    MINT_BASE_URL: str = "https://dx8jy.ttrk.io"
    MINT_CONNECT_TIMEOUT: float = 8.0
    MINT_TIMEOUT: float = 15.0
    DEFAULT_CAMPAIGN_ID: str = "68405d20d4a5e7f4cc123742"
    DEFAULT_USER_AGENT: str = "Mozilla/5.0"

    # Click id cache + cookie
    CLICKID_TTL_SECONDS: int = 6 * 3600
    CLICKID_COOKIE_NAME: str = "rtkclickid-store"  # read by the provider's JS
    CLICKID_COOKIE_MAX_AGE: int = 30 * 86400

    # Sessions
    SESSION_BACKEND: str = "memory"  # memory | redis
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_COOKIE_NAME: str = "clickid_session"
    SESSION_MAX_AGE: int = 86400

    # CORS
    ALLOWED_ORIGIN: str = "*"

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL.upper()


settings = Settings()
