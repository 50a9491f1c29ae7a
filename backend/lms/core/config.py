from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "LMS Backend"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/lms.db"

    # Public site that hosts the certificate verification page
    APP_BASE_URL: str = "http://localhost:3000"

    # Currency for coupon amounts and purchases when none is given
    DEFAULT_CURRENCY: str = "USD"

    # How many times a lost optimistic write is retried before answering 409
    CONFLICT_RETRY_ATTEMPTS: int = 3

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


settings = Settings()
