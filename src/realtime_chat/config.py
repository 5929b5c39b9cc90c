from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300

    REDIS_URL: str = "redis://localhost:6379/0"

    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_COOKIE_NAME: str = "jwt"

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    HOST: str = "0.0.0.0"
    PORT: int = 5001
    LOG_LEVEL: str = "info"

    # Application heartbeat; uvicorn's ping/timeout bounds stale presence entries.
    WS_HEARTBEAT_SECONDS: int = 30
    WS_PING_INTERVAL_SECONDS: float = 20.0
    WS_PING_TIMEOUT_SECONDS: float = 20.0

    MESSAGE_TEXT_MAX_LENGTH: int = 1000
    DEFAULT_SENDER_NAME: str = "A user"
    DEFAULT_AVATAR_URL: str = "/avatar.png"

    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 900
    RATE_LIMIT_PREFIX: str = "ratelimit"

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.POSTGRES_DB}"
        )

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
