from __future__ import annotations

from typing import Literal

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
    DB_ECHO: bool = False

    # Empty disables cross-instance fan-out; rooms are then served in-process.
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_PUBSUB_CHANNEL: str = "chat.rooms"

    JWT_SECRET: str = ""
    JWT_VERIFY_MODE: Literal["hs256", "jwks"] = "hs256"
    JWT_ALGORITHM: str = "HS256"
    JWKS_URL: str | None = None

    CORS_ORIGINS: list[str] = ["*"]

    WS_HEARTBEAT_SECONDS: int = 30

    # 0 disables the limit.
    MESSAGE_MAX_LENGTH: int = 4000

    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

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
