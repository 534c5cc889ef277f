from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    store_backend: Literal["sqlite", "redis", "memory"] = Field(
        default="sqlite",
        description="Backend for the shared key-value store",
    )
    db_path: str = Field(default="./data/ignition.db", description="Path to SQLite database file")

    # Redis
    redis_host: str = Field(default="localhost")
    redis_port: int = Field(default=6379)
    redis_db: int = Field(default=0)
    redis_user: str = Field(default="default")
    redis_pass: str = Field(default="")
    redis_prefix: str = Field(default="ignition", description="Namespace prepended to every Redis key")

    # App
    app_name: str = Field(default="Ignition")
    debug: bool = Field(default=False)
    log_dir: str = Field(default="logs")

    @computed_field
    @property
    def redis_url(self) -> str:
        return f"redis://{self.redis_user}:{self.redis_pass}@{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @computed_field
    @property
    def db_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.db_path}"

    @computed_field
    @property
    def db_directory(self) -> Path:
        return Path(self.db_path).parent


@lru_cache
def get_settings() -> Settings:
    return Settings()
