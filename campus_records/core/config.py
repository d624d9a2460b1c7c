from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")
    sql_echo: bool = Field(False, alias="SQL_ECHO")
    db_pool_pre_ping: bool = Field(True, alias="DB_POOL_PRE_PING")
    db_pool_recycle_seconds: int = Field(300, alias="DB_POOL_RECYCLE_SECONDS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    # A batch that has not committed within this window is aborted as a storage timeout.
    progression_timeout_seconds: float = Field(30.0, alias="PROGRESSION_TIMEOUT_SECONDS")
    max_batch_size: int = Field(1000, alias="MAX_BATCH_SIZE")
    default_academic_year: str = Field("2025-26", alias="DEFAULT_ACADEMIC_YEAR")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
