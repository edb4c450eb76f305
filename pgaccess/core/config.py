"""
Database settings read from the environment (and an optional .env file).

DB_HOST, DB_USER, DB_PASSWORD, DB_NAME, DB_PORT and DB_SSL describe the target
PostgreSQL server; the DB_POOL_* / DB_*_TIMEOUT values tune the pool.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "postgres"

    # Encrypt the connection but accept any server certificate (no chain or
    # hostname verification). Only for trusted/internal networks.
    DB_SSL: bool = False

    DB_POOL_MAX_SIZE: int = Field(default=10, ge=1)
    DB_POOL_TIMEOUT: float = Field(default=30.0, gt=0)
    DB_POOL_MAX_AGE_SEC: float = Field(default=600.0, gt=0)
    DB_CONNECT_TIMEOUT: int = Field(default=10, ge=0)
    DB_STATEMENT_TIMEOUT: int | None = None
    DB_APPLICATION_NAME: str = "pgaccess"

    @field_validator("DB_SSL", mode="before")
    @classmethod
    def _parse_ssl_flag(cls, v: Any) -> Any:
        """Only the exact string "true" enables TLS; any other string disables it."""
        if isinstance(v, str):
            return v == "true"
        return v

    @property
    def sslmode(self) -> str:
        """libpq sslmode: "require" encrypts without verifying the certificate."""
        return "require" if self.DB_SSL else "disable"


settings = Settings()
