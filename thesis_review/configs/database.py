"""
Database configuration settings.

Manages PostgreSQL connection parameters for the primary record store
(document rows, agent audit rows, profiles and credit transactions).

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from thesis_review.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")
    db: str = Field(default="thesisreview", description="PostgreSQL database name")

    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    sslmode: str = Field(default="prefer", description="SSL mode for managed Postgres")
    url: str | None = Field(
        default=None,
        description="Full connection string (e.g. a managed Postgres DSN); overrides the parts above",
    )

    @property
    def async_database_url(self) -> str:
        """
        Async PostgreSQL connection URL for asyncpg.

        A plain ``postgres://`` or ``postgresql://`` DSN is rewritten to the
        asyncpg driver.

        Returns:
            str: SQLAlchemy async-compatible database URL (asyncpg uses the 'ssl' param)
        """
        if self.url:
            for scheme in ("postgresql+asyncpg://", "postgresql://", "postgres://"):
                if self.url.startswith(scheme):
                    return "postgresql+asyncpg://" + self.url[len(scheme) :]
            return self.url
        ssl_param = "ssl=require" if self.sslmode == "require" else ""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}?{ssl_param}"
        )
