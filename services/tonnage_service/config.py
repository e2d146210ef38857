"""
Service configuration loaded from environment variables.

A `.env` file next to the working directory is loaded first when present.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


class DatabaseConfig(BaseModel):
    """Relational store connection and pool settings"""

    host: str = Field(default="localhost")
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = Field(default="postgres", min_length=1)
    password: str = Field(default="")
    database: str = Field(default="oil_calculator", min_length=1)
    dsn: str | None = None

    pool_size: int = Field(default=10, ge=1, le=100)
    pool_timeout: float = Field(default=60, gt=0)
    pool_recycle: int = Field(default=1800, ge=-1)

    @property
    def url(self) -> str:
        """SQLAlchemy URL; an explicit DATABASE_URL wins over the DB_* parts."""
        if self.dsn:
            return self.dsn
        return f"postgresql+psycopg2://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")  # nosec B104
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    environment: str = Field(default="development")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        if v not in ["development", "staging", "production"]:
            raise ValueError("Environment must be: development, staging, or production")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


class AppConfig(BaseModel):
    database: DatabaseConfig
    server: ServerConfig

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build the configuration from the process environment"""
        return cls(
            database=DatabaseConfig(
                host=os.getenv("DB_HOST", "localhost"),
                port=int(os.getenv("DB_PORT", "5432")),
                user=os.getenv("DB_USER", "postgres"),
                password=os.getenv("DB_PASSWORD", ""),
                database=os.getenv("DB_NAME", "oil_calculator"),
                dsn=os.getenv("DATABASE_URL") or None,
                pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
                pool_timeout=float(os.getenv("DB_POOL_TIMEOUT", "60")),
                pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
            ),
            server=ServerConfig(
                host=os.getenv("HOST", "0.0.0.0"),  # nosec B104
                port=int(os.getenv("PORT", "3000")),
                log_level=os.getenv("LOG_LEVEL", "INFO"),
                environment=os.getenv("ENVIRONMENT", "development"),
            ),
        )
