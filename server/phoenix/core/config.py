"""Environment-driven configuration with Pydantic v2."""

from typing import List, Optional
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    # Server Configuration
    host: str = Field(default="127.0.0.1", env="HOST")
    port: int = Field(default=8080, env="PORT", ge=1024, le=65535)
    debug: bool = Field(default=False, env="DEBUG")
    cors_origins: List[str] = Field(default_factory=list, env="CORS_ORIGINS")

    # Database Configuration
    database_url: str = Field(default="sqlite+aiosqlite:///./data/phoenix.db", env="DATABASE_URL")
    database_echo: bool = Field(default=False, env="DATABASE_ECHO")
    database_pool_size: int = Field(default=20, env="DATABASE_POOL_SIZE", ge=5, le=100)
    database_max_overflow: int = Field(default=30, env="DATABASE_MAX_OVERFLOW", ge=10, le=100)
    database_create_tables: bool = Field(default=False, env="DATABASE_CREATE_TABLES")

    # Cache Configuration
    redis_url: Optional[str] = Field(default=None, env="REDIS_URL")
    redis_enabled: bool = Field(default=False, env="REDIS_ENABLED")
    cache_ttl: int = Field(default=900, env="CACHE_TTL", ge=1)
    export_cache_ttl: int = Field(default=3600, env="EXPORT_CACHE_TTL", ge=1)

    # Assets and theme (logo probing)
    s3_logos: str = Field(default="https://s3.tosdr.org/logos", env="S3_LOGOS")
    theme_root: str = Field(default=".", env="THEME_ROOT")
    theme_dir: str = Field(default="themes", env="THEME_DIR")
    theme: str = Field(default="crisp", env="THEME")

    # Phoenix (edit.tosdr.org) remote API, deprecated fetch paths only
    phoenix_url: str = Field(default="https://edit.tosdr.org", env="PHOENIX_URL")
    phoenix_api_endpoint: str = Field(default="/api/v1", env="PHOENIX_API_ENDPOINT")
    phoenix_discussion_url: str = Field(default="https://edit.tosdr.org/points/", env="PHOENIX_DISCUSSION_URL")
    legacy_user_agent: str = Field(default="CrispCMS ToS;DR", env="LEGACY_USER_AGENT")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_format: str = Field(default="json", env="LOG_FORMAT")
    log_file: Optional[str] = Field(default=None, env="LOG_FILE")

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure database directory exists for SQLite."""
        if v and v.startswith("sqlite"):
            if ":///" in v:
                db_path = v.split("///")[1]
                if db_path and db_path != ":memory:":
                    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("s3_logos", "phoenix_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def logo_directory(self) -> Path:
        """Directory probed for themed service logos."""
        return Path(self.theme_root) / self.theme_dir / self.theme / "img" / "logo"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "forbid",
        "env_parse_none_str": "none",
        "env_nested_delimiter": "__",
    }
