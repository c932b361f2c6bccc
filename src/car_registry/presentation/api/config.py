"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List, Optional, Union
from urllib.parse import quote

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "car_registry"
    # Full SQLAlchemy URL; takes precedence over the db_* parts when set
    database_url: Optional[str] = None

    # Database session, applied on every connection checkout
    db_sql_mode: str = "TRADITIONAL"
    db_time_zone: str = "-8:00"

    # Database Pool
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_pre_ping: bool = True
    db_echo: bool = False

    # Application
    service_name: str = "car-registry"
    debug: bool = False
    api_prefix: str = ""

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    log_max_file_size: int = 10 * 1024 * 1024
    log_backup_count: int = 5
    log_enable_console: bool = True
    log_enable_file: bool = False
    log_request_body: bool = False

    # CORS
    allowed_origins: Union[str, List[str]] = "*"
    allowed_methods: Union[str, List[str]] = "GET,POST,PUT,DELETE,OPTIONS"
    allowed_headers: Union[str, List[str]] = "*"
    allow_credentials: bool = Field(default=True)

    @model_validator(mode='after')
    def convert_cors_lists(self):
        """Convert comma-separated strings to lists."""
        if isinstance(self.allowed_origins, str):
            self.allowed_origins = [item.strip() for item in self.allowed_origins.split(",") if item.strip()]
        if isinstance(self.allowed_methods, str):
            self.allowed_methods = [item.strip() for item in self.allowed_methods.split(",") if item.strip()]
        if isinstance(self.allowed_headers, str):
            self.allowed_headers = [item.strip() for item in self.allowed_headers.split(",") if item.strip()]
        return self

    @property
    def sqlalchemy_database_url(self) -> str:
        """Effective database URL, built from the db_* parts unless database_url is set."""
        if self.database_url:
            return self.database_url
        credentials = quote(self.db_user, safe='')
        if self.db_password:
            credentials = f"{credentials}:{quote(self.db_password, safe='')}"
        return f"mysql+aiomysql://{credentials}@{self.db_host}:{self.db_port}/{self.db_name}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
