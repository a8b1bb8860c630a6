"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreConfig(BaseModel):
    """Database / store settings."""
    echo: bool = False
    pool_pre_ping: bool = True
    create_tables: bool = True
    max_retries: int = 3
    retry_delay: float = 0.2
    exponential_backoff: bool = True


class InventoryConfig(BaseModel):
    """Inventory rule settings."""
    default_min_stock_level: int = 10


class AuthConfig(BaseModel):
    """Admin authorization settings."""
    require_admin_token: bool = True
    token_header: str = "X-Admin-Token"
    user_header: str = "X-User-Id"
    default_user: str = "admin"


class LoggingFilesConfig(BaseModel):
    """Log file paths."""
    ledger: str = "logs/ledger.log"
    reports: str = "logs/reports.log"
    reconcile: str = "logs/reconcile.log"
    error: str = "logs/error.log"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5
    files: LoggingFilesConfig = LoggingFilesConfig()


class SchedulerConfig(BaseModel):
    """Reconciliation scheduler configuration."""
    enabled: bool = False
    timezone: str = "UTC"
    max_instances: int = 1
    coalesce: bool = True
    misfire_grace_time: int = 300
    auto_fix: bool = False
    apply_pending: bool = False


class YAMLConfig(BaseModel):
    """Configuration loaded from YAML file."""
    store: StoreConfig = StoreConfig()
    inventory: InventoryConfig = InventoryConfig()
    auth: AuthConfig = AuthConfig()
    logging: LoggingConfig = LoggingConfig()
    scheduler: SchedulerConfig = SchedulerConfig()


class Settings(BaseSettings):
    """Application settings from environment variables."""

    database_url: str = Field(
        default="sqlite:///data/inventory.db",
        description="SQLAlchemy database URL"
    )
    admin_token: Optional[str] = Field(default=None, description="Shared admin API token")

    # Application settings
    environment: str = Field(default="development", description="Environment (development/production)")
    log_level: Optional[str] = Field(default=None, description="Override log level")
    reconcile_interval_minutes: int = Field(default=720, description="Reconciliation interval in minutes")
    port: int = Field(default=8000, description="Server port")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


class AppConfig:
    """Combined application configuration."""

    def __init__(self):
        self.env = Settings()

        # Load YAML config
        config_path = Path(__file__).parent.parent.parent / "config" / "config.yml"
        if config_path.exists():
            with open(config_path, "r") as f:
                yaml_data = yaml.safe_load(f) or {}
                self.yaml = YAMLConfig(**yaml_data)
        else:
            self.yaml = YAMLConfig()

        # Override log level if specified in env
        if self.env.log_level:
            self.yaml.logging.level = self.env.log_level

    @property
    def store(self) -> StoreConfig:
        return self.yaml.store

    @property
    def inventory(self) -> InventoryConfig:
        return self.yaml.inventory

    @property
    def auth(self) -> AuthConfig:
        return self.yaml.auth

    @property
    def logging(self) -> LoggingConfig:
        return self.yaml.logging

    @property
    def scheduler(self) -> SchedulerConfig:
        return self.yaml.scheduler

    @property
    def is_production(self) -> bool:
        return self.env.environment.lower() == "production"


@lru_cache()
def get_config() -> AppConfig:
    """Get cached configuration instance."""
    return AppConfig()
