"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yml"


class StorageConfig(BaseModel):
    """Backing file settings."""
    data_file: str = "inventory_data.csv"
    encoding: str = "utf-8"
    atomic_writes: bool = True


class InventoryConfig(BaseModel):
    """Inventory rules and report defaults."""
    default_minimum_stock: int = Field(default=5, ge=0)
    expiring_soon_days: int = Field(default=30, ge=0)
    top_items: int = Field(default=5, ge=1)


class LoggingFilesConfig(BaseModel):
    """Log file paths."""
    store: str = "logs/inventory.log"
    imports: str = "logs/import.log"
    error: str = "logs/error.log"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5
    to_file: bool = True
    files: LoggingFilesConfig = LoggingFilesConfig()


class YAMLConfig(BaseModel):
    """Configuration loaded from YAML file."""
    storage: StorageConfig = StorageConfig()
    inventory: InventoryConfig = InventoryConfig()
    logging: LoggingConfig = LoggingConfig()


class Settings(BaseSettings):
    """Application settings from environment variables."""

    inventory_data_file: Optional[str] = Field(default=None, description="Override backing CSV file path")
    config_file: Optional[str] = Field(default=None, description="Path to a YAML config file")

    environment: str = Field(default="development", description="Environment (development/production)")
    log_level: Optional[str] = Field(default=None, description="Override log level")
    log_to_file: Optional[bool] = Field(default=None, description="Override file logging")

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

        config_path = Path(self.env.config_file) if self.env.config_file else DEFAULT_CONFIG_PATH
        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    yaml_data = yaml.safe_load(f) or {}
                self.yaml = YAMLConfig(**yaml_data)
            except (yaml.YAMLError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid configuration file {config_path}: {e}",
                    {"path": str(config_path)}
                ) from e
        elif self.env.config_file:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        else:
            self.yaml = YAMLConfig()

        if self.env.log_level:
            self.yaml.logging.level = self.env.log_level
        if self.env.log_to_file is not None:
            self.yaml.logging.to_file = self.env.log_to_file
        if self.env.inventory_data_file:
            self.yaml.storage.data_file = self.env.inventory_data_file

    @property
    def storage(self) -> StorageConfig:
        return self.yaml.storage

    @property
    def inventory(self) -> InventoryConfig:
        return self.yaml.inventory

    @property
    def logging(self) -> LoggingConfig:
        return self.yaml.logging

    @property
    def is_production(self) -> bool:
        return self.env.environment.lower() == "production"


@lru_cache()
def get_config() -> AppConfig:
    """Get cached configuration instance."""
    return AppConfig()
