"""
Configuration management for the resale ledger.
Uses pydantic-settings for type-safe, centralized configuration.
"""

from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses pydantic-settings for validation and type safety.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # Database
    database_url: str = "sqlite:///resale_ledger.db"
    db_echo: bool = False

    # Logging
    log_level: str = "INFO"

    # Tax year (UK-style: starts on 1 April by default)
    tax_year_start_month: int = 4
    tax_year_start_day: int = 1

    # Unsold items older than these many days are reported as aged stock
    aged_inventory_thresholds: List[int] = [90, 180, 365]

    # Compute report sections independently instead of failing the whole report
    report_isolate_failures: bool = False

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log_level. Must be one of {valid_levels}")
        return v_upper

    @field_validator('tax_year_start_month')
    @classmethod
    def validate_tax_year_month(cls, v: int) -> int:
        if not 1 <= v <= 12:
            raise ValueError(f"tax_year_start_month must be between 1 and 12, got {v}")
        return v

    @field_validator('tax_year_start_day')
    @classmethod
    def validate_tax_year_day(cls, v: int) -> int:
        if not 1 <= v <= 28:
            raise ValueError(f"tax_year_start_day must be between 1 and 28, got {v}")
        return v

    @field_validator('aged_inventory_thresholds')
    @classmethod
    def validate_thresholds(cls, v: List[int]) -> List[int]:
        """Thresholds must be positive and are kept in ascending order."""
        if any(days <= 0 for days in v):
            raise ValueError("aged_inventory_thresholds must all be positive")
        return sorted(set(v))

    @property
    def is_sqlite(self) -> bool:
        """Check if the ledger lives in a SQLite database."""
        return self.database_url.startswith("sqlite")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings
