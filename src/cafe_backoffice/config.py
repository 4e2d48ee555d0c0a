"""Configuration management for the café back-office engine."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite+pysqlite:///./cafe_backoffice.db",
        description="SQLAlchemy database URL (PostgreSQL in production)",
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    database_pool_size: int = Field(default=10, description="Connections kept in the pool")
    database_max_overflow: int = Field(
        default=5, description="Connections allowed beyond the pool size"
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log format")

    # Sale Settings
    sale_reference_prefix: str = Field(
        default="TXN", description="Prefix for generated sale references"
    )
    partial_deductions: bool = Field(
        default=True,
        description="Deduct remaining stock on shortage instead of deducting nothing",
    )

    # Alert Settings
    alert_dedupe_window_hours: int = Field(
        default=24, description="Window in which an equivalent unresolved alert is suppressed"
    )
    alert_dedupe_lock: bool = Field(
        default=True,
        description="Lock the inventory row before the alert dedupe check",
    )
    expiry_alert_days: int = Field(
        default=7, description="Batches expiring within this many days raise alerts"
    )
    expiry_scan_days: int = Field(default=30, description="Default expiry scan horizon")
    notification_limit: int = Field(default=50, description="Max alerts listed at once")

    # Forecast Settings
    forecast_window_days: int = Field(
        default=30, description="Trailing days of sales used for usage velocity"
    )
    reorder_buffer_days: int = Field(
        default=7, description="Days of usage covered by a suggested order"
    )
    reorder_round_to: int = Field(
        default=10, description="Suggested order quantities round up to this multiple"
    )
    stockout_sentinel_days: int = Field(
        default=999, description="Days-to-stockout reported when there is no usage"
    )

    # Purchasing Settings
    purchase_order_lead_days: int = Field(
        default=7, description="Expected delivery offset for new purchase orders"
    )

    # Ledger Settings
    movement_list_limit: int = Field(
        default=500, description="Upper bound on stock movements returned at once"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("reorder_round_to", "alert_dedupe_window_hours")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate that a window or rounding step is positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
