"""
Configuration Management for the Finance Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

import warnings
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # One worksheet per store
    incomes_sheet_name: str = Field(default="Incomes")
    expenses_sheet_name: str = Field(default="Expenses")
    budgets_sheet_name: str = Field(default="Budgets")
    aggregates_sheet_name: str = Field(default="Aggregates")
    reports_sheet_name: str = Field(default="Reports")
    audit_sheet_name: str = Field(default="AuditLog")

    @field_validator('credentials_path')
    @classmethod
    def credentials_file_exists(cls, v: str) -> str:
        """Warn only: the file may be mounted after settings load. connect() fails hard."""
        if not Path(v).exists():
            warnings.warn(f"Service account file {v} does not exist yet")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Which store implementation to construct at startup"
    )

    # Display
    currency_code: str = Field(
        default="RWF",
        min_length=3,
        max_length=3,
        description="Three-letter currency code shown before every amount"
    )

    # Dashboard windows
    recent_entries_limit: int = Field(default=5, ge=1, le=50)
    cash_flow_window_days: int = Field(
        default=30,
        ge=1,
        description="How far back the dashboard cash-flow data reaches"
    )
    daily_bucket_count: int = Field(default=30, ge=1)
    weekly_bucket_count: int = Field(default=5, ge=1)
    comparison_window_days: int = Field(
        default=15,
        ge=1,
        description="Length of each window in the period-over-period comparison"
    )

    # Budgets
    budget_warning_threshold: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Progress percentage above which a budget is in warning"
    )
    scope_budget_actuals_to_period: bool = Field(
        default=False,
        description=(
            "Only count expenses inside the budget's current period. "
            "Off by default: actuals are summed over all time."
        )
    )

    # Reports
    strict_report_audit: bool = Field(
        default=False,
        description="Fail report generation when the audit record cannot be written"
    )

    @property
    def uses_google_sheets(self) -> bool:
        return self.storage_backend == "google_sheets"


class Settings(BaseSettings):
    """
    Root settings container.

    Sections are built on first access, so the in-memory backend runs
    without any Google Sheets variables set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Check each settings section the selected backend needs.

    Returns {section: is_valid} plus "<section>_error" messages.
    Google Sheets is only checked when it is the selected backend.
    """
    settings = get_settings()
    results = {}

    try:
        app = settings.app
        results["app"] = True
    except ValidationError as e:
        results["app"] = False
        results["app_error"] = str(e)
        return results

    if app.uses_google_sheets:
        try:
            settings.google_sheets
            results["google_sheets"] = True
        except ValidationError as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    return results
