"""Pydantic models for configuration validation"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from journal_analytics.core.constants import (
    DEFAULT_TRIM_FRACTION,
    EXPLORATORY_MIN_SAMPLE,
    INSIGHT_MIN_SAMPLE,
    RATIO_CAP,
    SESSIONS,
)


class EngineConfig(BaseModel):
    """Calculation engine configuration"""
    timezone: str = "UTC"  # reference timezone for hour-of-day and close date
    trim_fraction: float = Field(default=DEFAULT_TRIM_FRACTION, ge=0, lt=0.5)  # per tail
    exploratory_min_sample: int = Field(default=EXPLORATORY_MIN_SAMPLE, ge=1, le=1000)
    insight_min_sample: int = Field(default=INSIGHT_MIN_SAMPLE, ge=1, le=1000)
    max_insights: int = Field(default=3, ge=0, le=20)
    ratio_cap: float = Field(default=RATIO_CAP, gt=0)
    sessions: List[str] = Field(default_factory=lambda: list(SESSIONS))

    @field_validator("sessions")
    @classmethod
    def validate_sessions(cls, v: List[str]) -> List[str]:
        cleaned = [s.strip() for s in v]
        if not cleaned or any(not s for s in cleaned):
            raise ValueError("sessions must be a non-empty list of non-empty labels")
        return cleaned


class ReportConfig(BaseModel):
    """Report generation configuration"""
    starting_balance: float = Field(default=10_000, ge=0)
    currency: str = "USD"
    histogram_bins: int = Field(default=31, ge=1, le=501)
    trim_outliers: bool = False

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        if len(v.strip()) != 3 or not v.strip().isalpha():
            raise ValueError(f"currency must be a 3-letter ISO code, got {v!r}")
        return v.strip().upper()


class LoggingConfig(BaseModel):
    """Logging configuration"""
    log_dir: str = "./logs"
    log_file: Optional[str] = None  # None = console only
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()


class AnalyticsConfig(BaseModel):
    """Root configuration model"""
    engine: EngineConfig = Field(default_factory=EngineConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_config(self):
        """Cross-field validation"""
        if self.engine.insight_min_sample > self.engine.exploratory_min_sample:
            raise ValueError(
                "insight_min_sample must be <= exploratory_min_sample"
            )
        return self
