"""Configuration module"""

from journal_analytics.config.models import (
    AnalyticsConfig,
    EngineConfig,
    LoggingConfig,
    ReportConfig
)
from journal_analytics.config.loader import load_config

__all__ = [
    "AnalyticsConfig",
    "EngineConfig",
    "LoggingConfig",
    "ReportConfig",
    "load_config",
]
