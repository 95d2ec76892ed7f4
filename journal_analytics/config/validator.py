"""Additional configuration validation logic"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from journal_analytics.config.models import AnalyticsConfig


def validate_config_constraints(config: AnalyticsConfig) -> None:
    """
    Perform additional validation beyond Pydantic model validators.

    Args:
        config: AnalyticsConfig instance to validate

    Raises:
        ValueError: If validation fails
    """
    # Timezone must resolve to an IANA zone
    tz_name = config.engine.timezone
    if tz_name.upper() != "UTC":
        try:
            ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {tz_name}")

    sessions = config.engine.sessions
    duplicates = {s for s in sessions if sessions.count(s) > 1}
    if duplicates:
        raise ValueError(f"Duplicate session label(s): {sorted(duplicates)}")

    if config.report.trim_outliers and config.engine.trim_fraction == 0:
        raise ValueError("trim_outliers is enabled but trim_fraction is 0")
