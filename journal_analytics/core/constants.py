"""Core constants and enums for the analytics engine"""

from enum import Enum


class Direction(str, Enum):
    """Trade direction"""
    LONG = "long"
    SHORT = "short"


class Outcome(str, Enum):
    """Per-trade outcome, derived from the sign of pnl"""
    WIN = "win"
    LOSS = "loss"
    TIE = "tie"


class StreakType(str, Enum):
    """Type of the running daily streak"""
    WIN = "win"
    LOSS = "loss"
    NONE = "none"


class Confidence(str, Enum):
    """Sample-size confidence tier for backtest recommendations"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Playbook setup grades, best first
GRADES = ("A+", "A", "B", "C", "D", "F")

# Sunday-first, matching datetime.isoweekday() % 7
WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

SESSIONS = ("Asia", "London", "NY")

HOURS_PER_DAY = 24

# Buckets below this sample size are flagged exploratory
EXPLORATORY_MIN_SAMPLE = 30

# Insights are only emitted for buckets at or above this sample size
INSIGHT_MIN_SAMPLE = 15

# Display cap for ratios; unbounded ratios serialize above it
RATIO_CAP = 99.0
UNBOUNDED_RATIO_VALUE = 999.0

DEFAULT_TRIM_FRACTION = 0.025

# Backtest confidence thresholds: n < 10 low, n < 30 medium, else high
CONFIDENCE_MEDIUM_MIN = 10
CONFIDENCE_HIGH_MIN = 30

# Backtest insights: per-bucket sample floor, and per-grade floor for A+/A
BACKTEST_INSIGHT_MIN_SAMPLE = 10
BACKTEST_GRADE_MIN_SAMPLE = 5

# Label for backtests recorded without a session
UNKNOWN_SESSION = "Unknown"
