"""Reporting module"""

from journal_analytics.reporting.report import AnalyticsReport, ReportGenerator

__all__ = [
    "AnalyticsReport",
    "ReportGenerator",
]
