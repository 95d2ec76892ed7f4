"""Custom exceptions for the analytics engine"""


class AnalyticsError(Exception):
    """Base exception for all analytics errors"""
    pass


class MissingRateError(AnalyticsError):
    """No conversion rate supplied for a currency pair"""
    pass


class TradeReadError(AnalyticsError):
    """A trade or backtest record could not be parsed"""
    pass
