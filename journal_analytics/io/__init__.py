"""Trade and backtest file readers"""

from journal_analytics.io.trade_reader import TradeReader, parse_backtest, parse_trade

__all__ = [
    "TradeReader",
    "parse_trade",
    "parse_backtest",
]
