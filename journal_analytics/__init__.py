"""Trade performance analytics engine for a trading journal"""

__version__ = "0.1.0"
