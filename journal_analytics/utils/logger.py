"""Logging setup"""

import logging
import sys
from pathlib import Path
from typing import Optional

from journal_analytics.config.models import LoggingConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the journal_analytics logger.

    Args:
        config: LoggingConfig instance (if None, uses defaults)

    Returns:
        Logger instance
    """
    config = config or LoggingConfig()
    level = getattr(logging, config.log_level)

    logger = logging.getLogger("journal_analytics")
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if config.log_file:
        log_path = Path(config.log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / config.log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(name: str = "journal_analytics") -> logging.Logger:
    """Get logger instance by name"""
    return logging.getLogger(name)
