"""Configuration loader with environment variable substitution"""

import json
import os
import re
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from journal_analytics.config.models import AnalyticsConfig
from journal_analytics.config.validator import validate_config_constraints


def substitute_env_vars(data: Any) -> Any:
    """
    Recursively substitute environment variables in configuration data.

    Supports ${VAR_NAME} syntax in string values.
    """
    if isinstance(data, dict):
        return {key: substitute_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r'\$\{([^}]+)\}'
        result = data
        for var_name in re.findall(pattern, data):
            env_value = os.getenv(var_name)
            if env_value is None:
                raise ValueError(
                    f"Environment variable {var_name} not found but required in config"
                )
            result = result.replace(f"${{{var_name}}}", env_value)
        return result
    else:
        return data


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> AnalyticsConfig:
    """
    Load and validate analytics configuration from a JSON file.

    Args:
        config_path: Path to config JSON file; None returns the defaults
        load_env: Whether to load .env file first (default: True)

    Returns:
        Validated AnalyticsConfig instance

    Raises:
        FileNotFoundError: If config_path is given but doesn't exist
        ValueError: If config validation fails
        json.JSONDecodeError: If config file is invalid JSON
    """
    if load_env:
        load_dotenv()

    if config_path is None:
        config_data: Any = {}
    else:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_file, 'r') as f:
            raw_config = json.load(f)
        config_data = substitute_env_vars(raw_config)

    # Parse and validate with Pydantic
    try:
        config = AnalyticsConfig(**config_data)
        validate_config_constraints(config)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")

    return config
