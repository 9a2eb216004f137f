"""Configuration loader and validator."""
import copy
import os
from pathlib import Path
from typing import Any

import yaml

from tradejournal.core.constants import AnalyticsConstants, GoalConstants, Paths, ProjectionConstants


CONFIG_ENV_VAR = "TRADEJOURNAL_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    'journal': {
        'store_path': str(Paths.TRADES_FILE),
    },
    'analytics': {
        'initial_capital': AnalyticsConstants.DEFAULT_INITIAL_CAPITAL,
    },
    'projection': {
        'monthly_contribution': ProjectionConstants.DEFAULT_MONTHLY_CONTRIBUTION,
        'conservative': False,
        'dividend_yield': ProjectionConstants.DEFAULT_DIVIDEND_YIELD,
        'dividend_growth_rate': ProjectionConstants.DEFAULT_DIVIDEND_GROWTH_RATE,
    },
    'goals': dict(GoalConstants.DEFAULT_TARGETS),
    'cache': {
        'max_entries': 128,
    },
    'api': {
        'host': '127.0.0.1',
        'port': 8084,
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}


def load_config(config_path: str | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file. When omitted, the path in
                     TRADEJOURNAL_CONFIG is used, then configs/default.yaml;
                     if neither exists the built-in defaults are returned.

    Returns:
        Dictionary containing configuration parameters, with every section
        of DEFAULT_CONFIG present
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)
        if config_path is None:
            if not Paths.DEFAULT_CONFIG.exists():
                return copy.deepcopy(DEFAULT_CONFIG)
            config_path = str(Paths.DEFAULT_CONFIG)

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        loaded = yaml.safe_load(f) or {}

    config = merge_config(DEFAULT_CONFIG, loaded)

    # Basic validation
    validate_config(config)

    return config


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``override`` on a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: dict[str, Any]) -> None:
    """
    Validate configuration parameters.

    Args:
        config: Configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    required_sections = ['journal', 'analytics', 'projection', 'goals', 'cache', 'api', 'logging']
    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required config section: {section}")

    if not config['journal'].get('store_path'):
        raise ValueError("journal.store_path must be set")

    if config['analytics']['initial_capital'] < 0:
        raise ValueError("Initial capital must be >= 0")

    if config['projection']['monthly_contribution'] < 0:
        raise ValueError("Monthly contribution must be >= 0")

    if not isinstance(config['projection']['conservative'], bool):
        raise ValueError("projection.conservative must be true or false")

    if config['projection']['dividend_yield'] < 0:
        raise ValueError("Dividend yield must be >= 0")

    for period, amount in config['goals'].items():
        if period not in GoalConstants.PERIODS:
            raise ValueError(f"Unknown goal period: {period}")
        if amount <= 0:
            raise ValueError(f"Goal target for {period} must be > 0")

    if config['cache']['max_entries'] < 1:
        raise ValueError("cache.max_entries must be >= 1")

    valid_levels = ['TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL']
    if str(config['logging']['level']).upper() not in valid_levels:
        raise ValueError(f"Log level must be one of {valid_levels}")


def get_param(config: dict[str, Any], *keys, default=None) -> Any:
    """
    Safely get nested configuration parameter.

    Args:
        config: Configuration dictionary
        *keys: Nested keys to traverse
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    result = config
    for key in keys:
        if isinstance(result, dict) and key in result:
            result = result[key]
        else:
            return default
    return result
