"""
Configuration loading and validation.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration is invalid."""

    pass


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: str = "data/paperdesk.db"


@dataclass
class PricingConfig:
    """Subscription list prices."""

    monthly_price: float = 29.0
    yearly_price: float = 290.0

    def price_for(self, plan: str) -> float:
        """List price for a plan name."""
        return self.yearly_price if plan == "yearly" else self.monthly_price


@dataclass
class CouponsConfig:
    """Coupon and deal catalog settings."""

    seed_defaults: bool = True
    respect_deal_start: bool = False


@dataclass
class RegimeConfig:
    """Regime analysis settings."""

    ticker: str = "SPY"
    vix_ticker: str = "^VIX"
    random_seed: Optional[int] = None


@dataclass
class HealthcheckConfig:
    """Status report settings."""

    webhook_url: Optional[str] = None


@dataclass
class AdvancedConfig:
    """Advanced configuration."""

    log_level: str = "INFO"
    max_retries: int = 3


@dataclass
class AppConfig:
    """Main application configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    coupons: CouponsConfig = field(default_factory=CouponsConfig)
    regime: RegimeConfig = field(default_factory=RegimeConfig)
    healthcheck: HealthcheckConfig = field(default_factory=HealthcheckConfig)
    advanced: AdvancedConfig = field(default_factory=AdvancedConfig)


def _substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in string values."""
    if isinstance(value, str):
        # Match ${VAR_NAME} pattern
        pattern = r"\$\{([^}]+)\}"
        matches = re.findall(pattern, value)
        for var_name in matches:
            env_value = os.environ.get(var_name, "")
            value = value.replace(f"${{{var_name}}}", env_value)
        return value
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values."""
    # Check database path is provided
    db_config = config_dict.get("database") or {}
    db_path = db_config.get("path")
    if not db_path:
        raise ConfigValidationError("Database path is required")

    if db_path != ":memory:":
        parent = Path(db_path).parent
        if parent.exists() and not os.access(parent, os.W_OK):
            raise ConfigValidationError(f"Database path not writable: {parent}")

    # Prices must be positive numbers
    pricing = config_dict.get("pricing") or {}
    for key in ("monthly_price", "yearly_price"):
        if key in pricing:
            price = pricing[key]
            if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
                raise ConfigValidationError(f"pricing.{key} must be a positive number")

    # Log level must be known to logging
    advanced = config_dict.get("advanced") or {}
    log_level = str(advanced.get("log_level", "INFO")).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigValidationError(f"Unknown log level: {log_level}")


def load_config(config_path: str) -> AppConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        AppConfig instance

    Raises:
        ConfigValidationError: If configuration is invalid
        FileNotFoundError: If config file doesn't exist
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    # Substitute environment variables
    config_dict = _substitute_env_vars(raw_config)

    # Validate
    _validate_config(config_dict)

    healthcheck_dict = dict(config_dict.get("healthcheck") or {})
    # An unset ${VAR} substitutes to an empty string
    if not healthcheck_dict.get("webhook_url"):
        healthcheck_dict["webhook_url"] = None

    advanced_dict = dict(config_dict.get("advanced") or {})
    if "log_level" in advanced_dict:
        advanced_dict["log_level"] = str(advanced_dict["log_level"]).upper()

    try:
        return AppConfig(
            database=DatabaseConfig(**(config_dict.get("database") or {})),
            pricing=PricingConfig(**(config_dict.get("pricing") or {})),
            coupons=CouponsConfig(**(config_dict.get("coupons") or {})),
            regime=RegimeConfig(**(config_dict.get("regime") or {})),
            healthcheck=HealthcheckConfig(**healthcheck_dict),
            advanced=AdvancedConfig(**advanced_dict),
        )
    except TypeError as e:
        raise ConfigValidationError(f"Unknown configuration key: {e}") from e
