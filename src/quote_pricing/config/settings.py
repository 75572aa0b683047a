"""
Centralized settings for the quote pricing tool.
"""
import os
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = "QUOTE_PRICING_"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}")


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Fallbacks when the pricing-configuration service omits a value
    default_commission_percent: float = 15.0
    default_overprice_percent: float = 10.0
    default_vat_rate: float = 15.0

    # Business caps enforced by the validation wrapper (never by the engine)
    max_commission_percent: float = 50.0
    max_overprice_percent: float = 50.0
    max_vat_rate: float = 100.0

    # Submission envelope limits
    max_price_per_kwp: float = 2000.0
    min_system_size_kwp: float = 1.0
    max_system_size_kwp: float = 1000.0

    # Tolerance used when checking transmitted totals against recomputed ones
    money_tolerance: float = 0.01

    log_level: str = "INFO"

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings, applying QUOTE_PRICING_* environment overrides."""
        defaults = cls()

        return cls(
            default_commission_percent=_env_float('DEFAULT_COMMISSION_PERCENT', defaults.default_commission_percent),
            default_overprice_percent=_env_float('DEFAULT_OVERPRICE_PERCENT', defaults.default_overprice_percent),
            default_vat_rate=_env_float('DEFAULT_VAT_RATE', defaults.default_vat_rate),
            max_commission_percent=_env_float('MAX_COMMISSION_PERCENT', defaults.max_commission_percent),
            max_overprice_percent=_env_float('MAX_OVERPRICE_PERCENT', defaults.max_overprice_percent),
            max_vat_rate=_env_float('MAX_VAT_RATE', defaults.max_vat_rate),
            max_price_per_kwp=_env_float('MAX_PRICE_PER_KWP', defaults.max_price_per_kwp),
            min_system_size_kwp=_env_float('MIN_SYSTEM_SIZE_KWP', defaults.min_system_size_kwp),
            max_system_size_kwp=_env_float('MAX_SYSTEM_SIZE_KWP', defaults.max_system_size_kwp),
            money_tolerance=_env_float('MONEY_TOLERANCE', defaults.money_tolerance),
            log_level=os.environ.get(ENV_PREFIX + 'LOG_LEVEL', defaults.log_level).upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
