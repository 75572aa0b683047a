"""
Config Loader - maps the pricing-configuration payload onto PricingConfig.

The remote service reports percentages as 0-100 numbers under
platform_commission_percent, platform_overprice_percent and vat_rate.
Missing values fall back to the defaults in Settings.
"""
from typing import Optional, Any

from ..config.settings import get_settings, Settings
from ..engine.models import PricingConfig
from ..exceptions import InvalidConfiguration
from ..logging_config import get_logger

logger = get_logger(__name__)

# PricingConfig field -> remote payload key
FIELD_MAP = {
    'commission_percent': 'platform_commission_percent',
    'overprice_percent': 'platform_overprice_percent',
    'vat_rate': 'vat_rate',
}


def _unwrap(payload: dict) -> dict:
    """Accept both the bare config and the {"success", "data": {"pricing_config"}} envelope."""
    data = payload.get('data')
    if isinstance(data, dict) and isinstance(data.get('pricing_config'), dict):
        return data['pricing_config']
    if isinstance(payload.get('pricing_config'), dict):
        return payload['pricing_config']
    return payload


def _coerce(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidConfiguration(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{key} must be a number, got {value!r}")


def default_pricing_config(settings: Optional[Settings] = None) -> PricingConfig:
    """PricingConfig built purely from the configured defaults."""
    settings = settings or get_settings()
    return PricingConfig(
        commission_percent=settings.default_commission_percent,
        overprice_percent=settings.default_overprice_percent,
        vat_rate=settings.default_vat_rate,
    )


def load_pricing_config(payload: Optional[dict], settings: Optional[Settings] = None) -> PricingConfig:
    """
    Build a PricingConfig from a remote configuration payload.

    Args:
        payload: JSON object from the configuration endpoint (or None when unreachable)
        settings: Optional settings override

    Returns:
        PricingConfig with defaults substituted for absent values
    """
    settings = settings or get_settings()
    defaults = default_pricing_config(settings)

    if not payload:
        logger.warning("No pricing configuration received, using defaults %s", defaults.to_dict())
        return defaults

    source = _unwrap(payload)
    values = {}
    for field_name, key in FIELD_MAP.items():
        raw = source.get(key)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            values[field_name] = getattr(defaults, field_name)
            logger.info("Pricing config missing %s, using default %s", key, values[field_name])
        else:
            values[field_name] = _coerce(key, raw)

    config = PricingConfig(**values)
    logger.debug("Pricing configuration loaded: %s", config.to_dict())
    return config


def to_remote_payload(config: PricingConfig) -> dict:
    """Inverse mapping, used when echoing the snapshot back to the caller."""
    return {key: getattr(config, field_name) for field_name, key in FIELD_MAP.items()}
