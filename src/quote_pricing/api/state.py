"""Shared engine and validator instances for the API process."""
from ..config.settings import get_settings
from ..engine import PricingEngine
from ..logging_config import configure_logging
from ..services.validation import QuotationValidator

settings = get_settings()
configure_logging(settings.log_level)

engine = PricingEngine()
validator = QuotationValidator(settings)
