import logging
from storefront.core.config import settings
from storefront.services.mock_payment_service import MockPaymentService
from storefront.services.stripe_service import StripeCheckoutService

logger = logging.getLogger(__name__)

_payment_service = None

def build_payment_service():
    provider = settings.PAYMENT_PROVIDER.lower()
    if provider == "mock":
        if settings.ENVIRONMENT == "production":
            logger.warning("Mock payment provider configured in production")
        return MockPaymentService()
    if provider == "stripe":
        return StripeCheckoutService()
    raise ValueError(f"Unknown PAYMENT_PROVIDER: {settings.PAYMENT_PROVIDER}")

def get_payment_service():
    """Process-wide payment provider client, created on first use"""
    global _payment_service
    if _payment_service is None:
        _payment_service = build_payment_service()
    return _payment_service
