import stripe
import logging
from typing import Dict, List, Optional, Any
from storefront.core.config import settings
from storefront.core.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)


class StripeCheckoutService:
    """Stripe Checkout integration through the official SDK"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[stripe.StripeClient] = None,
    ):
        self.secret_key = secret_key or settings.STRIPE_SECRET_KEY
        self.timeout = timeout if timeout is not None else settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS
        self.shipping_countries = [c.strip().upper() for c in settings.SHIPPING_COUNTRIES.split(",") if c.strip()]

        self.client = client
        if self.client is None and self.secret_key:
            self.client = stripe.StripeClient(
                self.secret_key,
                base_addresses={"api": settings.STRIPE_API_BASE},
                max_network_retries=settings.PAYMENT_PROVIDER_MAX_RETRIES,
                http_client=stripe.RequestsClient(timeout=self.timeout),
            )

        if self.client is None:
            logger.warning("STRIPE_SECRET_KEY is not configured; checkout sessions will fail")

        logger.info(f"Stripe checkout service initialized - timeout: {self.timeout}s")

    def _build_params(
        self,
        buyer_email: str,
        line_items: List[Dict],
        success_url: str,
        cancel_url: str,
        currency: str,
        metadata: Dict[str, str],
    ) -> Dict[str, Any]:
        stripe_items = []
        for item in line_items:
            product_data = {"name": item["name"]}
            # Stripe rejects empty strings for these
            if item.get("description"):
                product_data["description"] = item["description"]
            if item.get("image_url"):
                product_data["images"] = [item["image_url"]]

            stripe_items.append({
                "price_data": {
                    "currency": currency,
                    "product_data": product_data,
                    "unit_amount": item["unit_amount"],
                },
                "quantity": item["quantity"],
            })

        return {
            "mode": "payment",
            "customer_email": buyer_email,
            "line_items": stripe_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
            "phone_number_collection": {"enabled": True},
            "shipping_address_collection": {"allowed_countries": self.shipping_countries},
        }

    def create_checkout_session(
        self,
        buyer_email: str,
        line_items: List[Dict],
        success_url: str,
        cancel_url: str,
        currency: str,
        metadata: Dict[str, str],
    ) -> Dict[str, str]:
        """Create a hosted checkout session and return its id and redirect url"""
        if self.client is None:
            raise PaymentProviderError("Payment provider is not configured")

        params = self._build_params(buyer_email, line_items, success_url, cancel_url, currency, metadata)
        try:
            session = self.client.v1.checkout.sessions.create(params)
        except stripe.APIConnectionError as e:
            logger.error(f"Stripe unreachable after retries (timeout {self.timeout}s): {e}")
            raise PaymentProviderError("Payment provider unavailable")
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session failed: {e.http_status} - {e.user_message or e}")
            raise PaymentProviderError(f"Payment provider error: {e.http_status}")

        session_id = getattr(session, "id", None)
        url = getattr(session, "url", None)
        if not session_id or not url:
            logger.error(f"Stripe response missing session id or url: {session_id}")
            raise PaymentProviderError("Payment provider returned an invalid response")

        return {"id": session_id, "url": url}
