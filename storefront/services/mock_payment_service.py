# storefront/services/mock_payment_service.py
import uuid
import logging
from typing import Dict, List
from datetime import datetime
from storefront.core.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)

class MockPaymentService:
    """Mock payment provider for local development and tests"""

    def __init__(self, base_url: str = "https://mock-pay.local", max_sessions: int = 100):
        self.base_url = base_url
        self.max_sessions = max_sessions
        self.sessions: List[Dict] = []  # most recent last, oldest dropped past max_sessions
        self.fail_next = False  # set to simulate an outage/timeout

        logger.info("Mock payment service initialized")

    def create_checkout_session(
        self,
        buyer_email: str,
        line_items: List[Dict],
        success_url: str,
        cancel_url: str,
        currency: str,
        metadata: Dict[str, str],
    ) -> Dict[str, str]:
        """Mock session creation"""
        if self.fail_next:
            self.fail_next = False
            raise PaymentProviderError("Payment provider unavailable")

        session_id = f"cs_mock_{uuid.uuid4().hex}"
        self.sessions.append({
            "id": session_id,
            "buyer_email": buyer_email,
            "line_items": line_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "currency": currency,
            "metadata": metadata,
            "created_at": datetime.utcnow().isoformat(),
        })
        del self.sessions[:-self.max_sessions]
        return {"id": session_id, "url": f"{self.base_url}/pay/{session_id}"}
