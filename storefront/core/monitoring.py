import logging
from typing import Dict, Any, Optional
from datetime import datetime

logger = logging.getLogger("monitoring")

class StorefrontMonitoring:
    """In-process counters for checkout and order activity"""

    def __init__(self):
        self.reset()

    def reset(self):
        self.metrics = {
            "checkout_sessions_created": 0,
            "orders_created": 0,
            "payment_confirmations": 0,
            "payment_provider_errors": 0,
            "persistence_errors": 0,
            "last_error": None
        }

    def record_checkout_session(self):
        self.metrics["checkout_sessions_created"] += 1

    def record_order(self, confirmed_by_payment: bool = False):
        self.metrics["orders_created"] += 1
        if confirmed_by_payment:
            self.metrics["payment_confirmations"] += 1

    def record_provider_error(self, error: str, user_id: Optional[int] = None):
        self.metrics["payment_provider_errors"] += 1
        self.record_error(error, user_id)

    def record_persistence_error(self, error: str, user_id: Optional[int] = None):
        self.metrics["persistence_errors"] += 1
        self.record_error(error, user_id)

    def record_error(self, error: str, user_id: Optional[int] = None):
        """Record system error"""
        self.metrics["last_error"] = {
            "error": error,
            "user_id": user_id,
            "timestamp": datetime.now().isoformat()
        }
        logger.error(f"System error: {error} (user: {user_id})")

    def get_health_status(self) -> Dict[str, Any]:
        """Get current system health"""
        failures = self.metrics["payment_provider_errors"] + self.metrics["persistence_errors"]
        attempts = self.metrics["checkout_sessions_created"] + self.metrics["orders_created"] + failures

        if attempts == 0:
            success_rate = 100.0
        else:
            success_rate = ((attempts - failures) / attempts) * 100

        if success_rate >= 99:
            status = "EXCELLENT"
        elif success_rate >= 95:
            status = "GOOD"
        elif success_rate >= 90:
            status = "WARNING"
        else:
            status = "CRITICAL"

        return {
            "status": status,
            "success_rate": round(success_rate, 2),
            "checkout_sessions_created": self.metrics["checkout_sessions_created"],
            "orders_created": self.metrics["orders_created"],
            "payment_confirmations": self.metrics["payment_confirmations"],
            "payment_provider_errors": self.metrics["payment_provider_errors"],
            "persistence_errors": self.metrics["persistence_errors"],
            "last_error": self.metrics["last_error"],
            "timestamp": datetime.now().isoformat()
        }

# Global monitoring instance
monitoring = StorefrontMonitoring()
