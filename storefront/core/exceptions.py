# storefront/core/exceptions.py
"""
Error taxonomy for cart, checkout and order operations.

Each error carries the HTTP status and a machine readable code; the
handlers registered in storefront.main turn them into JSON responses.
"""


class StorefrontError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)
        self.detail = detail


class AuthorizationError(StorefrontError):
    status_code = 401
    code = "unauthorized"

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class ValidationError(StorefrontError):
    status_code = 422
    code = "invalid_input"


class InvalidShippingDetails(ValidationError):
    code = "invalid_shipping_details"

    def __init__(self, missing_fields, detail: str = None):
        self.missing_fields = list(missing_fields)
        super().__init__(detail or f"Missing shipping details: {', '.join(self.missing_fields)}")


class NotFoundError(StorefrontError):
    status_code = 404
    code = "not_found"


class ProductNotFound(NotFoundError):
    code = "product_not_found"

    def __init__(self, detail: str = "Product not found"):
        super().__init__(detail)


class ItemNotFound(NotFoundError):
    code = "item_not_found"

    def __init__(self, detail: str = "Item not found in cart"):
        super().__init__(detail)


class OrderNotFound(NotFoundError):
    code = "order_not_found"

    def __init__(self, detail: str = "Order not found"):
        super().__init__(detail)


class EmptyCartError(StorefrontError):
    status_code = 400
    code = "empty_cart"

    def __init__(self, detail: str = "Cart is empty"):
        super().__init__(detail)


class PaymentMismatchError(StorefrontError):
    """The cart no longer matches what the buyer paid for."""
    status_code = 409
    code = "payment_mismatch"


class ExternalServiceError(StorefrontError):
    """Upstream dependency failed; nothing was mutated, safe to retry."""
    status_code = 502
    code = "external_service_error"
    retryable = True


class PaymentProviderError(ExternalServiceError):
    code = "payment_provider_error"


class WebhookVerificationError(StorefrontError):
    status_code = 400
    code = "invalid_webhook"


class PersistenceError(StorefrontError):
    status_code = 500
    code = "persistence_error"

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)
