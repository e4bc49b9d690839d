# storefront/services/checkout_service.py
"""
Checkout: hosted payment sessions and payment confirmation.

Creating a session never creates an order. Orders are materialized either
by the direct order endpoint or, once the provider confirms payment, by
confirm_payment_event, which produces at most one order per session.
"""

import logging
from typing import Dict, Any, Optional

import stripe
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import (
    EmptyCartError,
    InvalidShippingDetails,
    PaymentMismatchError,
    PaymentProviderError,
    PersistenceError,
    WebhookVerificationError,
)
from storefront.core.monitoring import monitoring
from storefront.crud.cart import load_cart
from storefront.crud.order import materialize_order, validate_shipping_details
from storefront.models.checkout import CheckoutSession, CheckoutSessionStatus
from storefront.schemas.auth import CurrentUser
from storefront.utils.money import to_minor_units

logger = logging.getLogger(__name__)

CONFIRMATION_EVENTS = ("checkout.session.completed", "checkout.session.async_payment_succeeded")
PAID_STATUSES = ("paid", "no_payment_required")


def create_checkout_session(db: Session, user: CurrentUser, payment_service) -> Dict[str, str]:
    """Send the buyer to the hosted payment page for their current cart"""
    cart = load_cart(db, user.id)
    if cart is None or not cart.items:
        raise EmptyCartError()

    # Live prices: a price change since add-to-cart is charged at the new price
    line_items = []
    for item in sorted(cart.items, key=lambda i: i.id):
        line_items.append({
            "name": item.product.name,
            "description": item.product.description,
            "image_url": item.product.image,
            "unit_amount": to_minor_units(item.product.price),
            "quantity": item.quantity,
        })
    amount_total = sum(line["unit_amount"] * line["quantity"] for line in line_items)
    base_url = settings.FRONTEND_URL.rstrip("/")

    try:
        session = payment_service.create_checkout_session(
            buyer_email=user.email,
            line_items=line_items,
            success_url=f"{base_url}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/cart",
            currency=settings.PAYMENT_CURRENCY,
            metadata={"userId": str(user.id), "cartId": str(cart.id)},
        )
    except PaymentProviderError as e:
        monitoring.record_provider_error(f"Checkout session failed: {e.detail}", user.id)
        raise

    record = CheckoutSession(
        provider_session_id=session["id"],
        user_id=user.id,
        cart_id=cart.id,
        amount_total=amount_total,
        currency=settings.PAYMENT_CURRENCY,
        status=CheckoutSessionStatus.OPEN,
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        monitoring.record_persistence_error(f"Failed to record checkout session {session['id']}: {e}", user.id)
        raise PersistenceError()

    monitoring.record_checkout_session()
    logger.info(f"Checkout session {session['id']} created for user {user.id}, cart {cart.id}, amount {amount_total}")
    return {"url": session["url"], "session_id": session["id"]}


def parse_payment_event(payload: bytes, signature: Optional[str], secret: Optional[str] = None) -> Dict[str, Any]:
    """Verify the provider signature and return the decoded event"""
    secret = secret or settings.STRIPE_WEBHOOK_SECRET
    if not secret:
        logger.error("Payment webhook received but STRIPE_WEBHOOK_SECRET is not configured")
        raise WebhookVerificationError("Webhook verification is not configured")
    if not signature:
        raise WebhookVerificationError("Missing signature")

    try:
        event = stripe.Webhook.construct_event(payload, signature, secret)
    except stripe.SignatureVerificationError:
        logger.warning("Payment webhook rejected: invalid signature")
        raise WebhookVerificationError("Invalid signature")
    except ValueError:
        raise WebhookVerificationError("Invalid payload")

    return event.to_dict()


def shipping_from_session(session_obj: Dict[str, Any]) -> Dict[str, Optional[str]]:
    customer = session_obj.get("customer_details") or {}
    shipping = (
        (session_obj.get("collected_information") or {}).get("shipping_details")
        or session_obj.get("shipping_details")
        or {}
    )
    address = shipping.get("address") or customer.get("address") or {}
    street = ", ".join(part for part in (address.get("line1"), address.get("line2")) if part)

    return {
        "name": shipping.get("name") or customer.get("name"),
        "email": customer.get("email") or session_obj.get("customer_email"),
        "phone": customer.get("phone"),
        "address": street or None,
        "city": address.get("city"),
        "postal_code": address.get("postal_code"),
    }


def _check_paid_session(session_obj: Dict[str, Any], record: CheckoutSession) -> None:
    """The event must describe the cart and amount recorded when the session was created"""
    metadata = session_obj.get("metadata") or {}
    if metadata.get("cartId") != str(record.cart_id):
        raise PaymentMismatchError(
            f"Session metadata cart {metadata.get('cartId')} does not match recorded cart {record.cart_id}"
        )

    paid = session_obj.get("amount_total")
    if paid is not None and paid != record.amount_total:
        raise PaymentMismatchError(f"Provider charged {paid}, session was created for {record.amount_total}")


def _mark_failed(db: Session, record: CheckoutSession, reason: str) -> None:
    record.status = CheckoutSessionStatus.FAILED
    record.failure_reason = reason
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to mark checkout session {record.provider_session_id} as failed: {e}")
        raise PersistenceError()


def confirm_payment_event(db: Session, event: Dict[str, Any]) -> Dict[str, Any]:
    """Materialize the order for a confirmed payment; repeated deliveries are no-ops"""
    event_type = event.get("type")
    if event_type not in CONFIRMATION_EVENTS:
        logger.info(f"Ignoring payment event {event.get('id')} of type {event_type}")
        return {"status": "ignored"}

    session_obj = (event.get("data") or {}).get("object") or {}
    provider_session_id = session_obj.get("id")
    if session_obj.get("payment_status") not in PAID_STATUSES:
        logger.info(f"Checkout session {provider_session_id} not paid yet ({session_obj.get('payment_status')})")
        return {"status": "ignored"}

    record = (
        db.query(CheckoutSession)
        .filter(CheckoutSession.provider_session_id == provider_session_id)
        .with_for_update()
        .first()
    )
    if record is None:
        logger.warning(f"Payment confirmed for unknown checkout session {provider_session_id}")
        return {"status": "ignored"}

    metadata = session_obj.get("metadata") or {}
    if metadata.get("userId") != str(record.user_id):
        logger.error(
            f"Checkout session {provider_session_id} metadata user {metadata.get('userId')} "
            f"does not match recorded user {record.user_id}"
        )
        return {"status": "ignored"}

    if record.order is not None:
        logger.info(f"Duplicate confirmation for checkout session {provider_session_id}")
        return {"status": "duplicate", "order_id": record.order.id}
    if record.status == CheckoutSessionStatus.FAILED:
        return {"status": "failed"}

    try:
        _check_paid_session(session_obj, record)
        shipping = validate_shipping_details(shipping_from_session(session_obj))
        order = materialize_order(db, record.user_id, shipping, checkout_session=record)
        db.commit()
    except (EmptyCartError, InvalidShippingDetails, PaymentMismatchError) as e:
        db.rollback()
        # Paid but nothing to fulfil: needs a manual refund or follow-up
        monitoring.record_error(
            f"Paid checkout session {provider_session_id} could not be fulfilled: {e.detail}", record.user_id
        )
        _mark_failed(db, record, e.detail)
        return {"status": "failed"}
    except IntegrityError:
        db.rollback()
        # Concurrent delivery of the same event already produced the order
        db.refresh(record)
        if record.order is not None:
            return {"status": "duplicate", "order_id": record.order.id}
        monitoring.record_persistence_error(f"Order for checkout session {provider_session_id} failed", record.user_id)
        raise PersistenceError()
    except SQLAlchemyError as e:
        db.rollback()
        monitoring.record_persistence_error(
            f"Order for checkout session {provider_session_id} failed: {e}", record.user_id
        )
        raise PersistenceError()

    monitoring.record_order(confirmed_by_payment=True)
    logger.info(f"Order {order.id} created from checkout session {provider_session_id} for user {record.user_id}")
    return {"status": "processed", "order_id": order.id}
