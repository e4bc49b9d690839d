import re
import logging
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, joinedload

from storefront.core.exceptions import (
    EmptyCartError,
    InvalidShippingDetails,
    OrderNotFound,
    PaymentMismatchError,
    PersistenceError,
)
from storefront.core.localization import LocalizationConfig
from storefront.core.monitoring import monitoring
from storefront.crud.cart import load_cart, cart_total
from storefront.models.checkout import CheckoutSession, CheckoutSessionStatus
from storefront.models.order import Order, OrderItem, OrderStatus, ShippingAddress
from storefront.schemas.auth import CurrentUser
from storefront.schemas.order import OrderOut, ShippingDetails
from storefront.utils.money import to_decimal, to_minor_units

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ("name", "email", "phone", "address", "city", "postal_code")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_shipping_details(details: Dict[str, Optional[str]]) -> Dict[str, str]:
    """Return stripped shipping fields or raise InvalidShippingDetails."""
    cleaned = {}
    missing = []
    for field in SHIPPING_FIELDS:
        value = details.get(field)
        value = value.strip() if isinstance(value, str) else ""
        if not value:
            missing.append(field)
        cleaned[field] = value

    if missing:
        raise InvalidShippingDetails(missing)
    if not EMAIL_PATTERN.match(cleaned["email"]):
        raise InvalidShippingDetails(["email"], "Invalid email address")
    return cleaned


def materialize_order(
    db: Session,
    user_id: int,
    shipping: Dict[str, str],
    checkout_session: Optional[CheckoutSession] = None,
) -> Order:
    """
    Turn the user's cart into an order and empty the cart.

    Writes are only flushed; the caller owns the transaction so that the
    order, its address, its items and the cart clear commit together.

    With a checkout session, the cart must still be the one that was paid
    for, at the amount that was charged.
    """
    cart = load_cart(db, user_id, for_update=True)
    if cart is None or not cart.items:
        raise EmptyCartError()

    items = sorted(cart.items, key=lambda item: item.id)
    if checkout_session is not None:
        cart_amount = sum(to_minor_units(item.product.price) * item.quantity for item in items)
        if cart.id != checkout_session.cart_id or cart_amount != checkout_session.amount_total:
            raise PaymentMismatchError(
                f"Cart {cart.id} now totals {cart_amount}, "
                f"session paid {checkout_session.amount_total} for cart {checkout_session.cart_id}"
            )

    order = Order(
        user_id=user_id,
        status=OrderStatus.PENDING,
        total_amount=cart_total(items),
        shipping_address=ShippingAddress(**shipping),
        items=[
            OrderItem(
                product_id=item.product_id,
                price=to_decimal(item.product.price),
                quantity=item.quantity,
                size=item.size,
            )
            for item in items
        ],
    )
    if checkout_session is not None:
        order.checkout_session = checkout_session
        checkout_session.status = CheckoutSessionStatus.COMPLETED
        checkout_session.completed_at = datetime.utcnow()

    db.add(order)
    for item in items:
        db.delete(item)
    db.flush()
    return order


def create_order(db: Session, user: CurrentUser, details: ShippingDetails) -> Order:
    shipping = validate_shipping_details(details.model_dump())

    try:
        order = materialize_order(db, user.id, shipping)
        db.commit()
    except EmptyCartError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        monitoring.record_persistence_error(f"Order creation failed: {e}", user.id)
        raise PersistenceError()

    monitoring.record_order()
    logger.info(f"Order {order.id} created for user {user.id}")
    return get_order(db, user, order.id)


def _orders_query(db: Session, user_id: int):
    return (
        db.query(Order)
        .options(
            selectinload(Order.items).joinedload(OrderItem.product),
            joinedload(Order.shipping_address),
        )
        .filter(Order.user_id == user_id)
    )


def get_order(db: Session, user: CurrentUser, order_id: int) -> Order:
    order = _orders_query(db, user.id).filter(Order.id == order_id).first()
    if order is None:
        raise OrderNotFound()
    return order


def list_orders(db: Session, user: CurrentUser) -> List[Order]:
    return _orders_query(db, user.id).order_by(Order.created_at.desc(), Order.id.desc()).all()


def localize_orders(orders: List[Order], localization: Optional[LocalizationConfig]) -> List[OrderOut]:
    results = []
    for order in orders:
        out = OrderOut.model_validate(order)
        if localization is not None:
            out.display_total = localization.format_price(order.total_amount)
            out.status_label = localization.status_label(order.status.value)
        results.append(out)
    return results
