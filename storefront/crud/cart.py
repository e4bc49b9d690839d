import logging
from decimal import Decimal
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, joinedload

from storefront.core.exceptions import ValidationError, ItemNotFound, PersistenceError
from storefront.crud.product import require_product
from storefront.models.cart import Cart, CartItem
from storefront.schemas.auth import CurrentUser
from storefront.schemas.cart import CartOut, CartItemOut
from storefront.utils.money import calculate_total

logger = logging.getLogger(__name__)


def load_cart(db: Session, user_id: int, for_update: bool = False) -> Optional[Cart]:
    """The user's cart with items and products eagerly loaded."""
    query = (
        db.query(Cart)
        .options(selectinload(Cart.items).joinedload(CartItem.product))
        .filter(Cart.user_id == user_id)
    )
    if for_update:
        query = query.with_for_update(of=Cart)
    return query.first()


def cart_total(items) -> Decimal:
    return calculate_total((item.product.price, item.quantity) for item in items)


def get_cart(db: Session, user: CurrentUser) -> CartOut:
    cart = load_cart(db, user.id)
    if cart is None:
        return CartOut()

    items = sorted(cart.items, key=lambda item: item.id)
    return CartOut(
        id=cart.id,
        items=[CartItemOut.model_validate(item) for item in items],
        total=cart_total(items),
        item_count=sum(item.quantity for item in items),
    )


def _find_cart(db: Session, user_id: int) -> Optional[Cart]:
    return db.query(Cart).filter(Cart.user_id == user_id).first()


def _get_or_create_cart(db: Session, user_id: int) -> Cart:
    cart = _find_cart(db, user_id)
    if cart is not None:
        return cart

    try:
        with db.begin_nested():
            cart = Cart(user_id=user_id)
            db.add(cart)
        return cart
    except IntegrityError:
        # A concurrent request created it first
        logger.info(f"Cart for user {user_id} created concurrently, reusing it")
        return db.query(Cart).filter(Cart.user_id == user_id).one()


def _increment_item(db: Session, cart_id: int, product_id: int, size: str, quantity: int) -> int:
    return (
        db.query(CartItem)
        .filter(CartItem.cart_id == cart_id, CartItem.product_id == product_id, CartItem.size == size)
        .update({CartItem.quantity: CartItem.quantity + quantity}, synchronize_session=False)
    )


def _increment_or_insert(db: Session, cart_id: int, product_id: int, size: str, quantity: int) -> CartItem:
    if not _increment_item(db, cart_id, product_id, size, quantity):
        try:
            with db.begin_nested():
                db.add(CartItem(cart_id=cart_id, product_id=product_id, size=size, quantity=quantity))
        except IntegrityError:
            # Same line inserted concurrently; fall back to incrementing it
            _increment_item(db, cart_id, product_id, size, quantity)

    return (
        db.query(CartItem)
        .options(joinedload(CartItem.product))
        .filter(CartItem.cart_id == cart_id, CartItem.product_id == product_id, CartItem.size == size)
        .populate_existing()
        .one()
    )


def _validate_quantity(quantity) -> None:
    if quantity is None or isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be a whole number of at least 1")


def add_item(db: Session, user: CurrentUser, product_id: int, quantity: int, size: str) -> CartItem:
    """Add a product line, merging with an existing (product, size) line."""
    _validate_quantity(quantity)
    size = (size or "").strip()
    if not size:
        raise ValidationError("Size is required")

    product = require_product(db, product_id)
    if not product.accepts_size(size):
        raise ValidationError(f"Size '{size}' is not available for this product")

    try:
        cart = _get_or_create_cart(db, user.id)
        item = _increment_or_insert(db, cart.id, product.id, size, quantity)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to add product {product_id} to cart of user {user.id}: {e}")
        raise PersistenceError()

    logger.info(f"User {user.id} added {quantity} x product {product_id} ({size}) to cart {item.cart_id}")
    return item


def _get_owned_item(db: Session, user_id: int, item_id: int) -> CartItem:
    # Items of other users are reported exactly like missing ones
    item = (
        db.query(CartItem)
        .join(Cart, CartItem.cart_id == Cart.id)
        .options(joinedload(CartItem.product))
        .filter(CartItem.id == item_id, Cart.user_id == user_id)
        .first()
    )
    if item is None:
        raise ItemNotFound()
    return item


def update_quantity(db: Session, user: CurrentUser, item_id: int, quantity: int) -> CartItem:
    # Zero is rejected rather than treated as a removal
    _validate_quantity(quantity)
    item = _get_owned_item(db, user.id, item_id)

    try:
        item.quantity = quantity
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update cart item {item_id} for user {user.id}: {e}")
        raise PersistenceError()

    db.refresh(item)
    return item


def remove_item(db: Session, user: CurrentUser, item_id: int) -> None:
    item = _get_owned_item(db, user.id, item_id)

    try:
        db.delete(item)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to remove cart item {item_id} for user {user.id}: {e}")
        raise PersistenceError()

    logger.info(f"User {user.id} removed cart item {item_id}")
