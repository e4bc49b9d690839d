# Model-level checks for the cart, order and checkout tables

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from storefront.db.session import SessionLocal
from storefront.models.cart import Cart, CartItem
from storefront.models.checkout import CheckoutSession, CheckoutSessionStatus
from storefront.models.order import Order, OrderItem, OrderStatus, ShippingAddress
from storefront.models.product import Product, ONE_SIZE


def test_sized_product_accepts_only_its_sizes():
    """Test 1: Sized products accept their listed labels"""
    product = Product(name="Tee", price=Decimal("1500"), category="Shirts", sizes=["S", "M", "L"])
    assert product.accepts_size("M")
    assert not product.accepts_size("XL")
    assert not product.accepts_size(ONE_SIZE)


def test_one_size_product():
    """Test 2: Products without sizes take the one-size label only"""
    product = Product(name="Scarf", price=Decimal("800"), category="Accessories", sizes=[])
    assert product.accepts_size(ONE_SIZE)
    assert not product.accepts_size("M")


def test_order_status_values():
    assert [status.value for status in OrderStatus] == [
        "PENDING", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED"
    ]
    assert OrderStatus.PENDING == "PENDING"


def test_one_cart_per_user(make_product):
    """Test 3: The database refuses a second cart row for the same user"""
    with SessionLocal() as session:
        session.add(Cart(user_id=1))
        session.commit()

        session.add(Cart(user_id=1))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

        assert session.query(Cart).filter(Cart.user_id == 1).count() == 1


def test_one_line_per_product_and_size(make_product):
    """Test 4: (cart, product, size) is unique, other sizes get their own line"""
    product_id = make_product()
    with SessionLocal() as session:
        cart = Cart(user_id=1)
        session.add(cart)
        session.commit()

        session.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=1, size="M"))
        session.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=1, size="L"))
        session.commit()

        session.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=2, size="M"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()


def test_cart_quantity_must_be_positive(make_product):
    """Test 5: Zero quantity lines are rejected by the table itself"""
    product_id = make_product()
    with SessionLocal() as session:
        cart = Cart(user_id=1)
        session.add(cart)
        session.commit()

        session.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=0, size="M"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()


def test_order_graph_persists_together(make_product):
    """Test 6: Order, items and address are saved as one graph"""
    product_id = make_product(name="Tee", image="https://cdn.test/tee.jpg")
    with SessionLocal() as session:
        checkout = CheckoutSession(
            provider_session_id="cs_test_1",
            user_id=1,
            cart_id=1,
            amount_total=300000,
            currency="rub",
        )
        order = Order(user_id=1, total_amount=Decimal("3000.00"), checkout_session=checkout)
        order.items.append(OrderItem(product_id=product_id, price=Decimal("1500.00"), quantity=2, size="M"))
        order.shipping_address = ShippingAddress(
            name="Alice", email="alice@example.com", phone="+79990000000",
            address="Tverskaya 1", city="Moscow", postal_code="125009",
        )
        session.add(order)
        session.commit()
        order_id = order.id

    with SessionLocal() as session:
        order = session.get(Order, order_id)
        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Decimal("3000.00")
        assert order.items[0].product_name == "Tee"
        assert order.items[0].product_image == "https://cdn.test/tee.jpg"
        assert order.shipping_address.city == "Moscow"
        assert order.checkout_session.provider_session_id == "cs_test_1"
        assert order.checkout_session.status == CheckoutSessionStatus.OPEN


def test_provider_session_id_is_unique():
    with SessionLocal() as session:
        for _ in range(2):
            session.add(CheckoutSession(
                provider_session_id="cs_dup", user_id=1, cart_id=1, amount_total=100, currency="rub"
            ))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()
