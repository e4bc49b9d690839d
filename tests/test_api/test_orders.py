from decimal import Decimal

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from helpers import add_to_cart, set_product_price, SHIPPING
from storefront.db.session import SessionLocal
from storefront.models.order import Order


def place_order(client, headers, shipping=None):
    return client.post("/api/orders/", json=shipping or SHIPPING, headers=headers)


def order_count():
    with SessionLocal() as session:
        return session.query(Order).count()


def test_cart_becomes_order_and_cart_is_emptied(client, alice, make_product):
    tee = make_product(name="Tee", price="1500.00", sizes=["S", "M", "L"])
    scarf = make_product(name="Scarf", price="800.00", sizes=[])
    add_to_cart(client, alice, tee, quantity=2, size="M")
    add_to_cart(client, alice, scarf, quantity=1, size="ONE SIZE")
    cart_id = client.get("/api/cart/", headers=alice).json()["id"]

    response = place_order(client, alice)
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "PENDING"
    assert order["user_id"] == 1
    assert Decimal(order["total_amount"]) == Decimal("3800")
    assert len(order["items"]) == 2
    assert order["shipping_address"]["postal_code"] == "125009"

    lines = {item["product_name"]: item for item in order["items"]}
    assert Decimal(lines["Tee"]["price"]) == Decimal("1500")
    assert lines["Tee"]["quantity"] == 2
    assert lines["Tee"]["size"] == "M"
    assert lines["Scarf"]["size"] == "ONE SIZE"

    cart = client.get("/api/cart/", headers=alice).json()
    assert cart["items"] == []
    # The cart row itself survives, just emptied
    assert cart["id"] == cart_id

    orders = client.get("/api/orders/", headers=alice).json()
    assert [o["id"] for o in orders] == [order["id"]]
    assert len(orders[0]["items"]) == 2


def test_fractional_prices_total_exactly(client, alice, make_product):
    socks = make_product(name="Socks", price="19.99")
    add_to_cart(client, alice, socks, quantity=3)

    order = place_order(client, alice).json()
    assert Decimal(order["total_amount"]) == Decimal("59.97")


def test_order_prices_are_frozen(client, alice, make_product):
    tee = make_product(price="100.00")
    add_to_cart(client, alice, tee)
    place_order(client, alice)

    set_product_price(tee, "150.00")

    [order] = client.get("/api/orders/", headers=alice).json()
    assert Decimal(order["items"][0]["price"]) == Decimal("100")
    assert Decimal(order["total_amount"]) == Decimal("100")


def test_order_uses_price_at_order_time(client, alice, make_product):
    tee = make_product(price="100.00")
    add_to_cart(client, alice, tee, quantity=2)
    set_product_price(tee, "120.50")

    order = place_order(client, alice).json()
    assert Decimal(order["total_amount"]) == Decimal("241.00")


def test_empty_cart_cannot_be_ordered(client, alice):
    response = place_order(client, alice)
    assert response.status_code == 400
    assert response.json()["code"] == "empty_cart"
    assert order_count() == 0


def test_second_order_from_same_cart_fails(client, alice, make_product):
    add_to_cart(client, alice, make_product())
    assert place_order(client, alice).status_code == 201
    assert place_order(client, alice).status_code == 400
    assert order_count() == 1


def test_missing_shipping_fields_are_rejected_before_any_change(client, alice, make_product):
    add_to_cart(client, alice, make_product())
    shipping = dict(SHIPPING, city="  ")
    del shipping["phone"]

    response = place_order(client, alice, shipping)
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "invalid_shipping_details"
    assert "phone" in body["detail"] and "city" in body["detail"]

    assert order_count() == 0
    assert len(client.get("/api/cart/", headers=alice).json()["items"]) == 1


def test_malformed_email_is_rejected(client, alice, make_product):
    add_to_cart(client, alice, make_product())
    response = place_order(client, alice, dict(SHIPPING, email="not-an-email"))
    assert response.status_code == 422


def test_orders_are_listed_newest_first(client, alice, make_product):
    tee = make_product()
    add_to_cart(client, alice, tee)
    first = place_order(client, alice).json()["id"]
    add_to_cart(client, alice, tee, quantity=2)
    second = place_order(client, alice).json()["id"]

    orders = client.get("/api/orders/", headers=alice).json()
    assert [o["id"] for o in orders] == [second, first]


def test_orders_are_private(client, alice, bob, make_product):
    add_to_cart(client, alice, make_product())
    order_id = place_order(client, alice).json()["id"]

    assert client.get("/api/orders/", headers=bob).json() == []
    foreign = client.get(f"/api/orders/{order_id}", headers=bob)
    missing = client.get("/api/orders/9999", headers=bob)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()

    assert client.get(f"/api/orders/{order_id}", headers=alice).status_code == 200


def test_bob_cannot_order_alices_cart(client, alice, bob, make_product):
    add_to_cart(client, alice, make_product())
    assert place_order(client, bob).status_code == 400
    assert len(client.get("/api/cart/", headers=alice).json()["items"]) == 1


def test_localized_order_listing(client, alice, make_product):
    add_to_cart(client, alice, make_product(price="1500.00"), quantity=2)
    place_order(client, alice)

    [order] = client.get("/api/orders/?language=en&currency=USD", headers=alice).json()
    assert order["display_total"] == "$33"
    assert order["status_label"] == "Pending"

    [order] = client.get("/api/orders/?language=ru", headers=alice).json()
    assert order["display_total"] == "3 000 ₽"
    assert order["status_label"] == "В обработке"

    [order] = client.get("/api/orders/", headers=alice).json()
    assert order["display_total"] is None


def test_unsupported_currency_is_rejected(client, alice):
    response = client.get("/api/orders/?currency=EUR", headers=alice)
    assert response.status_code == 422


def test_storage_failure_rolls_back_the_whole_order(client, alice, make_product, monkeypatch):
    add_to_cart(client, alice, make_product(), quantity=2)

    def failing_flush(self, objects=None):
        raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "flush", failing_flush)
    response = place_order(client, alice)
    monkeypatch.undo()

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error", "code": "persistence_error"}
    assert order_count() == 0
    assert client.get("/api/cart/", headers=alice).json()["items"][0]["quantity"] == 2
    assert client.get("/api/health").json()["persistence_errors"] == 1
