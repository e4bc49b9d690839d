import hashlib
import hmac
import json
import time
from decimal import Decimal

from storefront.core.security import create_access_token
from storefront.db.session import SessionLocal
from storefront.models.product import Product

WEBHOOK_SECRET = "whsec_test_secret"

SHIPPING = {
    "name": "Alice Doe",
    "email": "alice@example.com",
    "phone": "+7 (900) 123-45-67",
    "address": "Tverskaya 1",
    "city": "Moscow",
    "postal_code": "125009",
}


def auth_headers(user_id: int, email: str = None) -> dict:
    token = create_access_token(user_id, email or f"user{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def set_product_price(product_id: int, price: str):
    with SessionLocal() as session:
        session.query(Product).filter(Product.id == product_id).update({"price": Decimal(price)})
        session.commit()


def add_to_cart(client, headers, product_id, quantity=1, size="M"):
    return client.post(
        "/api/cart/items",
        json={"product_id": product_id, "quantity": quantity, "size": size},
        headers=headers,
    )


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"), f"{timestamp}.{payload}".encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def completed_event(session_id: str, user_id: int, cart_id: int, payment_status: str = "paid",
                    amount_total: int = None) -> str:
    event = {
        "id": f"evt_{session_id}",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": payment_status,
                "customer_email": "alice@example.com",
                "metadata": {"userId": str(user_id), "cartId": str(cart_id)},
                "customer_details": {
                    "name": "Alice Doe",
                    "email": "alice@example.com",
                    "phone": "+79001234567",
                    "address": {
                        "line1": "Tverskaya 1",
                        "line2": "apt 5",
                        "city": "Moscow",
                        "postal_code": "125009",
                        "country": "RU",
                    },
                },
            }
        },
    }
    if amount_total is not None:
        event["data"]["object"]["amount_total"] = amount_total
    return json.dumps(event)
