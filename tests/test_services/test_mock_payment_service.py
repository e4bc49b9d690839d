import pytest

from storefront.core.exceptions import PaymentProviderError
from storefront.services.mock_payment_service import MockPaymentService


def create(service, user_id="1"):
    return service.create_checkout_session(
        buyer_email="alice@example.com",
        line_items=[{"name": "Tee", "unit_amount": 150000, "quantity": 1}],
        success_url="http://shop.test/checkout/success",
        cancel_url="http://shop.test/cart",
        currency="rub",
        metadata={"userId": user_id, "cartId": "1"},
    )


def test_session_urls_point_at_the_mock_host():
    service = MockPaymentService(base_url="https://pay.test")
    session = create(service)
    assert session["id"].startswith("cs_mock_")
    assert session["url"] == f"https://pay.test/pay/{session['id']}"


def test_recorded_sessions_are_capped():
    service = MockPaymentService(max_sessions=3)
    ids = [create(service, user_id=str(n))["id"] for n in range(5)]

    assert len(service.sessions) == 3
    assert [s["id"] for s in service.sessions] == ids[-3:]


def test_fail_next_fails_once():
    service = MockPaymentService()
    service.fail_next = True
    with pytest.raises(PaymentProviderError):
        create(service)
    assert create(service)["id"]
    assert len(service.sessions) == 1
