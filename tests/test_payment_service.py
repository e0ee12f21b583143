import hashlib
import hmac
from unittest.mock import MagicMock, patch

import pytest
import requests

from app.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from app.models.payment import Payment
from app.services.payment_service import PaymentService, RazorpayClient
from app.services.pricing_service import LineItem, PriceBreakdown
from app.utils.retry import with_retry


def make_client(session=None):
    return RazorpayClient(key_id="rzp_test_key", key_secret="test_secret",
                          base_url="https://razorpay.test/v1", session=session or MagicMock())


def breakdown(total=3540):
    return PriceBreakdown(
        items=[LineItem(id="order:f1", name="Balance Sheet", price=3000)],
        subtotal=3000,
        gstAmount=540,
        totalAmount=total,
        taxRate=0.18,
    )


def sign(order_id, payment_id, secret="test_secret"):
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def test_signature_verification():
    client = make_client()

    assert client.verify_signature("order_1", "pay_1", sign("order_1", "pay_1"))
    assert not client.verify_signature("order_1", "pay_1", sign("order_1", "pay_2"))
    assert not client.verify_signature("order_1", "pay_1", None)


def test_create_order_persists_payment(db_session, verified_user):
    session = MagicMock()
    session.post.return_value.json.return_value = {"id": "order_ABC", "currency": "INR"}
    client = make_client(session)

    data = PaymentService.create_order(db_session, verified_user, breakdown(), {"name": "Asha"}, client=client)

    assert data["orderId"] == "order_ABC"
    assert data["amountPaise"] == 354000
    assert data["key"] == "rzp_test_key"
    assert data["customer"] == {"name": "Asha", "email": verified_user.email, "contact": verified_user.mobile}
    url = session.post.call_args[0][0]
    assert url == "https://razorpay.test/v1/orders"
    assert session.post.call_args[1]["json"]["amount"] == 354000

    payment = db_session.query(Payment).filter_by(order_id="order_ABC").one()
    assert payment.status == "CREATED"
    assert payment.breakdown["totalAmount"] == 3540


def test_create_order_rejects_zero_total(db_session, verified_user):
    with pytest.raises(ValidationError):
        PaymentService.create_order(db_session, verified_user, breakdown(total=0), client=make_client())


def test_create_order_requires_gateway_keys(db_session, verified_user):
    client = RazorpayClient(key_id="", key_secret="", session=MagicMock())
    with pytest.raises(ExternalServiceError):
        PaymentService.create_order(db_session, verified_user, breakdown(), client=client)


def test_create_order_gateway_failure(db_session, verified_user):
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("unreachable")

    with patch("app.services.payment_service.with_retry",
               lambda fn, **kw: with_retry(fn, sleep=lambda _: None, **kw)):
        with pytest.raises(ExternalServiceError):
            PaymentService.create_order(db_session, verified_user, breakdown(), client=make_client(session))

    assert session.post.call_count == 3
    assert db_session.query(Payment).count() == 0


def test_verify_payment(db_session, verified_user):
    db_session.add(Payment(id="p1", user_id=verified_user.id, order_id="order_1", amount=354000))
    db_session.commit()

    data = PaymentService.verify_payment(
        db_session, verified_user, "order_1", "pay_1", sign("order_1", "pay_1"), client=make_client()
    )

    assert data == {"paymentId": "p1", "orderId": "order_1", "status": "PAID", "amount": 354000}
    payment = db_session.query(Payment).one()
    assert payment.payment_id == "pay_1"
    assert payment.payment_date is not None


def test_verify_payment_bad_signature_marks_failed(db_session, verified_user):
    db_session.add(Payment(id="p1", user_id=verified_user.id, order_id="order_1", amount=354000))
    db_session.commit()

    with pytest.raises(ValidationError):
        PaymentService.verify_payment(db_session, verified_user, "order_1", "pay_1", "bad", client=make_client())

    assert db_session.query(Payment).one().status == "FAILED"


def test_verify_payment_unknown_order(db_session, verified_user):
    with pytest.raises(NotFoundError):
        PaymentService.verify_payment(db_session, verified_user, "order_x", "pay_1", "sig", client=make_client())


def test_bad_confirmation_does_not_downgrade_paid_payment(db_session, verified_user):
    db_session.add(Payment(id="p1", user_id=verified_user.id, order_id="order_1", amount=354000))
    db_session.commit()
    client = make_client()
    PaymentService.verify_payment(db_session, verified_user, "order_1", "pay_1", sign("order_1", "pay_1"), client=client)

    with pytest.raises(ValidationError):
        PaymentService.verify_payment(db_session, verified_user, "order_1", "junk", "bad", client=client)

    payment = db_session.query(Payment).one()
    assert payment.status == "PAID"
    assert payment.payment_id == "pay_1"

    again = PaymentService.verify_payment(
        db_session, verified_user, "order_1", "pay_1", sign("order_1", "pay_1"), client=client
    )
    assert again["status"] == "PAID"
