import pytest
from unittest.mock import patch

from app.core.exceptions import ValidationError


@patch("app.routers.payments_router.DocumentTypeService")
def test_quote_uses_catalogue_prices(mock_service, client):
    class DocType:
        name = "Balance Sheet"
        base_price = 1000
        udin_required = True

    mock_service.return_value.get_price_map.return_value = {"balance-sheet": DocType()}

    payload = {
        "orderItems": [
            {"fileId": "f1", "documentTypeId": "balance-sheet", "tier": "Standard"},
            {"fileId": "f2", "documentTypeId": "balance-sheet", "tier": "Premium"},
        ]
    }
    response = client.post("/api/payments/quote", json=payload)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["subtotal"] == 3000
    assert data["gstAmount"] == 540
    assert data["totalAmount"] == 3540
    assert [item["id"] for item in data["items"]] == ["order:f1", "order:f2"]


@patch("app.routers.payments_router.ActivityService.log")
@patch("app.routers.payments_router.PaymentService.create_order")
@patch("app.routers.payments_router.DocumentTypeService")
def test_create_order_activity_log(mock_service, mock_create, mock_activity_log, client):
    mock_service.return_value.get_price_map.return_value = {}
    mock_create.return_value = {"orderId": "order_1", "amountPaise": 11800, "key": "rzp"}

    response = client.post("/api/payments/order", json={"files": [{"id": "u1", "name": "a.pdf"}]})

    assert response.status_code == 200
    assert response.json()["data"]["orderId"] == "order_1"
    breakdown = mock_create.call_args[0][2]
    assert breakdown.totalAmount == 118
    args, kwargs = mock_activity_log.call_args
    assert kwargs['action'] == "PAYMENT_ORDER"
    assert kwargs['entity_id'] == "order_1"


@patch("app.routers.payments_router.ActivityService.log")
@patch("app.routers.payments_router.PaymentService.verify_payment")
def test_verify_payment_failure(mock_verify, mock_activity_log, client):
    mock_verify.side_effect = ValidationError("Payment verification failed")

    payload = {
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": "bad",
    }
    response = client.post("/api/payments/verify", json=payload)

    assert response.status_code == 400
    assert not mock_activity_log.called
