import pytest
from unittest.mock import patch, MagicMock

from app.core.exceptions import ConflictError, NotFoundError


class MockDocType:
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)


def balance_sheet(**overrides):
    values = dict(
        id="balance-sheet",
        name="Balance Sheet",
        description="Audited balance sheet",
        base_price=1000,
        udin_required=True,
        is_active=True,
    )
    values.update(overrides)
    return MockDocType(**values)


@patch("app.routers.document_types_router.DocumentTypeService")
def test_list_document_types(mock_service, client):
    mock_service.return_value.get_active.return_value = [balance_sheet()]

    response = client.get("/api/document-types")

    assert response.status_code == 200
    assert response.json()[0]["base_price"] == 1000


@patch("app.routers.document_types_router.DocumentTypeService")
def test_get_missing_document_type(mock_service, client):
    mock_service.return_value.get_by_id.return_value = None

    response = client.get("/api/document-types/unknown")

    assert response.status_code == 404


@patch("app.routers.document_types_router.ActivityService.log")
@patch("app.routers.document_types_router.DocumentTypeService")
def test_create_doctype_activity_log(mock_service, mock_activity_log, admin_client):
    mock_service.return_value.create.return_value = balance_sheet()

    payload = {
        "id": "balance-sheet",
        "name": "Balance Sheet",
        "description": "Audited balance sheet",
        "base_price": 1000,
        "udin_required": True,
    }
    response = admin_client.post("/api/document-types", json=payload)

    assert response.status_code == 201
    args, kwargs = mock_activity_log.call_args
    assert kwargs['action'] == "CREATE"
    assert kwargs['entity_type'] == "document_type"
    assert kwargs['details']['name'] == "Balance Sheet"
    assert "background_tasks" in kwargs


@patch("app.routers.document_types_router.ActivityService.log")
@patch("app.routers.document_types_router.DocumentTypeService")
def test_create_duplicate_doctype(mock_service, mock_activity_log, admin_client):
    mock_service.return_value.create.side_effect = ConflictError("Document type 'balance-sheet' already exists")

    payload = {"id": "balance-sheet", "name": "Balance Sheet", "base_price": 1000}
    response = admin_client.post("/api/document-types", json=payload)

    assert response.status_code == 400
    assert not mock_activity_log.called


def test_create_doctype_requires_admin(client):
    payload = {"id": "balance-sheet", "name": "Balance Sheet", "base_price": 1000}
    response = client.post("/api/document-types", json=payload)
    assert response.status_code == 403


@patch("app.routers.document_types_router.ActivityService.log")
@patch("app.routers.document_types_router.DocumentTypeService")
def test_update_doctype_activity_log(mock_service, mock_activity_log, admin_client):
    mock_service.return_value.update.return_value = balance_sheet(base_price=1200)

    response = admin_client.put("/api/document-types/balance-sheet", json={"base_price": 1200})

    assert response.status_code == 200
    assert response.json()["base_price"] == 1200
    mock_service.return_value.update.assert_called_once_with("balance-sheet", {"base_price": 1200})
    args, kwargs = mock_activity_log.call_args
    assert kwargs['action'] == "UPDATE"
    assert kwargs['details'] == {"base_price": 1200}


@patch("app.routers.document_types_router.ActivityService.log")
@patch("app.routers.document_types_router.DocumentTypeService")
def test_update_missing_doctype(mock_service, mock_activity_log, admin_client):
    mock_service.return_value.update.side_effect = NotFoundError("Document type not found")

    response = admin_client.put("/api/document-types/unknown", json={"name": "X"})

    assert response.status_code == 404
