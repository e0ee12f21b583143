import os
import uuid

import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.security import RequestContext
from app.models.document import Document
from app.models.payment import Payment
from app.services.s3_service import S3Service
from app.services.storage_service import StorageService, StoredFile
from app.services.upload_service import BatchMetadata, FileMetadata, UploadService

NO_S3 = S3Service(bucket_name="")


def stored(tmp_path, name, content: bytes) -> StoredFile:
    filename = f"{uuid.uuid4().hex}.pdf"
    path = tmp_path / filename
    path.write_bytes(content)
    return StoredFile(path=str(path), filename=filename, original_name=name, size=len(content),
                      content_type="application/pdf")


def context(user):
    return RequestContext(user=user, ip="127.0.0.1", user_agent="pytest")


def test_batch_accepts_files_and_records_metadata(db_session, verified_user, tmp_path):
    files = [stored(tmp_path, "a.pdf", b"alpha"), stored(tmp_path, "b.pdf", b"beta")]
    meta = [
        FileMetadata(documentTypeId="balance-sheet", tier="Express", originalId="f1"),
        FileMetadata(documentTypeId="net-worth-certificate", originalId="f2"),
    ]
    batch = UploadService.parse_batch_metadata(customer_info='{"name": "Asha"}')

    result = UploadService.process_batch(db_session, context(verified_user), files, meta, batch, s3=NO_S3)

    assert len(result.uploaded) == 2
    assert result.errors == []
    first = db_session.query(Document).filter_by(original_name="a.pdf").one()
    assert first.tier == "Express"
    assert first.document_type_id == "balance-sheet"
    assert first.udin.startswith("UDIN") and len(first.udin) == 18
    assert first.meta["customerInfo"] == {"name": "Asha"}
    assert first.meta["uploadIP"] == "127.0.0.1"
    assert result.uploaded[0]["originalId"] == "f1"
    assert result.to_response()["data"]["totalUploaded"] == 2


def test_duplicate_content_is_rejected_per_file(db_session, verified_user, tmp_path):
    first = stored(tmp_path, "a.pdf", b"same bytes")
    copy = stored(tmp_path, "copy.pdf", b"same bytes")
    other = stored(tmp_path, "c.pdf", b"different")

    result = UploadService.process_batch(
        db_session, context(verified_user), [first, copy, other], [], BatchMetadata(), s3=NO_S3
    )

    assert [doc["fileName"] for doc in result.uploaded] == ["a.pdf", "c.pdf"]
    assert result.errors == ['File "copy.pdf" has already been uploaded']
    assert not os.path.exists(copy.path)
    assert db_session.query(Document).count() == 2

    response = result.to_response()
    assert response["success"] is True
    assert response["data"]["totalRequested"] == 3


def test_unverified_user_rejects_whole_batch(db_session, verified_user, tmp_path):
    verified_user.is_email_verified = False
    db_session.commit()
    files = [stored(tmp_path, "a.pdf", b"alpha"), stored(tmp_path, "b.pdf", b"beta")]

    with pytest.raises(ValidationError) as exc:
        UploadService.process_batch(db_session, context(verified_user), files, [], BatchMetadata(), s3=NO_S3)

    assert "verify your email" in exc.value.message
    assert all(not os.path.exists(f.path) for f in files)
    assert db_session.query(Document).count() == 0


def test_failure_in_one_file_does_not_abort_batch(db_session, verified_user, tmp_path):
    missing = StoredFile(path=str(tmp_path / "gone.pdf"), filename="gone.pdf", original_name="gone.pdf", size=3)
    good = stored(tmp_path, "good.pdf", b"good")

    result = UploadService.process_batch(
        db_session, context(verified_user), [missing, good], [], BatchMetadata(), s3=NO_S3
    )

    assert [doc["fileName"] for doc in result.uploaded] == ["good.pdf"]
    assert len(result.errors) == 1
    assert result.errors[0].startswith('Failed to process file "gone.pdf"')


def test_nothing_accepted_reports_failure(db_session, verified_user, tmp_path):
    UploadService.process_batch(
        db_session, context(verified_user), [stored(tmp_path, "a.pdf", b"x")], [], BatchMetadata(), s3=NO_S3
    )

    result = UploadService.process_batch(
        db_session, context(verified_user), [stored(tmp_path, "again.pdf", b"x")], [], BatchMetadata(), s3=NO_S3
    )

    response = result.to_response()
    assert response["success"] is False
    assert response["message"] == "No files were uploaded successfully"
    assert response["data"]["errors"] == ['File "again.pdf" has already been uploaded']


def test_batch_requires_completed_payment(db_session, verified_user, tmp_path):
    db_session.add(Payment(id="pay1", user_id=verified_user.id, order_id="order_1", amount=354000, status="CREATED"))
    db_session.commit()
    files = [stored(tmp_path, "a.pdf", b"alpha")]

    with pytest.raises(ValidationError):
        UploadService.process_batch(
            db_session, context(verified_user), files, [], BatchMetadata(paymentId="order_1"), s3=NO_S3
        )
    assert not os.path.exists(files[0].path)

    db_session.query(Payment).filter_by(id="pay1").update({"status": "PAID"})
    db_session.commit()
    files = [stored(tmp_path, "a.pdf", b"alpha")]

    result = UploadService.process_batch(
        db_session, context(verified_user), files, [], BatchMetadata(paymentId="order_1"), s3=NO_S3
    )
    assert db_session.query(Document).one().payment_id == "pay1"
    assert len(result.uploaded) == 1


def test_parse_file_metadata():
    parsed = UploadService.parse_file_metadata('[{"documentTypeId": "balance-sheet", "tier": "Premium"}, {}]')
    assert parsed[0].tier == "Premium"
    assert parsed[1].tier == "Standard"
    assert UploadService.parse_file_metadata(None) == []

    with pytest.raises(ValidationError):
        UploadService.parse_file_metadata("{not json")
    with pytest.raises(ValidationError):
        UploadService.parse_file_metadata('{"documentTypeId": "x"}')


def test_upload_status_and_listing(db_session, verified_user, tmp_path):
    result = UploadService.process_batch(
        db_session,
        context(verified_user),
        [stored(tmp_path, f"{i}.pdf", f"content {i}".encode()) for i in range(3)],
        [],
        BatchMetadata(),
        s3=NO_S3,
    )
    upload_id = result.uploaded[0]["id"]

    status = UploadService.get_upload_status(db_session, verified_user.id, upload_id, s3=NO_S3)
    assert status["status"] == "PENDING"
    assert "downloadUrl" not in status

    with pytest.raises(NotFoundError):
        UploadService.get_upload_status(db_session, "someone-else", upload_id, s3=NO_S3)

    page = UploadService.get_user_uploads(db_session, verified_user, verified_user.id, page=1, limit=2)
    assert len(page["uploads"]) == 2
    assert page["pagination"] == {"current": 1, "pages": 2, "total": 3}

    with pytest.raises(ForbiddenError):
        UploadService.get_user_uploads(db_session, verified_user, "another-user")


def test_discard_tolerates_missing_file(tmp_path):
    gone = StoredFile(path=str(tmp_path / "nope"), filename="nope", original_name="nope", size=0)
    assert StorageService.discard(gone) is False


def test_failed_insert_removes_s3_copy(db_session, verified_user, tmp_path):
    s3_client = MagicMock()
    s3 = S3Service(bucket_name="udin-docs", client=s3_client)
    file = stored(tmp_path, "a.pdf", b"alpha")

    failure = OperationalError("INSERT INTO documents ...", {}, Exception("connection lost"))
    with patch.object(db_session, "commit", side_effect=failure):
        result = UploadService.process_batch(db_session, context(verified_user), [file], [], BatchMetadata(), s3=s3)

    assert result.uploaded == []
    assert result.errors == ['Failed to process file "a.pdf": database error']
    s3_client.upload_file.assert_called_once()
    s3_key = s3_client.upload_file.call_args[0][2]
    s3_client.delete_object.assert_called_once_with(Bucket="udin-docs", Key=s3_key)
    assert not os.path.exists(file.path)


def test_file_metadata_falls_back_on_null_values():
    parsed = UploadService.parse_file_metadata(
        '[{"documentTypeId": 7, "tier": null, "originalId": null, "name": 12}]'
    )

    assert parsed[0].documentTypeId == "7"
    assert parsed[0].tier == "Standard"
    assert parsed[0].originalId == ""
    assert parsed[0].name == "12"
