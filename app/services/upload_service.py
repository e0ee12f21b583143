import json
import logging
import math
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.security import RequestContext
from app.models.document import Document
from app.models.payment import Payment
from app.services.s3_service import S3Service, s3_service
from app.services.storage_service import StorageService, StoredFile

logger = logging.getLogger(__name__)


class FileMetadata(BaseModel):
    documentTypeId: str = ""
    tier: str = "Standard"
    originalId: str = ""
    name: Optional[str] = None

    @field_validator("documentTypeId", "tier", "originalId", mode="before")
    @classmethod
    def _fallback(cls, value, info):
        if value is None or value == "":
            return "Standard" if info.field_name == "tier" else ""
        return str(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return None if value is None else str(value)


class BatchMetadata(BaseModel):
    uploadTimestamp: Optional[str] = None
    customerInfo: Optional[Dict[str, Any]] = None
    pricingSnapshot: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    paymentId: Optional[str] = None


@dataclass
class BatchResult:
    uploaded: List[Dict] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    total_requested: int = 0

    def to_response(self) -> Dict:
        accepted = len(self.uploaded)
        return {
            "success": accepted > 0,
            "message": (
                f"Successfully uploaded {accepted} file(s)"
                if accepted > 0
                else "No files were uploaded successfully"
            ),
            "data": {
                "uploadedFiles": self.uploaded,
                "totalUploaded": accepted,
                "totalRequested": self.total_requested,
                **({"errors": self.errors} if self.errors else {}),
            },
        }


def _parse_json_field(raw: Optional[str], name: str):
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Validation failed: {name} must be valid JSON")


class UploadService:

    @staticmethod
    def parse_file_metadata(raw: Optional[str]) -> List[FileMetadata]:
        """Parse the ``fileMetadata`` field: a JSON array, entry i describing file i."""
        parsed = _parse_json_field(raw, "fileMetadata")
        if parsed is None:
            return []
        if not isinstance(parsed, list):
            raise ValidationError("Validation failed: fileMetadata must be a JSON array")
        try:
            return [FileMetadata(**(entry or {})) for entry in parsed]
        except (TypeError, PydanticValidationError) as e:
            raise ValidationError(f"Validation failed: invalid fileMetadata entry ({e})")

    @staticmethod
    def parse_batch_metadata(
        upload_timestamp: Optional[str] = None,
        customer_info: Optional[str] = None,
        pricing_snapshot: Optional[str] = None,
        metadata: Optional[str] = None,
        payment_id: Optional[str] = None,
    ) -> BatchMetadata:
        return BatchMetadata(
            paymentId=payment_id or None,
            uploadTimestamp=upload_timestamp or datetime.now(timezone.utc).isoformat(),
            customerInfo=_parse_json_field(customer_info, "customerInfo"),
            pricingSnapshot=_parse_json_field(pricing_snapshot, "pricingSnapshot"),
            metadata=_parse_json_field(metadata, "metadata"),
        )

    @staticmethod
    def generate_udin(db: Session) -> str:
        while True:
            candidate = "UDIN" + datetime.now(timezone.utc).strftime("%y%m%d") + secrets.token_hex(4).upper()
            if not db.query(Document).filter(Document.udin == candidate).first():
                return candidate

    @staticmethod
    def _document_view(document: Document, original_id: str) -> Dict:
        return {
            "id": document.id,
            "udin": document.udin,
            "fileName": document.original_name,
            "fileSize": document.file_size,
            "fileType": document.file_type,
            "documentTypeId": document.document_type_id,
            "tier": document.tier,
            "uploadDate": document.upload_date,
            "status": document.status,
            "originalId": original_id,
        }

    @staticmethod
    def _process_file(
        db: Session,
        ctx: RequestContext,
        stored: StoredFile,
        meta: FileMetadata,
        batch: BatchMetadata,
        s3: S3Service,
        result: BatchResult,
        payment_id: Optional[str] = None,
    ) -> bool:
        document_hash = StorageService.compute_hash(stored.path)

        if db.query(Document).filter(Document.document_hash == document_hash).first():
            StorageService.discard(stored)
            result.errors.append(f'File "{stored.original_name}" has already been uploaded')
            return False

        udin = UploadService.generate_udin(db)

        s3_key = s3_bucket = None
        if s3.enabled:
            s3_key, s3_bucket = s3.upload_file(stored.path, udin, stored.filename, stored.content_type)

        document = Document(
            id=str(uuid.uuid4()),
            user_id=ctx.user.id,
            udin=udin,
            file_name=stored.filename,
            original_name=stored.original_name,
            file_type=stored.extension,
            file_size=stored.size,
            file_path=stored.path,
            document_hash=document_hash,
            document_type_id=meta.documentTypeId,
            tier=meta.tier or "Standard",
            s3_key=s3_key,
            s3_bucket=s3_bucket,
            payment_id=payment_id,
            meta={
                "uploadIP": ctx.ip,
                "userAgent": ctx.user_agent,
                "uploadTimestamp": batch.uploadTimestamp,
                "checksum": document_hash,
                "originalId": meta.originalId,
                "customerInfo": batch.customerInfo,
                "pricingSnapshot": batch.pricingSnapshot,
                "uploadMetadata": batch.metadata,
            },
        )
        db.add(document)
        try:
            db.commit()
            db.refresh(document)
        except IntegrityError:
            # lost a race against a concurrent upload of the same bytes
            db.rollback()
            if s3_key:
                s3.delete_file(s3_key)
            StorageService.discard(stored)
            result.errors.append(f'File "{stored.original_name}" has already been uploaded')
            return False
        except Exception:
            db.rollback()
            if s3_key:
                s3.delete_file(s3_key)
            raise

        result.uploaded.append(UploadService._document_view(document, meta.originalId))
        return True

    @staticmethod
    def process_batch(
        db: Session,
        ctx: RequestContext,
        stored_files: List[StoredFile],
        file_metadata: List[FileMetadata],
        batch: BatchMetadata,
        s3: S3Service = None,
    ) -> BatchResult:
        """Accept a batch of temporarily stored files.

        The whole batch fails only when the account is not email-verified or
        the referenced payment is not completed; in that case every temporary
        file is deleted first. Otherwise each
        file is hashed, rejected if its content was uploaded before, and
        stored with a fresh UDIN. Failures are reported per file.
        """
        s3 = s3 or s3_service

        if not stored_files:
            raise ValidationError("No files uploaded")

        if not ctx.user.is_email_verified:
            StorageService.discard_all(stored_files)
            raise ValidationError("Please verify your email before uploading documents")

        payment_id = None
        if batch.paymentId:
            payment = db.query(Payment).filter(
                or_(Payment.id == batch.paymentId, Payment.order_id == batch.paymentId),
                Payment.user_id == ctx.user.id,
                Payment.status == "PAID",
            ).first()
            if not payment:
                StorageService.discard_all(stored_files)
                raise ValidationError("Payment not found or not completed")
            payment_id = payment.id

        result = BatchResult(total_requested=len(stored_files))
        for index, stored in enumerate(stored_files):
            meta = file_metadata[index] if index < len(file_metadata) else FileMetadata()
            try:
                UploadService._process_file(db, ctx, stored, meta, batch, s3, result, payment_id)
            except Exception as e:
                db.rollback()
                StorageService.discard(stored)
                logger.exception("Error processing file %s", stored.original_name)
                if isinstance(e, SQLAlchemyError):
                    message = "database error"
                else:
                    message = getattr(e, "message", None) or str(e)
                result.errors.append(f'Failed to process file "{stored.original_name}": {message}')

        logger.info(
            "User %s uploaded %d of %d file(s)",
            ctx.user.user_id, len(result.uploaded), result.total_requested,
        )
        return result

    @staticmethod
    def get_upload_status(db: Session, user_id: str, upload_id: str, s3: S3Service = None) -> Dict:
        s3 = s3 or s3_service
        document = db.query(Document).filter(
            Document.id == upload_id,
            Document.user_id == user_id,
        ).first()
        if not document:
            raise NotFoundError("Upload not found")

        data = {
            "uploadId": document.id,
            "status": document.status,
            "fileName": document.original_name,
            "fileSize": document.file_size,
            "uploadDate": document.upload_date,
            "udin": document.udin,
        }
        if document.s3_key and s3.enabled:
            data["downloadUrl"] = s3.generate_presigned_url(document.s3_key)
        return data

    @staticmethod
    def get_user_uploads(
        db: Session,
        current_user,
        requested_user_id: str,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
    ) -> Dict:
        if requested_user_id not in (current_user.id, current_user.user_id):
            raise ForbiddenError("You can only view your own uploads")
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")

        query = db.query(Document).filter(
            Document.user_id == current_user.id,
            Document.is_active.is_(True),
        )
        if status:
            query = query.filter(Document.status == status)

        total = query.count()
        documents = (
            query.order_by(Document.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        uploads = []
        for doc in documents:
            payment = None
            if doc.payment is not None:
                payment = {
                    "id": doc.payment.id,
                    "status": doc.payment.status,
                    "amount": doc.payment.amount,
                    "paymentDate": doc.payment.payment_date,
                }
            uploads.append({
                "id": doc.id,
                "udin": doc.udin,
                "fileName": doc.original_name,
                "fileType": doc.file_type,
                "fileSize": doc.file_size,
                "status": doc.status,
                "uploadDate": doc.upload_date,
                "verificationDate": doc.verification_date,
                "documentTypeId": doc.document_type_id,
                "tier": doc.tier,
                "payment": payment,
            })

        return {
            "uploads": uploads,
            "pagination": {
                "current": page,
                "pages": math.ceil(total / limit),
                "total": total,
            },
        }
