import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.permissions import user_only
from app.core.security import RequestContext, get_current_user, get_request_context
from app.models.user import User
from app.services.activity_service import ActivityService
from app.services.storage_service import StorageService, storage_service
from app.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(user_only)])


@router.post("/files")
async def upload_files(
    request: Request,
    background_tasks: BackgroundTasks,
    files: List[UploadFile] = File(None),
    fileMetadata: Optional[str] = Form(None),
    customerInfo: Optional[str] = Form(None),
    pricingSnapshot: Optional[str] = Form(None),
    metadata: Optional[str] = Form(None),
    uploadTimestamp: Optional[str] = Form(None),
    paymentId: Optional[str] = Form(None),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Upload a batch of documents.
    Per-file metadata is a JSON array in ``fileMetadata``; entry i describes file i.
    """
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")

    for file in files:
        if file.size and file.size > settings.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=400,
                detail=f"File {file.filename} exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)}MB limit",
            )

    # validate everything before touching the disk
    try:
        file_metadata = UploadService.parse_file_metadata(fileMetadata)
        batch = UploadService.parse_batch_metadata(
            upload_timestamp=uploadTimestamp,
            customer_info=customerInfo,
            pricing_snapshot=pricingSnapshot,
            metadata=metadata,
            payment_id=paymentId,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    stored_files = []
    try:
        stored_files = await storage_service.save_uploads(files)
        result = UploadService.process_batch(db, ctx, stored_files, file_metadata, batch)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception("Upload files error")
        StorageService.discard_all(stored_files)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": str(e) or "File upload failed"},
        )

    for doc in result.uploaded:
        ActivityService.log(
            db,
            action="UPLOAD",
            entity_type="document",
            entity_id=doc["id"],
            user_id=ctx.user.id,
            details={"udin": doc["udin"], "filename": doc["fileName"], "size": doc["fileSize"]},
            request=request,
            background_tasks=background_tasks,
        )

    return JSONResponse(
        status_code=201 if result.uploaded else 400,
        content=jsonable_encoder(result.to_response()),
        background=background_tasks,
    )


@router.get("/status/{upload_id}")
async def get_upload_status(
    upload_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        data = UploadService.get_upload_status(db, current_user.id, upload_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"success": True, "data": data}


@router.get("/user/{user_id}")
async def get_user_uploads(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        data = UploadService.get_user_uploads(db, current_user, user_id, page=page, limit=limit, status=status)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"success": True, "data": data}
