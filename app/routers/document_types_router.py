from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional
from pydantic import BaseModel, Field

from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.permissions import RoleRequired
from app.models.user import User
from app.services.activity_service import ActivityService
from app.services.document_type_service import DocumentTypeService

router = APIRouter()

admin_only = RoleRequired("admin")


class DocumentTypeCreate(BaseModel):
    id: str = Field(..., pattern=r"^[a-z0-9_-]+$")
    name: str
    description: Optional[str] = None
    base_price: int = Field(..., ge=0)
    udin_required: bool = False
    is_active: bool = True


class DocumentTypeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[int] = Field(None, ge=0)
    udin_required: Optional[bool] = None
    is_active: Optional[bool] = None


class DocumentTypeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    base_price: int
    udin_required: bool
    is_active: bool

    class Config:
        from_attributes = True


@router.get("", response_model=List[DocumentTypeResponse])
def get_document_types(db: Session = Depends(get_db)):
    """Active document types with their base prices"""
    return DocumentTypeService(db).get_active()


@router.get("/{document_type_id}", response_model=DocumentTypeResponse)
def get_document_type(document_type_id: str, db: Session = Depends(get_db)):
    document_type = DocumentTypeService(db).get_by_id(document_type_id)
    if not document_type:
        raise HTTPException(status_code=404, detail="Document type not found")
    return document_type


@router.post("", response_model=DocumentTypeResponse, status_code=status.HTTP_201_CREATED)
def create_document_type(
    request: DocumentTypeCreate,
    req: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    try:
        document_type = DocumentTypeService(db).create(request.model_dump())
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    ActivityService.log(
        db,
        action="CREATE",
        entity_type="document_type",
        entity_id=document_type.id,
        user_id=current_user.id,
        details={"name": request.name, "base_price": request.base_price},
        request=req,
        background_tasks=background_tasks
    )
    return document_type


@router.put("/{document_type_id}", response_model=DocumentTypeResponse)
def update_document_type(
    document_type_id: str,
    request: DocumentTypeUpdate,
    req: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    changes = request.model_dump(exclude_unset=True)
    try:
        document_type = DocumentTypeService(db).update(document_type_id, changes)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    ActivityService.log(
        db,
        action="UPDATE",
        entity_type="document_type",
        entity_id=document_type_id,
        user_id=current_user.id,
        details=changes,
        request=req,
        background_tasks=background_tasks
    )
    return document_type
