from typing import Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.security import get_current_user
from app.models.user import User
from app.services.activity_service import ActivityService
from app.services.document_type_service import DocumentTypeService
from app.services.payment_service import PaymentService
from app.services.pricing_service import Calculation, FileItem, OrderItem, PricingService

router = APIRouter(dependencies=[Depends(get_current_user)])


class QuoteRequest(BaseModel):
    orderItems: List[OrderItem] = []
    files: List[FileItem] = []
    calculation: Optional[Calculation] = None


class OrderRequest(QuoteRequest):
    customer: Optional[Dict[str, str]] = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


def _breakdown(request: QuoteRequest, db: Session):
    ids = [i.documentTypeId for i in request.orderItems] + [f.documentTypeId for f in request.files]
    catalogue = DocumentTypeService(db).get_price_map(ids)
    pricing = PricingService(catalogue)
    items = pricing.build_items(request.orderItems, request.files)
    return pricing.compute_breakdown(items, request.calculation)


@router.post("/quote")
async def quote(request: QuoteRequest, db: Session = Depends(get_db)):
    return {"success": True, "data": _breakdown(request, db).to_dict()}


@router.post("/order")
async def create_order(
    request: OrderRequest,
    req: Request,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        data = PaymentService.create_order(db, current_user, _breakdown(request, db), request.customer)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    ActivityService.log(
        db,
        action="PAYMENT_ORDER",
        entity_type="payment",
        entity_id=data["orderId"],
        user_id=current_user.id,
        details={"amountPaise": data["amountPaise"]},
        request=req,
        background_tasks=background_tasks,
    )
    return {"success": True, "data": jsonable_encoder(data)}


@router.post("/verify")
async def verify_payment(
    request: VerifyPaymentRequest,
    req: Request,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        data = PaymentService.verify_payment(
            db,
            current_user,
            request.razorpay_order_id,
            request.razorpay_payment_id,
            request.razorpay_signature,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    ActivityService.log(
        db,
        action="PAYMENT_VERIFIED",
        entity_type="payment",
        entity_id=data["paymentId"],
        user_id=current_user.id,
        request=req,
        background_tasks=background_tasks,
    )
    return {"success": True, "data": data}
