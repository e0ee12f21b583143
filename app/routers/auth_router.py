from fastapi import APIRouter, HTTPException, Depends, Request, BackgroundTasks
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.security import get_current_user
from app.services.auth_service import AuthService
from app.services.activity_service import ActivityService
from app.models.user import User

router = APIRouter()


class Address(BaseModel):
    street: Optional[str] = None
    state: Optional[str] = None
    pinCode: Optional[str] = None


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    mobile: str = Field(..., pattern=r"^\+?\d{10,15}$")
    address: Optional[Address] = None


class EmailRequest(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    verificationId: str = Field(..., min_length=1)
    otp: str = Field(..., pattern=r"^\d{6}$")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


@router.post("/register", status_code=201)
async def register(request: RegisterRequest, req: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    try:
        data = AuthService.register_user(request.model_dump(), db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    ActivityService.log(
        db,
        action="REGISTER",
        entity_type="user",
        details={"email": request.email},
        request=req,
        background_tasks=background_tasks
    )
    return {
        "success": True,
        "message": "Account created. OTP sent to your email address",
        "data": data,
    }


@router.post("/send-otp")
async def send_otp(request: EmailRequest, db: Session = Depends(get_db)):
    try:
        data = AuthService.send_otp(request.email, db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"success": True, "message": "OTP sent to your email", "data": data}


@router.post("/verify-otp")
async def verify_otp(request: VerifyOtpRequest, req: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    try:
        result = AuthService.verify_otp(request.verificationId, request.otp, db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    ActivityService.log(
        db,
        action="VERIFY_EMAIL",
        entity_type="user",
        entity_id=result["user"]["id"],
        user_id=result["user"]["id"],
        request=req,
        background_tasks=background_tasks
    )
    return {"success": True, **result}


@router.post("/resend-otp")
async def resend_otp(request: EmailRequest, db: Session = Depends(get_db)):
    try:
        data = AuthService.resend_otp(request.email, db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"success": True, "message": "New OTP has been sent to your email", "data": data}


@router.get("/otp-status/{verification_id}")
async def otp_status(verification_id: str, db: Session = Depends(get_db)):
    try:
        data = AuthService.otp_status(verification_id, db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"success": True, "data": data}


@router.post("/login")
async def login(request: LoginRequest, req: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    try:
        result = AuthService.login_user(request.email, request.password, db)
    except ServiceError as e:
        ActivityService.log(
            db,
            action="LOGIN_FAILED",
            entity_type="user",
            details={"email": request.email},
            request=req
        )
        raise HTTPException(status_code=e.status_code, detail=e.message)

    ActivityService.log(
        db,
        action="LOGIN",
        entity_type="user",
        entity_id=result["user"]["id"],
        user_id=result["user"]["id"],
        request=req,
        background_tasks=background_tasks
    )
    return {"success": True, **result}


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": AuthService.get_user_profile(current_user)}
