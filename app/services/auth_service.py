from sqlalchemy import or_
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Dict, Optional
import logging
import math
import secrets
import time
import uuid

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.core.security import verify_password, get_password_hash, generate_token
from app.models.email_verification import EmailVerification
from app.models.user import User
from app.utils.email import email_enabled, send_otp_email, send_welcome_email

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def seconds_remaining(expires_at: int, now: Optional[int] = None) -> int:
    """Whole seconds left before ``expires_at`` (epoch ms), never negative."""
    now = now_ms() if now is None else now
    return max(0, math.ceil((expires_at - now) / 1000))


class AuthService:
    @staticmethod
    def public_user(user: User) -> Dict:
        return {
            "id": user.id,
            "userId": user.user_id,
            "name": user.name,
            "email": user.email,
            "mobile": user.mobile,
            "role": user.role,
            "isEmailVerified": user.is_email_verified,
            "lastLogin": user.last_login,
        }

    @staticmethod
    def generate_user_id(db: Session) -> str:
        while True:
            candidate = "USR" + datetime.now(timezone.utc).strftime("%y%m%d") + "".join(
                secrets.choice("0123456789") for _ in range(6)
            )
            if not db.query(User).filter(User.user_id == candidate).first():
                return candidate

    @staticmethod
    def generate_otp_code() -> str:
        return str(100000 + secrets.randbelow(900000))

    @staticmethod
    def issue_otp(email: str, db: Session) -> EmailVerification:
        record = EmailVerification(
            id=str(uuid.uuid4()),
            email=email,
            otp=AuthService.generate_otp_code(),
            verification_id=secrets.token_hex(16),
            expires_at=now_ms() + settings.OTP_EXPIRE_MINUTES * 60 * 1000,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def _otp_payload(record: EmailVerification) -> Dict:
        return {
            "verificationId": record.verification_id,
            "email": record.email,
            "expiresAt": record.expires_at,
            "expiresIn": seconds_remaining(record.expires_at),
        }

    @staticmethod
    def _dispatch_otp(record: EmailVerification):
        sent = send_otp_email(record.email, record.otp, settings.OTP_EXPIRE_MINUTES)
        if not sent and email_enabled():
            raise ExternalServiceError("Failed to send verification email")

    @staticmethod
    def register_user(data: Dict, db: Session) -> Dict:
        email = data["email"]
        mobile = data["mobile"]

        existing = db.query(User).filter(or_(User.email == email, User.mobile == mobile)).first()
        if existing:
            raise ConflictError("User already exists with this email or mobile number")

        temp_password = secrets.token_hex(8)
        user = User(
            id=str(uuid.uuid4()),
            user_id=AuthService.generate_user_id(db),
            name=data["name"],
            email=email,
            mobile=mobile,
            address=data.get("address"),
            hashed_password=get_password_hash(temp_password),
            is_email_verified=False,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        record = AuthService.issue_otp(email, db)
        sent = send_welcome_email(email, user.name, record.otp, temp_password)
        if not sent and email_enabled():
            raise ExternalServiceError("Failed to send verification email")

        logger.info("Registered user %s", user.user_id)
        return {
            "userId": user.user_id,
            "email": user.email,
            "mobile": user.mobile,
            "isEmailVerified": user.is_email_verified,
            **AuthService._otp_payload(record),
        }

    @staticmethod
    def send_otp(email: str, db: Session) -> Dict:
        if db.query(User).filter(User.email == email).first():
            raise ConflictError("User already exists with this email")

        record = AuthService.issue_otp(email, db)
        AuthService._dispatch_otp(record)
        return AuthService._otp_payload(record)

    @staticmethod
    def verify_otp(verification_id: str, otp: str, db: Session) -> Dict:
        record = db.query(EmailVerification).filter(
            EmailVerification.verification_id == verification_id,
            EmailVerification.expires_at > now_ms(),
        ).first()
        if not record:
            raise ValidationError("Invalid or expired OTP")

        if not secrets.compare_digest(record.otp, otp):
            raise ValidationError("Invalid OTP")

        user = db.query(User).filter(User.email == record.email).first()
        if not user:
            raise NotFoundError("User not found")

        user.is_email_verified = True
        user.last_login = datetime.now(timezone.utc)
        db.delete(record)
        db.commit()
        db.refresh(user)

        return {
            "message": "Email verified successfully",
            "token": generate_token(user.id),
            "user": AuthService.public_user(user),
        }

    @staticmethod
    def resend_otp(email: str, db: Session) -> Dict:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            raise NotFoundError("No account found for this email")
        if user.is_email_verified:
            raise ConflictError("Email is already verified")

        db.query(EmailVerification).filter(EmailVerification.email == email).delete(
            synchronize_session=False
        )
        db.commit()

        record = AuthService.issue_otp(email, db)
        AuthService._dispatch_otp(record)
        return AuthService._otp_payload(record)

    @staticmethod
    def otp_status(verification_id: str, db: Session) -> Dict:
        record = db.query(EmailVerification).filter(
            EmailVerification.verification_id == verification_id
        ).first()
        if not record:
            raise NotFoundError("Verification not found")

        issued_at = record.expires_at - settings.OTP_EXPIRE_MINUTES * 60 * 1000
        resend_in = seconds_remaining(issued_at + settings.OTP_RESEND_COOLDOWN_SECONDS * 1000)
        return {
            "verificationId": record.verification_id,
            "expiresAt": record.expires_at,
            "expiresIn": seconds_remaining(record.expires_at),
            "resendIn": resend_in,
            "canResend": resend_in == 0,
        }

    @staticmethod
    def login_user(email: str, password: str, db: Session) -> Dict:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            raise ForbiddenError("Account is deactivated")

        if not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid credentials")

        user.last_login = datetime.now(timezone.utc)
        db.commit()
        db.refresh(user)

        return {
            "token": generate_token(user.id),
            "user": AuthService.public_user(user),
        }

    @staticmethod
    def get_user_profile(user: User) -> Dict:
        return {
            **AuthService.public_user(user),
            "address": user.address,
            "createdAt": user.created_at,
        }
