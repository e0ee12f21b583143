from sqlalchemy import Column, String, DateTime, BigInteger
from sqlalchemy.sql import func
from .base import Base


class EmailVerification(Base):
    __tablename__ = "email_verification"
    __table_args__ = {'schema': 'udin'}

    id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    otp = Column(String(6), nullable=False)
    verification_id = Column(String(32), unique=True, nullable=False, index=True)
    # epoch milliseconds
    expires_at = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
