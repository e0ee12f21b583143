from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, JSON, func
from sqlalchemy.orm import relationship
from .base import Base


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = {'schema': 'udin'}

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("udin.user.id"), nullable=False, index=True)
    udin = Column(String(32), unique=True, nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    file_type = Column(String(20), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_path = Column(String(500), nullable=False)
    document_hash = Column(String(64), unique=True, nullable=False, index=True)
    document_type_id = Column(String, nullable=True)
    tier = Column(String(20), default="Standard", nullable=False)
    status = Column(String(30), default="PENDING", nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    s3_key = Column(String(500), nullable=True)
    s3_bucket = Column(String(100), nullable=True)
    payment_id = Column(String, ForeignKey("udin.payment.id"), nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)
    upload_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    verification_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    user = relationship("User", back_populates="documents")
    payment = relationship("Payment", back_populates="documents")
