from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from .base import Base


class Payment(Base):
    __tablename__ = "payment"
    __table_args__ = {'schema': 'udin'}

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("udin.user.id"), nullable=False, index=True)
    order_id = Column(String, unique=True, nullable=False, index=True)
    payment_id = Column(String, nullable=True)
    # paise
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    status = Column(String(20), default="CREATED", nullable=False)
    breakdown = Column(JSON, nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="payments")
    documents = relationship("Document", back_populates="payment")
