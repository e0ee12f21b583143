from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean, func
from .base import Base


class DocumentType(Base):
    __tablename__ = "document_types"
    __table_args__ = {'schema': 'udin'}

    id = Column(String, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Integer, nullable=False, default=0)
    udin_required = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<DocumentType(id={self.id}, name='{self.name}')>"
