from sqlalchemy import Column, String, DateTime, ForeignKey, Text, JSON
from sqlalchemy.sql import func
from .base import Base


class ActivityLog(Base):
    __tablename__ = "activity_log"
    __table_args__ = {'schema': 'udin'}

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey('udin.user.id'), nullable=True)
    action = Column(String, nullable=False, index=True)
    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(String, nullable=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
