import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


class ActivityService:
    @staticmethod
    def log_task(
        action: str,
        entity_type: str,
        user_id: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ):
        """
        Background task to write activity log.
        Creates its own DB session to ensure persistence after request logic finishes.
        """
        from app.core.database import SessionLocal
        db = SessionLocal()
        try:
            ActivityService._write(db, action, entity_type, user_id, entity_id, details, ip_address, user_agent)
        finally:
            db.close()

    @staticmethod
    def _write(db: Session, action, entity_type, user_id, entity_id, details, ip_address, user_agent):
        try:
            db.add(ActivityLog(
                id=str(uuid.uuid4()),
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                details=details or {},
                ip_address=ip_address,
                user_agent=user_agent,
            ))
            db.commit()
        except Exception:
            logger.exception("Failed to write activity log %s", action)
            db.rollback()

    @staticmethod
    def log(
        db,
        action: str,
        entity_type: str,
        entity_id: str = None,
        user_id: str = None,
        details: dict = None,
        request=None,
        background_tasks=None,
    ):
        """Record an audit entry. Never raises into the request.

        With ``background_tasks`` the write happens after the response on a
        fresh session; otherwise it uses ``db`` directly.
        """
        ip_address = request.client.host if request is not None and request.client else None
        user_agent = request.headers.get("user-agent") if request is not None else None

        if background_tasks is not None:
            background_tasks.add_task(
                ActivityService.log_task,
                action=action,
                entity_type=entity_type,
                user_id=user_id,
                entity_id=entity_id,
                details=details,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            return

        ActivityService._write(db, action, entity_type, user_id, entity_id, details, ip_address, user_agent)
