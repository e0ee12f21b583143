from .base import Base
from .user import User
from .email_verification import EmailVerification
from .document_type import DocumentType
from .payment import Payment
from .document import Document
from .activity_log import ActivityLog

__all__ = [
    'Base', 'User', 'EmailVerification', 'DocumentType', 'Payment', 'Document', 'ActivityLog'
]
