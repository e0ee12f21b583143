from .auth_service import AuthService
from .upload_service import UploadService
from .document_type_service import DocumentTypeService
from .pricing_service import PricingService
from .payment_service import PaymentService
from .activity_service import ActivityService

__all__ = ["AuthService", "UploadService", "DocumentTypeService", "PricingService", "PaymentService", "ActivityService"]
