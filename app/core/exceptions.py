class ServiceError(Exception):
    """Base class for failures raised by the service layer.

    Routers translate these into ``HTTPException`` using ``status_code``.
    """
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    status_code = 400


class ConflictError(ServiceError):
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ExternalServiceError(ServiceError):
    status_code = 500
