# app/core/exceptions.py
"""Domain errors raised by the service layer.

Routes never build HTTP errors for these by hand; `app.main` registers one
handler that turns any `ServiceError` into a `{"error", "detail"}` body.
"""


class ServiceError(Exception):
    """Base class for every error the service layer raises on purpose"""
    code = "service_error"
    status_code = 400

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Input failed validation"""
    code = "validation_error"
    status_code = 422

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or []


class DuplicateReviewError(ServiceError):
    """Review for this booking already exists"""
    code = "duplicate_review"
    status_code = 409


class BookingNotReviewableError(ServiceError):
    """Booking cannot be reviewed"""
    code = "booking_not_reviewable"
    status_code = 400


class InvalidStatusTransitionError(ServiceError):
    """Status change not allowed"""
    code = "invalid_status_transition"
    status_code = 400


class NotFoundError(ServiceError):
    code = "not_found"
    status_code = 404


class ProviderNotFoundError(NotFoundError):
    """Provider not found"""
    code = "provider_not_found"


class BookingNotFoundError(NotFoundError):
    """Booking not found"""
    code = "booking_not_found"


class ReviewNotFoundError(NotFoundError):
    """Review not found"""
    code = "review_not_found"


class ServiceNotFoundError(NotFoundError):
    """Service not found"""
    code = "service_not_found"


class UserNotFoundError(NotFoundError):
    """User not found"""
    code = "user_not_found"


class DuplicateUserError(ServiceError):
    """Email already registered"""
    code = "duplicate_user"
    status_code = 409


class StorageError(ServiceError):
    """Storage operation failed"""
    code = "storage_error"
    status_code = 500
