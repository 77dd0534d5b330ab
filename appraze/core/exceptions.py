from typing import Any, Dict, Optional


class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message=message, status_code=404, error_code="NOT_FOUND")


class ValidationFailedError(AppException):
    """Business-rule validation that runs before any write."""
    def __init__(self, message: str):
        super().__init__(message=message, status_code=400, error_code="VALIDATION_FAILED")


class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )


class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )


class RecordStoreError(AppException):
    """
    Failure reported by the record store.

    `code` mirrors the store's own error codes so callers can special-case
    the "no rows" condition without string matching.
    """
    NOT_FOUND = "PGRST116"
    BAD_REQUEST = "PGRST100"
    UNIQUE_VIOLATION = "23505"
    DATABASE_ERROR = "DB_ERROR"

    def __init__(self, message: str, code: str = DATABASE_ERROR):
        self.code = code
        super().__init__(
            message=message,
            status_code=404 if code == self.NOT_FOUND else 502,
            error_code=f"STORE_{code}",
            details={"code": code},
        )

    @property
    def is_not_found(self) -> bool:
        return self.code == self.NOT_FOUND


class GenerationError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="AI_SERVICE_UNAVAILABLE",
            details=details
        )


class ReviewCreationError(AppException):
    def __init__(self, message: str = "Failed to create review. Please try again."):
        super().__init__(message=message, status_code=500, error_code="REVIEW_CREATION_FAILED")


class ReviewGenerationError(AppException):
    def __init__(self, review_id: str, message: str = "Failed to generate review with AI. Please try again or check your API key."):
        self.review_id = review_id
        super().__init__(
            message=message,
            status_code=502,
            error_code="REVIEW_GENERATION_FAILED",
            details={"review_id": review_id},
        )


class BillingError(AppException):
    def __init__(self, message: str = "Payment provider request failed"):
        super().__init__(message=message, status_code=502, error_code="BILLING_ERROR")


class WebhookSignatureError(AppException):
    def __init__(self, message: str):
        super().__init__(message=message, status_code=400, error_code="WEBHOOK_SIGNATURE_INVALID")
