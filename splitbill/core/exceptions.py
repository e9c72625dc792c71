"""Custom exception classes"""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str = "AppError",
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class InvalidBillError(AppException):
    """Structurally invalid bill (participant count, blank fields, creditor)"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="InvalidBillError",
            details=details
        )


class InvalidAmountError(AppException):
    """Amount that is not strictly positive or not representable"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="InvalidAmountError",
            details=details
        )


class DuplicateParticipantError(AppException):
    """Same address listed twice in one bill"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_type="DuplicateParticipantError",
            details=details
        )


class NotFoundError(AppException):
    """Resource not found exception"""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_type="NotFoundError",
            details=details
        )


class UnauthorizedPayerError(AppException):
    """Payer address does not own a share of the bill"""

    def __init__(self, message: str = "Payer is not a participant of this bill", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=403,
            error_type="UnauthorizedPayerError",
            details=details
        )


class AlreadyPaidError(AppException):
    """Share has already been paid"""

    def __init__(self, message: str = "Share already paid", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_type="AlreadyPaidError",
            details=details
        )


class AmountMismatchError(AppException):
    """Amount sent differs from the amount owed"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_type="AmountMismatchError",
            details=details
        )


class SettlementInvariantError(AppException):
    """Internal bookkeeping inconsistency detected while settling"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_type="SettlementInvariantError",
            details=details
        )


class ConflictError(AppException):
    """Resource conflict exception (e.g., duplicate entry)"""

    def __init__(self, message: str = "Resource already exists", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_type="ConflictError",
            details=details
        )
