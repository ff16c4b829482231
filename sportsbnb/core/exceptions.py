"""
Custom application exceptions
"""

from typing import Optional, Dict, Any


class SportsbnbException(Exception):
    """Base exception for Sportsbnb application"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class AuthenticationError(SportsbnbException):
    """Authentication related errors"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_ERROR",
            status_code=401,
            details=details
        )


class AuthorizationError(SportsbnbException):
    """Authorization related errors"""

    def __init__(self, message: str = "Not authorized", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_FORBIDDEN",
            status_code=403,
            details=details
        )


class NotFoundError(SportsbnbException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id {identifier} not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class ValidationError(SportsbnbException):
    """
    Form validation errors.

    ``errors`` maps a field name to the message shown next to that field.
    """

    def __init__(self, errors: Dict[str, str], message: str = "Please fix the highlighted fields"):
        self.errors = dict(errors)
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=422,
            details={"fields": self.errors}
        )


class ConflictError(SportsbnbException):
    """Resource conflict errors"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details=details
        )


class BookingError(SportsbnbException):
    """Booking related errors"""

    def __init__(self, message: str, code: str = "BOOKING_ERROR", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details
        )


class SlotUnavailableError(BookingError):
    """Requested time slot is not bookable"""

    def __init__(self, booking_date: str, booking_time: str):
        super().__init__(
            message="Selected time slot is no longer available",
            code="SLOT_UNAVAILABLE",
            details={"booking_date": booking_date, "booking_time": booking_time}
        )


class GameFullError(BookingError):
    """Game has no free player slots"""

    def __init__(self, game_id: str, max_players: int):
        super().__init__(
            message="This game is already full",
            code="GAME_FULL",
            details={"game_id": game_id, "max_players": max_players}
        )


class ResourceBusyError(SportsbnbException):
    """Another request holds the lock on a slot or game"""

    def __init__(self, resource: str):
        super().__init__(
            message="Someone else is booking this right now, please try again",
            code="RESOURCE_BUSY",
            status_code=409,
            details={"resource": resource}
        )


class PaymentError(SportsbnbException):
    """Payment related errors"""

    def __init__(self, message: str = "Payment processing failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="PAYMENT_FAILED",
            status_code=402,
            details=details
        )


class StorageError(SportsbnbException):
    """File upload errors"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            status_code=400,
            details=details
        )


class RateLimitError(SportsbnbException):
    """Rate limit exceeded error"""

    def __init__(self, limit: int, window: int):
        super().__init__(
            message=f"Too many attempts. Max {limit} requests per {window} seconds",
            code="RATE_LIMIT_EXCEEDED",
            status_code=429,
            details={"limit": limit, "window": window}
        )


class ExternalServiceError(SportsbnbException):
    """External service error"""

    def __init__(self, service: str, message: str = None):
        super().__init__(
            message=message or f"External service {service} is unavailable",
            code="EXTERNAL_SERVICE_ERROR",
            status_code=503,
            details={"service": service}
        )
