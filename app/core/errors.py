"""Application error taxonomy. Each error carries a client-safe message and HTTP status."""

from fastapi import status


class AppError(Exception):
    """Base for errors rendered to clients as {"error": message}."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None, details: list | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidCredentials(AppError):
    """Unknown user, non-admin user, or wrong password (deliberately indistinguishable)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class NotificationFailure(AppError):
    """OTP email could not be delivered."""

    default_message = "Failed to send OTP"


class InvalidUser(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid user"


class OtpExpiredOrMissing(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "OTP expired or invalid"


class InvalidOtp(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid OTP"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden: Not an admin"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class StoreError(AppError):
    """Persistence layer failure; detail is logged, never returned."""

    default_message = "Server error"


class ConversionError(AppError):
    """External notebook converter failed or timed out."""

    default_message = "Error converting notebook"
