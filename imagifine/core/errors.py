# imagifine/core/errors.py
"""Domain errors raised by services and mapped to HTTP responses by the app."""

from typing import Optional


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def public_message(self) -> str:
        return self.message


# ─────────────────────────────────────────────
# 400
# ─────────────────────────────────────────────

class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidPlan(ValidationError):
    default_message = "Invalid plan"


class InvalidSignature(ValidationError):
    default_message = "Invalid signature"


class OTPExpired(ValidationError):
    default_message = "OTP has expired"


class InvalidOTP(ValidationError):
    default_message = "Invalid OTP"


class InvalidCredentials(ValidationError):
    default_message = "Invalid credentials"


class BalanceOutOfRange(ValidationError):
    default_message = "Credit balance out of range"


class ConflictError(AppError):
    status_code = 400
    default_message = "Conflict"


class AlreadyExists(ConflictError):
    default_message = "User already exists and is verified"


class DuplicateAccount(ConflictError):
    default_message = "Username or email already in use"


# ─────────────────────────────────────────────
# 401 / 403 / 404 / 429
# ─────────────────────────────────────────────

class AuthError(AppError):
    status_code = 401
    default_message = "Not authenticated"


class ForbiddenError(AuthError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class AccountNotFound(NotFoundError):
    default_message = "User not found"


class TransactionNotFound(NotFoundError):
    default_message = "Transaction not found"


class ContactNotFound(NotFoundError):
    default_message = "Contact not found"


class RateLimitedError(AppError):
    status_code = 429
    default_message = "Too many requests, please wait before retrying"


# ─────────────────────────────────────────────
# 500 - detail stays in the server log
# ─────────────────────────────────────────────

class ExternalServiceError(AppError):
    status_code = 500
    default_message = "External service error"
    public = "Server error"

    @property
    def public_message(self) -> str:
        return self.public


class GatewayUnavailable(ExternalServiceError):
    default_message = "Payment gateway unavailable"
    public = "Payment service unavailable, please try again"


class NotificationFailed(ExternalServiceError):
    default_message = "Notification delivery failed"
    public = "Failed to send email"


class OrderPersistenceFailed(ExternalServiceError):
    default_message = "Order could not be recorded"
    public = "Could not create order, please try again"


class VerificationFailed(ExternalServiceError):
    default_message = "Payment verification failed"
    public = "Payment verification failed, please retry"
