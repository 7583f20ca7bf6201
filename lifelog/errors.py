"""
errors.py — Lifelog error taxonomy
Every failure surfaced to a caller is a LifelogError carrying a user-facing
message and the HTTP status the routes answer with.
"""

import logging

logger = logging.getLogger(__name__)


class LifelogError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred. Please try again."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LifelogError):
    status_code = 400
    default_message = "Invalid input."


class AuthError(LifelogError):
    """Base for errors reported by the authentication provider."""

    status_code = 400
    default_message = "Authentication failed. Please try again."

    def __init__(self, message: str | None = None, code: str | None = None):
        super().__init__(message)
        self.code = code


class EmailAlreadyInUse(AuthError):
    status_code = 409
    default_message = "This email is already registered. Please sign in instead."


class AccountNotFound(AuthError):
    status_code = 404
    default_message = "No account found with this email. Please sign up first."


class WrongCredential(AuthError):
    status_code = 401
    default_message = "Incorrect password. Please try again."


class EmailNotVerified(AuthError):
    status_code = 403
    default_message = (
        "Please verify your email before signing in. "
        "We've sent you a new verification link."
    )


class RateLimited(AuthError):
    status_code = 429
    default_message = "Too many failed attempts. Please try again later."


class NetworkFailure(AuthError):
    status_code = 503
    default_message = "Network error. Please check your internet connection."


class PermissionDenied(AuthError):
    status_code = 403
    default_message = "Permission denied. Please try again or contact support."


class RepositoryError(LifelogError):
    status_code = 500
    default_message = "Failed to access journal entries."


class NotificationError(LifelogError):
    status_code = 500
    default_message = "Failed to update notification settings."


class AnalyticsError(LifelogError):
    status_code = 503
    default_message = "Word cloud is unavailable: the text tagger data could not be loaded."


# provider code → (error class, user-facing message)
AUTH_ERROR_TABLE: dict[str, tuple[type[LifelogError], str]] = {
    "email-already-in-use": (EmailAlreadyInUse, EmailAlreadyInUse.default_message),
    "invalid-email": (ValidationError, "Please enter a valid email address."),
    "operation-not-allowed": (
        PermissionDenied,
        "Email/password accounts are not enabled. Please contact support.",
    ),
    "weak-password": (ValidationError, "Password should be at least 6 characters long."),
    "user-disabled": (PermissionDenied, "This account has been disabled. Please contact support."),
    "user-not-found": (AccountNotFound, AccountNotFound.default_message),
    "wrong-password": (WrongCredential, WrongCredential.default_message),
    "email-not-verified": (EmailNotVerified, EmailNotVerified.default_message),
    "too-many-requests": (RateLimited, RateLimited.default_message),
    "network-request-failed": (NetworkFailure, NetworkFailure.default_message),
    "permission-denied": (PermissionDenied, PermissionDenied.default_message),
}


def _generic_auth_message(raw: str) -> str:
    lowered = raw.lower()
    if "email" in lowered:
        hint = "Please check your email address."
    elif "password" in lowered:
        hint = "Please check your password."
    elif "network" in lowered:
        hint = "Please check your internet connection."
    else:
        hint = "Please try again."
    return f"Authentication error: {raw}. {hint}"


def map_auth_error(error: Exception) -> LifelogError:
    """Translate a provider failure into a LifelogError with a fixed message."""
    if isinstance(error, LifelogError):
        return error

    logger.error(f"Auth provider error: {error!r}")
    code = getattr(error, "code", None)
    if code in AUTH_ERROR_TABLE:
        cls, message = AUTH_ERROR_TABLE[code]
        if issubclass(cls, AuthError):
            return cls(message, code=code)
        return cls(message)

    raw = getattr(error, "message", None) or str(error)
    if not raw:
        return AuthError(LifelogError.default_message, code=code)
    return AuthError(_generic_auth_message(raw), code=code)
