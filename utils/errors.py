"""
Application error taxonomy.
Raised close to the violation and rendered as JSON by the app-level error handler.
"""


class AppError(Exception):
    """Base error carrying a client-safe message and an HTTP status."""
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self):
        return {"success": False, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class Conflict(AppError):
    status_code = 409
    default_message = "Resource already exists"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class InvalidToken(AppError):
    """Verification token unknown or already consumed."""
    status_code = 400
    default_message = "Invalid verification token"


class TokenExpired(AppError):
    status_code = 400
    default_message = "Verification token has expired. Request a new one."


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(Unauthorized):
    # Same message for unknown email, Google-only account and wrong password
    default_message = "Invalid email or password"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class EmailNotVerified(Forbidden):
    default_message = "Please verify your email before logging in."


class PaymentFailed(AppError):
    status_code = 402
    default_message = "Payment was not completed"


class UpstreamUnavailable(AppError):
    """Provider timeout or non-2xx answer. Safe for the client to retry."""
    status_code = 502
    default_message = "Upstream service unavailable. Please try again later."
