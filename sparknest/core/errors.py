"""Error taxonomy for the authentication core.

Every error carries the HTTP status it maps to and a user-facing message.
Authentication failures deliberately share generic messages so responses
do not reveal which half of a credential pair was wrong.
"""

from typing import Any, List, Optional


class SparkNestError(Exception):
    """Base exception for SparkNest"""

    status_code: int = 500
    message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ConfigError(SparkNestError):
    """Configuration error, raised at startup"""


class ValidationFailed(SparkNestError):
    """Malformed input shape"""

    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: Optional[List[Any]] = None, message: Optional[str] = None):
        self.errors = errors or []
        super().__init__(message)


class DuplicateAccount(SparkNestError):
    status_code = 400
    message = "User with this email already exists"


class InvalidOrExpiredCode(SparkNestError):
    status_code = 400
    message = "Invalid or expired OTP"


class InvalidCredentials(SparkNestError):
    status_code = 400
    message = "Invalid email or password"


class EmailNotVerified(SparkNestError):
    status_code = 400
    message = "Please verify your email first"


class TokenInvalid(SparkNestError):
    status_code = 401
    message = "Invalid or expired token"


class TokenExpired(TokenInvalid):
    pass


class Unauthenticated(SparkNestError):
    status_code = 401
    message = "Access token required"


class DeliveryFailed(SparkNestError):
    """Email transport failure"""

    status_code = 502
    message = "Failed to send OTP"


class StorageUnavailable(SparkNestError):
    status_code = 503
    message = "Service temporarily unavailable"


class NoteNotFound(SparkNestError):
    status_code = 404
    message = "Note not found"
