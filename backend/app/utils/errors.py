"""Error taxonomy shared by the auth flow and the doubt-solving proxy.

Every error carries a fixed, human-readable ``message``. Route handlers
choose the HTTP status; the message is the only detail ever returned to
the client.
"""
from typing import Optional


class CodeCoachError(Exception):
    """Base class for all application errors."""

    message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Bad input shape
# ---------------------------------------------------------------------------

class ValidationError(CodeCoachError):
    message = "Invalid input"


class MissingFieldError(ValidationError):
    message = "Some field missing"


class InvalidEmailError(ValidationError):
    message = "Invalid email"


class WeakPasswordError(ValidationError):
    message = "Weak password"


class MissingFieldsError(ValidationError):
    message = "Missing required fields: messages and title"


# ---------------------------------------------------------------------------
# Bad or missing credentials / token
# ---------------------------------------------------------------------------

class AuthenticationError(CodeCoachError):
    message = "Authentication failed"


class MissingCredentialsError(AuthenticationError):
    message = "Email and password are required"


class InvalidCredentialsError(AuthenticationError):
    message = "Invalid credentials"


class MissingTokenError(AuthenticationError):
    message = "Token is not present"


class MalformedTokenError(AuthenticationError):
    message = "Invalid or expired token"


class RevokedTokenError(AuthenticationError):
    message = "Token has been revoked"


# ---------------------------------------------------------------------------
# Acting identity
# ---------------------------------------------------------------------------

class AuthorizationError(CodeCoachError):
    message = "Not authorized"


class MissingIdentityError(AuthorizationError):
    message = "No authenticated user attached to the request"


# ---------------------------------------------------------------------------
# Stores and downstream services
# ---------------------------------------------------------------------------

class PersistenceError(CodeCoachError):
    message = "Database operation failed"


class DuplicateEmailError(PersistenceError):
    message = "Email already registered"


class ServiceUnavailableError(CodeCoachError):
    message = "Service temporarily unavailable. Please try again."
