class AuthError(Exception):
    """Base for errors surfaced to the client as JSON responses."""

    status_code = 400
    default_message = "Authentication error"

    def __init__(self, message: str = None, **extra) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.extra = extra

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        body = {"error": self.name, "message": self.message}
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body


class ValidationError(AuthError):
    default_message = "Invalid request"

    def __init__(self, message: str = None, details=None) -> None:
        super().__init__(message, details=details)


class DuplicateEmail(AuthError):
    default_message = "Email already in use"


class DuplicateUsername(AuthError):
    default_message = "Username already exists"


class InvalidCredentials(AuthError):
    # same message for unknown email and wrong password
    status_code = 401
    default_message = "Invalid email or password"


class AccountLocked(AuthError):
    status_code = 401
    default_message = "Account is locked. Try again later."

    def __init__(self, message: str = None, lockout_minutes=None, retry_after_seconds=None, locked_now=False) -> None:
        super().__init__(
            message,
            lockout_minutes=lockout_minutes,
            retry_after_seconds=retry_after_seconds,
        )
        self.locked_now = locked_now


class NotAuthenticated(AuthError):
    status_code = 401
    default_message = "Not authenticated"
