class DomainError(Exception):
    """Base class for all domain-level errors.

    ``status_code`` and ``message`` describe how the error is surfaced to API
    clients; ``message`` is an untranslated msgid.
    """

    status_code: int = 400
    message: str = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidArgument(DomainError, ValueError):
    """A caller broke a precondition (wrong type, non-positive TTL, ...)."""

    status_code = 500


class StoreUnavailable(DomainError):
    """The expiring key-value store could not be reached."""

    status_code = 503
    message = "Service temporarily unavailable. Please try again later."

    def __init__(self, detail: str | None = None) -> None:
        # detail is for logs only; clients always get the generic message
        super().__init__()
        self.detail = detail


class RateLimited(DomainError):
    """Too many attempts for an identifier inside its window."""

    status_code = 429
    message = "Too many attempts. Please try again in {wait}."

    def __init__(self, remaining_seconds: int, message: str | None = None) -> None:
        self.remaining_seconds = remaining_seconds
        super().__init__(message)


class InvalidCredentials(DomainError):
    status_code = 401
    message = "Invalid credentials."


class InvalidVerificationCode(DomainError):
    message = "Invalid or expired verification code."


class InvalidResetToken(DomainError):
    status_code = 401
    message = "Invalid or expired reset token. Please request a new code."


class AccountInactive(DomainError):
    """Login attempted on an account that has not been activated yet."""

    status_code = 403
    message = (
        "Please activate your account. "
        "A new activation code has been sent to your email."
    )

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__()


class EmailFeaturesDisabled(DomainError):
    status_code = 403
    message = "Email features are disabled."


class UserNotFound(DomainError):
    """No user matches the lookup criteria (e.g., email)."""

    status_code = 404
    message = "User not found."


class UserAlreadyExists(DomainError):
    """Registration collided with an existing username or email."""

    message = "That email is already registered."


class InvalidRegistration(DomainError):
    """Registration input failed validation; ``message`` says which rule."""


class WeakPassword(DomainError):
    """Password failed a strength rule; ``message`` says which one."""


class PasswordMismatch(DomainError):
    message = "Passwords do not match."


class PasswordReused(DomainError):
    message = (
        "You are using the password that you already have. "
        "Please choose a different password."
    )


class InvalidStatusTransition(DomainError):
    """Tried to change a user's status in a way that's not allowed."""

    message = "Account is already active."


class IncorrectPassword(DomainError):
    """The current password given for an authenticated change did not match."""

    message = "Current password is incorrect."


class Unauthenticated(DomainError):
    """Missing, unknown or expired bearer session."""

    status_code = 401
    message = "Invalid or expired session. Please log in again."
