"""
Error taxonomy shared by the service layer.

Services raise these; the API layer renders them as ``{"error": message}``
with the status code carried by the exception class.
"""


class AppError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class InvalidInputError(AppError):
    status_code = 400
    default_message = "Invalid input"


class InvalidStateError(AppError):
    """Temporal eligibility violated, e.g. the event has already started."""

    status_code = 400
    default_message = "Invalid state"


class ConflictError(AppError):
    status_code = 400
    default_message = "Conflict"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class InternalError(AppError):
    status_code = 500


class EmailDeliveryError(InternalError):
    """
    Raised by the email sender.

    ``transient`` marks failures worth retrying (network errors, timeouts,
    5xx responses from the provider).
    """

    default_message = "Failed to send email"

    def __init__(self, message: str = None, transient: bool = False):
        super().__init__(message)
        self.transient = transient
