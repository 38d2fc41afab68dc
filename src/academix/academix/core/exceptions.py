class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials are invalid or no session is signed in."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when an addressed row or session does not exist."""


class InvalidTransitionError(DomainError):
    """Raised when the auth session state machine gets an event it cannot accept."""


class RemoteStoreError(DomainError):
    """Raised when the remote record store rejects or fails an operation."""

    def __init__(self, message: str, *, operation: str):
        super().__init__(message)
        self.operation = operation


class PartialSessionWriteError(RemoteStoreError):
    """The old rows of a session were deleted but the new rows were not inserted.

    The session is empty in the remote store until it is committed again.
    """

    def __init__(self, message: str, *, date, timestamp):
        super().__init__(message, operation="insert_batch")
        self.date = date
        self.timestamp = timestamp
