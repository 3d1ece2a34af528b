class ProjectDeskError(Exception):
    """Base exception for the ProjectDesk backend."""

    pass


class ExchangeError(ProjectDeskError):
    """Raised when the identity provider rejects a login code.

    ``message`` is the provider's own text and is shown to the client as-is.
    """

    def __init__(self, message: str, code: int | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


class StoreUnavailableError(ProjectDeskError):
    """Raised when an operation needs the store but it is not connected."""

    pass


class TokenError(ProjectDeskError):
    """Raised when a session token cannot be decoded or has expired."""

    pass
