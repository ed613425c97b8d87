# Domain error taxonomy shared by the operations layer and the API

class ReserveError(Exception):
    """Base class for errors raised by donation and account operations"""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(ReserveError, ValueError):
    """Bad input for an operation; nothing was changed"""


class NotFoundError(ReserveError, LookupError):
    """Unknown donation, reservation or account id; nothing was changed"""


class InvalidTransitionError(ReserveError):
    """Account workflow step not allowed from the current status"""


class CollaboratorFailure(ReserveError):
    """
    External enrichment service failed.

    Never leaves the collaborator adapters: callers always receive a fallback value.
    """
