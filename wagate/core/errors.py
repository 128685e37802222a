"""Gateway exception types."""


class WagateError(Exception):
    pass


class ClientUnavailableError(WagateError):
    """Raised when a collaborator call is made with no live messaging client."""
