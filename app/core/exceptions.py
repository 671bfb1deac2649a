class OrbitalHubException(Exception):
    """Base exception for the business API"""

    pass


class UnauthenticatedException(OrbitalHubException):
    """Raised when no principal can be resolved for the request"""

    pass


class UnauthorizedException(OrbitalHubException):
    """Raised when the principal lacks the role or tenant an operation needs"""

    pass


class ValidationException(OrbitalHubException):
    """Raised for business rule validation errors"""

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        super().__init__(message)
        self.fields = fields or {}


class NotFoundException(OrbitalHubException):
    """Raised when a record does not exist inside the caller's tenant"""

    pass


class ReferentialConflictException(OrbitalHubException):
    """Raised when dependent records block a delete or update"""

    pass


class PersistenceException(OrbitalHubException):
    """Raised when the store fails unexpectedly. Message is safe to show."""

    def __init__(self, message: str = "The operation could not be completed"):
        super().__init__(message)


class RedirectException(OrbitalHubException):
    """Raised by the route guard to send the client somewhere else"""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location
