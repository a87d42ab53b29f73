class BookkeepingException(Exception):
    """Base exception for the bookkeeping API"""

    pass


class UnauthorizedException(BookkeepingException):
    """Raised when the request carries no valid identity"""

    pass


class NotFoundException(BookkeepingException):
    """Raised when resource not found"""

    pass


class ForbiddenException(BookkeepingException):
    """Raised when an authenticated user lacks the required permission"""

    pass


class ValidationException(BookkeepingException):
    """Raised for business logic validation errors"""

    pass


class UpgradeRequiredException(BookkeepingException):
    """Raised when a feature needs a higher subscription tier"""

    def __init__(self, message: str, feature: str, current_tier: str):
        super().__init__(message)
        self.feature = feature
        self.current_tier = current_tier


class InvalidAccessCheck(BookkeepingException, ValueError):
    """Raised when an access check names an unknown resource or action.

    This is a programming error, not a denial.
    """

    pass
