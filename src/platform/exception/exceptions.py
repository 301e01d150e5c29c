class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class GoneError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 410)


class TooManyRequestsError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 429)


class UpstreamServiceError(CustomBaseError):
    """Payment / email / storage provider failed or reported a non-success status."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)


class InternalInconsistencyError(CustomBaseError):
    """A multi-step write failed part way and had to be compensated."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)
