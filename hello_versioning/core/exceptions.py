"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class DeclarationError(ApplicationError):
    """Raised when a client declaration is invalid or used incorrectly."""

    def __init__(self, message: str = "Invalid client declaration") -> None:
        super().__init__(message, code="CLIENT_DECLARATION_ERROR")


class ExternalServiceError(ApplicationError):
    """Raised when an external service call fails."""

    def __init__(
        self,
        message: str = "External service error",
        code: str = "SYS_EXTERNAL_SERVICE_ERROR",
    ) -> None:
        super().__init__(message, code=code)


class RemoteCallError(ExternalServiceError):
    """Raised when the remote service answers with a non-2xx status."""

    def __init__(self, method: str, url: str, status_code: int, body: str = "") -> None:
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"{method} {url} returned {status_code}",
            code="REMOTE_CALL_FAILED",
        )


class VersionNotFoundError(ApplicationError):
    """Raised when no handler exists for the requested API version."""

    def __init__(self, version: str | None) -> None:
        self.version = version
        if version is None:
            message = "No API version given and no default configured"
        else:
            message = f"API version {version!r} is not supported"
        super().__init__(message, code="VERSION_NOT_FOUND")
