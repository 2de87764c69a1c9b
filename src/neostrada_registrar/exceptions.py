"""
Exception classes for the Neostrada registrar adapter.

The HTTP client and the domain name helpers raise these; the adapter
catches them and turns them into errors on the OperationResult, so none
of them crosses the plugin boundary. Each error carries a code from one
of the error-code enums plus the request context in `details`.
"""

from typing import Optional

from .enums import ClientErrorCode


class RegistrarError(Exception):
    """
    Base exception for all registrar adapter errors.

    Attributes:
        code: Value of one of the error-code enums
        message: Human-readable description
        details: Request context (method, path, status_code, ...)
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status of the failed request, if the registrar answered."""
        return self.details.get("status_code")

    @property
    def retryable(self) -> bool:
        """Whether repeating the same call could succeed."""
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"

    def to_dict(self) -> dict:
        """Serialize for the audit log."""
        data = {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(RegistrarError):
    """Raised when a domain name cannot be normalized or split."""

    pass


class NetworkError(RegistrarError):
    """Raised when the HTTP round trip fails or returns a non-200 status."""

    @property
    def retryable(self) -> bool:
        """Timeouts, connection failures, 429 and 5xx answers are transient."""
        if self.code in (ClientErrorCode.TIMEOUT.value, ClientErrorCode.NETWORK_ERROR.value):
            return True
        status = self.status_code
        return status is not None and (status == 429 or status >= 500)


class ProtocolError(RegistrarError):
    """Raised when a response body is not the JSON shape the API documents."""

    pass


class ConfigurationError(RegistrarError):
    """Raised when the adapter configuration is incomplete."""

    pass
