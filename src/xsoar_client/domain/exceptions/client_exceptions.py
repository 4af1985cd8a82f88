from __future__ import annotations

from typing import Optional


class XsoarError(Exception):
    """Base class for every exception raised by the client.

    ``detail`` carries the human-readable message so callers can log or
    surface it without depending on a concrete subclass.
    """

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(XsoarError):
    pass


class MissingBaseURLError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("xsoar: no base URL configured")


class MissingCredentialsError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("xsoar: no credentials configured")


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class TransportError(XsoarError):
    """The HTTP exchange itself failed (network, oversized or undecodable body)."""


class ResponseTooLargeError(TransportError):
    def __init__(self, limit: int = 0) -> None:
        self.limit = limit
        super().__init__(f"response too large: exceeds {limit} bytes")


# ---------------------------------------------------------------------------
# API errors (HTTP status >= 400)
# ---------------------------------------------------------------------------


class APIError(XsoarError):
    """A non-successful response from the XSOAR API.

    Every status-specific error below subclasses this one, so
    ``except APIError`` catches all of them.
    """

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int = 0,
        request_id: str = "",
        detail: str = "",
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.request_id = request_id
        self.api_detail = detail
        super().__init__(self._render())

    def _render(self) -> str:
        if self.request_id:
            return (
                f"xsoar: API error {self.status_code}: {self.message} "
                f"(request_id={self.request_id})"
            )
        return f"xsoar: API error {self.status_code}: {self.message}"


class AuthenticationError(APIError):
    def _render(self) -> str:
        return f"xsoar: authentication failed: {self.message}"


class NotFoundError(APIError):
    def __init__(
        self,
        message: str = "",
        *,
        status_code: int = 404,
        request_id: str = "",
        detail: str = "",
        resource_type: str = "",
        resource_id: str = "",
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            message, status_code=status_code, request_id=request_id, detail=detail
        )

    def _render(self) -> str:
        if self.resource_type and self.resource_id:
            return f"xsoar: {self.resource_type} not found: {self.resource_id}"
        return f"xsoar: resource not found: {self.message}"


class ValidationError(APIError):
    def __init__(
        self,
        message: str = "",
        *,
        status_code: int = 0,
        request_id: str = "",
        detail: str = "",
        fields: Optional[dict[str, str]] = None,
    ) -> None:
        self.fields = fields or {}
        super().__init__(
            message, status_code=status_code, request_id=request_id, detail=detail
        )

    def _render(self) -> str:
        if self.fields:
            return f"xsoar: validation error: {self.message} (fields: {self.fields})"
        return f"xsoar: validation error: {self.message}"


class RateLimitError(APIError):
    def __init__(
        self,
        message: str = "",
        *,
        status_code: int = 429,
        request_id: str = "",
        detail: str = "",
        retry_after: Optional[float] = None,
    ) -> None:
        # Seconds until the server accepts requests again, if it said so.
        self.retry_after = retry_after
        super().__init__(
            message, status_code=status_code, request_id=request_id, detail=detail
        )

    def _render(self) -> str:
        if self.retry_after:
            return f"xsoar: rate limit exceeded, retry after {self.retry_after:g}s"
        return "xsoar: rate limit exceeded"


class ServerError(APIError):
    def _render(self) -> str:
        return f"xsoar: server error {self.status_code}: {self.message}"


# ---------------------------------------------------------------------------
# Iteration
# ---------------------------------------------------------------------------


class CancellationError(XsoarError):
    """The caller's cancellation token fired before the operation finished."""


class OperationCancelledError(CancellationError):
    def __init__(self) -> None:
        super().__init__("operation cancelled")


class DeadlineExceededError(CancellationError):
    def __init__(self) -> None:
        super().__init__("deadline exceeded")


class EmptyIteratorError(XsoarError):
    def __init__(self) -> None:
        super().__init__("iterator is empty")
