from xsoar_client.domain.exceptions.client_exceptions import (
    APIError,
    AuthenticationError,
    CancellationError,
    ConfigurationError,
    DeadlineExceededError,
    EmptyIteratorError,
    MissingBaseURLError,
    MissingCredentialsError,
    NotFoundError,
    OperationCancelledError,
    RateLimitError,
    ResponseTooLargeError,
    ServerError,
    TransportError,
    ValidationError,
    XsoarError,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "CancellationError",
    "ConfigurationError",
    "DeadlineExceededError",
    "EmptyIteratorError",
    "MissingBaseURLError",
    "MissingCredentialsError",
    "NotFoundError",
    "OperationCancelledError",
    "RateLimitError",
    "ResponseTooLargeError",
    "ServerError",
    "TransportError",
    "ValidationError",
    "XsoarError",
]
