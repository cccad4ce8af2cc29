from .exceptions import (
    RoutineSenseException,
    AuthenticationError,
    ResourceNotFoundError,
    ServiceUnavailableError,
    RemoteStoreError,
    not_found,
    bad_request,
    unauthorized,
    internal_error
)
from .result import OperationResult

__all__ = [
    # Exceptions
    "RoutineSenseException",
    "AuthenticationError",
    "ResourceNotFoundError",
    "ServiceUnavailableError",
    "RemoteStoreError",
    "not_found",
    "bad_request",
    "unauthorized",
    "internal_error",
    # Results
    "OperationResult"
]
