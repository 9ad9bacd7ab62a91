"""Exception hierarchy for s3-lifecycle."""

from typing import Optional


class S3LifecycleError(Exception):
    """Base exception for all s3-lifecycle errors."""

    pass


class ConfigurationError(S3LifecycleError):
    """Raised when credentials or required parameters are missing or invalid."""

    pass


class StorageConnectionError(S3LifecycleError):
    """Raised when a client handle for the storage service cannot be built."""

    pass


class TransportError(S3LifecycleError):
    """Raised when a request never got a response from the storage service."""

    pass


class ServiceError(S3LifecycleError):
    """Raised when the storage service rejected a request."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.status = status
        self.request_id = request_id
        self.operation = operation


class NotFoundError(ServiceError):
    """Raised when a bucket, object, version or local file does not exist."""

    pass
