"""Core utilities and shared components for s3-lifecycle."""

from .config import settings
from .exceptions import (
    ConfigurationError,
    NotFoundError,
    S3LifecycleError,
    ServiceError,
    StorageConnectionError,
    TransportError,
)
from .observability import get_logger, get_tracer, operation_span

__all__ = [
    "settings",
    "S3LifecycleError",
    "ConfigurationError",
    "StorageConnectionError",
    "ServiceError",
    "TransportError",
    "NotFoundError",
    "get_logger",
    "get_tracer",
    "operation_span",
]
