"""Bucket and object lifecycle client for S3-compatible object storage.

This package creates and deletes buckets (including every object version of
a versioned bucket), uploads and downloads objects, optionally by version,
and exports a bucket's object/version inventory to a file. All requests go
through one explicitly passed connection whose retry policy decides which
failures are worth another attempt.

Recommended Usage:
    >>> from s3_lifecycle import connect, create_bucket, delete_bucket
    >>> connection = connect("https://s3.example.com", "access", "secret")
    >>> create_bucket(connection, "reports", enable_versioning=True)
    >>> delete_bucket(connection, "reports")

Properties-file driven usage:
    >>> from s3_lifecycle import ToolProperties, connect_from_properties
    >>> properties = ToolProperties.load("S3Client.properties")
    >>> connection = connect_from_properties(properties, "PROD")
"""

__version__ = "0.1.0"

from .core.exceptions import (
    ConfigurationError,
    NotFoundError,
    S3LifecycleError,
    ServiceError,
    StorageConnectionError,
    TransportError,
)
from .objectstorage import (
    BucketVersioningState,
    ConnectionConfig,
    DeleteSummary,
    GetResult,
    PutResult,
    RetryClassifier,
    RetryPolicyConfig,
    StorageConnection,
    bucket_exists,
    connect,
    create_bucket,
    delete_bucket,
    delete_object,
    export_inventory,
    get_object,
    get_object_version,
    put_object,
)
from .properties import ToolProperties, connect_from_properties

__all__ = [
    # Errors
    "ConfigurationError",
    "NotFoundError",
    "S3LifecycleError",
    "ServiceError",
    "StorageConnectionError",
    "TransportError",
    # Connection
    "ConnectionConfig",
    "RetryClassifier",
    "RetryPolicyConfig",
    "StorageConnection",
    "connect",
    "ToolProperties",
    "connect_from_properties",
    # Operations
    "BucketVersioningState",
    "DeleteSummary",
    "GetResult",
    "PutResult",
    "bucket_exists",
    "create_bucket",
    "delete_bucket",
    "delete_object",
    "export_inventory",
    "get_object",
    "get_object_version",
    "put_object",
]
