"""Object storage operations for S3-compatible services."""

from .clients import ConnectionConfig, Credentials, StorageConnection, connect
from .retry import (
    ErrorCategory,
    RetryClassifier,
    RetryPolicy,
    RetryPolicyConfig,
    classify_error,
)
from .listing import (
    ListingPage,
    ObjectVersionEntry,
    iter_listing,
    iter_object_keys,
    iter_object_versions,
)
from .buckets import (
    BucketVersioningState,
    DeleteSummary,
    bucket_exists,
    create_bucket,
    delete_bucket,
    delete_object,
    get_versioning_state,
)
from .transfer import GetResult, PutResult, get_object, get_object_version, put_object
from .inventory import default_export_filename, export_inventory

__all__ = [
    "BucketVersioningState",
    "ConnectionConfig",
    "Credentials",
    "DeleteSummary",
    "ErrorCategory",
    "GetResult",
    "ListingPage",
    "ObjectVersionEntry",
    "PutResult",
    "RetryClassifier",
    "RetryPolicy",
    "RetryPolicyConfig",
    "StorageConnection",
    "bucket_exists",
    "classify_error",
    "connect",
    "create_bucket",
    "default_export_filename",
    "delete_bucket",
    "delete_object",
    "export_inventory",
    "get_object",
    "get_object_version",
    "get_versioning_state",
    "iter_listing",
    "iter_object_keys",
    "iter_object_versions",
    "put_object",
]
