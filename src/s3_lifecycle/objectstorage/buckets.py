"""Bucket lifecycle: creation and versioning-aware recursive deletion.

A bucket can only be deleted once it is empty. On an unversioned (or
suspended) bucket deleting every listed key is enough. On a versioning-enabled
bucket a plain delete only adds a delete marker and keeps every earlier
version, so each entry of the version listing has to be deleted by its
version id instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from s3_lifecycle.core import get_logger, get_tracer, operation_span
from s3_lifecycle.core.exceptions import S3LifecycleError
from s3_lifecycle.objectstorage.clients import StorageConnection
from s3_lifecycle.objectstorage.errors import error_details, translate_error
from s3_lifecycle.objectstorage.listing import iter_object_keys, iter_object_versions

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class BucketVersioningState(str, Enum):
    """Versioning status of a bucket as reported by the service."""

    UNVERSIONED = "Unversioned"
    ENABLED = "Enabled"
    SUSPENDED = "Suspended"


@dataclass(frozen=True)
class DeleteSummary:
    """Outcome of a recursive bucket deletion."""

    bucket: str
    versioning_state: BucketVersioningState
    deleted_entries: int
    bucket_gone: bool


def bucket_exists(connection: StorageConnection, name: str) -> bool:
    """Check whether a bucket exists.

    A 403 means the bucket exists but belongs to someone else or is not
    readable with these credentials, so it counts as existing.
    """
    try:
        connection.client.head_bucket(Bucket=name)
        return True
    except ClientError as e:
        details = error_details(e)
        if details["code"] in ("404", "NoSuchBucket", "NotFound"):
            return False
        if details["status"] == 403:
            logger.info("Bucket exists but is not accessible", bucket=name)
            return True
        raise translate_error(e, f"check existence of bucket '{name}'") from e
    except BotoCoreError as e:
        raise translate_error(e, f"check existence of bucket '{name}'") from e


def get_versioning_state(
    connection: StorageConnection, name: str
) -> BucketVersioningState:
    """Query the current versioning state of a bucket.

    A missing status means versioning was never configured. Statuses other
    than Enabled and Suspended, such as the "Disabled" some S3-compatible
    services report, are treated as unversioned.
    """
    try:
        response = connection.client.get_bucket_versioning(Bucket=name)
    except (ClientError, BotoCoreError) as e:
        raise translate_error(e, f"read versioning state of bucket '{name}'") from e

    status = response.get("Status")
    if status is None:
        return BucketVersioningState.UNVERSIONED
    try:
        return BucketVersioningState(status)
    except ValueError:
        logger.warning(
            "Unknown versioning status, treating bucket as unversioned",
            bucket=name,
            status=status,
        )
        return BucketVersioningState.UNVERSIONED


def create_bucket(
    connection: StorageConnection, name: str, enable_versioning: bool = False
) -> bool:
    """Create a bucket unless it already exists.

    Args:
        connection: Storage connection
        name: Bucket name
        enable_versioning: Enable versioning on the new bucket

    Returns:
        True if the bucket was created, False if it already existed

    Raises:
        ServiceError: If the service rejects the creation or the versioning
            configuration. In the latter case the bucket exists unversioned.
        TransportError: If the service could not be reached
    """
    with operation_span(tracer, "create_bucket", bucket=name):
        if bucket_exists(connection, name):
            logger.info("Bucket already exists", bucket=name)
            return False

        logger.info("Creating bucket", bucket=name, versioning=enable_versioning)
        params: dict = {"Bucket": name}
        region = connection.config.region_name
        if region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            connection.client.create_bucket(**params)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"create bucket '{name}'") from e

        if enable_versioning:
            try:
                connection.client.put_bucket_versioning(
                    Bucket=name,
                    VersioningConfiguration={"Status": BucketVersioningState.ENABLED.value},
                )
            except (ClientError, BotoCoreError) as e:
                raise translate_error(
                    e,
                    f"enable versioning on bucket '{name}' "
                    "(bucket was created but is left unversioned)",
                ) from e

        logger.info("Bucket created", bucket=name, versioning=enable_versioning)
        return True


def delete_object(
    connection: StorageConnection,
    bucket: str,
    key: str,
    version_id: Optional[str] = None,
) -> bool:
    """Delete a single object, or one version of it.

    Without a version id this is a plain delete, which on a versioned bucket
    only adds a delete marker. With a version id the bucket's versioning
    state is checked first; on an unversioned bucket nothing is deleted.

    Args:
        connection: Storage connection
        bucket: Bucket name
        key: Object key
        version_id: Version to delete permanently

    Returns:
        True if a delete request was sent, False if it was skipped

    Raises:
        ServiceError: If the service rejects the request
        TransportError: If the service could not be reached
    """
    with operation_span(
        tracer, "delete_object", bucket=bucket, key=key, version_id=version_id
    ):
        params = {"Bucket": bucket, "Key": key}
        action = f"delete object '{bucket}/{key}'"
        if version_id is not None:
            state = get_versioning_state(connection, bucket)
            if state is BucketVersioningState.UNVERSIONED:
                logger.info(
                    "Bucket is not versioned, version delete skipped",
                    bucket=bucket,
                    key=key,
                    version_id=version_id,
                )
                return False
            params["VersionId"] = version_id
            action = f"delete version '{version_id}' of '{bucket}/{key}'"

        try:
            connection.client.delete_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, action) from e

        logger.info("Deleted object", bucket=bucket, key=key, version_id=version_id)
        return True


def _log_aborted(name: str, deleted: int) -> None:
    logger.error(
        "Bucket deletion aborted, bucket is partially emptied",
        bucket=name,
        deleted_entries=deleted,
    )


def _delete_versions(
    connection: StorageConnection, name: str, page_size: Optional[int]
) -> int:
    deleted = 0
    try:
        for entry in iter_object_versions(connection, name, page_size):
            try:
                connection.client.delete_object(
                    Bucket=name, Key=entry.key, VersionId=entry.version_id
                )
            except (ClientError, BotoCoreError) as e:
                raise translate_error(
                    e, f"delete version '{entry.version_id}' of '{entry.key}'"
                ) from e
            deleted += 1
            logger.info(
                "Deleted object version",
                bucket=name,
                key=entry.key,
                version_id=entry.version_id,
                delete_marker=entry.is_delete_marker,
            )
    except S3LifecycleError:
        _log_aborted(name, deleted)
        raise
    return deleted


def _delete_objects(
    connection: StorageConnection, name: str, page_size: Optional[int]
) -> int:
    deleted = 0
    try:
        for key in iter_object_keys(connection, name, page_size):
            try:
                connection.client.delete_object(Bucket=name, Key=key)
            except (ClientError, BotoCoreError) as e:
                raise translate_error(e, f"delete object '{key}'") from e
            deleted += 1
            logger.info("Deleted object", bucket=name, key=key)
    except S3LifecycleError:
        _log_aborted(name, deleted)
        raise
    return deleted


def delete_bucket(
    connection: StorageConnection, name: str, page_size: Optional[int] = None
) -> DeleteSummary:
    """Delete a bucket together with all of its objects and versions.

    The versioning state is queried on every call since it can be changed
    from outside at any time.

    Args:
        connection: Storage connection
        name: Bucket name
        page_size: Entries requested per listing page

    Returns:
        DeleteSummary with the number of deleted entries

    Raises:
        ServiceError: If the service rejects a request. Entries deleted
            before the failure stay deleted; the count is logged.
        TransportError: If the service could not be reached
    """
    with operation_span(tracer, "delete_bucket", bucket=name):
        state = get_versioning_state(connection, name)
        logger.info("Deleting bucket", bucket=name, versioning_state=state.value)

        if state is BucketVersioningState.ENABLED:
            deleted = _delete_versions(connection, name, page_size)
        else:
            deleted = _delete_objects(connection, name, page_size)

        try:
            connection.client.delete_bucket(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"delete bucket '{name}'") from e

        # existence may lag behind the delete; report it, never fail on it
        try:
            gone = not bucket_exists(connection, name)
        except S3LifecycleError as e:
            logger.warning("Could not confirm bucket deletion", bucket=name, error=str(e))
            gone = False
        if gone:
            logger.info("Bucket was deleted", bucket=name, deleted_entries=deleted)
        else:
            logger.error(
                "Bucket still reported as existing after delete",
                bucket=name,
                deleted_entries=deleted,
            )

        return DeleteSummary(
            bucket=name,
            versioning_state=state,
            deleted_entries=deleted,
            bucket_gone=gone,
        )
