"""Single-object upload and download."""

import os
from dataclasses import dataclass
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from s3_lifecycle.core import get_logger, get_tracer, operation_span
from s3_lifecycle.core.exceptions import NotFoundError
from s3_lifecycle.objectstorage.clients import StorageConnection
from s3_lifecycle.objectstorage.errors import NOT_FOUND_CODES, translate_error

logger = get_logger(__name__)
tracer = get_tracer(__name__)

CHUNK_SIZE = 1024 * 1024

# S3 answers an unknown version id with NoSuchVersion, or with InvalidArgument
# when the id is not even well formed
VERSION_NOT_FOUND_CODES = NOT_FOUND_CODES | {"InvalidArgument"}


@dataclass(frozen=True)
class PutResult:
    """Result of an upload."""

    bucket: str
    key: str
    etag: str
    version_id: Optional[str] = None


@dataclass(frozen=True)
class GetResult:
    """Result of a download."""

    bucket: str
    key: str
    etag: Optional[str]
    version_id: Optional[str]
    content_type: Optional[str]
    content_length: Optional[int]
    bytes_read: int
    destination: Optional[str] = None


def put_object(
    connection: StorageConnection, bucket: str, key: str, source_file: str
) -> PutResult:
    """Upload a local file to ``bucket``/``key``.

    Args:
        connection: Storage connection
        bucket: Target bucket
        key: Target object key
        source_file: Path of the file to upload

    Returns:
        PutResult with the entity tag and, on versioned buckets, the version id

    Raises:
        NotFoundError: If the source file is missing or unreadable
        ServiceError: If the service rejects the upload
        TransportError: If the service could not be reached
    """
    with operation_span(tracer, "put_object", bucket=bucket, key=key):
        if not os.path.isfile(source_file) or not os.access(source_file, os.R_OK):
            raise NotFoundError(f"Source file {source_file} is missing or unreadable")

        logger.info("Uploading object", bucket=bucket, key=key, source=source_file)
        try:
            with open(source_file, "rb") as body:
                response = connection.client.put_object(
                    Bucket=bucket, Key=key, Body=body
                )
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"upload '{source_file}' to '{bucket}/{key}'") from e
        except OSError as e:
            raise NotFoundError(f"Cannot read source file {source_file}: {e}") from e

        result = PutResult(
            bucket=bucket,
            key=key,
            etag=response.get("ETag", "").strip('"'),
            version_id=response.get("VersionId"),
        )
        logger.info(
            "Upload completed",
            bucket=bucket,
            key=key,
            etag=result.etag,
            version_id=result.version_id,
        )
        return result


def _consume_body(response: dict[str, Any], destination: Optional[str]) -> int:
    body = response["Body"]
    total = 0
    try:
        if destination is None:
            for chunk in body.iter_chunks(CHUNK_SIZE):
                total += len(chunk)
        else:
            with open(destination, "wb") as target:
                for chunk in body.iter_chunks(CHUNK_SIZE):
                    target.write(chunk)
                    total += len(chunk)
    finally:
        body.close()
    return total


def _download(
    connection: StorageConnection,
    bucket: str,
    key: str,
    destination: Optional[str],
    version_id: Optional[str] = None,
) -> GetResult:
    params: dict[str, Any] = {"Bucket": bucket, "Key": key}
    action = f"download '{bucket}/{key}'"
    not_found_codes = NOT_FOUND_CODES
    if version_id is not None:
        params["VersionId"] = version_id
        action = f"download version '{version_id}' of '{bucket}/{key}'"
        not_found_codes = VERSION_NOT_FOUND_CODES

    # the request completes before the destination is opened, so a failed
    # lookup leaves any existing file untouched
    try:
        response = connection.client.get_object(**params)
        bytes_read = _consume_body(response, destination)
    except (ClientError, BotoCoreError) as e:
        raise translate_error(e, action, not_found_codes=not_found_codes) from e
    except OSError as e:
        logger.error(
            "Cannot write destination file", destination=destination, error=str(e)
        )
        raise NotFoundError(f"Cannot write destination file {destination}: {e}") from e

    result = GetResult(
        bucket=bucket,
        key=key,
        etag=response.get("ETag", "").strip('"') or None,
        version_id=response.get("VersionId"),
        content_type=response.get("ContentType"),
        content_length=response.get("ContentLength"),
        bytes_read=bytes_read,
        destination=destination,
    )
    logger.info(
        "Download completed",
        bucket=bucket,
        key=key,
        version_id=result.version_id,
        content_type=result.content_type,
        bytes_read=bytes_read,
        destination=destination,
    )
    return result


def get_object(
    connection: StorageConnection,
    bucket: str,
    key: str,
    destination: Optional[str] = None,
) -> GetResult:
    """Download the latest version of an object.

    With a destination the content is written there, replacing any existing
    file. Without one the content is read and discarded, which exercises the
    full download path without touching the local disk.
    """
    with operation_span(tracer, "get_object", bucket=bucket, key=key):
        logger.info("Downloading object", bucket=bucket, key=key, destination=destination)
        return _download(connection, bucket, key, destination)


def get_object_version(
    connection: StorageConnection,
    bucket: str,
    key: str,
    version_id: str,
    destination: str,
) -> GetResult:
    """Download a specific version of an object to ``destination``.

    Raises:
        NotFoundError: If the key or the version does not exist, or the
            destination file cannot be written
        ServiceError: If the service rejects the request
        TransportError: If the service could not be reached
    """
    with operation_span(
        tracer, "get_object_version", bucket=bucket, key=key, version_id=version_id
    ):
        logger.info(
            "Downloading object version",
            bucket=bucket,
            key=key,
            version_id=version_id,
            destination=destination,
        )
        return _download(connection, bucket, key, destination, version_id=version_id)
