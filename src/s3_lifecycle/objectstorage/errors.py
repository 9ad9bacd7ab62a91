"""Translation of botocore failures into s3-lifecycle exceptions.

botocore raises ``ClientError`` when the service answered with an error
document and a ``BotoCoreError`` subclass when the request never produced a
response. Both are converted here once retries are exhausted, so callers only
ever see the s3-lifecycle hierarchy, with the remote code, status and request
id preserved for diagnosis.
"""

from collections.abc import Iterable
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError, ParamValidationError

from s3_lifecycle.core import get_logger
from s3_lifecycle.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    S3LifecycleError,
    ServiceError,
    TransportError,
)

logger = get_logger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchBucket", "NoSuchKey", "NoSuchVersion", "NotFound"})


def error_details(exc: ClientError) -> dict[str, Any]:
    """Extract code, status, request id and message from a service error."""
    response = exc.response or {}
    error = response.get("Error", {})
    metadata = response.get("ResponseMetadata", {})
    return {
        "code": error.get("Code"),
        "message": error.get("Message"),
        "status": metadata.get("HTTPStatusCode"),
        "request_id": metadata.get("RequestId"),
    }


def translate_error(
    exc: Exception,
    action: str,
    not_found_codes: Optional[Iterable[str]] = None,
) -> S3LifecycleError:
    """Convert a botocore exception into the matching s3-lifecycle error.

    Args:
        exc: The exception raised by the boto3 client
        action: What was being attempted, e.g. "delete bucket 'logs'"
        not_found_codes: Error codes that mean the addressed resource does not
            exist; defaults to the standard S3 not-found codes

    Returns:
        The translated exception, ready to be raised ``from exc``
    """
    if isinstance(exc, S3LifecycleError):
        return exc

    if isinstance(exc, ClientError):
        details = error_details(exc)
        codes = NOT_FOUND_CODES if not_found_codes is None else frozenset(not_found_codes)
        logger.error(
            "Request rejected by storage service",
            action=action,
            operation=exc.operation_name,
            error_code=details["code"],
            status=details["status"],
            request_id=details["request_id"],
            error_message=details["message"],
        )
        error_cls = NotFoundError if details["code"] in codes else ServiceError
        return error_cls(
            f"Failed to {action}: {details['code']} "
            f"(status {details['status']}): {details['message']}",
            code=details["code"],
            status=details["status"],
            request_id=details["request_id"],
            operation=exc.operation_name,
        )

    if isinstance(exc, ParamValidationError):
        logger.error("Invalid request parameters", action=action, error=str(exc))
        return ConfigurationError(f"Failed to {action}: {exc}")

    if isinstance(exc, BotoCoreError):
        logger.error(
            "Client failed to communicate with storage service",
            action=action,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return TransportError(f"Failed to {action}: {exc}")

    raise TypeError(f"Cannot translate {type(exc).__name__}: {exc}")
