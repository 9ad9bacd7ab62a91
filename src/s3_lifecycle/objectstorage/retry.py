"""Retry classification for storage requests.

The classifier is a stateless predicate: given a failure and the number of
attempts made so far it decides whether the request is worth repeating. The
policy wraps it into a botocore ``needs-retry`` handler that owns the attempt
budget and the exponential backoff, so the classifier itself never sleeps and
never counts.

Decision order (first match wins):
    1. Local I/O failure (connection reset, read timeout, ...) -> retry
    2. Transient service failure (5xx internal / unavailable) -> retry
    3. Throttling response -> retry
    4. Clock skew between client and server -> retry
    5. Anything else (4xx authorization, not found, ...) -> no retry
"""

import random
from enum import Enum
from typing import Any, Optional

from botocore.exceptions import ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError
from pydantic import BaseModel, ConfigDict, Field

from s3_lifecycle.core import get_logger

logger = get_logger(__name__)

THROTTLING_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "ThrottledException",
        "RequestThrottledException",
        "TooManyRequestsException",
        "ProvisionedThroughputExceededException",
        "TransactionInProgressException",
        "RequestLimitExceeded",
        "BandwidthLimitExceeded",
        "LimitExceededException",
        "RequestThrottled",
        "SlowDown",
        "PriorRequestNotComplete",
        "EC2ThrottledException",
    }
)

TRANSIENT_CODES = frozenset(
    {
        "InternalError",
        "ServiceUnavailable",
        "RequestTimeout",
        "RequestTimeoutException",
    }
)

TRANSIENT_STATUS_CODES = frozenset({500, 502, 503, 504})

CLOCK_SKEW_CODES = frozenset(
    {
        "RequestTimeTooSkewed",
        "RequestExpired",
        "RequestInTheFuture",
        "InvalidSignatureException",
        "SignatureDoesNotMatch",
        "AuthFailure",
    }
)


class ErrorCategory(str, Enum):
    """Retry-relevant category of a failed request."""

    LOCAL_IO = "local-io"
    TRANSIENT = "transient"
    THROTTLING = "throttling"
    CLOCK_SKEW = "clock-skew"
    CLIENT = "client"


RETRYABLE_CATEGORIES = frozenset(
    {
        ErrorCategory.LOCAL_IO,
        ErrorCategory.TRANSIENT,
        ErrorCategory.THROTTLING,
        ErrorCategory.CLOCK_SKEW,
    }
)


def _is_local_io(error: BaseException) -> bool:
    if isinstance(error, (HTTPClientError, BotoConnectionError, OSError)):
        return True
    if isinstance(error, ClientError):
        return False
    return isinstance(error.__cause__, OSError)


def classify_error(error: BaseException) -> ErrorCategory:
    """Map a failure onto exactly one retry category."""
    if _is_local_io(error):
        return ErrorCategory.LOCAL_IO

    if not isinstance(error, ClientError):
        return ErrorCategory.CLIENT

    response = error.response or {}
    code = response.get("Error", {}).get("Code")
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")

    if code in TRANSIENT_CODES or (
        status in TRANSIENT_STATUS_CODES and code not in THROTTLING_CODES
    ):
        return ErrorCategory.TRANSIENT
    if code in THROTTLING_CODES or status == 429:
        return ErrorCategory.THROTTLING
    if code in CLOCK_SKEW_CODES:
        return ErrorCategory.CLOCK_SKEW
    return ErrorCategory.CLIENT


class RetryClassifier:
    """Decides whether a failed storage request should be attempted again."""

    def should_retry(
        self,
        error: BaseException,
        attempt_count: int,
        request: Optional[str] = None,
    ) -> bool:
        """Return True when the failure belongs to a retryable category.

        Args:
            error: The exception, or the service error built from an error
                response
            attempt_count: Attempts made so far, including the failed one
            request: Identity of the originating request, for the log only

        Returns:
            True if the request should be retried
        """
        category = classify_error(error)
        retry = category in RETRYABLE_CATEGORIES
        logger.info(
            "Retry decision",
            error=str(error),
            request=request,
            attempt_count=attempt_count,
            category=category.value,
            retry=retry,
        )
        return retry


class RetryPolicyConfig(BaseModel):
    """Attempt budget and backoff parameters for the retry policy."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_attempts: int = Field(
        4, ge=1, description="Total attempts per request, including the first"
    )
    base_delay: float = Field(0.1, ge=0, description="Backoff base delay in seconds")
    max_delay: float = Field(20.0, ge=0, description="Backoff ceiling in seconds")


class RetryPolicy:
    """botocore ``needs-retry`` handler driven by a RetryClassifier.

    botocore calls the handler after every attempt. Returning ``None`` lets
    the response (or exception) through; returning a number makes the
    endpoint sleep that many seconds and send the request again.
    """

    def __init__(
        self,
        classifier: Optional[RetryClassifier] = None,
        config: Optional[RetryPolicyConfig] = None,
    ):
        self.classifier = classifier or RetryClassifier()
        self.config = config or RetryPolicyConfig()

    def backoff_delay(self, attempts: int) -> float:
        """Exponential backoff with full jitter for the given attempt number."""
        ceiling = min(
            self.config.max_delay, self.config.base_delay * (2 ** max(attempts - 1, 0))
        )
        return random.uniform(0, ceiling)

    def __call__(
        self,
        attempts: int,
        response: Optional[tuple[Any, dict[str, Any]]] = None,
        caught_exception: Optional[BaseException] = None,
        operation: Any = None,
        request_dict: Optional[dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Optional[float]:
        operation_name = getattr(operation, "name", None) or "Unknown"
        error = caught_exception
        if error is None and response is not None:
            parsed = response[1] or {}
            if parsed.get("Error", {}).get("Code"):
                error = ClientError(parsed, operation_name)
        if error is None:
            return None

        if attempts >= self.config.max_attempts:
            logger.info(
                "Retry budget exhausted",
                operation=operation_name,
                attempts=attempts,
                max_attempts=self.config.max_attempts,
            )
            return None

        url = (request_dict or {}).get("url")
        request = f"{operation_name} {url}" if url else operation_name
        if not self.classifier.should_retry(error, attempts, request=request):
            return None

        delay = self.backoff_delay(attempts)
        logger.info(
            "Retrying request", operation=operation_name, attempts=attempts, delay=delay
        )
        return delay
