"""S3 client configuration and connection setup.

This module builds the single client handle every storage operation goes
through. The handle is configured once and never mutated afterwards:

    - static credentials (access key / secret key)
    - a custom endpoint with path-style addressing, for S3-compatible
      services that do not resolve bucket subdomains
    - a fixed region
    - the RetryPolicy wired into botocore's ``needs-retry`` event, replacing
      the SDK's own retry loop

No network I/O happens here; the first request is made by the first
operation that uses the connection.
"""

from typing import Any, Optional
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError
from pydantic import BaseModel, ConfigDict, Field

from s3_lifecycle.core import get_logger, settings
from s3_lifecycle.core.exceptions import ConfigurationError, StorageConnectionError
from s3_lifecycle.objectstorage.retry import (
    RetryClassifier,
    RetryPolicy,
    RetryPolicyConfig,
)

logger = get_logger(__name__)


class Credentials(BaseModel):
    """Static access credentials for the storage service."""

    model_config = ConfigDict(frozen=True)

    access_key: str
    secret_key: str = Field(repr=False)

    @classmethod
    def from_keys(
        cls, access_key: Optional[str], secret_key: Optional[str]
    ) -> "Credentials":
        """Build credentials, failing fast if either key is missing or blank.

        Raises:
            ConfigurationError: If a key is None or empty
        """
        if not access_key or not access_key.strip():
            raise ConfigurationError("accessKey is null or empty")
        if not secret_key or not secret_key.strip():
            raise ConfigurationError("secretKey is null or empty")
        return cls(access_key=access_key.strip(), secret_key=secret_key.strip())


def default_retry_config() -> RetryPolicyConfig:
    """Retry budget and backoff taken from the application settings."""
    return RetryPolicyConfig(
        max_attempts=settings.max_attempts,
        base_delay=settings.backoff_base_delay,
        max_delay=settings.backoff_max_delay,
    )


class ConnectionConfig(BaseModel):
    """Configuration for the storage service connection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    endpoint_url: Optional[str] = Field(
        None, description="Endpoint URL of the S3-compatible service"
    )
    region_name: str = Field(
        default_factory=lambda: settings.region_name, description="Region name"
    )
    path_style: bool = Field(True, description="Use path-style bucket addressing")
    retry: RetryPolicyConfig = Field(default_factory=default_retry_config)


class StorageConnection:
    """Owns the configured client handle and the credentials behind it."""

    def __init__(
        self,
        config: ConnectionConfig,
        credentials: Credentials,
        classifier: Optional[RetryClassifier] = None,
    ):
        self.config = config
        self._credentials = credentials
        self.retry_policy = RetryPolicy(classifier, config.retry)
        self.client = self._create_client()
        logger.info("Storage connection initialized", **self.describe())

    def _create_client(self) -> Any:
        """Create the boto3 S3 client with the configured settings."""
        addressing_style = "path" if self.config.path_style else "auto"
        boto_config = Config(
            s3={"addressing_style": addressing_style},
            # the SDK's own loop gets a single attempt; RetryPolicy decides
            retries={"total_max_attempts": 1, "mode": "standard"},
        )
        kwargs: dict[str, Any] = {
            "region_name": self.config.region_name,
            "aws_access_key_id": self._credentials.access_key,
            "aws_secret_access_key": self._credentials.secret_key,
            "config": boto_config,
        }
        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        try:
            client = boto3.client("s3", **kwargs)  # type: ignore
        except (ValueError, BotoCoreError) as e:
            raise StorageConnectionError(f"Cannot build S3 client: {e}") from e

        client.meta.events.register(
            "needs-retry.s3", self.retry_policy, unique_id="s3-lifecycle-retry"
        )
        return client

    def describe(self) -> dict[str, Any]:
        """Connection details that are safe to log."""
        return {
            "endpoint_url": self.config.endpoint_url,
            "region": self.config.region_name,
            "path_style": self.config.path_style,
            "max_attempts": self.config.retry.max_attempts,
        }


def _validate_endpoint(endpoint_url: str) -> None:
    parsed = urlparse(endpoint_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise StorageConnectionError(f"Malformed endpoint URL: {endpoint_url!r}")


def connect(
    endpoint_url: Optional[str],
    access_key: Optional[str],
    secret_key: Optional[str],
    config: Optional[ConnectionConfig] = None,
) -> StorageConnection:
    """Create a connection to an S3-compatible storage service.

    Args:
        endpoint_url: Service endpoint, e.g. https://s3.example.com:9021.
            None uses the region's default AWS endpoint.
        access_key: Access key
        secret_key: Secret key
        config: Optional connection configuration; its endpoint is replaced
            by ``endpoint_url``

    Returns:
        StorageConnection ready for use

    Raises:
        ConfigurationError: If credentials are missing (no network call made)
        StorageConnectionError: If the client handle cannot be built
    """
    credentials = Credentials.from_keys(access_key, secret_key)

    if config is None:
        config = ConnectionConfig(endpoint_url=endpoint_url)
    else:
        config = config.model_copy(update={"endpoint_url": endpoint_url})

    if config.endpoint_url:
        _validate_endpoint(config.endpoint_url)

    logger.info(
        "Connecting to storage service",
        endpoint_url=config.endpoint_url,
        region=config.region_name,
    )
    return StorageConnection(config, credentials)
