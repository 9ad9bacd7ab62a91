"""Properties file loading for s3-lifecycle.

The tool reads its connection and operation parameters from a Java-style
properties file (``S3Client.properties`` by default)::

    # one block per environment
    Host-PROD=https://s3.example.com:9021
    Accesskey-PROD=...
    Securitykey-PROD=...

    BucketVersioning=true

    UploadBucketName=reports
    UploadObjectname=2024/summary.pdf
    UploadFilename=/tmp/summary.pdf

    DownloadFileBucketName=reports
    DownloadObjectname=2024/summary.pdf
    DownloadVersionID=3HL4kqtJlcpXroDTDmjVBH40Nrjfkd
    DownloadFilename=/tmp/summary-restored.pdf

Only ``key=value`` lines and ``#`` comments are supported.
"""

from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field

from s3_lifecycle.core import get_logger
from s3_lifecycle.core.exceptions import ConfigurationError
from s3_lifecycle.objectstorage.clients import (
    ConnectionConfig,
    StorageConnection,
    connect,
)

logger = get_logger(__name__)


class EnvironmentProperties(BaseModel):
    """Connection parameters of one named environment."""

    model_config = ConfigDict(frozen=True)

    name: str
    endpoint_url: str
    access_key: str
    secret_key: str = Field(repr=False)


class UploadProperties(BaseModel):
    """Parameters of the upload operation."""

    bucket: str
    key: str
    filename: str


class DownloadProperties(BaseModel):
    """Parameters of the download operation."""

    bucket: str
    key: str
    version_id: Optional[str] = None
    filename: Optional[str] = None


class ToolProperties(BaseModel):
    """Key-value configuration read from a properties file."""

    values: dict[str, str] = Field(default_factory=dict)
    source: Optional[str] = None

    @classmethod
    def load(cls, path: str) -> "ToolProperties":
        """Read a properties file.

        Raises:
            ConfigurationError: If the file does not exist
        """
        if not Path(path).is_file():
            raise ConfigurationError(f"Properties file {path} not found")

        raw = dotenv_values(path)
        values = {k: v.strip() for k, v in raw.items() if v is not None}
        logger.info("Properties loaded", source=path, key_count=len(values))
        return cls(values=values, source=path)

    def get(self, key: str) -> Optional[str]:
        """Return a value, treating blank values as missing."""
        value = self.values.get(key)
        return value if value else None

    def require(self, key: str) -> str:
        """Return a value that must be present.

        Raises:
            ConfigurationError: If the key is missing or blank
        """
        value = self.get(key)
        if value is None:
            where = f" in {self.source}" if self.source else ""
            raise ConfigurationError(f"Missing required property '{key}'{where}")
        return value

    def environment(self, name: str) -> EnvironmentProperties:
        """Connection parameters for an environment such as ``PROD``."""
        return EnvironmentProperties(
            name=name,
            endpoint_url=self.require(f"Host-{name}"),
            access_key=self.require(f"Accesskey-{name}"),
            secret_key=self.require(f"Securitykey-{name}"),
        )

    @property
    def bucket_versioning(self) -> bool:
        """``BucketVersioning``; anything other than "true" means False."""
        return (self.get("BucketVersioning") or "").lower() == "true"

    def upload(self) -> UploadProperties:
        return UploadProperties(
            bucket=self.require("UploadBucketName"),
            key=self.require("UploadObjectname"),
            filename=self.require("UploadFilename"),
        )

    def download(self) -> DownloadProperties:
        return DownloadProperties(
            bucket=self.require("DownloadFileBucketName"),
            key=self.require("DownloadObjectname"),
            version_id=self.get("DownloadVersionID"),
            filename=self.get("DownloadFilename"),
        )


def connect_from_properties(
    properties: ToolProperties,
    environment: str,
    config: Optional[ConnectionConfig] = None,
) -> StorageConnection:
    """Connect using the endpoint and keys of a named environment."""
    env = properties.environment(environment)
    logger.info("Using environment", environment=env.name, endpoint_url=env.endpoint_url)
    return connect(env.endpoint_url, env.access_key, env.secret_key, config=config)
