"""Storage connection setup."""

from .s3_client import ConnectionConfig, Credentials, StorageConnection, connect

__all__ = ["ConnectionConfig", "Credentials", "StorageConnection", "connect"]
