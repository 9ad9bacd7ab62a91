"""Test configuration and fixtures for s3-lifecycle."""

from types import SimpleNamespace

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from s3_lifecycle.objectstorage import ConnectionConfig, RetryPolicyConfig, connect

ENDPOINT = "https://s3.us-west-2.amazonaws.com"
REGION = "us-west-2"


@pytest.fixture(autouse=True)
def aws_environment(monkeypatch):
    """Keep boto3 away from any real credentials or config on the host."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def connection_config():
    """Connection config without backoff sleeps."""
    return ConnectionConfig(
        region_name=REGION,
        retry=RetryPolicyConfig(max_attempts=3, base_delay=0, max_delay=0),
    )


@pytest.fixture
def mocked_s3():
    """Run the test against moto's in-memory S3."""
    with mock_aws():
        yield boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name=REGION,
        )


@pytest.fixture
def connection(mocked_s3, connection_config):
    """StorageConnection talking to moto."""
    return connect(ENDPOINT, "test_key", "test_secret", connection_config)


def make_bucket(s3_client, name, versioned=False):
    """Create a bucket directly with boto3, bypassing the code under test."""
    s3_client.create_bucket(
        Bucket=name, CreateBucketConfiguration={"LocationConstraint": REGION}
    )
    if versioned:
        s3_client.put_bucket_versioning(
            Bucket=name, VersioningConfiguration={"Status": "Enabled"}
        )


def service_error(code, status, operation="DeleteObject", request_id="REQ123"):
    """Build the ClientError boto3 raises for an error response."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} message"},
            "ResponseMetadata": {"HTTPStatusCode": status, "RequestId": request_id},
        },
        operation,
    )


class ScriptedS3Client:
    """Stand-in for a boto3 S3 client serving pre-defined listing pages.

    Pages are lists of (key, version_id) tuples. Every call is recorded in
    ``calls`` as ``(method, params)`` so tests can check counts and ordering.
    """

    def __init__(
        self,
        version_pages=None,
        object_pages=None,
        versioning_status=None,
        fail_on_delete=None,
        fail_on_page=None,
    ):
        self.version_pages = version_pages or [[]]
        self.object_pages = object_pages or [[]]
        self.versioning_status = versioning_status
        self.fail_on_delete = fail_on_delete
        self.fail_on_page = fail_on_page
        self.bucket_deleted = False
        self.calls = []

    def _page_index(self, marker):
        return 0 if marker is None else int(marker.split("-")[1])

    def get_bucket_versioning(self, **params):
        self.calls.append(("get_bucket_versioning", params))
        if self.versioning_status is None:
            return {}
        return {"Status": self.versioning_status}

    def list_object_versions(self, **params):
        self.calls.append(("list_object_versions", params))
        index = self._page_index(params.get("KeyMarker"))
        if self.fail_on_page == index:
            raise service_error("InternalError", 500, "ListObjectVersions")
        page = self.version_pages[index]
        response = {
            "Versions": [{"Key": k, "VersionId": v} for k, v in page],
            "IsTruncated": index + 1 < len(self.version_pages),
        }
        if response["IsTruncated"]:
            response["NextKeyMarker"] = f"page-{index + 1}"
            response["NextVersionIdMarker"] = f"vmarker-{index + 1}"
        return response

    def list_objects_v2(self, **params):
        self.calls.append(("list_objects_v2", params))
        index = self._page_index(params.get("ContinuationToken"))
        page = self.object_pages[index]
        response = {
            "Contents": [{"Key": k} for k in page],
            "IsTruncated": index + 1 < len(self.object_pages),
        }
        if response["IsTruncated"]:
            response["NextContinuationToken"] = f"token-{index + 1}"
        return response

    def delete_object(self, **params):
        self.calls.append(("delete_object", params))
        deletes = sum(1 for name, _ in self.calls if name == "delete_object")
        if self.fail_on_delete == deletes:
            raise service_error("AccessDenied", 403)
        return {}

    def delete_bucket(self, **params):
        self.calls.append(("delete_bucket", params))
        self.bucket_deleted = True
        return {}

    def head_bucket(self, **params):
        self.calls.append(("head_bucket", params))
        if self.bucket_deleted:
            raise service_error("404", 404, "HeadBucket")
        return {}

    def calls_to(self, method):
        return [params for name, params in self.calls if name == method]


@pytest.fixture
def scripted_connection():
    """Factory for a connection backed by a ScriptedS3Client."""

    def factory(**kwargs):
        client = ScriptedS3Client(**kwargs)
        return SimpleNamespace(client=client, config=ConnectionConfig(region_name=REGION))

    return factory
