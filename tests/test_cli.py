"""Tests for the command-line interface."""

import pytest
from conftest import ENDPOINT, make_bucket
from typer.testing import CliRunner

from s3_lifecycle import __version__
from s3_lifecycle.cli import app

runner = CliRunner()


@pytest.fixture
def properties_file(temp_dir):
    path = temp_dir / "S3Client.properties"
    path.write_text(
        f"Host-PROD={ENDPOINT}\n"
        "Accesskey-PROD=test_key\n"
        "Securitykey-PROD=test_secret\n"
        "BucketVersioning=true\n"
        "UploadBucketName=reports\n"
        "UploadObjectname=notes.txt\n"
        f"UploadFilename={temp_dir / 'notes.txt'}\n"
    )
    return str(path)


def invoke(*args):
    return runner.invoke(app, list(args))


class TestCli:
    """Test the commands end to end against moto."""

    def test_version(self):
        result = invoke("--version")

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_create_bucket_uses_versioning_property(self, mocked_s3, properties_file):
        result = invoke("create-bucket", "reports", "--login", "PROD", "-p", properties_file)

        assert result.exit_code == 0
        assert "Bucket created: reports (versioning: True)" in result.stdout
        status = mocked_s3.get_bucket_versioning(Bucket="reports")["Status"]
        assert status == "Enabled"

    def test_create_bucket_override_versioning(self, mocked_s3, properties_file):
        result = invoke(
            "create-bucket", "reports", "-l", "PROD", "-p", properties_file, "--no-versioning"
        )

        assert result.exit_code == 0
        assert "versioning: False" in result.stdout
        assert "Status" not in mocked_s3.get_bucket_versioning(Bucket="reports")

    def test_create_existing_bucket(self, mocked_s3, properties_file):
        make_bucket(mocked_s3, "reports")

        result = invoke("create-bucket", "reports", "-l", "PROD", "-p", properties_file)

        assert result.exit_code == 0
        assert "Bucket already exists: reports" in result.stdout

    def test_upload_from_properties(self, mocked_s3, properties_file, temp_dir):
        make_bucket(mocked_s3, "reports", versioned=True)
        (temp_dir / "notes.txt").write_text("meeting notes")

        result = invoke("upload", "-l", "PROD", "-p", properties_file)

        assert result.exit_code == 0
        assert "Uploaded: reports/notes.txt" in result.stdout
        assert "Version ID:" in result.stdout
        body = mocked_s3.get_object(Bucket="reports", Key="notes.txt")["Body"].read()
        assert body == b"meeting notes"

    def test_download_version(self, mocked_s3, properties_file, temp_dir):
        make_bucket(mocked_s3, "reports", versioned=True)
        first = mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"first")
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"second")
        destination = temp_dir / "restored.txt"

        result = invoke(
            "download",
            "-l",
            "PROD",
            "-p",
            properties_file,
            "--bucket",
            "reports",
            "--key",
            "a.txt",
            "--version-id",
            first["VersionId"],
            "-o",
            str(destination),
        )

        assert result.exit_code == 0
        assert destination.read_bytes() == b"first"
        assert f"Stored at: {destination}" in result.stdout

    def test_download_no_store(self, mocked_s3, properties_file, temp_dir):
        make_bucket(mocked_s3, "reports")
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"content")

        result = invoke(
            "download", "-l", "PROD", "-p", properties_file,
            "--bucket", "reports", "--key", "a.txt", "--no-store",
        )

        assert result.exit_code == 0
        assert "Downloaded: reports/a.txt (7 bytes)" in result.stdout
        assert "Stored at" not in result.stdout

    def test_export(self, mocked_s3, properties_file, temp_dir):
        make_bucket(mocked_s3, "reports", versioned=True)
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"v1")
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"v2")
        output = temp_dir / "export.csv"

        result = invoke("export", "reports", "-l", "PROD", "-p", properties_file, "-o", str(output))

        assert result.exit_code == 0
        assert "Exported 2 entries of reports" in result.stdout
        assert len(output.read_text().splitlines()) == 2

    def test_delete_bucket(self, mocked_s3, properties_file):
        make_bucket(mocked_s3, "reports", versioned=True)
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"v1")
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"v2")

        result = invoke("delete-bucket", "reports", "-l", "PROD", "-p", properties_file)

        assert result.exit_code == 0
        assert "Deleted 2 entries from reports (versioning: Enabled)" in result.stdout
        assert "Bucket deleted: reports" in result.stdout

    def test_delete_missing_bucket_fails(self, mocked_s3, properties_file):
        result = invoke("delete-bucket", "absent", "-l", "PROD", "-p", properties_file)

        assert result.exit_code == 1
        assert "could not delete bucket 'absent'" in result.output

    def test_unknown_environment_fails(self, mocked_s3, properties_file):
        result = invoke("create-bucket", "reports", "-l", "TEST", "-p", properties_file)

        assert result.exit_code == 1
        assert "Host-TEST" in result.output

    def test_missing_properties_file(self, temp_dir):
        result = invoke(
            "create-bucket", "reports", "-l", "PROD", "-p", str(temp_dir / "absent")
        )

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_object_version(self, mocked_s3, properties_file):
        make_bucket(mocked_s3, "reports", versioned=True)
        first = mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"v1")
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"v2")

        result = invoke(
            "delete-object", "reports", "a.txt", "-l", "PROD", "-p", properties_file,
            "--version-id", first["VersionId"],
        )

        assert result.exit_code == 0
        assert f"Deleted: reports/a.txt (version {first['VersionId']})" in result.stdout
        versions = mocked_s3.list_object_versions(Bucket="reports")["Versions"]
        assert len(versions) == 1

    def test_delete_object_version_on_unversioned_bucket(self, mocked_s3, properties_file):
        make_bucket(mocked_s3, "reports")
        mocked_s3.put_object(Bucket="reports", Key="a.txt", Body=b"x")

        result = invoke(
            "delete-object", "reports", "a.txt", "-l", "PROD", "-p", properties_file,
            "--version-id", "v1",
        )

        assert result.exit_code == 0
        assert "not versioned, nothing deleted" in result.stdout
        assert mocked_s3.list_objects_v2(Bucket="reports")["KeyCount"] == 1
