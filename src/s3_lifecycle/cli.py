"""Command-line interface for s3-lifecycle.

Commands:
    - create-bucket: Create a bucket, optionally with versioning
    - delete-bucket: Delete a bucket with all objects and versions
    - delete-object: Delete an object, or one version of it
    - upload: Upload a file to an existing bucket
    - download: Download an object, optionally a specific version
    - export: Export all objects and versions of a bucket to a file

Connection parameters come from the properties file, selected by the
environment name given with --login (e.g. nonPROD, PROD). Operation
parameters default to the properties file and can be overridden per call.
"""

import os
from typing import Annotated, Optional

import typer

from . import __version__
from .core import settings
from .core.exceptions import S3LifecycleError, ServiceError
from .objectstorage import (
    create_bucket,
    default_export_filename,
    delete_bucket,
    delete_object,
    export_inventory,
    get_object,
    get_object_version,
    put_object,
)
from .objectstorage.clients import StorageConnection
from .properties import ToolProperties, connect_from_properties

app = typer.Typer(
    name="s3-lifecycle",
    help="Bucket and object lifecycle client for S3-compatible storage.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"s3-lifecycle {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    S3-Lifecycle: create, fill, export and delete buckets on S3-compatible storage.
    """
    pass


LoginOption = Annotated[
    str,
    typer.Option(
        "--login",
        "-l",
        help="Environment from the properties file to connect to (e.g. nonPROD, PROD)",
    ),
]

PropertiesOption = Annotated[
    Optional[str],
    typer.Option("--properties", "-p", help="Path to the properties file"),
]

PageSizeOption = Annotated[
    Optional[int],
    typer.Option("--page-size", help="Entries requested per listing page", min=1),
]


def _load(properties_file: Optional[str]) -> ToolProperties:
    return ToolProperties.load(properties_file or settings.properties_file)


def _connect(properties: ToolProperties, login: str) -> StorageConnection:
    return connect_from_properties(properties, login)


def _fail(action: str, error: Exception) -> typer.Exit:
    """Print what was attempted plus the error detail and return the exit."""
    typer.echo(f"Error: could not {action}: {error}", err=True)
    if isinstance(error, ServiceError) and error.request_id:
        typer.echo(f"Request ID: {error.request_id}", err=True)
    return typer.Exit(1)


@app.command("create-bucket")
def create_bucket_cmd(
    name: Annotated[str, typer.Argument(help="Name of the bucket to create")],
    login: LoginOption,
    properties_file: PropertiesOption = None,
    versioning: Annotated[
        Optional[bool],
        typer.Option(
            "--versioning/--no-versioning",
            help="Enable versioning (default: BucketVersioning property)",
        ),
    ] = None,
) -> None:
    """
    Create a new bucket unless it already exists.

    Example:
        s3-lifecycle create-bucket reports --login PROD --versioning
    """
    action = f"create bucket '{name}'"
    try:
        properties = _load(properties_file)
        enable_versioning = (
            properties.bucket_versioning if versioning is None else versioning
        )
        connection = _connect(properties, login)
        created = create_bucket(connection, name, enable_versioning)
    except (S3LifecycleError, OSError) as e:
        raise _fail(action, e)

    if created:
        typer.echo(f"Bucket created: {name} (versioning: {enable_versioning})")
    else:
        typer.echo(f"Bucket already exists: {name}")


@app.command("delete-bucket")
def delete_bucket_cmd(
    name: Annotated[str, typer.Argument(help="Name of the bucket to delete")],
    login: LoginOption,
    properties_file: PropertiesOption = None,
    page_size: PageSizeOption = None,
) -> None:
    """
    Delete a bucket with all of its objects and versions.

    Example:
        s3-lifecycle delete-bucket reports --login nonPROD
    """
    action = f"delete bucket '{name}'"
    try:
        connection = _connect(_load(properties_file), login)
        summary = delete_bucket(connection, name, page_size=page_size)
    except (S3LifecycleError, OSError) as e:
        raise _fail(action, e)

    typer.echo(
        f"Deleted {summary.deleted_entries:,} entries from {name} "
        f"(versioning: {summary.versioning_state.value})"
    )
    if summary.bucket_gone:
        typer.echo(f"Bucket deleted: {name}")
    else:
        typer.echo(f"Bucket {name} is still reported as existing", err=True)


@app.command("delete-object")
def delete_object_cmd(
    bucket: Annotated[str, typer.Argument(help="Bucket holding the object")],
    key: Annotated[str, typer.Argument(help="Object name")],
    login: LoginOption,
    properties_file: PropertiesOption = None,
    version_id: Annotated[
        Optional[str],
        typer.Option("--version-id", help="Delete this version permanently"),
    ] = None,
) -> None:
    """
    Delete an object, or one version of it on a versioned bucket.

    Example:
        s3-lifecycle delete-object reports a.pdf --login PROD --version-id 3HL4kq
    """
    action = f"delete object '{bucket}/{key}'"
    try:
        connection = _connect(_load(properties_file), login)
        deleted = delete_object(connection, bucket, key, version_id)
    except (S3LifecycleError, OSError) as e:
        raise _fail(action, e)

    if not deleted:
        typer.echo(f"Bucket {bucket} is not versioned, nothing deleted")
    elif version_id:
        typer.echo(f"Deleted: {bucket}/{key} (version {version_id})")
    else:
        typer.echo(f"Deleted: {bucket}/{key}")


@app.command("upload")
def upload_cmd(
    login: LoginOption,
    properties_file: PropertiesOption = None,
    bucket: Annotated[
        Optional[str],
        typer.Option("--bucket", help="Target bucket (default: UploadBucketName)"),
    ] = None,
    key: Annotated[
        Optional[str],
        typer.Option("--key", help="Object name (default: UploadObjectname)"),
    ] = None,
    file: Annotated[
        Optional[str],
        typer.Option("--file", help="File to upload (default: UploadFilename)"),
    ] = None,
) -> None:
    """
    Upload a file to an existing bucket.

    Example:
        s3-lifecycle upload --login PROD --bucket reports --key a.pdf --file a.pdf
    """
    action = "upload file"
    try:
        properties = _load(properties_file)
        if not (bucket and key and file):
            defaults = properties.upload()
            bucket = bucket or defaults.bucket
            key = key or defaults.key
            file = file or defaults.filename
        action = f"upload '{file}' to '{bucket}/{key}'"
        connection = _connect(properties, login)
        result = put_object(connection, bucket, key, file)
    except (S3LifecycleError, OSError) as e:
        raise _fail(action, e)

    typer.echo(f"Uploaded: {bucket}/{key}")
    typer.echo(f"ETag: {result.etag}")
    if result.version_id:
        typer.echo(f"Version ID: {result.version_id}")


@app.command("download")
def download_cmd(
    login: LoginOption,
    properties_file: PropertiesOption = None,
    bucket: Annotated[
        Optional[str],
        typer.Option("--bucket", help="Bucket (default: DownloadFileBucketName)"),
    ] = None,
    key: Annotated[
        Optional[str],
        typer.Option("--key", help="Object name (default: DownloadObjectname)"),
    ] = None,
    version_id: Annotated[
        Optional[str],
        typer.Option("--version-id", help="Version to fetch (default: DownloadVersionID)"),
    ] = None,
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Destination file (default: object name)"),
    ] = None,
    no_store: Annotated[
        bool,
        typer.Option(
            "--no-store",
            help="Read the latest version without writing it to disk",
        ),
    ] = False,
) -> None:
    """
    Download an object, or a specific version of it, to a local file.

    Example:
        s3-lifecycle download --login PROD --bucket reports --key a.pdf \
            --version-id 3HL4kqtJlcpXroDTDmjVBH40Nrjfkd --output restored.pdf
    """
    action = "download object"
    try:
        properties = _load(properties_file)
        if not (bucket and key):
            defaults = properties.download()
            bucket = bucket or defaults.bucket
            key = key or defaults.key
            version_id = version_id or defaults.version_id
            output = output or defaults.filename
        target = output or os.path.basename(key)
        action = f"download '{bucket}/{key}'"
        connection = _connect(properties, login)
        if version_id:
            action = f"download version '{version_id}' of '{bucket}/{key}'"
            result = get_object_version(connection, bucket, key, version_id, target)
        else:
            result = get_object(connection, bucket, key, None if no_store else target)
    except (S3LifecycleError, OSError) as e:
        raise _fail(action, e)

    typer.echo(f"Downloaded: {bucket}/{key} ({result.bytes_read:,} bytes)")
    if result.version_id:
        typer.echo(f"Version ID: {result.version_id}")
    if result.destination:
        typer.echo(f"Stored at: {result.destination}")


@app.command("export")
def export_cmd(
    bucket: Annotated[str, typer.Argument(help="Bucket to export")],
    login: LoginOption,
    properties_file: PropertiesOption = None,
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Export file (default: Export_<bucket>.csv)"),
    ] = None,
    page_size: PageSizeOption = None,
) -> None:
    """
    Export all objects and versions of a bucket as key;versionId lines.

    Example:
        s3-lifecycle export reports --login PROD
    """
    output = output or default_export_filename(bucket)
    action = f"export bucket '{bucket}' to '{output}'"
    try:
        connection = _connect(_load(properties_file), login)
        lines = export_inventory(connection, bucket, output, page_size=page_size)
    except (S3LifecycleError, OSError) as e:
        raise _fail(action, e)

    typer.echo(f"Exported {lines:,} entries of {bucket} to {output}")


if __name__ == "__main__":
    app()
