"""Export of a bucket's object/version inventory to a delimited file.

Each line is ``key;versionId`` in the order the service enumerates the
version listing, with no header. Entries without a version id are written
with the service's "null" version id. The file is rewritten on every export. A
failed export leaves whatever was written so far in place, so its output must
be discarded and the export run again from the start.
"""

from typing import Optional

from s3_lifecycle.core import get_logger, get_tracer, operation_span
from s3_lifecycle.objectstorage.clients import StorageConnection
from s3_lifecycle.objectstorage.listing import iter_object_versions

logger = get_logger(__name__)
tracer = get_tracer(__name__)

FIELD_SEPARATOR = ";"
NULL_VERSION_ID = "null"


def default_export_filename(bucket: str) -> str:
    """File name used when no output path is given."""
    return f"Export_{bucket}.csv"


def export_inventory(
    connection: StorageConnection,
    bucket: str,
    output_file: str,
    page_size: Optional[int] = None,
) -> int:
    """Write every object version of ``bucket`` to ``output_file``.

    Args:
        connection: Storage connection
        bucket: Bucket to export
        output_file: Path of the export file; truncated if it exists
        page_size: Entries requested per listing page

    Returns:
        Number of lines written

    Raises:
        ServiceError: If the service rejects a listing request
        TransportError: If the service could not be reached
        OSError: If the export file cannot be written
    """
    with operation_span(tracer, "export_inventory", bucket=bucket):
        logger.info("Exporting bucket inventory", bucket=bucket, output_file=output_file)

        lines = 0
        try:
            with open(output_file, "w", encoding="utf-8", newline="\n") as out:
                for entry in iter_object_versions(connection, bucket, page_size):
                    version_id = entry.version_id or NULL_VERSION_ID
                    out.write(f"{entry.key}{FIELD_SEPARATOR}{version_id}\n")
                    lines += 1
        except Exception:
            logger.error(
                "Inventory export failed, output file is incomplete",
                bucket=bucket,
                output_file=output_file,
                lines_written=lines,
            )
            raise

        logger.info(
            "Inventory export finished",
            bucket=bucket,
            output_file=output_file,
            lines_written=lines,
        )
        return lines
