"""Paginated enumeration of bucket contents.

Plain object listings and version listings share the same shape: a page of
entries, a truncation flag and the parameters for the next request. Both are
modelled as ``ListingPage`` and consumed by a single loop, ``iter_listing``,
which stops strictly when a page reports it is not truncated.
"""

import heapq
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from s3_lifecycle.core import get_logger, settings
from s3_lifecycle.core.exceptions import ServiceError
from s3_lifecycle.objectstorage.clients import StorageConnection
from s3_lifecycle.objectstorage.errors import translate_error

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ObjectVersionEntry:
    """One stored state of a key. ``version_id`` is "null" or None when unversioned."""

    key: str
    version_id: Optional[str] = None
    is_delete_marker: bool = False
    last_modified: Optional[datetime] = field(default=None, compare=False)


@dataclass(frozen=True)
class ListingPage(Generic[T]):
    """A single page of a listing."""

    items: list[T]
    is_truncated: bool
    continuation: Optional[dict[str, str]] = field(default=None)


PageFetcher = Callable[[Optional[dict[str, str]]], ListingPage[T]]


def iter_listing(fetch_page: PageFetcher[T]) -> Iterator[T]:
    """Yield every entry of every page until a page is not truncated.

    Args:
        fetch_page: Called with None for the first page and with the previous
            page's continuation parameters afterwards

    Raises:
        ServiceError: If a truncated page carries no continuation, which would
            otherwise re-fetch the same page forever
    """
    continuation: Optional[dict[str, str]] = None
    pages = 0
    while True:
        page = fetch_page(continuation)
        pages += 1
        yield from page.items

        if not page.is_truncated:
            logger.debug("Listing complete", pages=pages)
            return
        if not page.continuation:
            raise ServiceError(
                "Listing is truncated but the service returned no continuation marker"
            )
        continuation = page.continuation


def object_pages(
    connection: StorageConnection, bucket: str, page_size: Optional[int] = None
) -> PageFetcher[str]:
    """Page fetcher over the plain object listing (ListObjectsV2)."""
    max_keys = page_size or settings.listing_page_size

    def fetch(continuation: Optional[dict[str, str]]) -> ListingPage[str]:
        params: dict[str, Any] = {"Bucket": bucket, "MaxKeys": max_keys}
        params.update(continuation or {})
        try:
            response = connection.client.list_objects_v2(**params)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"list objects of bucket '{bucket}'") from e

        is_truncated = bool(response.get("IsTruncated"))
        token = response.get("NextContinuationToken")
        return ListingPage(
            items=[obj["Key"] for obj in response.get("Contents", [])],
            is_truncated=is_truncated,
            continuation={"ContinuationToken": token} if token else None,
        )

    return fetch


def _listing_order(entry: ObjectVersionEntry) -> tuple[str, float]:
    # keys ascending, then newest first within a key
    stamp = entry.last_modified.timestamp() if entry.last_modified else 0.0
    return entry.key, -stamp


def version_pages(
    connection: StorageConnection, bucket: str, page_size: Optional[int] = None
) -> PageFetcher[ObjectVersionEntry]:
    """Page fetcher over the version listing (ListObjectVersions).

    Versions and delete markers come back as two lists, each sorted by key
    and newest first within a key, so merging on (key, newest first) restores
    the service's enumeration order.
    """
    max_keys = page_size or settings.listing_page_size

    def fetch(
        continuation: Optional[dict[str, str]],
    ) -> ListingPage[ObjectVersionEntry]:
        params: dict[str, Any] = {"Bucket": bucket, "MaxKeys": max_keys}
        params.update(continuation or {})
        try:
            response = connection.client.list_object_versions(**params)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"list object versions of bucket '{bucket}'") from e

        versions = (
            ObjectVersionEntry(
                key=v["Key"],
                version_id=v.get("VersionId"),
                last_modified=v.get("LastModified"),
            )
            for v in response.get("Versions", [])
        )
        markers = (
            ObjectVersionEntry(
                key=m["Key"],
                version_id=m.get("VersionId"),
                is_delete_marker=True,
                last_modified=m.get("LastModified"),
            )
            for m in response.get("DeleteMarkers", [])
        )
        items = list(heapq.merge(versions, markers, key=_listing_order))

        continuation_params = None
        if response.get("NextKeyMarker") is not None:
            continuation_params = {"KeyMarker": response["NextKeyMarker"]}
            if response.get("NextVersionIdMarker"):
                continuation_params["VersionIdMarker"] = response["NextVersionIdMarker"]

        return ListingPage(
            items=items,
            is_truncated=bool(response.get("IsTruncated")),
            continuation=continuation_params,
        )

    return fetch


def iter_object_keys(
    connection: StorageConnection, bucket: str, page_size: Optional[int] = None
) -> Iterator[str]:
    """Iterate over every key in a bucket."""
    return iter_listing(object_pages(connection, bucket, page_size))


def iter_object_versions(
    connection: StorageConnection, bucket: str, page_size: Optional[int] = None
) -> Iterator[ObjectVersionEntry]:
    """Iterate over every object version and delete marker in a bucket."""
    return iter_listing(version_pages(connection, bucket, page_size))
