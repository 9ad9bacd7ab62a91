"""Paginated bucket listings."""

from .pagination import (
    ListingPage,
    ObjectVersionEntry,
    iter_listing,
    iter_object_keys,
    iter_object_versions,
    object_pages,
    version_pages,
)

__all__ = [
    "ListingPage",
    "ObjectVersionEntry",
    "iter_listing",
    "iter_object_keys",
    "iter_object_versions",
    "object_pages",
    "version_pages",
]
