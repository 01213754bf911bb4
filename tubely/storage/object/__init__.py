"""Object storage for published media (videos, thumbnails)."""

from .store import LocalObjectStore, ObjectStore, ObjectStoreError, S3ObjectStore, UploadResult

__all__ = ["LocalObjectStore", "ObjectStore", "ObjectStoreError", "S3ObjectStore", "UploadResult"]
