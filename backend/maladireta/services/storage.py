"""
Object storage for batch source files and generated PCL jobs.

Conversion code depends only on the ObjectStorage protocol
(fetch / store / exists). SupabaseObjectStorage implements it on the
Supabase Storage API.
"""

import io
import logging
from typing import BinaryIO, Optional, Protocol

from supabase import Client

from maladireta.db import get_supabase_admin

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    def fetch(self, bucket: str, key: str) -> BinaryIO:
        ...

    def store(self, bucket: str, key: str, content: bytes, content_type: str) -> str:
        ...

    def exists(self, bucket: str, key: str) -> bool:
        ...


def _split_key(key: str) -> tuple[str, str]:
    """Split "a/b/file.csv" into ("a/b", "file.csv")."""
    folder, _, name = key.rpartition("/")
    return folder, name


class SupabaseObjectStorage:
    """
    ObjectStorage backed by Supabase Storage.

    Args:
        client: Supabase client; defaults to the service-level client so that
            bucket policies (RLS) do not apply.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_admin()
        return self._client

    def fetch(self, bucket: str, key: str) -> BinaryIO:
        """
        Download an object fully into memory.

        Raises:
            Exception: If the download fails (including missing objects)
        """
        logger.info(f"Downloading {bucket}/{key}")
        try:
            content = self.client.storage.from_(bucket).download(key)
        except Exception as e:
            logger.error(f"Failed to download {bucket}/{key}: {e}")
            raise

        logger.info(f"Downloaded {key} ({len(content)} bytes)")
        return io.BytesIO(content)

    def store(self, bucket: str, key: str, content: bytes, content_type: str) -> str:
        """
        Upload an object, overwriting any previous version at the same key.

        Returns:
            Location descriptor "{bucket}/{key}"
        """
        logger.info(f"Uploading {bucket}/{key} ({len(content)} bytes, {content_type})")
        try:
            self.client.storage.from_(bucket).upload(
                key,
                content,
                {
                    "content-type": content_type,
                    "upsert": "true",
                },
            )
        except Exception as e:
            logger.error(f"Failed to upload {bucket}/{key}: {e}")
            raise

        return f"{bucket}/{key}"

    def exists(self, bucket: str, key: str) -> bool:
        """
        Return True if an object exists at key.

        A missing object is a plain False; listing failures propagate.
        """
        folder, name = _split_key(key)
        try:
            entries = self.client.storage.from_(bucket).list(folder, {"search": name})
        except Exception as e:
            logger.error(f"Failed to check existence of {bucket}/{key}: {e}")
            raise

        return any(entry.get("name") == name for entry in entries or [])

    def bucket_exists(self, bucket: str) -> bool:
        """Return True if the bucket is visible to the client."""
        return bucket in {b.name for b in self.client.storage.list_buckets()}
