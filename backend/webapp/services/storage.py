"""Supabase Storage service for product image bytes."""
import os
import uuid
import httpx
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote
from webapp.constants import IMAGE_EXTENSIONS
from webapp.utils.logger import logger


@dataclass
class StorageResult:
    """Result of a storage operation."""
    success: bool
    path: Optional[str] = None
    error: Optional[str] = None


def build_storage_path(owner_id, product_id, filename: str, content_type: str) -> str:
    """
    Build the object path for a new image: {owner_id}/{product_id}/{uuid}.{ext}.

    The extension comes from the uploaded filename when it is a known image
    extension, otherwise from the content type.
    """
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in (".jpg", ".jpeg", ".png", ".gif"):
        ext = IMAGE_EXTENSIONS.get(content_type, "")
    return f"{owner_id}/{product_id}/{uuid.uuid4()}{ext}"


def _encode_path(storage_path: str) -> str:
    # Slashes define the directory structure; only the segments are quoted
    return '/'.join(quote(segment, safe='') for segment in storage_path.split('/'))


class StorageService:
    """Service for storing files in Supabase Storage using the REST API."""

    def __init__(
        self,
        supabase_url: Optional[str],
        supabase_key: Optional[str],
        bucket_name: str,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not supabase_url or not supabase_key:
            raise ValueError(
                "Supabase URL and secret key must be configured. "
                "Set SUPABASE_URL and SUPABASE_SECRET_KEY environment variables."
            )

        # Ensure URL doesn't have trailing slash
        self.supabase_url = supabase_url.rstrip('/')
        self.supabase_key = supabase_key
        self.bucket_name = bucket_name
        self.storage_url = f"{self.supabase_url}/storage/v1"
        self.client = client or httpx.AsyncClient(timeout=60.0)
        self._bucket_checked = False

    def _headers(self, content_type: str = "application/json") -> dict[str, str]:
        return {
            "apikey": self.supabase_key,
            "Authorization": f"Bearer {self.supabase_key}",
            "Content-Type": content_type,
        }

    async def _ensure_bucket_exists(self) -> bool:
        """Ensure the storage bucket exists, create it if it doesn't."""
        if self._bucket_checked:
            return True

        try:
            check_url = f"{self.storage_url}/bucket/{self.bucket_name}"
            check_response = await self.client.get(check_url, headers=self._headers())

            if check_response.status_code == 200:
                self._bucket_checked = True
                return True

            # Bucket doesn't exist, create it
            if check_response.status_code in (400, 404):
                create_response = await self.client.post(
                    f"{self.storage_url}/bucket",
                    headers=self._headers(),
                    json={
                        "id": self.bucket_name,
                        "name": self.bucket_name,
                        "public": False,  # Images are served through the API, not by URL
                    },
                )

                if create_response.status_code in (200, 201):
                    self._bucket_checked = True
                    return True

                logger.error(
                    f"Failed to create bucket {self.bucket_name}: "
                    f"{create_response.status_code} - {create_response.text}"
                )
                return False

            logger.error(
                f"Failed to check bucket {self.bucket_name}: "
                f"{check_response.status_code} - {check_response.text}"
            )
            return False

        except httpx.HTTPError as e:
            logger.error(f"Error ensuring bucket exists: {e}", exc_info=True)
            return False

    async def put(self, data: bytes, content_type: str, storage_path: str) -> StorageResult:
        """
        Upload bytes to the bucket.

        Args:
            data: File content
            content_type: MIME type of the file
            storage_path: Object path inside the bucket

        Returns:
            StorageResult with the stored path on success
        """
        if not await self._ensure_bucket_exists():
            return StorageResult(
                success=False,
                error=f"Storage bucket '{self.bucket_name}' does not exist and could not be created",
            )

        upload_url = f"{self.storage_url}/object/{self.bucket_name}/{_encode_path(storage_path)}"

        try:
            response = await self.client.post(
                upload_url,
                headers=self._headers(content_type),
                content=data,
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to upload {storage_path}: {e}", exc_info=True)
            return StorageResult(success=False, error=str(e))

        if response.status_code not in (200, 201):
            logger.error(f"Storage upload failed: {response.status_code} - {response.text}")
            return StorageResult(
                success=False,
                error=f"Upload failed: {response.status_code} - {response.text}",
            )

        logger.info(f"Stored {len(data)} bytes at {storage_path}")
        return StorageResult(success=True, path=storage_path)

    async def delete(self, storage_path: str) -> StorageResult:
        """
        Delete an object from the bucket.

        A missing object counts as deleted, so a retried delete can finish.
        """
        delete_url = f"{self.storage_url}/object/{self.bucket_name}/{_encode_path(storage_path)}"

        try:
            response = await self.client.delete(delete_url, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Failed to delete {storage_path}: {e}", exc_info=True)
            return StorageResult(success=False, path=storage_path, error=str(e))

        if response.status_code not in (200, 204, 404):
            logger.error(f"Storage delete failed: {response.status_code} - {response.text}")
            return StorageResult(
                success=False,
                path=storage_path,
                error=f"Delete failed: {response.status_code} - {response.text}",
            )

        logger.info(f"Deleted object {storage_path}")
        return StorageResult(success=True, path=storage_path)

    async def close(self) -> None:
        await self.client.aclose()
