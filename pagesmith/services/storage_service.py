"""
Storage Service - Upload and fetch landing page source assets.

Assets live in Supabase Storage, one bucket per kind:
- document:     content documents (.docx)
- wireframe:    wireframe / sketch images
- inspiration:  design inspiration images

Public URLs handed out at upload time are resolved back to bucket + path
when an image has to be forwarded to the generation service.
"""

import base64
import logging
import mimetypes
import secrets
import time
from typing import Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

from ..core.config import Config
from ..core.database import get_supabase_client

logger = logging.getLogger(__name__)

PUBLIC_URL_MARKER = "/storage/v1/object/public/"


class StorageError(Exception):
    """Raised when an upload or download fails."""
    pass


def parse_public_url(url: str) -> Optional[Tuple[str, str]]:
    """
    Resolve a Supabase public object URL to (bucket, path).

    Returns:
        (bucket, path) or None if the URL is not a public storage URL
    """
    if not url:
        return None
    path = urlparse(url).path
    idx = path.find(PUBLIC_URL_MARKER)
    if idx == -1:
        return None

    rest = path[idx + len(PUBLIC_URL_MARKER):]
    bucket, _, object_path = rest.partition("/")
    if not bucket or not object_path:
        return None
    return bucket, unquote(object_path)


def build_object_path(user_id: str, filename: str, now: Optional[float] = None) -> str:
    """``{user_id}/{timestamp_ms}-{random}.{ext}`` for a new upload."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    timestamp = int((now if now is not None else time.time()) * 1000)
    return f"{user_id}/{timestamp}-{secrets.token_hex(4)}.{ext}"


class StorageService:
    """
    Service for landing page asset storage.

    Usage:
        storage = StorageService()
        result = storage.upload_asset("wireframe", user_id, "sketch.png", data)
        data_url = storage.download_as_data_url(result["public_url"])
    """

    def __init__(self, supabase=None):
        self.supabase = supabase or get_supabase_client()

    def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> Dict[str, str]:
        """
        Upload bytes to ``bucket/path``.

        Returns:
            Dict with ``path`` and ``public_url``

        Raises:
            StorageError: If the upload fails
        """
        content_type = content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
        try:
            self.supabase.storage.from_(bucket).upload(
                path,
                data,
                {"content-type": content_type, "upsert": "false"}
            )
        except Exception as e:
            logger.error(f"Upload to {bucket}/{path} failed: {e}")
            raise StorageError(f"Failed to upload {path}: {e}") from e

        public_url = self.supabase.storage.from_(bucket).get_public_url(path)
        logger.info(f"Uploaded {len(data)} bytes to {bucket}/{path}")
        return {"path": path, "public_url": public_url}

    def upload_asset(
        self,
        kind: str,
        user_id: str,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> Dict[str, str]:
        """Upload a source asset into the bucket for its kind."""
        bucket = Config.bucket_for(kind)
        path = build_object_path(user_id, filename)
        return self.upload(bucket, path, data, content_type or mimetypes.guess_type(filename)[0])

    def download(self, bucket: str, path: str) -> bytes:
        """
        Download an object.

        Raises:
            StorageError: If the download fails or returns nothing
        """
        try:
            data = self.supabase.storage.from_(bucket).download(path)
        except Exception as e:
            raise StorageError(f"Failed to download {bucket}/{path}: {e}") from e
        if not data:
            raise StorageError(f"Empty download for {bucket}/{path}")
        return data

    def download_public_url(self, url: str) -> Tuple[bytes, str]:
        """
        Download the object behind a public URL.

        Returns:
            (bytes, mime type)
        """
        parsed = parse_public_url(url)
        if parsed is None:
            raise StorageError(f"Unsupported storage URL format: {url}")
        bucket, path = parsed
        mime = mimetypes.guess_type(path)[0] or "image/png"
        return self.download(bucket, path), mime

    def download_as_data_url(self, url: str) -> str:
        data, mime = self.download_public_url(url)
        return f"data:{mime};base64,{base64.b64encode(data).decode()}"
