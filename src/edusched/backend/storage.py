from __future__ import annotations

import random
import string
import time
from typing import Optional

from .client import BackendClient


def random_object_name(filename: str, *, now_ms: Optional[int] = None) -> str:
    """`<epoch-ms>-<random>.<ext>`, keeping the original extension."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{ts}-{suffix}.{ext}"


class StorageClient:
    """Object storage: upload by path into one bucket, public URL lookup."""

    def __init__(self, client: BackendClient, *, bucket: Optional[str] = None):
        self._client = client
        self._bucket = bucket or client.config.storage_bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def upload(self, path: str, content: bytes, *, content_type: str = "application/octet-stream") -> str:
        self._client.request(
            "POST",
            f"/storage/v1/object/{self._bucket}/{path}",
            data=content,
            headers={"Content-Type": content_type, "x-upsert": "false"},
            admin=self._client.has_service_key,
        )
        return path

    def get_public_url(self, path: str) -> str:
        return f"{self._client.base_url}/storage/v1/object/public/{self._bucket}/{path}"

    def upload_to_folder(self, folder: str, filename: str, content: bytes, *, content_type: str) -> str:
        """Upload under `folder/` with a fresh random name; returns the public URL."""
        path = f"{folder}/{random_object_name(filename)}"
        self.upload(path, content, content_type=content_type)
        return self.get_public_url(path)

    def download(self, url: str, *, max_bytes: Optional[int] = None) -> bytes:
        return self._client.fetch(url, max_bytes=max_bytes)
