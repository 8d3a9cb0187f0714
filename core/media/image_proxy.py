#!/usr/bin/env python3
"""
Image Proxy - Copy short-lived CDN avatars into durable storage.

Scraped Instagram/TikTok image URLs expire within hours, so the profile
image of every persisted candidate is downloaded and re-hosted. Failures
are never fatal: the caller keeps the original URL.
"""

import asyncio
import logging
import os
import re
import time
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urlparse

from core.media.image_fetcher import ImageFetcher

logger = logging.getLogger(__name__)

_EXTENSION = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)


def image_extension(url: str) -> str:
    """File extension from the URL path, defaulting to .jpg."""
    try:
        path = urlparse(url).path
    except ValueError:
        return ".jpg"
    match = _EXTENSION.search(path)
    return f".{match.group(1).lower()}" if match else ".jpg"


def storage_key(url: str, username: str, platform: str, timestamp_ms: Optional[int] = None) -> str:
    """Object key ``{platform}/{username}_{timestamp}{ext}``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{platform}/{username}_{timestamp_ms}{image_extension(url)}"


class ImageStore(ABC):
    """Binary object storage returning publicly reachable URLs."""

    @abstractmethod
    async def store(self, data: bytes, mime_type: str, key: str) -> Optional[str]:
        """Persist ``data`` under ``key``; return its public URL or None on failure."""
        pass


class SupabaseImageStore(ImageStore):
    """Supabase Storage bucket (upsert). The client is synchronous, so calls run in a thread."""

    def __init__(self, url: str, key: str, bucket: str = "avatars", client=None):
        if client is None:
            from supabase import create_client
            client = create_client(url, key)
        self.client = client
        self.bucket = bucket

    def _upload(self, data: bytes, mime_type: str, key: str) -> str:
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(key, data, file_options={"content-type": mime_type, "upsert": "true"})
        return bucket.get_public_url(key)

    async def store(self, data: bytes, mime_type: str, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._upload, data, mime_type, key)
        except Exception as e:
            logger.error(f"Failed to upload {key} to bucket '{self.bucket}': {e}")
            return None


class LocalImageStore(ImageStore):
    """Writes files below a directory served at ``base_url``; for development."""

    def __init__(self, root_dir: str, base_url: str = "/media"):
        self.root_dir = root_dir
        self.base_url = base_url.rstrip('/')

    def _write(self, data: bytes, key: str) -> None:
        path = os.path.join(self.root_dir, *key.split('/'))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)

    async def store(self, data: bytes, mime_type: str, key: str) -> Optional[str]:
        try:
            await asyncio.to_thread(self._write, data, key)
        except OSError as e:
            logger.error(f"Failed to write {key} under {self.root_dir}: {e}")
            return None
        return f"{self.base_url}/{key}"


class ImageProxy:
    """Download a remote image and hand it to an ImageStore."""

    def __init__(self, store: ImageStore, fetcher: Optional[ImageFetcher] = None):
        self.store = store
        self.fetcher = fetcher or ImageFetcher()

    async def proxy(self, url: Optional[str], username: str, platform: str) -> Optional[str]:
        """
        Re-host an image.

        Args:
            url: Source image URL (None/empty is a no-op)
            username: Owner handle, used in the object key
            platform: 'instagram' or 'tiktok'; selects the Referer header

        Returns:
            Public URL of the stored copy, or None on any failure.
        """
        if not url:
            return None

        try:
            downloaded = await self.fetcher.download(url, platform)
            if downloaded is None:
                return None

            key = storage_key(url, username, platform)
            public_url = await self.store.store(downloaded.content, downloaded.mime_type, key)
        except Exception as e:
            logger.error(f"Image proxy failed for @{username} ({url!r}): {type(e).__name__}: {e}")
            return None

        if public_url:
            logger.debug(f"Proxied image for @{username} to {public_url}")
        return public_url
