"""Image download helpers shared by the scorer and the image proxy."""

import base64
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0

BROWSER_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
    ),
    'Accept': 'image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}

PLATFORM_REFERERS = {
    'instagram': 'https://www.instagram.com/',
    'tiktok': 'https://www.tiktok.com/',
}


@dataclass(frozen=True)
class EncodedImage:
    """Base64 image payload ready for a vision prompt."""
    data: str
    mime_type: str = "image/jpeg"

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class DownloadedImage:
    content: bytes
    mime_type: str


def _mime_type(response: httpx.Response) -> str:
    content_type = response.headers.get('content-type') or 'image/jpeg'
    return content_type.split(';')[0].strip() or 'image/jpeg'


class ImageFetcher:
    """
    Downloads remote images with a per-request timeout.

    Every failure (timeout, non-2xx, transport error) is reported as None so
    callers can simply omit the image.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def download(self, url: str, platform: Optional[str] = None) -> Optional[DownloadedImage]:
        """Fetch raw image bytes, sending a platform referer when known."""
        if not url:
            return None

        headers: Dict[str, str] = dict(BROWSER_HEADERS)
        if platform in PLATFORM_REFERERS:
            headers['Referer'] = PLATFORM_REFERERS[platform]

        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers, timeout=self.timeout_seconds)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds), follow_redirects=True) as client:
                    response = await client.get(url, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # InvalidURL (control characters, bad scheme) is not an HTTPError
            logger.warning(f"Image fetch failed for {url!r}: {type(e).__name__}: {e}")
            return None

        if response.status_code >= 400:
            logger.warning(f"Image fetch failed for {url}: HTTP {response.status_code}")
            return None

        return DownloadedImage(content=response.content, mime_type=_mime_type(response))

    async def fetch_as_base64(self, url: str, platform: Optional[str] = None) -> Optional[EncodedImage]:
        downloaded = await self.download(url, platform)
        if downloaded is None or not downloaded.content:
            return None
        return EncodedImage(
            data=base64.b64encode(downloaded.content).decode('ascii'),
            mime_type=downloaded.mime_type,
        )
