"""
Unit tests for image fetching and the image proxy.
"""
import base64
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from core.media.image_fetcher import ImageFetcher
from core.media.image_proxy import ImageProxy, LocalImageStore, SupabaseImageStore, image_extension, storage_key
from tests.mocks.scout_mocks import FakeImageFetcher, MemoryImageStore


def _fetcher(handler) -> ImageFetcher:
    return ImageFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestImageFetcher:

    async def test_base64_with_mime_type_and_referer(self):
        seen = {}

        def handler(request):
            seen["referer"] = request.headers.get("Referer")
            return httpx.Response(200, content=b"png-bytes", headers={"content-type": "image/png; charset=binary"})

        image = await _fetcher(handler).fetch_as_base64("https://cdn.test/a.png", "tiktok")

        assert image.mime_type == "image/png"
        assert base64.b64decode(image.data) == b"png-bytes"
        assert image.data_uri.startswith("data:image/png;base64,")
        assert seen["referer"] == "https://www.tiktok.com/"

    async def test_http_error_status_is_none(self):
        fetcher = _fetcher(lambda request: httpx.Response(403))
        assert await fetcher.fetch_as_base64("https://cdn.test/a.jpg") is None

    async def test_transport_error_is_none(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        assert await _fetcher(handler).download("https://cdn.test/a.jpg") is None

    async def test_empty_url(self):
        assert await ImageFetcher().download("") is None

    async def test_control_character_in_url_is_none(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, content=b"img"))
        assert await fetcher.download("https://cdn.test/a\x0bb.jpg", "tiktok") is None


class TestStorageKey:

    @pytest.mark.parametrize("url,ext", [
        ("https://cdn.test/pic.PNG?sig=1", ".png"),
        ("https://cdn.test/pic.webp", ".webp"),
        ("https://cdn.test/pic", ".jpg"),
    ])
    def test_extension(self, url, ext):
        assert image_extension(url) == ext

    def test_key_layout(self):
        key = storage_key("https://cdn.test/pic.png", "ana", "instagram", timestamp_ms=1700000000000)
        assert key == "instagram/ana_1700000000000.png"


class TestImageProxy:

    async def test_proxy_stores_and_returns_public_url(self):
        store = MemoryImageStore()
        proxy = ImageProxy(store, fetcher=FakeImageFetcher({"https://cdn.test/a.jpg": b"img"}))

        url = await proxy.proxy("https://cdn.test/a.jpg", "ana", "instagram")

        assert url.startswith("https://cdn.test/instagram/ana_")
        assert list(store.objects.values()) == [b"img"]

    async def test_failed_download_returns_none(self):
        store = MemoryImageStore()
        proxy = ImageProxy(store, fetcher=FakeImageFetcher({}))

        assert await proxy.proxy("https://cdn.test/missing.jpg", "ana", "instagram") is None
        assert store.objects == {}

    async def test_failed_upload_returns_none(self):
        proxy = ImageProxy(MemoryImageStore(fail=True), fetcher=FakeImageFetcher({"u": b"img"}))
        assert await proxy.proxy("u", "ana", "tiktok") is None

    async def test_no_url(self):
        proxy = ImageProxy(MemoryImageStore(), fetcher=FakeImageFetcher({}))
        assert await proxy.proxy(None, "ana", "instagram") is None

    async def test_unexpected_fetch_error_returns_none(self):
        fetcher = MagicMock()
        fetcher.download = AsyncMock(side_effect=RuntimeError("decoder crashed"))
        proxy = ImageProxy(MemoryImageStore(), fetcher=fetcher)

        assert await proxy.proxy("https://cdn.test/a.jpg", "ana", "instagram") is None

    async def test_invalid_url_with_real_fetcher_returns_none(self):
        store = MemoryImageStore()
        proxy = ImageProxy(store, fetcher=_fetcher(lambda request: httpx.Response(200, content=b"img")))

        assert await proxy.proxy("https://cdn.test/a\x0bb.jpg", "dee", "tiktok") is None
        assert store.objects == {}


class TestStores:

    async def test_local_store_writes_file(self, tmp_path):
        store = LocalImageStore(str(tmp_path), base_url="/media/")

        url = await store.store(b"img", "image/jpeg", "instagram/ana_1.jpg")

        assert url == "/media/instagram/ana_1.jpg"
        assert (tmp_path / "instagram" / "ana_1.jpg").read_bytes() == b"img"

    async def test_supabase_store_upserts(self):
        client = MagicMock()
        bucket = client.storage.from_.return_value
        bucket.get_public_url.return_value = "https://sb.test/avatars/instagram/ana_1.jpg"
        store = SupabaseImageStore("https://sb.test", "key", bucket="avatars", client=client)

        url = await store.store(b"img", "image/jpeg", "instagram/ana_1.jpg")

        assert url == "https://sb.test/avatars/instagram/ana_1.jpg"
        client.storage.from_.assert_called_with("avatars")
        bucket.upload.assert_called_once_with(
            "instagram/ana_1.jpg", b"img",
            file_options={"content-type": "image/jpeg", "upsert": "true"},
        )

    async def test_supabase_failure_returns_none(self):
        client = MagicMock()
        client.storage.from_.return_value.upload.side_effect = RuntimeError("bucket missing")
        store = SupabaseImageStore("https://sb.test", "key", client=client)

        assert await store.store(b"img", "image/jpeg", "k.jpg") is None
