#!/usr/bin/env python3
"""
Test Mock Implementations - Fake LLM, image fetcher, scraper and image store.

These fakes provide deterministic behavior for unit and pipeline tests
without network access.
"""
import json
from typing import Any, Dict, List, Optional, Sequence

from core.llm.interfaces import LLMProvider
from core.media.image_fetcher import DownloadedImage, EncodedImage
from core.media.image_proxy import ImageStore
from core.normalizer import Platform, RecordSource
from core.scraper.interfaces import ScrapeBatch, ScrapeError, ScrapeProvider


def dimension(score: int, confidence: int = 80) -> Dict[str, Any]:
    return {"score": score, "confidence": confidence, "factors": [], "notes": ""}


def standard_response(physical=80, unsigned=90, reach=60, engagement=70, **extra) -> str:
    """JSON text shaped like a standard rubric model response."""
    payload = {
        "physical_potential": dimension(physical),
        "unsigned_probability": dimension(unsigned),
        "reachability": dimension(reach),
        "engagement_health": dimension(engagement),
        "overall_assessment": "Strong editorial look.",
        "strengths": ["bone structure"],
        "potential_categories": ["Editorial"],
        "recommendations": ["Reach out via DM"],
    }
    payload.update(extra)
    return json.dumps(payload)


def street_response(estimated_age=21, raw=70, authenticity=60, **extra) -> str:
    """JSON text shaped like a street-casting model response."""
    payload = json.loads(standard_response())
    payload.update({
        "estimated_age": estimated_age,
        "age_confidence": 70,
        "raw_potential_score": raw,
        "content_authenticity_score": authenticity,
        "content_style": "candid",
        "device_quality": "iphone",
        "authenticity_signals": ["no filters"],
    })
    payload.update(extra)
    return json.dumps(payload)


class MockLLMProvider(LLMProvider):
    """
    Mock LLM for testing.

    Returns queued responses in order (the last one repeats) and records
    every call. An Exception in the queue is raised instead of returned.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [standard_response()])
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, prompt, images=None, system_prompt=None) -> str:
        self.calls.append({"prompt": prompt, "images": images, "system_prompt": system_prompt})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakeImageFetcher:
    """Serves fixed bytes for known URLs, None for everything else."""

    def __init__(self, images: Optional[Dict[str, bytes]] = None, mime_type: str = "image/jpeg"):
        self.images = dict(images or {})
        self.mime_type = mime_type
        self.requested: List[str] = []

    async def download(self, url: str, platform: Optional[str] = None) -> Optional[DownloadedImage]:
        self.requested.append(url)
        content = self.images.get(url)
        if content is None:
            return None
        return DownloadedImage(content=content, mime_type=self.mime_type)

    async def fetch_as_base64(self, url: str, platform: Optional[str] = None) -> Optional[EncodedImage]:
        downloaded = await self.download(url, platform)
        if downloaded is None:
            return None
        return EncodedImage(data="ZmFrZQ==", mime_type=downloaded.mime_type)


class MemoryImageStore(ImageStore):
    """Keeps stored objects in a dict and returns fake public URLs."""

    def __init__(self, fail: bool = False):
        self.objects: Dict[str, bytes] = {}
        self.fail = fail

    async def store(self, data: bytes, mime_type: str, key: str) -> Optional[str]:
        if self.fail:
            return None
        self.objects[key] = data
        return f"https://cdn.test/{key}"


class FakeScraper(ScrapeProvider):
    """
    Scripted scrape provider.

    ``hashtags`` maps (platform, tag) to a list of raw records or an
    Exception to raise. Unknown keys yield an empty batch. Every call
    reports a run id ``run-<n>`` to ``on_run_started``; ``datasets`` maps
    dataset ids to records for finished-run processing.
    """

    def __init__(
        self,
        hashtags: Optional[Dict[tuple, Any]] = None,
        profiles: Optional[Dict[Platform, Any]] = None,
        followers: Optional[Dict[tuple, Any]] = None,
        datasets: Optional[Dict[str, Any]] = None,
    ):
        self.hashtags = hashtags or {}
        self.profiles = profiles or {}
        self.followers = followers or {}
        self.datasets = datasets or {}
        self.calls: List[tuple] = []

    async def _started(self, on_run_started, source: RecordSource) -> None:
        if on_run_started is not None:
            await on_run_started(f"run-{len(self.calls)}", source)

    @staticmethod
    def _resolve(result, source: RecordSource) -> ScrapeBatch:
        if isinstance(result, Exception):
            raise result
        return ScrapeBatch(source, list(result or []))

    async def scrape_by_hashtag(self, platform: Platform, tag: str, limit: int, on_run_started=None) -> ScrapeBatch:
        self.calls.append(("hashtag", platform, tag, limit))
        source = RecordSource.TIKTOK_VIDEO if platform == Platform.TIKTOK else RecordSource.INSTAGRAM_POST
        await self._started(on_run_started, source)
        return self._resolve(self.hashtags.get((platform, tag)), source)

    async def scrape_followers(self, platform: Platform, username: str, limit: int, on_run_started=None) -> ScrapeBatch:
        self.calls.append(("followers", platform, username, limit))
        if platform != Platform.INSTAGRAM:
            raise ScrapeError(f"Follower scraping is not supported on {platform.value}")
        await self._started(on_run_started, RecordSource.INSTAGRAM_FOLLOWER)
        return self._resolve(self.followers.get((platform, username)), RecordSource.INSTAGRAM_FOLLOWER)

    async def scrape_profiles(self, platform: Platform, usernames: Sequence[str], on_run_started=None) -> ScrapeBatch:
        self.calls.append(("profiles", platform, tuple(usernames), None))
        source = RecordSource.TIKTOK_VIDEO if platform == Platform.TIKTOK else RecordSource.INSTAGRAM_PROFILE
        await self._started(on_run_started, source)
        return self._resolve(self.profiles.get(platform), source)

    async def dataset_items(self, dataset_id: str) -> List[Dict[str, Any]]:
        self.calls.append(("dataset", None, dataset_id, None))
        result = self.datasets.get(dataset_id)
        if isinstance(result, Exception):
            raise result
        return list(result or [])


def instagram_post(username: str, likes: int = 10, location: Optional[str] = None, **extra) -> Dict[str, Any]:
    """Raw hashtag-scraper record."""
    record = {
        "id": f"post-{username}",
        "url": f"https://instagram.com/p/{username}",
        "ownerUsername": username,
        "ownerFullName": username.title(),
        "displayUrl": f"https://cdn.instagram.test/{username}.jpg",
        "likesCount": likes,
        "commentsCount": 1,
        "caption": "street style",
    }
    if location:
        record["locationName"] = location
    record.update(extra)
    return record


def tiktok_video(name: str, fans: int = 1000, heart: int = 500, video: int = 10, **author) -> Dict[str, Any]:
    """Raw TikTok-scraper record."""
    meta = {
        "name": name,
        "nickName": name.title(),
        "signature": "",
        "avatar": f"https://cdn.tiktok.test/{name}.jpg",
        "fans": fans,
        "heart": heart,
        "video": video,
        "following": 5,
        "verified": False,
    }
    meta.update(author)
    return {
        "id": f"video-{name}",
        "webVideoUrl": f"https://tiktok.com/@{name}/video/1",
        "text": "ootd",
        "diggCount": 50,
        "commentCount": 2,
        "authorMeta": meta,
        "videoMeta": {"coverUrl": f"https://cdn.tiktok.test/{name}-cover.jpg"},
    }
