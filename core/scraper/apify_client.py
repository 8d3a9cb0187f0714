"""Apify API Client with connection reuse and retry logic."""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception,
    before_sleep_log,
)

from core.config_loader import ScraperConfig
from core.normalizer import Platform, RecordSource
from core.scraper.interfaces import (
    ScrapeBatch,
    ScrapeError,
    RunStartedCallback,
    ScrapeProvider,
    ScraperConfigurationError,
)

logger = logging.getLogger(__name__)

TERMINAL_FAILURES = ("FAILED", "ABORTED", "TIMED-OUT")


def _is_retryable_error(exc: BaseException) -> bool:
    """
    Determine if an exception is retryable.

    Only retries on:
    - Timeouts and connection errors
    - Server errors (5xx) and 429

    Does NOT retry on other client errors (4xx).
    """
    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError)):
        return True

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429

    return False


def clean_tag(tag: str) -> str:
    return tag.strip().lstrip('#').strip()


def clean_username(username: str) -> str:
    return username.strip().lstrip('@').strip()


class ApifyClient(ScrapeProvider):
    """
    Client for the Apify REST API.

    Responsibilities:
    - Own an httpx.AsyncClient for connection reuse
    - Start actor runs with retry logic
    - Poll runs until they finish within the wait budget
    - Download the run's default dataset
    """

    def __init__(self, config: ScraperConfig, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize Apify client.

        Args:
            config: Scraper configuration (token, actors, timeouts)
            client: Optional pre-built HTTP client (tests)
        """
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.poll_interval_seconds = config.poll_interval_seconds
        self.job_timeout_seconds = config.job_timeout_seconds

        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.request_timeout_seconds),
        )

        logger.info(
            f"ApifyClient initialized: base_url={self.base_url}, "
            f"poll_interval={self.poll_interval_seconds}s, "
            f"job_timeout={self.job_timeout_seconds}s"
        )

    def _headers(self) -> Dict[str, str]:
        if not self.config.token:
            raise ScraperConfigurationError("Apify token is not configured (set APIFY_TOKEN)")
        return {"Authorization": f"Bearer {self.config.token}"}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(2),
        retry=retry_if_exception(_is_retryable_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self.client.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            **kwargs,
        )
        if response.status_code in (401, 403):
            raise ScraperConfigurationError(f"Apify rejected credentials ({response.status_code}) for {path}")
        response.raise_for_status()
        return response.json()

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        """Run a request, translating transport failures into ScrapeError."""
        try:
            return await self._request(method, path, **kwargs)
        except ScrapeError:
            raise
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404 and path.startswith("/v2/acts/"):
                raise ScraperConfigurationError(f"Apify actor not found: {path}") from e
            raise ScrapeError(f"Apify request {method} {path} failed: HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise ScrapeError(f"Apify request {method} {path} failed: {e}") from e

    async def start_run(self, actor_id: str, run_input: Dict[str, Any]) -> Dict[str, Any]:
        """Start an actor run; returns the run object (id, defaultDatasetId, status)."""
        actor_path = actor_id.replace('/', '~')
        payload = await self._call("POST", f"/v2/acts/{actor_path}/runs", json=run_input)
        run = payload.get("data") or {}
        if not run.get("id"):
            raise ScrapeError(f"Apify did not return a run id for {actor_id}")
        logger.info(f"Started {actor_id}: run_id={run['id']}")
        return run

    async def wait_for_run(
        self,
        run_id: str,
        *,
        poll_interval_s: Optional[float] = None,
        job_timeout_s: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Poll a run until it succeeds.

        Args:
            run_id: Run to poll
            poll_interval_s: Seconds between status polls
            job_timeout_s: Wait budget in seconds

        Raises:
            ScrapeError: Run failed, was aborted, or exceeded the wait budget
        """
        poll_interval = poll_interval_s or self.poll_interval_seconds
        job_timeout = job_timeout_s or self.job_timeout_seconds
        deadline = time.monotonic() + job_timeout

        while True:
            payload = await self._call("GET", f"/v2/actor-runs/{run_id}")
            run = payload.get("data") or {}
            status = run.get("status")

            if status == "SUCCEEDED":
                logger.info(f"Run {run_id} succeeded")
                return run
            if status in TERMINAL_FAILURES:
                raise ScrapeError(f"Apify run {run_id} failed with status: {status}")

            if time.monotonic() + poll_interval > deadline:
                raise ScrapeError(f"Apify run {run_id} timed out after {job_timeout}s")

            await asyncio.sleep(poll_interval)

    async def dataset_items(self, dataset_id: str) -> List[Dict[str, Any]]:
        items = await self._call(
            "GET",
            f"/v2/datasets/{dataset_id}/items",
            params={"clean": "true", "format": "json"},
        )
        if not isinstance(items, list):
            raise ScrapeError(f"Unexpected dataset payload for {dataset_id}")
        return [item for item in items if isinstance(item, dict)]

    async def run_actor(
        self,
        actor_id: str,
        run_input: Dict[str, Any],
        source: Optional[RecordSource] = None,
        on_run_started: Optional[RunStartedCallback] = None,
    ) -> List[Dict[str, Any]]:
        """Start, wait, and download: the full scrape round trip."""
        run = await self.start_run(actor_id, run_input)
        if on_run_started is not None and source is not None:
            try:
                await on_run_started(run["id"], source)
            except Exception as e:
                logger.warning(f"Could not record run {run['id']}: {e}")
        finished = await self.wait_for_run(run["id"])
        dataset_id = finished.get("defaultDatasetId") or run.get("defaultDatasetId")
        if not dataset_id:
            raise ScrapeError(f"Run {run['id']} has no dataset")
        items = await self.dataset_items(dataset_id)
        logger.info(f"{actor_id} returned {len(items)} items")
        return items

    async def scrape_by_hashtag(
        self,
        platform: Platform,
        tag: str,
        limit: int,
        on_run_started: Optional[RunStartedCallback] = None,
    ) -> ScrapeBatch:
        tag = clean_tag(tag)
        if not tag:
            raise ScrapeError("Empty hashtag")

        actors = self.config.actors
        if platform == Platform.TIKTOK:
            items = await self.run_actor(actors.tiktok, {
                "hashtags": [tag],
                "resultsPerPage": limit,
                "shouldDownloadVideos": False,
                "shouldDownloadCovers": False,
            }, RecordSource.TIKTOK_VIDEO, on_run_started)
            return ScrapeBatch(RecordSource.TIKTOK_VIDEO, items)

        items = await self.run_actor(actors.instagram_hashtag, {
            "hashtags": [tag],
            "resultsLimit": limit,
            "searchType": "hashtag",
        }, RecordSource.INSTAGRAM_POST, on_run_started)
        return ScrapeBatch(RecordSource.INSTAGRAM_POST, items)

    async def scrape_followers(
        self,
        platform: Platform,
        username: str,
        limit: int,
        on_run_started: Optional[RunStartedCallback] = None,
    ) -> ScrapeBatch:
        if platform != Platform.INSTAGRAM:
            raise ScrapeError(f"Follower scraping is not supported on {platform.value}")
        username = clean_username(username)
        items = await self.run_actor(self.config.actors.instagram_followers, {
            "usernames": [username],
            "resultsLimit": limit,
        }, RecordSource.INSTAGRAM_FOLLOWER, on_run_started)
        return ScrapeBatch(RecordSource.INSTAGRAM_FOLLOWER, items)

    async def scrape_profiles(
        self,
        platform: Platform,
        usernames: Sequence[str],
        on_run_started: Optional[RunStartedCallback] = None,
    ) -> ScrapeBatch:
        names = [clean_username(u) for u in usernames if clean_username(u)]
        if not names:
            raise ScrapeError("No usernames to scrape")

        if platform == Platform.TIKTOK:
            items = await self.run_actor(self.config.actors.tiktok, {
                "profiles": names,
                "resultsPerPage": 1,
                "shouldDownloadVideos": False,
                "shouldDownloadCovers": False,
            }, RecordSource.TIKTOK_VIDEO, on_run_started)
            return ScrapeBatch(RecordSource.TIKTOK_VIDEO, items)

        items = await self.run_actor(
            self.config.actors.instagram_profile, {"usernames": names},
            RecordSource.INSTAGRAM_PROFILE, on_run_started,
        )
        return ScrapeBatch(RecordSource.INSTAGRAM_PROFILE, items)

    async def close(self):
        """Close the client and release resources."""
        await self.client.aclose()
        logger.info("ApifyClient session closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
