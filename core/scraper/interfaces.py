"""
Scrape Provider Interface - Abstract base for social media scraping services.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from core.normalizer import Platform, RecordSource

# Called with (run_id, record_source) as soon as a provider run is started
RunStartedCallback = Callable[[str, RecordSource], Awaitable[None]]


class ScrapeError(Exception):
    """A single scrape call failed; the job carries on without its records."""


class ScraperConfigurationError(ScrapeError):
    """Missing or rejected credentials, unknown actor. Fatal to the job."""


@dataclass
class ScrapeBatch:
    """Raw records from one scrape call, tagged with their shape."""
    source: RecordSource
    records: List[Dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)


class ScrapeProvider(ABC):
    """
    Abstract Interface for scraping providers.

    ``on_run_started`` lets the caller remember provider run ids, so a
    completion webhook can later be matched to its discovery job.
    """

    @abstractmethod
    async def scrape_by_hashtag(
        self,
        platform: Platform,
        tag: str,
        limit: int,
        on_run_started: Optional[RunStartedCallback] = None,
    ) -> ScrapeBatch:
        """Posts/videos published under a hashtag."""
        pass

    @abstractmethod
    async def scrape_followers(
        self,
        platform: Platform,
        username: str,
        limit: int,
        on_run_started: Optional[RunStartedCallback] = None,
    ) -> ScrapeBatch:
        """Follower stubs of an account."""
        pass

    @abstractmethod
    async def scrape_profiles(
        self,
        platform: Platform,
        usernames: Sequence[str],
        on_run_started: Optional[RunStartedCallback] = None,
    ) -> ScrapeBatch:
        """Full profiles (Instagram) or recent videos (TikTok) of specific accounts."""
        pass

    @abstractmethod
    async def dataset_items(self, dataset_id: str) -> List[Dict[str, Any]]:
        """Raw records of a finished run's dataset."""
        pass
