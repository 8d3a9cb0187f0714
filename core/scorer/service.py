#!/usr/bin/env python3
"""
Scoring Service - AI rubric scoring of candidate profiles.

For each profile:
- Resolve up to five images (profile picture first) and fetch them as base64
- Build the standard or street-casting prompt
- Call the LLM (vision path when any image was fetched)
- Parse and validate the JSON response
- Recompute the composite from the dimension scores

score() never raises. Any failure yields the uniform default analysis
with composite 50.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.config_loader import ScoringConfig
from core.filters.models import DiscoveryFilters
from core.llm.interfaces import LLMProvider
from core.llm.system_prompts import SCOUT_SYSTEM_PROMPT, STREET_CASTING_SYSTEM_PROMPT
from core.media.image_fetcher import EncodedImage, ImageFetcher
from core.normalizer import CanonicalProfile

from core.scorer.composite import apply_composite
from core.scorer.models import (
    ScoreResult,
    ScoringMode,
    default_analysis,
    DEFAULT_COMPOSITE_SCORE,
)
from core.scorer.parsing import parse_analysis
from core.scorer.prompts import build_prompt

logger = logging.getLogger(__name__)


def resolve_image_urls(
    profile: CanonicalProfile,
    extra_urls: Optional[Sequence[str]] = None,
    max_images: int = 5,
) -> List[str]:
    """
    Pick the images to send: profile picture, then caller URLs, then post images.

    Duplicates and empty values are skipped; at most ``max_images`` URLs.
    """
    ordered = [profile.profile_image_url] + list(extra_urls or []) + list(profile.post_image_urls)
    urls: List[str] = []
    for url in ordered:
        if url and url not in urls:
            urls.append(url)
        if len(urls) >= max_images:
            break
    return urls


class ScoringService:
    """
    Scores canonical profiles against the standard or street-casting rubric.

    Designed to be used standalone (ad-hoc analysis) or from the discovery
    orchestrator.
    """

    def __init__(
        self,
        llm: LLMProvider,
        image_fetcher: Optional[ImageFetcher] = None,
        config: Optional[ScoringConfig] = None,
    ):
        self.llm = llm
        self.image_fetcher = image_fetcher or ImageFetcher()
        self.config = config or ScoringConfig()

    async def fetch_images(self, urls: Sequence[str], platform: Optional[str] = None) -> List[EncodedImage]:
        """Fetch all URLs concurrently; failed fetches are omitted, order is kept."""
        if not urls:
            return []
        results = await asyncio.gather(
            *(self.image_fetcher.fetch_as_base64(url, platform) for url in urls),
            return_exceptions=True,
        )
        images = []
        for url, result in zip(urls, results):
            if isinstance(result, BaseException):
                logger.warning(f"Image fetch raised for {url}: {result}")
                continue
            if result is not None:
                images.append(result)
        return images

    def _age_range(self, filters: Optional[DiscoveryFilters]) -> Tuple[int, int]:
        if filters is not None and filters.age_range:
            return filters.age_range
        return self.config.default_age_range

    async def score(
        self,
        profile: CanonicalProfile,
        extra_image_urls: Optional[Sequence[str]] = None,
        mode: ScoringMode = ScoringMode.STANDARD,
        filters: Optional[DiscoveryFilters] = None,
    ) -> ScoreResult:
        """
        Score one profile.

        Args:
            profile: Canonical profile to assess
            extra_image_urls: Additional image URLs to prefer over post images
            mode: Standard or street-casting rubric
            filters: Job filters (age range, style preference)

        Returns:
            ScoreResult with the locally computed composite.
        """
        vision_analyzed = False
        try:
            urls = resolve_image_urls(profile, extra_image_urls, self.config.max_images)
            images = await self.fetch_images(urls, profile.platform.value)
            vision_analyzed = bool(images)

            prompt = build_prompt(
                profile,
                mode,
                image_count=len(images),
                filters=filters,
                default_age_range=self.config.default_age_range,
            )
            system_prompt = STREET_CASTING_SYSTEM_PROMPT if mode == ScoringMode.STREET_CASTING else SCOUT_SYSTEM_PROMPT

            text = await self.llm.generate(prompt, images=images or None, system_prompt=system_prompt)
            analysis = parse_analysis(text, mode)
            analysis.vision_analyzed = vision_analyzed

            composite = apply_composite(analysis, self._age_range(filters))
            logger.info(
                f"Scored @{profile.username} ({mode.value}): {composite} "
                f"[{len(images)} images]"
            )
            return ScoreResult(composite_score=composite, analysis=analysis)

        except Exception as e:
            logger.warning(f"Scoring failed for @{profile.username}, using default analysis: {type(e).__name__}: {e}")
            return ScoreResult(
                composite_score=DEFAULT_COMPOSITE_SCORE,
                analysis=default_analysis(mode, vision_analyzed=vision_analyzed),
            )

    async def score_batch(
        self,
        profiles: Iterable[CanonicalProfile],
        mode: ScoringMode = ScoringMode.STANDARD,
        filters: Optional[DiscoveryFilters] = None,
    ) -> Dict[str, ScoreResult]:
        """
        Score profiles in small concurrent groups with a pause between groups.

        Returns:
            Results keyed by lower-cased username.
        """
        profiles = list(profiles)
        batch_size = max(1, self.config.batch_size)
        results: Dict[str, ScoreResult] = {}

        for start in range(0, len(profiles), batch_size):
            group = profiles[start:start + batch_size]
            scored = await asyncio.gather(
                *(self.score(p, mode=mode, filters=filters) for p in group)
            )
            for profile, result in zip(group, scored):
                results[profile.username_key] = result

            if start + batch_size < len(profiles) and self.config.batch_delay_seconds > 0:
                await asyncio.sleep(self.config.batch_delay_seconds)

        logger.info(f"Batch scored {len(results)} profiles in groups of {batch_size}")
        return results
