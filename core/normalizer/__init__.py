#!/usr/bin/env python3
"""
Normalizer Module - Raw scraper records to CanonicalProfile.

Public API:
- normalize: Map one raw record of a known source shape
- normalize_batch: Map many records, dropping the ones that don't resolve
- dedupe_profiles: Keep the first profile per case-insensitive username

- models.py: CanonicalProfile, RecentPost, Platform, RecordSource
- platforms.py: Per-source field tables and mapping functions
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from core.normalizer.models import CanonicalProfile, Platform, RecentPost, RecordSource
from core.normalizer.platforms import MAPPERS, engagement_rate

logger = logging.getLogger(__name__)


def normalize(raw: Dict[str, Any], source: RecordSource) -> Optional[CanonicalProfile]:
    """
    Map a raw scraped record into a CanonicalProfile.

    Args:
        raw: Record as returned by the scraper
        source: Which scraper output shape the record has

    Returns:
        The canonical profile, or None when no username could be resolved.
    """
    if not isinstance(raw, dict):
        logger.debug(f"Dropping non-dict {source.value} record: {type(raw).__name__}")
        return None

    outcome = MAPPERS[RecordSource(source)](raw)
    if outcome.profile is None:
        logger.debug(f"Dropping {source.value} record: {outcome.reason}")
    return outcome.profile


def normalize_batch(records: Iterable[Dict[str, Any]], source: RecordSource) -> List[CanonicalProfile]:
    """Normalize a batch; records that fail or raise are dropped, never fatal."""
    profiles = []
    dropped = 0
    for raw in records:
        try:
            profile = normalize(raw, source)
        except Exception as e:
            logger.debug(f"Failed to normalize {source.value} record: {e}")
            profile = None
        if profile is None:
            dropped += 1
            continue
        profiles.append(profile)

    if dropped:
        logger.debug(f"normalize_batch({source.value}): kept {len(profiles)}, dropped {dropped}")
    return profiles


def dedupe_profiles(profiles: Iterable[CanonicalProfile]) -> List[CanonicalProfile]:
    """Keep the first occurrence of each lower-cased username, preserving order."""
    seen = set()
    unique = []
    for profile in profiles:
        if profile.username_key in seen:
            continue
        seen.add(profile.username_key)
        unique.append(profile)
    return unique


__all__ = [
    'CanonicalProfile',
    'Platform',
    'RecentPost',
    'RecordSource',
    'normalize',
    'normalize_batch',
    'dedupe_profiles',
    'engagement_rate',
]
