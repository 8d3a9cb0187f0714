#!/usr/bin/env python3
"""
Filter Module - Drop signed models and profiles outside caller constraints.

Public API:
- filter_profiles: Order-preserving filter over canonical profiles
- explain_exclusion: Why a single profile would be dropped
- DiscoveryFilters: Caller constraints
"""

import logging
from typing import Iterable, List, Optional

from core.filters.constraints import constraint_reasons, location_matches, CITY_KEYWORDS
from core.filters.models import DiscoveryFilters
from core.filters.signed_model import looks_signed, signed_reasons
from core.normalizer import CanonicalProfile

logger = logging.getLogger(__name__)


def explain_exclusion(profile: CanonicalProfile, constraints: Optional[DiscoveryFilters] = None) -> List[str]:
    """
    List every reason a profile is excluded.

    Args:
        profile: Canonical profile to check
        constraints: Optional caller constraints

    Returns:
        Human-readable reasons; empty when the profile is kept.
    """
    return signed_reasons(profile) + constraint_reasons(profile, constraints)


def filter_profiles(
    profiles: Iterable[CanonicalProfile],
    constraints: Optional[DiscoveryFilters] = None,
) -> List[CanonicalProfile]:
    """Keep profiles that look unsigned and satisfy the constraints, in input order."""
    kept = []
    for profile in profiles:
        reasons = explain_exclusion(profile, constraints)
        if reasons:
            logger.debug(f"Excluding @{profile.username}: {'; '.join(reasons)}")
            continue
        kept.append(profile)
    return kept


__all__ = [
    'DiscoveryFilters',
    'filter_profiles',
    'explain_exclusion',
    'looks_signed',
    'location_matches',
    'CITY_KEYWORDS',
]
