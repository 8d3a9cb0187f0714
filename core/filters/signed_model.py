"""
Signed-model heuristic.

A profile that advertises representation is assumed to be already signed
and is never worth outreach.
"""
import re
from typing import List

from core.normalizer import CanonicalProfile

SIGNED_KEYWORDS = (
    "signed to",
    "signed with",
    "signed @",
    "represented by",
    "repped by",
    "management:",
    "mgmt:",
    "mgmt @",
    "agency:",
    "booking:",
    "bookings:",
    "mother agency",
    "img models",
    "elite model",
    "ford models",
    "wilhelmina",
    "next models",
    "storm models",
    "dna models",
    "the society",
    "women management",
    "select model",
    "premier model",
    "models 1",
    "viva model",
    "supreme management",
)

AGENCY_EMAIL_PATTERN = re.compile(
    r"[\w.+-]+@[\w-]*(?:models|management|mgmt|agency|talent)[\w-]*\.[a-z]{2,}",
    re.IGNORECASE,
)


def signed_reasons(profile: CanonicalProfile) -> List[str]:
    """Reasons the profile looks represented; empty when it looks unsigned."""
    reasons = []
    bio = profile.biography.lower()
    name = profile.display_name.lower()

    for keyword in SIGNED_KEYWORDS:
        if keyword in bio or keyword in name:
            reasons.append(f"agency keyword '{keyword}'")
            break

    if AGENCY_EMAIL_PATTERN.search(profile.biography):
        reasons.append("agency email in bio")

    if profile.is_verified:
        reasons.append("verified account")

    return reasons


def looks_signed(profile: CanonicalProfile) -> bool:
    return bool(signed_reasons(profile))
