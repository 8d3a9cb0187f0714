"""
Unit tests for discovery request parsing and sizing rules.
"""
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from core.config_loader import DiscoveryConfig
from core.normalizer import Platform
from pipeline.stages import (
    DiscoveryOutcome,
    DiscoveryRequest,
    SearchType,
    analysis_subset_size,
    describe_error,
    location_to_hashtag,
    per_source_limit,
    request_from_job,
)


class TestPerSourceLimit:

    def test_two_platforms_two_tags(self):
        assert per_source_limit(50, 2, 2) == 13

    def test_capped(self):
        assert per_source_limit(200, 1, 1) == 30

    def test_at_least_one(self):
        assert per_source_limit(1, 2, 5) == 1


class TestAnalysisSubsetSize:

    @pytest.mark.parametrize("n,expected", [
        (0, 0),
        (4, 4),
        (10, 10),
        (18, 10),
        (30, 15),
        (50, 25),
        (120, 25),
    ])
    def test_default_bounds(self, n, expected):
        assert analysis_subset_size(n) == expected

    def test_configurable_cap(self):
        assert analysis_subset_size(120, DiscoveryConfig(analysis_cap=40)) == 40


class TestDiscoveryRequest:

    def test_hashtags_are_cleaned_and_deduped(self):
        request = DiscoveryRequest(
            platforms=["instagram", "instagram", "tiktok"],
            search_type="hashtag",
            hashtags=["#nycmodel", "streetstyle", "nycmodel", " "],
        )
        assert request.sources() == ["nycmodel", "streetstyle"]
        assert request.platforms == [Platform.INSTAGRAM, Platform.TIKTOK]

    def test_hashtags_from_query(self):
        request = DiscoveryRequest(platforms=["tiktok"], search_type="hashtag", search_query="#ootd, skater  fits")
        assert request.sources() == ["ootd", "skater", "fits"]

    def test_location_becomes_hashtag(self):
        request = DiscoveryRequest(platforms=["instagram"], search_type="location", search_query="New York")
        assert request.sources() == ["newyork"]
        assert location_to_hashtag("Los Angeles!") == "losangeles"

    def test_profile_usernames(self):
        request = DiscoveryRequest(platforms=["instagram"], search_type=SearchType.PROFILE, usernames=["@ana", "bo"])
        assert request.sources() == ["ana", "bo"]

    @pytest.mark.parametrize("fields", [
        {"platforms": [], "search_type": "hashtag", "hashtags": ["x"]},
        {"platforms": ["instagram"], "search_type": "hashtag", "hashtags": []},
        {"platforms": ["instagram"], "search_type": "followers"},
        {"platforms": ["myspace"], "search_type": "hashtag", "hashtags": ["x"]},
        {"platforms": ["instagram"], "search_type": "hashtag", "hashtags": ["x"], "limit": 0},
    ])
    def test_invalid_requests(self, fields):
        with pytest.raises(ValidationError):
            DiscoveryRequest(**fields)


class TestOutcome:

    def test_success_dict(self):
        outcome = DiscoveryOutcome(job_id="j1", success=True, platforms_searched=["instagram"],
                                   hashtags_searched=["x"], candidates_found=4, candidates_analyzed=3)
        data = outcome.to_dict()
        assert data["success"] is True
        assert data["candidates_found"] == 4
        assert "error" not in data

    def test_failure_dict(self):
        outcome = DiscoveryOutcome(job_id="j1", success=False, error="boom")
        assert outcome.to_dict() == {"success": False, "job_id": "j1", "error": "boom"}

    def test_describe_error_unwraps_groups(self):
        group = ExceptionGroup("tasks", [ValueError("Apify token is not configured")])
        assert describe_error(group) == "Apify token is not configured"
        assert describe_error(RuntimeError()) == "RuntimeError"


def stored_job(**fields):
    defaults = dict(platforms=["instagram"], search_type="hashtag", search_query=None, hashtags=["nycmodel"],
                    requested_limit=40, street_casting_mode=False, filters={})
    defaults.update(fields)
    return SimpleNamespace(**defaults)


class TestRequestFromJob:

    def test_hashtag_job(self):
        request = request_from_job(stored_job(filters={"min_followers": 500}))
        assert request.search_type == SearchType.HASHTAG
        assert request.sources() == ["nycmodel"]
        assert request.limit == 40
        assert request.filters.min_followers == 500

    def test_profile_job_restores_usernames(self):
        request = request_from_job(stored_job(search_type="profile", hashtags=["ana", "bo"], street_casting_mode=True))
        assert request.usernames == ["ana", "bo"]
        assert request.sources() == ["ana", "bo"]
        assert request.street_casting_mode is True
        assert request.filters is None

    def test_missing_limit_uses_default(self):
        request = request_from_job(stored_job(requested_limit=None, platforms=["instagram", "tiktok"]))
        assert request.limit == 50
        assert request.platforms == [Platform.INSTAGRAM, Platform.TIKTOK]
