#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Dict, Any


class StartDiscoveryResponse(BaseModel):
    """Outcome of a discovery job run."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "job_id": "550e8400-e29b-41d4-a716-446655440000",
                "platforms_searched": ["instagram", "tiktok"],
                "hashtags_searched": ["streetstyle", "nycmodel"],
                "candidates_found": 37,
                "candidates_analyzed": 19,
                "street_casting_mode": False
            }
        }
    )

    success: bool
    job_id: str
    platforms_searched: Optional[List[str]] = None
    hashtags_searched: Optional[List[str]] = None
    candidates_found: Optional[int] = None
    candidates_analyzed: Optional[int] = None
    street_casting_mode: Optional[bool] = None
    error: Optional[str] = None


class CandidateSummary(BaseModel):
    id: str
    name: str
    handle: str
    platform: str
    avatar_url: Optional[str] = None
    ai_score: Optional[int] = None
    status: str
    physical_potential_score: Optional[int] = None
    unsigned_probability_score: Optional[int] = None
    street_casting_score: Optional[int] = None


class DiscoveryJobStatusResponse(BaseModel):
    job: Dict[str, Any]
    candidates: List[CandidateSummary]
    top_candidates: List[CandidateSummary]


class DeleteResponse(BaseModel):
    success: bool


class AnalyzeResponse(BaseModel):
    score: int
    analysis: Dict[str, Any]


class PipelineStatsResponse(BaseModel):
    total: int
    by_status: Dict[str, int]


class BatchAnalyzeResponse(BaseModel):
    count: int
    results: Dict[str, AnalyzeResponse]


class WebhookResponse(BaseModel):
    received: bool
    processed: bool
    success: Optional[bool] = None
    job_id: Optional[str] = None
    candidates_found: Optional[int] = None
    candidates_analyzed: Optional[int] = None
    error: Optional[str] = None
