#!/usr/bin/env python3
"""
Analyze endpoints - score candidates outside a discovery job.
"""

from fastapi import APIRouter, Depends, Request

from ..config import get_config
from ..dependencies import get_discovery_service
from ..models.requests import AnalyzeRequest, BatchAnalyzeRequest
from ..models.responses import AnalyzeResponse, BatchAnalyzeResponse
from ..services.discovery_service import DiscoveryService
from .discovery import limiter

router = APIRouter(prefix="/api/analyze", tags=["analyze"])


@router.post("", response_model=AnalyzeResponse)
@limiter.limit(lambda: get_config().web.analyze_rate_limit)
async def analyze_candidate(
    request: Request,
    body: AnalyzeRequest,
    service: DiscoveryService = Depends(get_discovery_service),
):
    """
    Score one candidate with the AI rubric.

    Never fails on model errors: an unusable model response yields the
    default analysis with score 50.
    """
    return await service.analyze(body)


@router.post("/batch", response_model=BatchAnalyzeResponse)
@limiter.limit(lambda: get_config().web.analyze_rate_limit)
async def analyze_candidates(
    request: Request,
    body: BatchAnalyzeRequest,
    service: DiscoveryService = Depends(get_discovery_service),
):
    """
    Score several candidates with one rubric.

    Candidates are scored in small concurrent groups with a pause between
    groups. Results are keyed by lower-cased handle.
    """
    return await service.analyze_batch(body)
