#!/usr/bin/env python3
"""
Stats endpoints - candidate pipeline statistics.
"""

from fastapi import APIRouter, Depends

from ..dependencies import get_discovery_service, get_user_id
from ..models.responses import PipelineStatsResponse
from ..services.discovery_service import DiscoveryService

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/pipeline", response_model=PipelineStatsResponse)
async def get_pipeline_stats(
    user_id: str = Depends(get_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """
    Count the caller's candidates per outreach status.
    """
    return await service.pipeline_stats(user_id)
