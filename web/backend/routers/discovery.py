#!/usr/bin/env python3
"""
Discovery endpoints - start, inspect and delete discovery jobs.
"""

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from ..config import get_config
from ..dependencies import get_discovery_service, get_user_id
from ..models.requests import ApifyWebhookRequest, StartDiscoveryRequest
from ..models.responses import (
    DeleteResponse,
    DiscoveryJobStatusResponse,
    StartDiscoveryResponse,
    WebhookResponse,
)
from ..services.discovery_service import DiscoveryService

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/discovery", tags=["discovery"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": f"Rate limit exceeded: {exc.detail}", "type": "RateLimitExceeded"}
    )


@router.post("/start", response_model=StartDiscoveryResponse, response_model_exclude_none=True)
@limiter.limit(lambda: get_config().web.discovery_rate_limit)
async def start_discovery(
    request: Request,
    body: StartDiscoveryRequest,
    user_id: str = Depends(get_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """
    Run a discovery job and return its outcome.

    The job will:
    - Scrape the requested platform(s) for each hashtag or account
    - Drop signed models and profiles outside the filters
    - Score the best candidates with the AI rubric
    - Save new candidates to the pipeline

    A job that fails after creation is reported with success=false and its id.
    """
    return await service.start(user_id, body)


@router.post("/webhook", response_model=WebhookResponse, response_model_exclude_none=True)
async def apify_webhook(
    body: ApifyWebhookRequest,
    service: DiscoveryService = Depends(get_discovery_service),
):
    """
    Apify run notification, an alternative to polling.

    On ACTOR.RUN.SUCCEEDED the job that started the run is finished from
    the run's dataset. Jobs that already completed or failed are left alone.
    """
    return await service.handle_apify_webhook(body)


@router.get("/webhook")
async def apify_webhook_check():
    """Endpoint check used when registering the webhook."""
    return {"status": "ok", "endpoint": "apify-webhook"}


@router.get("/{job_id}", response_model=DiscoveryJobStatusResponse)
async def get_discovery_job(
    job_id: str,
    user_id: str = Depends(get_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """
    Get a discovery job with its best candidates.

    Status values:
    - pending: Job created but not yet started
    - running: Job is scraping or analyzing
    - completed: Job finished
    - failed: Job stopped with error_message set
    """
    return await service.get_status(job_id, user_id)


@router.delete("/{job_id}", response_model=DeleteResponse)
async def delete_discovery_job(
    job_id: str,
    user_id: str = Depends(get_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """Delete a discovery job. Its candidates stay in the pipeline."""
    return await service.delete(job_id, user_id)
