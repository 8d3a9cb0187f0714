#!/usr/bin/env python3
"""
Discovery service - request handling between the HTTP layer and the pipeline.
"""

import logging
import uuid
from typing import Any, Dict

from pydantic import ValidationError

from core.app_context import AppContext
from core.normalizer import CanonicalProfile
from core.scorer import ScoringMode
from database.uow import job_uow
from ..exceptions import InvalidDiscoveryRequestException, JobNotFoundException
from ..models.requests import (
    AnalyzeRequest,
    ApifyWebhookRequest,
    BatchAnalyzeRequest,
    StartDiscoveryRequest,
)

logger = logging.getLogger(__name__)

TOP_CANDIDATES = 5
STATUS_CANDIDATE_LIMIT = 20
RUN_SUCCEEDED_EVENT = "ACTOR.RUN.SUCCEEDED"


def _parse_job_id(job_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(job_id))
    except ValueError:
        raise JobNotFoundException(f"Discovery job {job_id} not found")


def profile_from_analyze_request(body: AnalyzeRequest) -> CanonicalProfile:
    """Loose ad-hoc fields to a CanonicalProfile (handle falls back to the name)."""
    handle = (body.handle or "").strip().lstrip('@') or body.name.strip().replace(' ', '').lower()
    return CanonicalProfile(
        username=handle,
        display_name=body.name.strip(),
        platform=body.platform,
        biography=body.bio or "",
        location=body.location,
        followers_count=body.followers or 0,
        engagement_rate=body.engagement_rate or 0.0,
        profile_image_url=body.avatar_url,
    )


class DiscoveryService:
    """Service layer for discovery jobs, candidate stats and ad-hoc analysis."""

    def __init__(self, ctx: AppContext):
        self.ctx = ctx

    async def start(self, user_id: str, body: StartDiscoveryRequest) -> Dict[str, Any]:
        """Validate, then run a discovery job to completion."""
        cfg = self.ctx.config.discovery
        try:
            request = body.to_discovery_request(cfg.default_limit, cfg.max_limit)
        except ValidationError as e:
            messages = "; ".join(err.get('msg', '') for err in e.errors())
            raise InvalidDiscoveryRequestException(messages or "Invalid discovery request")

        outcome = await self.ctx.orchestrator.run(user_id, request)
        return outcome.to_dict()

    async def get_status(self, job_id: str, user_id: str) -> Dict[str, Any]:
        job_uuid = _parse_job_id(job_id)
        async with job_uow(self.ctx.session_factory) as repo:
            job = await repo.jobs.get(job_uuid, user_id)
            if job is None:
                raise JobNotFoundException(f"Discovery job {job_id} not found")
            candidates = await repo.candidates.list_for_job(job_uuid, limit=STATUS_CANDIDATE_LIMIT)
            summaries = [c.to_summary() for c in candidates]
            return {
                'job': job.to_dict(),
                'candidates': summaries,
                'top_candidates': summaries[:TOP_CANDIDATES],
            }

    async def delete(self, job_id: str, user_id: str) -> Dict[str, Any]:
        job_uuid = _parse_job_id(job_id)
        async with job_uow(self.ctx.session_factory) as repo:
            deleted = await repo.jobs.delete(job_uuid, user_id)
        if not deleted:
            raise JobNotFoundException(f"Discovery job {job_id} not found")
        return {'success': True}

    async def pipeline_stats(self, user_id: str) -> Dict[str, Any]:
        async with job_uow(self.ctx.session_factory) as repo:
            by_status = await repo.candidates.count_by_status(user_id)
        return {'total': sum(by_status.values()), 'by_status': by_status}

    def _profile(self, body: AnalyzeRequest) -> CanonicalProfile:
        try:
            return profile_from_analyze_request(body)
        except ValidationError as e:
            messages = "; ".join(err.get('msg', '') for err in e.errors())
            raise InvalidDiscoveryRequestException(messages or "Invalid candidate")

    async def analyze(self, body: AnalyzeRequest) -> Dict[str, Any]:
        profile = self._profile(body)
        mode = ScoringMode.STREET_CASTING if body.street_casting_mode else ScoringMode.STANDARD
        result = await self.ctx.scoring_service.score(
            profile,
            extra_image_urls=body.image_urls,
            mode=mode,
            filters=body.filters,
        )
        return {'score': result.composite_score, 'analysis': result.analysis.model_dump(mode='json')}

    async def analyze_batch(self, body: BatchAnalyzeRequest) -> Dict[str, Any]:
        """Score several candidates in small groups; results keyed by lower-cased handle."""
        profiles = [self._profile(candidate) for candidate in body.candidates]
        mode = ScoringMode.STREET_CASTING if body.street_casting_mode else ScoringMode.STANDARD
        scored = await self.ctx.scoring_service.score_batch(profiles, mode=mode, filters=body.filters)
        results = {
            key: {'score': result.composite_score, 'analysis': result.analysis.model_dump(mode='json')}
            for key, result in scored.items()
        }
        return {'count': len(results), 'results': results}

    async def handle_apify_webhook(self, body: ApifyWebhookRequest) -> Dict[str, Any]:
        """
        Finish the discovery job of a succeeded scraper run.

        Other events, and runs whose job already finished, are acknowledged
        without processing.
        """
        resource = body.resource
        if (body.event_type != RUN_SUCCEEDED_EVENT or resource.status != 'SUCCEEDED'
                or not resource.default_dataset_id):
            logger.info(f"Ignoring webhook {body.event_type} for run {resource.id}")
            return {'received': True, 'processed': False}

        try:
            outcome = await self.ctx.orchestrator.process_finished_run(resource.id, resource.default_dataset_id)
        except LookupError:
            raise JobNotFoundException(f"No discovery job for run {resource.id}")

        if outcome is None:
            return {'received': True, 'processed': False}

        result = outcome.to_dict()
        return {
            'received': True,
            'processed': True,
            'success': result['success'],
            'job_id': result['job_id'],
            'candidates_found': result.get('candidates_found'),
            'candidates_analyzed': result.get('candidates_analyzed'),
            'error': result.get('error'),
        }
