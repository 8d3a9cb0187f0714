"""Discovery job orchestrator.

Runs one discovery job end to end:

    create job (pending) -> running
    -> scrape every platform concurrently
    -> normalize, dedupe, filter -> checkpoint candidates_found
    -> analyze a bounded subset: skip known, proxy avatar + score, persist
    -> completed

A completion webhook can finish a job from a scraper run dataset instead:
the job is looked up by the run id recorded when the run started, then
goes through the same filter and analyze stages.

Per-hashtag, per-image and per-candidate failures are logged and skipped.
Scraper configuration errors and anything else escaping those boundaries
mark the job failed.
"""

import asyncio
import logging
import time
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.config_loader import DiscoveryConfig
from core.filters import filter_profiles
from core.job_state import JobState, JobStatus
from core.media.image_proxy import ImageProxy
from core.normalizer import CanonicalProfile, Platform, RecordSource, dedupe_profiles, normalize_batch
from core.scorer import ScoringMode, ScoringService
from core.scraper.interfaces import RunStartedCallback, ScrapeBatch, ScrapeProvider, ScraperConfigurationError
from database.uow import job_uow

from pipeline.stages import (
    DiscoveryOutcome,
    DiscoveryRequest,
    SearchType,
    analysis_subset_size,
    describe_error,
    per_source_limit,
    request_from_job,
)

logger = logging.getLogger(__name__)


class _JobRun:
    """Mutable bookkeeping for one running job."""

    def __init__(self, job_id, user_id: str, request: DiscoveryRequest, state: Optional[JobState] = None):
        self.job_id = job_id
        self.user_id = user_id
        self.request = request
        self.state = state or JobState()
        self.lock = asyncio.Lock()


class DiscoveryOrchestrator:
    """
    Coordinates scraping, filtering, scoring and persistence for discovery jobs.

    Responsibilities:
    - Own the job lifecycle and its progress checkpoints
    - Fan out scraping across platforms
    - Keep individual failures from sinking the whole job
    """

    def __init__(
        self,
        scraper: ScrapeProvider,
        scoring_service: ScoringService,
        image_proxy: Optional[ImageProxy] = None,
        session_factory: Optional[async_sessionmaker] = None,
        config: Optional[DiscoveryConfig] = None,
    ):
        self.scraper = scraper
        self.scoring_service = scoring_service
        self.image_proxy = image_proxy
        self.session_factory = session_factory
        self.config = config or DiscoveryConfig()

    async def run(self, user_id: str, request: DiscoveryRequest) -> DiscoveryOutcome:
        """Create a job for ``request`` and execute it to a terminal state."""
        async with job_uow(self.session_factory) as repo:
            job = await repo.jobs.create(
                user_id=user_id,
                platforms=[p.value for p in request.platforms],
                search_type=request.search_type.value,
                search_query=request.search_query,
                hashtags=request.sources(),
                filters=request.filters.model_dump(mode='json') if request.filters else {},
                street_casting_mode=request.street_casting_mode,
                requested_limit=request.limit,
            )
            job_id = job.id
        logger.info(f"Created discovery job {job_id} for user {user_id}")
        return await self.execute(job_id, user_id, request)

    async def execute(self, job_id, user_id: str, request: DiscoveryRequest) -> DiscoveryOutcome:
        run = _JobRun(job_id, user_id, request)
        return await self._drive(run, lambda: self.scrape(request, run), f"DISCOVERY JOB {job_id}")

    async def process_finished_run(self, run_id: str, dataset_id: str) -> Optional[DiscoveryOutcome]:
        """
        Finish the job that owns a completed scraper run from the run's dataset.

        Used by the completion webhook as an alternative to polling. The
        dataset goes through the same normalize, filter and analyze stages
        as a polled scrape.

        Returns:
            The outcome, or None when the job is already completed or failed.

        Raises:
            LookupError: No job recorded this run id
        """
        async with job_uow(self.session_factory) as repo:
            job = await repo.jobs.get_by_apify_run(run_id)
            if job is None:
                raise LookupError(f"No discovery job for scraper run {run_id}")
            state = job.to_state()
            if state.status.is_terminal:
                logger.info(f"Run {run_id}: job {job.id} is already {state.status.value}, ignoring")
                return None
            run = _JobRun(job.id, job.user_id, request_from_job(job), state)
            source = RecordSource(job.apify_record_source)

        return await self._drive(run, lambda: self._collect_run(source, dataset_id), f"SCRAPER RUN {run_id}")

    async def _drive(self, run: _JobRun, collect, label: str) -> DiscoveryOutcome:
        """Take a job from its current state to completed or failed."""
        request = run.request
        started = time.time()
        outcome = DiscoveryOutcome(
            job_id=str(run.job_id),
            success=False,
            platforms_searched=[p.value for p in request.platforms],
            hashtags_searched=request.sources(),
            street_casting_mode=request.street_casting_mode,
        )

        logger.info("=" * 60)
        logger.info(f"STARTING {label}")
        logger.info("=" * 60)

        try:
            if run.state.status == JobStatus.PENDING:
                await self._checkpoint(run, run.state.start())

            logger.info("=== DISCOVERY STEP 1: Collecting profiles ===")
            profiles = await collect()

            logger.info("=== DISCOVERY STEP 2: Filtering ===")
            kept = filter_profiles(profiles, request.filters)
            logger.info(f"Kept {len(kept)} of {len(profiles)} unique profiles after filtering")
            if run.state.candidates_found is None:
                await self._checkpoint(run, run.state.record_found(len(kept)))

            subset_size = analysis_subset_size(len(kept), self.config)
            logger.info(f"=== DISCOVERY STEP 3: Analyzing {subset_size} candidates ===")
            await self.analyze(run, kept[:subset_size])

            await self._checkpoint(run, run.state.complete())
            outcome.success = True

        except Exception as e:
            message = describe_error(e)
            logger.error(f"Discovery job {run.job_id} failed: {message}", exc_info=True)
            outcome.error = message
            try:
                await self._checkpoint(run, run.state.fail(message))
            except Exception as persist_error:
                logger.error(f"Could not mark job {run.job_id} failed: {persist_error}")

        outcome.candidates_found = run.state.candidates_found or 0
        outcome.candidates_analyzed = run.state.candidates_analyzed
        outcome.execution_time = time.time() - started

        logger.info("=" * 60)
        logger.info(
            f"DISCOVERY JOB {run.job_id} {run.state.status.value.upper()}: "
            f"found={outcome.candidates_found}, analyzed={outcome.candidates_analyzed} "
            f"({outcome.execution_time:.1f}s)"
        )
        logger.info("=" * 60)
        return outcome

    async def _checkpoint(self, run: _JobRun, new_state: JobState) -> None:
        async with job_uow(self.session_factory) as repo:
            await repo.jobs.save_state(run.job_id, new_state)
        run.state = new_state

    # ------------------------------------------------------------------
    # Scraping
    # ------------------------------------------------------------------

    async def scrape(self, request: DiscoveryRequest, run: Optional[_JobRun] = None) -> List[CanonicalProfile]:
        """Scrape all platforms concurrently; returns deduplicated profiles."""
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(self._scrape_platform(platform, request, run)) for platform in request.platforms]

        merged = [profile for task in tasks for profile in task.result()]
        unique = dedupe_profiles(merged)
        logger.info(f"Scraped {len(merged)} profiles ({len(unique)} unique)")
        return unique

    async def _scrape_platform(
        self,
        platform: Platform,
        request: DiscoveryRequest,
        run: Optional[_JobRun] = None,
    ) -> List[CanonicalProfile]:
        sources = request.sources()
        on_run_started = self._run_recorder(run)

        if request.search_type == SearchType.PROFILE:
            call = self.scraper.scrape_profiles(platform, sources, on_run_started=on_run_started)
            batch = await self._guarded(platform, ",".join(sources), call)
            return self._normalize(batch)

        limit = per_source_limit(request.limit, len(request.platforms), len(sources), self.config.per_source_cap)
        profiles: List[CanonicalProfile] = []
        for source in sources:
            if request.search_type == SearchType.FOLLOWERS:
                call = self.scraper.scrape_followers(platform, source, limit, on_run_started=on_run_started)
            else:
                call = self.scraper.scrape_by_hashtag(platform, source, limit, on_run_started=on_run_started)
            batch = await self._guarded(platform, source, call)
            profiles.extend(self._normalize(batch))

        logger.info(f"{platform.value}: {len(profiles)} profiles from {len(sources)} sources (limit {limit} each)")
        return profiles

    def _run_recorder(self, run: Optional[_JobRun]) -> Optional[RunStartedCallback]:
        if run is None:
            return None

        async def record(run_id: str, source: RecordSource) -> None:
            async with job_uow(self.session_factory) as repo:
                await repo.jobs.record_apify_run(run.job_id, run_id, source.value)

        return record

    async def _collect_run(self, source: RecordSource, dataset_id: str) -> List[CanonicalProfile]:
        """Normalize and dedupe the dataset of a finished run; fetch errors fail the job."""
        records = await self.scraper.dataset_items(dataset_id)
        unique = dedupe_profiles(normalize_batch(records, source))
        logger.info(f"Dataset {dataset_id}: {len(records)} records, {len(unique)} unique profiles")
        return unique

    async def _guarded(self, platform: Platform, source: str, call) -> Optional[ScrapeBatch]:
        """Await one scrape call; configuration errors propagate, anything else is skipped."""
        try:
            return await call
        except ScraperConfigurationError:
            raise
        except Exception as e:
            logger.warning(f"Scrape failed for {platform.value} '{source}', skipping: {e}")
            return None

    @staticmethod
    def _normalize(batch: Optional[ScrapeBatch]) -> List[CanonicalProfile]:
        if batch is None:
            return []
        return normalize_batch(batch.records, batch.source)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def analyze(self, run: _JobRun, profiles: List[CanonicalProfile]) -> None:
        """Analyze profiles sequentially, or with bounded concurrency when configured."""
        concurrency = max(1, self.config.analysis_concurrency)
        if concurrency == 1:
            for profile in profiles:
                await self._analyze_guarded(run, profile)
            return

        semaphore = asyncio.Semaphore(concurrency)

        async def bounded(profile: CanonicalProfile) -> None:
            async with semaphore:
                await self._analyze_guarded(run, profile)

        async with asyncio.TaskGroup() as tg:
            for profile in profiles:
                tg.create_task(bounded(profile))

    async def _analyze_guarded(self, run: _JobRun, profile: CanonicalProfile) -> None:
        try:
            await self.analyze_candidate(run, profile)
        except Exception as e:
            logger.error(f"Error processing profile @{profile.username}: {describe_error(e)}")

    async def analyze_candidate(self, run: _JobRun, profile: CanonicalProfile) -> bool:
        """
        Score and persist one profile unless the user already has it.

        Returns:
            True if a candidate row was written.
        """
        async with job_uow(self.session_factory) as repo:
            exists = await repo.candidates.exists_by_username(run.user_id, profile.username, profile.platform.value)
        if exists:
            logger.debug(f"Skipping @{profile.username}: already a candidate")
            return False

        request = run.request
        mode = ScoringMode.STREET_CASTING if request.street_casting_mode else ScoringMode.STANDARD

        async with asyncio.TaskGroup() as tg:
            avatar_task = tg.create_task(self._proxy_avatar(profile))
            score_task = tg.create_task(
                self.scoring_service.score(profile, mode=mode, filters=request.filters)
            )
        result = score_task.result()

        async with run.lock:
            new_state = run.state.record_analyzed()
            async with job_uow(self.session_factory) as repo:
                await repo.candidates.create_from_score(
                    user_id=run.user_id,
                    profile=profile,
                    result=result,
                    discovery_job_id=run.job_id,
                    avatar_url=avatar_task.result(),
                )
                await repo.jobs.save_state(run.job_id, new_state)
            run.state = new_state

        logger.info(f"Saved @{profile.username} ({profile.platform.value}) score={result.composite_score}")
        return True

    async def _proxy_avatar(self, profile: CanonicalProfile) -> Optional[str]:
        if self.image_proxy is None or not profile.profile_image_url:
            return None
        return await self.image_proxy.proxy(profile.profile_image_url, profile.username, profile.platform.value)
