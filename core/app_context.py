import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.config_loader import AppConfig, LlmConfig, StorageConfig
from core.llm.openai_service import OpenAIService
from core.media.image_fetcher import ImageFetcher
from core.media.image_proxy import ImageProxy, ImageStore, LocalImageStore, SupabaseImageStore
from core.scorer import ScoringService
from core.scraper.apify_client import ApifyClient
from database import database
from pipeline.orchestrator import DiscoveryOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access should be obtained
    via job_uow() inside each unit of work.
    """
    config: AppConfig
    ai_service: OpenAIService
    scoring_service: ScoringService
    apify_client: ApifyClient
    image_proxy: ImageProxy
    session_factory: async_sessionmaker
    orchestrator: DiscoveryOrchestrator

    @classmethod
    def build(cls, config: AppConfig) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration

        Returns:
            Fully wired AppContext instance
        """
        session_factory = database.configure(config.database.url, echo=config.database.echo)

        ai_service = cls._build_ai_service(config.llm)
        image_fetcher = ImageFetcher(timeout_seconds=config.storage.fetch_timeout_seconds)
        scoring_service = ScoringService(ai_service, image_fetcher=image_fetcher, config=config.scoring)
        apify_client = ApifyClient(config.scraper)
        image_proxy = ImageProxy(cls._build_image_store(config.storage), fetcher=image_fetcher)

        orchestrator = DiscoveryOrchestrator(
            scraper=apify_client,
            scoring_service=scoring_service,
            image_proxy=image_proxy,
            session_factory=session_factory,
            config=config.discovery,
        )

        return cls(
            config=config,
            ai_service=ai_service,
            scoring_service=scoring_service,
            apify_client=apify_client,
            image_proxy=image_proxy,
            session_factory=session_factory,
            orchestrator=orchestrator,
        )

    @staticmethod
    def _build_ai_service(llm_config: LlmConfig) -> OpenAIService:
        """Build OpenAI-compatible service from LLM configuration."""
        model_config = {
            'model': llm_config.model,
            'temperature': llm_config.temperature,
            'max_output_tokens': llm_config.max_output_tokens,
            'request_timeout_seconds': llm_config.request_timeout_seconds,
        }

        return OpenAIService(
            base_url=llm_config.base_url,
            api_key=llm_config.api_key,
            model_config=model_config,
        )

    @staticmethod
    def _build_image_store(storage_config: StorageConfig) -> ImageStore:
        """Supabase when configured and credentials are present, local directory otherwise."""
        if storage_config.backend == "supabase":
            if storage_config.supabase_url and storage_config.supabase_key:
                return SupabaseImageStore(
                    url=storage_config.supabase_url,
                    key=storage_config.supabase_key,
                    bucket=storage_config.bucket,
                )
            logger.warning("Supabase storage selected but SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY missing; using local store")
        return LocalImageStore(storage_config.local_dir, storage_config.local_base_url)

    async def close(self) -> None:
        """Release HTTP clients and database connections."""
        await self.apify_client.close()
        await self.ai_service.close()
        await database.dispose()
