import yaml
import os
from typing import List, Optional, Dict, Any, Tuple
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str = "sqlite+aiosqlite:///./talentscout.db"
    echo: bool = False


class LlmConfig(BaseModel):
    # Any OpenAI-compatible chat-completions endpoint; Gemini by default
    base_url: Optional[str] = "https://generativelanguage.googleapis.com/v1beta/openai/"
    api_key: Optional[str] = None
    model: str = "gemini-2.0-flash"
    temperature: float = 0.7
    max_output_tokens: int = 2048
    request_timeout_seconds: float = 60.0


class ActorConfig(BaseModel):
    """Apify actor ids per scraper kind."""
    instagram_hashtag: str = "apify/instagram-hashtag-scraper"
    instagram_profile: str = "apify/instagram-profile-scraper"
    instagram_followers: str = "apify/instagram-followers-count-scraper"
    tiktok: str = "clockworks/tiktok-scraper"


class ScraperConfig(BaseModel):
    base_url: str = "https://api.apify.com"
    token: Optional[str] = None
    actors: ActorConfig = Field(default_factory=ActorConfig)
    poll_interval_seconds: float = 5.0
    job_timeout_seconds: float = 120.0  # wait budget per scrape call
    request_timeout_seconds: float = 30.0


class StorageConfig(BaseModel):
    """Where proxied profile images end up."""
    backend: str = "local"  # "supabase" or "local"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    bucket: str = "avatars"
    local_dir: str = "./media"
    local_base_url: str = "/media"
    fetch_timeout_seconds: float = 10.0


class DiscoveryConfig(BaseModel):
    """
    Limits for discovery jobs.

    analysis subset = min(n, analysis_cap, max(ceil(n * analysis_fraction), analysis_floor))
    per-hashtag limit = min(ceil(limit / platforms / sources), per_source_cap)
    """
    default_limit: int = 50
    max_limit: int = 200
    per_source_cap: int = 30
    analysis_cap: int = 25
    analysis_floor: int = 10
    analysis_fraction: float = 0.5
    analysis_concurrency: int = 1  # 1 = sequential


class ScoringConfig(BaseModel):
    max_images: int = 5
    batch_size: int = 3
    batch_delay_seconds: float = 1.0
    default_age_range: Tuple[int, int] = (18, 25)


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    discovery_rate_limit: str = "10/minute"
    analyze_rate_limit: str = "30/minute"


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    llm: LlmConfig = Field(default_factory=LlmConfig)
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    web: WebConfig = Field(default_factory=WebConfig)


def _set(data: Dict[str, Any], section: str, key: str, value: Optional[str]) -> None:
    if not value:
        return
    if data.get(section) is None:
        data[section] = {}
    data[section][key] = value


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data: Dict[str, Any] = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Secrets and endpoints come from the environment when present
    _set(data, 'database', 'url', os.environ.get("DATABASE_URL"))
    _set(data, 'scraper', 'token', os.environ.get("APIFY_TOKEN"))
    _set(data, 'llm', 'api_key', os.environ.get("LLM_API_KEY") or os.environ.get("GOOGLE_GEMINI_API_KEY"))
    _set(data, 'llm', 'base_url', os.environ.get("LLM_BASE_URL"))
    _set(data, 'storage', 'supabase_url', os.environ.get("SUPABASE_URL"))
    _set(data, 'storage', 'supabase_key', os.environ.get("SUPABASE_SERVICE_ROLE_KEY"))

    return AppConfig(**data)
