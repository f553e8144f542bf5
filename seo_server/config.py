"""
SEO Edge Server - Configuration

Pydantic Settings for all configuration via environment variables.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional, Literal


class LLMSettings(BaseSettings):
    """Content analyzer (LLM provider) configuration."""
    provider: str = Field("gemini", alias="LLM_PROVIDER")
    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-4o", alias="OPENAI_MODEL")
    openai_base_url: str = Field("https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    gemini_api_key: Optional[str] = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta", alias="GEMINI_BASE_URL"
    )
    timeout_ms: int = Field(30000, alias="LLM_TIMEOUT_MS")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class PipelineSettings(BaseSettings):
    """Analysis pipeline and retry policy configuration."""
    max_retries: int = Field(3, alias="MAX_RETRIES")
    sweep_interval_seconds: int = Field(60, alias="RETRY_SWEEP_INTERVAL_SECONDS")
    max_content_chars: int = Field(8000, alias="MAX_CONTENT_CHARS")
    max_stored_html_chars: int = Field(500000, alias="MAX_STORED_HTML_CHARS")
    registered_domains: str = Field("", alias="REGISTERED_DOMAINS")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}

    @property
    def domain_names(self) -> List[str]:
        return [d.strip().lower() for d in self.registered_domains.split(",") if d.strip()]


class CacheSettings(BaseSettings):
    """Edge key/value cache configuration."""
    backend: Literal["memory", "cloudflare_kv"] = Field("memory", alias="CACHE_BACKEND")
    ttl_seconds: int = Field(86400, alias="CACHE_TTL_SECONDS")
    max_entries: int = Field(10000, alias="CACHE_MAX_ENTRIES")
    timeout_ms: int = Field(1000, alias="CACHE_TIMEOUT_MS")
    cloudflare_account_id: Optional[str] = Field(None, alias="CLOUDFLARE_ACCOUNT_ID")
    cloudflare_namespace_id: Optional[str] = Field(None, alias="CLOUDFLARE_KV_NAMESPACE_ID")
    cloudflare_api_token: Optional[str] = Field(None, alias="CLOUDFLARE_API_TOKEN")
    cloudflare_api_base: str = Field(
        "https://api.cloudflare.com/client/v4", alias="CLOUDFLARE_API_BASE"
    )

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class EdgeSettings(BaseSettings):
    """Edge interceptor (reverse proxy) configuration."""
    origin_url: str = Field("http://localhost:3000", alias="ORIGIN_URL")
    backend_api_url: str = Field("", alias="BACKEND_API_URL")
    origin_timeout_ms: int = Field(10000, alias="EDGE_ORIGIN_TIMEOUT_MS")
    submit_timeout_ms: int = Field(5000, alias="EDGE_SUBMIT_TIMEOUT_MS")
    inflight_ttl_seconds: int = Field(0, alias="EDGE_INFLIGHT_TTL_SECONDS")
    host: str = Field("0.0.0.0", alias="EDGE_HOST")
    port: int = Field(8787, alias="EDGE_PORT")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class ServerSettings(BaseSettings):
    """Backend (job API + MCP) server configuration."""
    worker_api_key: str = Field("default-worker-key", alias="WORKER_API_KEY")
    transport: Literal["sse", "http", "stdio"] = Field("http", alias="MCP_TRANSPORT")
    host: str = Field("0.0.0.0", alias="MCP_HOST")
    port: int = Field(5000, alias="MCP_PORT")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class LogSettings(BaseSettings):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", alias="LOG_LEVEL"
    )

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""
    llm: LLMSettings = Field(default_factory=LLMSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    edge: EdgeSettings = Field(default_factory=EdgeSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = {"env_prefix": "", "extra": "ignore"}


def get_settings() -> Settings:
    """Load settings from environment variables."""
    from dotenv import load_dotenv
    load_dotenv()
    return Settings()
