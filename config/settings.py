"""
Configuration settings for the adverse media aggregation service.

Loads configuration from environment variables using Pydantic Settings.
Every credential is optional: a missing key disables the feature that
needs it, it never prevents startup.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    GROQ = "groq"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class NamespaceBudget(BaseModel):
    """A retrievable namespace and its local top-k budget."""

    name: str
    top_k: int = Field(ge=1, le=100)


DEFAULT_NAMESPACES = [
    NamespaceBudget(name="prior_screenings", top_k=5),
    NamespaceBudget(name="regulatory_docs", top_k=3),
    NamespaceBudget(name="enforcement_actions", top_k=3),
    NamespaceBudget(name="enforcement_cases", top_k=3),
    NamespaceBudget(name="case_notes", top_k=5),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # LLM Provider Configuration (enrichment pass)
    # -------------------------------------------------------------------------
    default_llm_provider: LLMProvider = Field(
        default=LLMProvider.ANTHROPIC,
        description="LLM provider used for the enrichment pass",
    )

    groq_api_key: Optional[str] = Field(default=None, description="Groq API key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")

    groq_model: str = Field(default="llama-3.3-70b-versatile")
    openai_model: str = Field(default="gpt-4o-2024-11-20")
    anthropic_model: str = Field(default="claude-sonnet-4-20250514")

    llm_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="LLM temperature (0 = deterministic)",
    )
    llm_max_tokens: int = Field(
        default=2048,
        ge=256,
        le=8192,
        description="Maximum tokens in the enrichment reply",
    )
    enable_fallback: bool = Field(
        default=False,
        description="Fall back to another configured provider when the default one is missing",
    )

    # -------------------------------------------------------------------------
    # Source credentials (each optional, each gates one adapter)
    # -------------------------------------------------------------------------
    news_api_key: Optional[str] = Field(default=None, description="NewsAPI.org key")
    bing_news_api_key: Optional[str] = Field(default=None, description="Bing News Search key")

    # -------------------------------------------------------------------------
    # Vector index
    # -------------------------------------------------------------------------
    pinecone_api_key: Optional[str] = Field(default=None, description="Pinecone API key")
    pinecone_index_name: str = Field(default="marlowe-financial-crimes")
    embedding_model: str = Field(default="multilingual-e5-large")

    # -------------------------------------------------------------------------
    # Timeouts (seconds)
    # -------------------------------------------------------------------------
    source_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-call timeout for search sources",
    )
    enrichment_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for the AI enrichment call",
    )
    wayback_timeout: float = Field(default=8.0, gt=0, le=120)
    mediacloud_timeout: float = Field(default=15.0, gt=0, le=120)
    rag_query_timeout: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Timeout for each vector-index and embedding call",
    )

    # -------------------------------------------------------------------------
    # Cost / volume caps
    # -------------------------------------------------------------------------
    max_terms_per_source: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Search terms consumed by each multi-term source",
    )
    compliance_keyword_count: int = Field(
        default=4,
        ge=0,
        le=12,
        description="Compliance keywords combined with the subject",
    )
    enrichment_batch_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Records sent to the enrichment pass",
    )
    dedup_key_length: int = Field(default=80, ge=8, le=500)
    max_articles_in_response: int = Field(default=20, ge=1, le=500)

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------
    rag_top_k: int = Field(default=16, ge=1, le=200)
    rag_score_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    rag_namespaces: list[NamespaceBudget] = Field(
        default_factory=lambda: [ns.model_copy() for ns in DEFAULT_NAMESPACES]
    )
    case_study_namespace: str = Field(default="enforcement_cases")
    chunk_max_chars: int = Field(default=3200, ge=200)
    chunk_overlap: int = Field(default=400, ge=0)

    # -------------------------------------------------------------------------
    # Observability & Logging
    # -------------------------------------------------------------------------
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARN, ERROR)",
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
    )

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; AdverseMediaAggregator/1.0)",
        description="User agent for source requests",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v_lower

    @field_validator("chunk_overlap")
    @classmethod
    def validate_chunk_overlap(cls, v: int, info) -> int:
        max_chars = info.data.get("chunk_max_chars")
        if max_chars is not None and v >= max_chars:
            raise ValueError("chunk_overlap must be smaller than chunk_max_chars")
        return v

    def get_available_providers(self) -> list[LLMProvider]:
        """
        Get list of providers with valid API keys.

        Returns:
            List of available LLM providers
        """
        available = []
        if self.groq_api_key:
            available.append(LLMProvider.GROQ)
        if self.openai_api_key:
            available.append(LLMProvider.OPENAI)
        if self.anthropic_api_key:
            available.append(LLMProvider.ANTHROPIC)
        return available

    def get_model_name(self, provider: LLMProvider) -> str:
        """Get model name for specified provider."""
        if provider == LLMProvider.GROQ:
            return self.groq_model
        elif provider == LLMProvider.OPENAI:
            return self.openai_model
        elif provider == LLMProvider.ANTHROPIC:
            return self.anthropic_model
        return ""

    def validate_provider(self, provider: LLMProvider) -> bool:
        """Check if provider is available (has valid API key)."""
        return provider in self.get_available_providers()

    def get_fallback_providers(self, primary: LLMProvider) -> list[LLMProvider]:
        """
        Get fallback providers (all available providers except primary).

        Returns an empty list when fallback is disabled.
        """
        if not self.enable_fallback:
            return []

        return [p for p in self.get_available_providers() if p != primary]

    @property
    def enrichment_configured(self) -> bool:
        """True when the enrichment pass has at least one usable provider."""
        if self.validate_provider(self.default_llm_provider):
            return True
        return bool(self.get_fallback_providers(self.default_llm_provider))

    @property
    def vector_index_configured(self) -> bool:
        return bool(self.pinecone_api_key)


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get singleton settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
