"""
Pydantic configuration schema for streamgate.

This module defines all configuration models with validation.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PREFERRED_PROVIDERS: tuple[str, ...] = (
    "openai",
    "anthropic",
    "groq",
    "huggingface",
)

DEFAULT_ENABLED_PROVIDERS: frozenset[str] = frozenset(
    {"openai", "anthropic", "groq", "huggingface", "mock"}
)


def _split_names(value: object) -> object:
    """Accept "a,b" strings (CLI and environment) for provider name collections."""
    if isinstance(value, str):
        return tuple(name.strip() for name in value.split(",") if name.strip())
    return value


# =============================================================================
# Gateway (selection) Configuration
# =============================================================================


class AdapterConfigUpdate(BaseModel):
    """Partial replacement for an AdapterConfig.

    Only fields that are explicitly set (and not None) are applied by
    AdapterConfig.merge().
    """

    model_config = ConfigDict(extra="forbid")

    preferred_providers: tuple[str, ...] | None = None
    enabled_providers: frozenset[str] | None = None
    fallback_to_free: bool | None = None

    @field_validator("preferred_providers", "enabled_providers", mode="before")
    @classmethod
    def split_names(cls, value: object) -> object:
        return _split_names(value)

    def changes(self) -> dict[str, object]:
        """Return only the fields this update carries."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class AdapterConfig(BaseModel):
    """Provider selection policy.

    preferred_providers is the priority order (highest first). Names absent
    from it are never selected automatically. The mock provider is the
    terminal fallback and does not need to appear in either collection.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    preferred_providers: tuple[str, ...] = DEFAULT_PREFERRED_PROVIDERS
    enabled_providers: frozenset[str] = DEFAULT_ENABLED_PROVIDERS
    fallback_to_free: bool = True

    @field_validator("preferred_providers", "enabled_providers", mode="before")
    @classmethod
    def split_names(cls, value: object) -> object:
        return _split_names(value)

    def merge(self, update: AdapterConfigUpdate) -> "AdapterConfig":
        """Shallow-merge an update over this config, returning a new config."""
        return self.model_copy(update=update.changes())

    def is_enabled(self, name: str) -> bool:
        return name in self.enabled_providers

    def to_display_dict(self) -> dict[str, object]:
        """Plain dict with a stable ordering for output and YAML."""
        return {
            "preferred_providers": list(self.preferred_providers),
            "enabled_providers": sorted(self.enabled_providers),
            "fallback_to_free": self.fallback_to_free,
        }


# =============================================================================
# Backend Configuration
# =============================================================================


class ProviderSettings(BaseModel):
    """Connection settings shared by every live backend."""

    model_config = ConfigDict(extra="allow")

    api_key_env: str
    model_env: str
    default_model: str
    base_url: str | None = None
    max_tokens: int = Field(default=1024, ge=1)
    timeout_seconds: float = Field(default=60.0, gt=0)


class GroqSettings(ProviderSettings):
    """Raw-SSE backend settings."""

    api_key_env: str = "GROQ_API_KEY"
    model_env: str = "GROQ_MODEL"
    default_model: str = "llama-3.1-70b-versatile"
    base_url: str | None = "https://api.groq.com/openai/v1/chat/completions"

    # Join SSE lines split across network reads. Off by default: each read
    # is split on its own, so a payload spanning two reads is dropped.
    sse_buffering: bool = False


class HuggingFaceSettings(ProviderSettings):
    """Single-shot inference backend settings."""

    api_key_env: str = "HUGGINGFACE_API_KEY"
    model_env: str = "HUGGINGFACE_MODEL"
    default_model: str = "microsoft/DialoGPT-large"
    base_url: str | None = "https://api-inference.huggingface.co/models"
    max_new_tokens: int = Field(default=512, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class AnthropicSettings(ProviderSettings):
    """Anthropic SDK backend settings."""

    api_key_env: str = "ANTHROPIC_API_KEY"
    model_env: str = "CLAUDE_MODEL"
    default_model: str = "claude-3-5-sonnet-20241022"


class OpenAISettings(ProviderSettings):
    """OpenAI SDK backend settings."""

    api_key_env: str = "OPENAI_API_KEY"
    model_env: str = "OPENAI_MODEL"
    default_model: str = "gpt-3.5-turbo"


class MockSettings(BaseModel):
    """Synthetic backend settings."""

    token_delay: float = Field(default=0.05, ge=0.0)


class ProvidersConfig(BaseModel):
    """Per-backend settings."""

    model_config = ConfigDict(extra="allow")

    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    anthropic: AnthropicSettings = Field(default_factory=AnthropicSettings)
    groq: GroqSettings = Field(default_factory=GroqSettings)
    huggingface: HuggingFaceSettings = Field(default_factory=HuggingFaceSettings)
    mock: MockSettings = Field(default_factory=MockSettings)


# =============================================================================
# Audit / General Configuration
# =============================================================================


class AuditLogConfig(BaseModel):
    """Audit logging configuration."""

    enable: bool = False
    path: str | None = None  # defaults to <STREAMGATE_HOME>/audit.jsonl
    retention_days: int = Field(default=30, ge=1, le=365)
    compress_old: bool = True
    hash_details: bool = False
    buffer_size: int = Field(default=20, ge=1)
    flush_interval_seconds: int = 5


class GeneralConfig(BaseModel):
    """General application settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


# =============================================================================
# Root Configuration
# =============================================================================


class Config(BaseModel):
    """Root streamgate configuration."""

    model_config = ConfigDict(extra="allow")

    gateway: AdapterConfig = Field(default_factory=AdapterConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    audit_log: AuditLogConfig = Field(default_factory=AuditLogConfig)
    general: GeneralConfig = Field(default_factory=GeneralConfig)
