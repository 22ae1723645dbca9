"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces
configuration values from the environment and programmatic overrides into
the correct types with proper defaults.
"""

from typing import Any

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aura_engine import constants


class AuraSettings(BaseSettings):
    """Pydantic settings schema for the generation engine.

    Handles validation, type coercion and defaults for every configuration
    field. Environment variables use the AURA_ prefix; the API key is also
    read from GEMINI_API_KEY.
    """

    model_config = SettingsConfigDict(
        env_prefix="AURA_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars for forward compatibility
        populate_by_name=True,
    )

    # --- Provider ---

    api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
        validation_alias=AliasChoices("AURA_API_KEY", "GEMINI_API_KEY"),
    )

    model: str = Field(
        default=constants.DEFAULT_MODEL,
        description="Gemini model identifier",
        min_length=1,
    )

    use_real_api: bool = Field(
        default=False,
        description="Use the real provider instead of the deterministic mock",
    )

    # --- Resilience ---

    max_attempts: int = Field(default=constants.MAX_ATTEMPTS, ge=1, le=10)

    timeout_seconds: float = Field(default=constants.TIMEOUT_SECONDS, gt=0)

    multi_turn_timeout_seconds: float = Field(
        default=constants.MULTI_TURN_TIMEOUT_SECONDS, gt=0
    )

    extended_timeout_seconds: float = Field(
        default=constants.EXTENDED_TIMEOUT_SECONDS, gt=0
    )

    backoff_step_seconds: float = Field(
        default=constants.BACKOFF_STEP_SECONDS,
        ge=0,
        description="Linear backoff step; attempt n waits n * step",
    )

    # --- Prompt store ---

    prompt_cache_ttl_seconds: int = Field(
        default=constants.PROMPT_CACHE_TTL_SECONDS,
        ge=0,
        description="How long resolved prompts are memoized (0 disables)",
    )

    # --- Validation Rules ---

    @model_validator(mode="after")
    def validate_api_key_requirement(self) -> "AuraSettings":
        """Ensure api_key is provided when use_real_api is True."""
        if self.use_real_api and not self.api_key:
            raise ValueError(
                "api_key is required when use_real_api=True. "
                "Set AURA_API_KEY or GEMINI_API_KEY, or pass it programmatically."
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary of resolved field values."""
        return {name: getattr(self, name) for name in type(self).model_fields}
