"""Core configuration data types for the generation engine.

Configuration follows a resolve-once, freeze-then-flow pattern: values are
merged and validated once, then frozen and handed to the service.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from aura_engine.core.types import RetryPolicy, TimeoutTier

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_FIELD_ORDER = (
    "api_key",
    "model",
    "use_real_api",
    "max_attempts",
    "timeout_seconds",
    "multi_turn_timeout_seconds",
    "extended_timeout_seconds",
    "backoff_step_seconds",
    "prompt_cache_ttl_seconds",
)


class ResolvedConfig(NamedTuple):
    """Configuration after resolution, before freezing.

    Carries the origin of every field so a redacted audit can be printed.
    """

    api_key: str | None
    model: str
    use_real_api: bool
    max_attempts: int
    timeout_seconds: float
    multi_turn_timeout_seconds: float
    extended_timeout_seconds: float
    backoff_step_seconds: float
    prompt_cache_ttl_seconds: int

    origin: SourceMap

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"ResolvedConfig(api_key={api_key_display!r}, model={self.model!r}, "
            f"use_real_api={self.use_real_api!r}, max_attempts={self.max_attempts!r}, "
            f"origin={dict(self.origin)!r})"
        )

    def __repr__(self) -> str:
        """Repr with redacted API key for safe debugging."""
        return self.__str__()

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by the service."""
        values = self._asdict()
        values.pop("origin")
        return FrozenConfig(**values)

    def audit(self) -> str:
        """Redacted report showing where each field value came from."""
        lines = []
        for field in _FIELD_ORDER:
            origin = self.origin.get(field, "default")
            value = getattr(self, field)
            if field == "api_key":
                display = f"{origin}:None" if value is None else f"{origin}:[REDACTED]"
            elif origin == "env":
                display = f"env:AURA_{field.upper()}={value}"
            else:
                display = f"{origin}:{value}"
            lines.append(f"{field}: {display}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to the generation service.

    Any attempt to modify this object raises an exception.
    """

    api_key: str | None
    model: str
    use_real_api: bool
    max_attempts: int
    timeout_seconds: float
    multi_turn_timeout_seconds: float
    extended_timeout_seconds: float
    backoff_step_seconds: float
    prompt_cache_ttl_seconds: int

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, model={self.model!r}, "
            f"use_real_api={self.use_real_api!r}, max_attempts={self.max_attempts!r}, "
            f"timeouts=({self.timeout_seconds!r}, {self.multi_turn_timeout_seconds!r}, "
            f"{self.extended_timeout_seconds!r}), "
            f"backoff_step_seconds={self.backoff_step_seconds!r})"
        )

    def __repr__(self) -> str:
        """Representation with redacted API key for safe debugging."""
        return self.__str__()

    def timeout_for(self, tier: TimeoutTier) -> float:
        match tier:
            case TimeoutTier.STANDARD:
                return self.timeout_seconds
            case TimeoutTier.MULTI_TURN:
                return self.multi_turn_timeout_seconds
            case TimeoutTier.EXTENDED:
                return self.extended_timeout_seconds

    def policy_for(
        self, tier: TimeoutTier, *, max_attempts: int | None = None
    ) -> RetryPolicy:
        """Build the retry policy for an operation's timeout tier."""
        return RetryPolicy(
            max_attempts=max_attempts or self.max_attempts,
            timeout_seconds=self.timeout_for(tier),
            backoff_step_seconds=self.backoff_step_seconds,
        )
