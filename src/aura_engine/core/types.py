"""Core data types that flow between the generation stages.

This module defines the immutable values exchanged by the executor, the
provider adapters and the service layer: the Result monad, the operation
catalogue enums, the retry policy, the provider request/reply shapes and the
``AIResponse`` envelope returned by every public operation.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import typing

# --- Minimal guard helpers (clarity > boilerplate) ---

T = typing.TypeVar("T")


def _is_tuple_of(value: object, typ: type | tuple[type, ...]) -> bool:
    return isinstance(value, tuple) and all(isinstance(v, typ) for v in value)


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            enhanced_message = f"{field_name}: {message}"
            raise exc(enhanced_message)
        raise exc(message)


# --- Result Monad for Robust Error Handling ---
# Stages hand failures forward as values so the service boundary can turn
# every outcome into an envelope without broad try/except blocks.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful stage result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed stage result, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Operation Catalogue ---


class OperationKind(str, Enum):
    """Every generation operation exposed by the service."""

    OUTREACH_MESSAGE = "outreach_message"
    CATEGORY_CONTENT = "category_content"
    EMAIL_SEQUENCE = "email_sequence"
    LEAD_RESEARCH = "lead_research"
    BUSINESS_ANALYSIS = "business_analysis"
    FOLLOW_UP_QUESTIONS = "follow_up_questions"
    COMMAND_CENTER = "command_center"
    PIPELINE_STRATEGY = "pipeline_strategy"
    BLOG_CONTENT = "blog_content"
    CONTENT_SUGGESTIONS = "content_suggestions"
    SOCIAL_CAPTION = "social_caption"
    WORKFLOW_OPTIMIZATION = "workflow_optimization"
    GUEST_POST_PITCH = "guest_post_pitch"
    EMAIL_PERSONALIZATION = "email_personalization"
    DASHBOARD_INSIGHTS = "dashboard_insights"


class ResilienceClass(str, Enum):
    """How an operation degrades once its remote call is exhausted."""

    EXPLANATORY = "explanatory"  # labeled failure text, empty payload
    LOCAL_TEMPLATE = "local_template"  # deterministic local answer


class TimeoutTier(str, Enum):
    """Per-attempt timeout buckets resolved against configuration."""

    STANDARD = "standard"
    MULTI_TURN = "multi_turn"
    EXTENDED = "extended"


class Outcome(str, Enum):
    """Terminal state recorded on every envelope."""

    SUCCESS = "success"
    FAILED = "failed"
    QUOTA_DENIED = "quota_denied"
    FALLBACK = "fallback"
    CANCELLED = "cancelled"


# --- Execution Policy ---


@dataclasses.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt bound, per-attempt timeout and linear backoff step."""

    max_attempts: int = 3
    timeout_seconds: float = 15.0
    backoff_step_seconds: float = 1.0

    def __post_init__(self) -> None:
        """Validate invariants for predictable scheduling."""
        _require(
            condition=isinstance(self.max_attempts, int) and self.max_attempts >= 1,
            message="must be an int >= 1",
            field_name="max_attempts",
        )
        _require(
            condition=self.timeout_seconds > 0,
            message="must be > 0",
            field_name="timeout_seconds",
        )
        _require(
            condition=self.backoff_step_seconds >= 0,
            message="must be >= 0",
            field_name="backoff_step_seconds",
        )

    def backoff_for(self, attempt: int) -> float:
        """Delay after failed attempt ``attempt`` (1-based)."""
        return attempt * self.backoff_step_seconds

    def backoff_schedule(self) -> tuple[float, ...]:
        """Every delay slept when all attempts fail."""
        return tuple(self.backoff_for(n) for n in range(1, self.max_attempts))

    def with_attempts(self, max_attempts: int) -> RetryPolicy:
        return dataclasses.replace(self, max_attempts=max_attempts)


# --- Provider Request / Reply ---


@dataclasses.dataclass(frozen=True, slots=True)
class SamplingParams:
    """Sampling knobs forwarded to the provider."""

    temperature: float = 0.7
    top_p: float | None = 0.9
    top_k: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class ChatTurn:
    """A single prior turn of a multi-turn exchange."""

    role: typing.Literal["user", "model"]
    text: str

    def __post_init__(self) -> None:
        _require(
            condition=self.role in ("user", "model"),
            message="must be 'user' or 'model'",
            field_name="role",
        )
        _require(
            condition=isinstance(self.text, str),
            message="must be str",
            field_name="text",
            exc=TypeError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ModelRequest:
    """Provider-neutral description of one generation call."""

    model: str
    prompt: str
    system_instruction: str | None = None
    sampling: SamplingParams = dataclasses.field(default_factory=SamplingParams)
    history: tuple[ChatTurn, ...] = ()
    use_search: bool = False

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.model, str) and self.model != "",
            message="must be a non-empty str",
            field_name="model",
        )
        _require(
            condition=_is_tuple_of(self.history, ChatTurn),
            message="must be a tuple[ChatTurn, ...]",
            field_name="history",
            exc=TypeError,
        )

    def without_search(self) -> ModelRequest:
        return dataclasses.replace(self, use_search=False)


@dataclasses.dataclass(frozen=True, slots=True)
class ModelReply:
    """Raw provider reply: text plus the reported token usage."""

    text: str
    total_tokens: int = 0
    model: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text or not self.text.strip()


# --- Envelope ---


@dataclasses.dataclass(frozen=True, slots=True)
class AIResponse[TPayload]:
    """Uniform result of every generation operation.

    ``text`` is never None: on failure it carries a sentinel-prefixed
    explanation, on local fallback the locally rendered answer. ``payload``
    holds the operation's structured result when one was recovered.
    """

    text: str
    tokens_used: int
    model_name: str
    prompt_name: str
    prompt_version: int
    outcome: Outcome = Outcome.SUCCESS
    payload: TPayload | None = None
    confidence: int | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.text, str),
            message="must be str",
            field_name="text",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.tokens_used, int) and self.tokens_used >= 0,
            message="must be an int >= 0",
            field_name="tokens_used",
        )

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def is_unavailable(self) -> bool:
        """True when callers must not treat ``text`` as an answer."""
        return self.outcome in (Outcome.FAILED, Outcome.QUOTA_DENIED, Outcome.CANCELLED)
