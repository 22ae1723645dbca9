"""Retry-with-timeout primitive for a single outbound generation call.

The executor knows nothing about prompts or domain data. It runs a
zero-argument async callable under a per-attempt timeout, retries transport
failures and empty replies with a linear backoff, and reports the outcome as
a ``Result`` instead of raising.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import dataclasses
import logging

from aura_engine.core.types import Failure, ModelReply, Result, RetryPolicy, Success
from aura_engine.exceptions import (
    AttemptTimeoutError,
    EmptyReplyError,
    RetriesExhaustedError,
    StreamCancelledError,
)
from aura_engine.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)

type ModelCall = Callable[[], Awaitable[ModelReply]]
type SleepFn = Callable[[float], Awaitable[None]]


@dataclasses.dataclass(slots=True)
class RetryState:
    """Per-call bookkeeping; created by ``execute`` and dropped when it returns."""

    attempt: int = 0
    timed_out: bool = False
    last_error: BaseException | None = None


class RequestExecutor:
    """Runs a model call with a timeout, bounded retries and linear backoff.

    Args:
        sleep: Awaitable used for the backoff delay. Tests inject a recorder.
        telemetry: Optional telemetry context for attempt scopes and counters.
    """

    def __init__(
        self,
        *,
        sleep: SleepFn = asyncio.sleep,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._sleep = sleep
        self._telemetry = telemetry or TelemetryContext()

    async def execute(
        self, call: ModelCall, policy: RetryPolicy
    ) -> Result[ModelReply, RetriesExhaustedError]:
        """Run ``call`` until it yields non-empty text or attempts run out.

        A successful attempt returns immediately. After failed attempt ``n``
        the executor waits ``n * policy.backoff_step_seconds`` before the next
        one; nothing is slept after the final attempt. Caller cancellation
        (``asyncio.CancelledError`` or ``StreamCancelledError``) is never
        absorbed or retried.
        """
        state = RetryState()
        while state.attempt < policy.max_attempts:
            state.attempt += 1
            try:
                with self._telemetry("executor.attempt", attempt=state.attempt):
                    reply = await asyncio.wait_for(call(), timeout=policy.timeout_seconds)
                if reply.is_empty:
                    raise EmptyReplyError("Empty response from intelligence engine.")
                return Success(reply)
            except TimeoutError:
                state.timed_out = True
                state.last_error = AttemptTimeoutError(
                    f"Attempt timed out after {policy.timeout_seconds:g}s"
                )
            except StreamCancelledError:
                raise
            except Exception as e:
                state.last_error = e

            self._telemetry.count("executor.failure")
            log.warning(
                "Generation attempt %d/%d failed: %s",
                state.attempt,
                policy.max_attempts,
                state.last_error,
            )
            if state.attempt < policy.max_attempts:
                await self._sleep(policy.backoff_for(state.attempt))

        self._telemetry.count("executor.exhausted")
        log.error(
            "Generation failed after %d attempt(s): %s",
            state.attempt,
            state.last_error,
        )
        return Failure(
            RetriesExhaustedError(
                state.attempt, state.last_error, timed_out=state.timed_out
            )
        )
