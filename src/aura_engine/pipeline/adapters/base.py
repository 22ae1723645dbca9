"""Provider adapter protocol used by the generation service."""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from aura_engine.core.types import ModelReply, ModelRequest


@runtime_checkable
class GenerationAdapter(Protocol):
    """Minimal provider surface: one-shot generation plus chunked streaming.

    Implementations translate a provider-neutral ``ModelRequest`` into the
    provider's call and report text and total token usage. They raise on
    transport failure; retrying is the executor's job.
    """

    async def generate(self, request: ModelRequest) -> ModelReply:
        """Run one generation call and return the complete reply.

        Args:
            request: Prompt, system instruction, sampling and prior turns.

        Returns:
            The reply text with the provider's total token count.
        """
        ...

    def stream(self, request: ModelRequest) -> AsyncIterator[ModelReply]:
        """Yield reply chunks in arrival order.

        Each chunk carries only its own text; the last non-zero token count
        seen is the total for the call.
        """
        ...
