"""Incremental delivery of a streamed model reply.

``StreamCoordinator.run`` drains one provider stream, hands the accumulated
text to ``on_chunk`` after every chunk and resolves with the full reply. It is
meant to run inside ``RequestExecutor.execute`` so stream failures are timed
out and retried exactly like single-shot calls; each attempt starts from an
empty accumulator.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
import logging

from aura_engine.core.types import ModelReply
from aura_engine.exceptions import StreamCancelledError

log = logging.getLogger(__name__)

type StreamFactory = Callable[[], AsyncIterator[ModelReply]]
type ChunkCallback = Callable[[str], None]


class StreamCoordinator:
    """Drains a stream of reply chunks; one coordinator per request.

    ``cancel()`` stops delivery, cancels the task awaiting the next chunk and
    makes ``run`` raise ``StreamCancelledError``. Chunks arriving after
    cancellation are discarded without reaching ``on_chunk``.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._task: asyncio.Task[object] | None = None
        self._parts: list[str] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def partial_text(self) -> str:
        """Text delivered so far by the current (or last) attempt."""
        return "".join(self._parts)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def run(
        self, stream_factory: StreamFactory, on_chunk: ChunkCallback | None = None
    ) -> ModelReply:
        if self._cancelled:
            raise StreamCancelledError("Stream cancelled before it started")

        task = asyncio.current_task()
        self._task = task
        self._parts = []
        tokens = 0
        model: str | None = None
        stream = stream_factory()
        try:
            async for chunk in stream:
                if self._cancelled:
                    raise StreamCancelledError("Stream cancelled by caller")
                if chunk.total_tokens:
                    tokens = chunk.total_tokens
                model = chunk.model or model
                if chunk.text:
                    self._parts.append(chunk.text)
                    if on_chunk is not None:
                        on_chunk(self.partial_text)
            if self._cancelled:
                raise StreamCancelledError("Stream cancelled by caller")
        except asyncio.CancelledError:
            if not self._cancelled:
                raise
            # The cancellation was ours; clear it so the caller's task keeps running
            if task is not None:
                task.uncancel()
            log.debug("Stream task cancelled after %d chunk(s)", len(self._parts))
            raise StreamCancelledError("Stream cancelled by caller") from None
        finally:
            self._task = None
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        return ModelReply(text=self.partial_text, total_tokens=tokens, model=model)
