"""Test doubles shared across the suite."""

import asyncio
from collections.abc import AsyncIterator, Sequence
from datetime import UTC, datetime
from typing import Any

from aura_engine.core.types import ModelReply, ModelRequest
from aura_engine.service import QuotaCheck

FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class Hang:
    """Script step that never completes; only a timeout or cancel ends it."""


class ScriptedAdapter:
    """Adapter that plays back a script, one step per call.

    A step is a reply text, a ``ModelReply``, an exception instance to raise,
    or ``Hang`` to block until cancelled. Stream scripts are lists of chunk
    texts (or ``ModelReply`` chunks). The last step repeats once the script
    runs out.
    """

    def __init__(
        self,
        steps: Sequence[Any] = ("ok",),
        *,
        streams: Sequence[Sequence[Any]] = (),
        tokens: int = 42,
    ) -> None:
        self.steps = list(steps)
        self.streams = [list(s) for s in streams]
        self.tokens = tokens
        self.requests: list[ModelRequest] = []
        self.stream_requests: list[ModelRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests) + len(self.stream_requests)

    @staticmethod
    def _pick(script: list[Any], index: int) -> Any:
        return script[min(index, len(script) - 1)]

    async def generate(self, request: ModelRequest) -> ModelReply:
        step = self._pick(self.steps, len(self.requests))
        self.requests.append(request)
        if step is Hang:
            await asyncio.Event().wait()
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, ModelReply):
            return step
        return ModelReply(text=step, total_tokens=self.tokens, model=request.model)

    async def stream(self, request: ModelRequest) -> AsyncIterator[ModelReply]:
        script = self._pick(self.streams, len(self.stream_requests))
        self.stream_requests.append(request)
        for chunk in script:
            if chunk is Hang:
                await asyncio.Event().wait()
            if isinstance(chunk, BaseException):
                raise chunk
            if isinstance(chunk, ModelReply):
                yield chunk
            else:
                yield ModelReply(text=chunk, model=request.model)
        yield ModelReply(text="", total_tokens=self.tokens, model=request.model)


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeLedger:
    """Credit ledger answering from a fixed balance."""

    def __init__(self, balance: int = 100, message: str | None = None) -> None:
        self.balance = balance
        self.message = message
        self.charges: list[int] = []

    async def consume(self, cost: int) -> QuotaCheck:
        if cost > self.balance:
            return QuotaCheck(success=False, message=self.message)
        self.balance -= cost
        self.charges.append(cost)
        return QuotaCheck(success=True)


class DictStore:
    """In-memory prompt store keyed by (owner_id, name)."""

    def __init__(self, rows=None, *, fail: bool = False):
        self.rows = rows or {}
        self.fail = fail
        self.lookups: list[tuple[str, str | None]] = []

    async def lookup(self, name, owner_id=None):
        self.lookups.append((name, owner_id))
        if self.fail:
            raise ConnectionError("store offline")
        return self.rows.get((owner_id, name))
