"""Deterministic adapter used for tests/examples (no network)."""

from __future__ import annotations

from collections.abc import AsyncIterator

from aura_engine.core.types import ModelReply, ModelRequest


def _estimate_tokens(text: str) -> int:
    return len(text) // 4 + 10


class MockAdapter:
    """Echoes the prompt back; streams it in fixed-size word chunks.

    Args:
        chunk_words: Words per streamed chunk.
    """

    def __init__(self, *, chunk_words: int = 8) -> None:
        if chunk_words < 1:
            raise ValueError("chunk_words must be >= 1")
        self._chunk_words = chunk_words

    def _echo(self, request: ModelRequest) -> str:
        return f"echo: {request.prompt}"

    async def generate(self, request: ModelRequest) -> ModelReply:
        text = self._echo(request)
        return ModelReply(
            text=text, total_tokens=_estimate_tokens(request.prompt), model=request.model
        )

    async def stream(self, request: ModelRequest) -> AsyncIterator[ModelReply]:
        words = self._echo(request).split(" ")
        step = self._chunk_words
        for start in range(0, len(words), step):
            piece = " ".join(words[start : start + step])
            if start + step < len(words):
                piece += " "
            yield ModelReply(text=piece, model=request.model)
        yield ModelReply(
            text="", total_tokens=_estimate_tokens(request.prompt), model=request.model
        )
