"""Google Gemini adapter built on the ``google-genai`` SDK."""

from __future__ import annotations

from collections.abc import AsyncIterator
import logging
from typing import Any

from google import genai
from google.genai import types

from aura_engine.core.types import ModelReply, ModelRequest
from aura_engine.exceptions import TransportError

log = logging.getLogger(__name__)


def _build_config(request: ModelRequest) -> types.GenerateContentConfig:
    sampling = request.sampling
    tools = [types.Tool(google_search=types.GoogleSearch())] if request.use_search else None
    return types.GenerateContentConfig(
        system_instruction=request.system_instruction or None,
        temperature=sampling.temperature,
        top_p=sampling.top_p,
        top_k=sampling.top_k,
        tools=tools,
    )


def _build_contents(request: ModelRequest) -> str | list[types.Content]:
    # Single-turn calls send the bare prompt; multi-turn calls replay history
    if not request.history:
        return request.prompt
    contents = [
        types.Content(role=turn.role, parts=[types.Part(text=turn.text)])
        for turn in request.history
    ]
    contents.append(types.Content(role="user", parts=[types.Part(text=request.prompt)]))
    return contents


def _to_reply(response: Any, model: str) -> ModelReply:
    usage = getattr(response, "usage_metadata", None)
    total = getattr(usage, "total_token_count", None) or 0
    return ModelReply(
        text=getattr(response, "text", None) or "",
        total_tokens=int(total),
        model=getattr(response, "model_version", None) or model,
    )


class GoogleGenAIAdapter:
    """Async Gemini adapter.

    Args:
        api_key: Gemini API key.
        client: Pre-built ``genai.Client``; tests pass a stub here.
    """

    def __init__(self, api_key: str | None = None, *, client: Any | None = None) -> None:
        if client is None:
            if not api_key:
                raise ValueError("GoogleGenAIAdapter requires an api_key or a client")
            client = genai.Client(api_key=api_key)
        self._client = client

    async def generate(self, request: ModelRequest) -> ModelReply:
        try:
            response = await self._client.aio.models.generate_content(
                model=request.model,
                contents=_build_contents(request),
                config=_build_config(request),
            )
        except Exception as e:
            raise TransportError(f"Gemini request failed: {e}") from e
        return _to_reply(response, request.model)

    async def stream(self, request: ModelRequest) -> AsyncIterator[ModelReply]:
        try:
            chunks = await self._client.aio.models.generate_content_stream(
                model=request.model,
                contents=_build_contents(request),
                config=_build_config(request),
            )
        except Exception as e:
            raise TransportError(f"Gemini stream failed to start: {e}") from e
        try:
            async for chunk in chunks:
                yield _to_reply(chunk, request.model)
        except Exception as e:
            raise TransportError(f"Gemini stream interrupted: {e}") from e
