from types import SimpleNamespace
from typing import Any

from google.genai import types
import pytest

from aura_engine.core.types import ChatTurn, ModelReply, ModelRequest, SamplingParams
from aura_engine.exceptions import TransportError
from aura_engine.pipeline.adapters import GenerationAdapter, GoogleGenAIAdapter, MockAdapter
from tests.helpers import ScriptedAdapter

pytestmark = pytest.mark.contract


class _StubModels:
    """Stands in for ``client.aio.models``."""

    def __init__(self, response: Any = None, *, chunks=(), error: Exception | None = None):
        self.response = response
        self.chunks = list(chunks)
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response

    async def generate_content_stream(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error

        async def chunks():
            for chunk in self.chunks:
                if isinstance(chunk, Exception):
                    raise chunk
                yield chunk

        return chunks()


def _client(models: _StubModels) -> SimpleNamespace:
    return SimpleNamespace(aio=SimpleNamespace(models=models))


def _response(text, tokens=None, model_version=None) -> SimpleNamespace:
    usage = SimpleNamespace(total_token_count=tokens) if tokens is not None else None
    return SimpleNamespace(text=text, usage_metadata=usage, model_version=model_version)


REQUEST = ModelRequest(
    model="gemini-test",
    prompt="Write a note",
    system_instruction="Be brief.",
    sampling=SamplingParams(temperature=0.4, top_p=0.8, top_k=20),
)


@pytest.mark.parametrize(
    "adapter",
    [
        MockAdapter(),
        GoogleGenAIAdapter(client=_client(_StubModels())),
        ScriptedAdapter(),
    ],
)
def test_adapters_satisfy_protocol(adapter):
    assert isinstance(adapter, GenerationAdapter)


# --- Mock adapter ---


@pytest.mark.asyncio
async def test_mock_echoes_prompt():
    reply = await MockAdapter().generate(REQUEST)
    assert reply.text == "echo: Write a note"
    assert reply.total_tokens == len("Write a note") // 4 + 10
    assert reply.model == "gemini-test"


@pytest.mark.asyncio
async def test_mock_stream_reassembles_to_generate_text():
    adapter = MockAdapter(chunk_words=2)
    chunks = [c async for c in adapter.stream(REQUEST)]
    assert "".join(c.text for c in chunks) == (await adapter.generate(REQUEST)).text
    assert len(chunks) == 3
    assert chunks[-1].text == ""
    assert chunks[-1].total_tokens > 0


def test_mock_rejects_empty_chunks():
    with pytest.raises(ValueError):
        MockAdapter(chunk_words=0)


# --- Gemini adapter ---


def test_gemini_needs_a_key_or_client():
    with pytest.raises(ValueError):
        GoogleGenAIAdapter()


@pytest.mark.asyncio
async def test_gemini_builds_single_turn_call():
    models = _StubModels(_response("Hello", tokens=33, model_version="gemini-test-001"))
    adapter = GoogleGenAIAdapter(client=_client(models))

    reply = await adapter.generate(REQUEST)

    assert reply == ModelReply(text="Hello", total_tokens=33, model="gemini-test-001")
    (call,) = models.calls
    assert call["model"] == "gemini-test"
    assert call["contents"] == "Write a note"
    config = call["config"]
    assert isinstance(config, types.GenerateContentConfig)
    assert config.temperature == 0.4
    assert config.top_p == 0.8
    assert config.top_k == 20
    assert config.system_instruction == "Be brief."
    assert not config.tools


@pytest.mark.asyncio
async def test_gemini_search_grounding_adds_tool():
    models = _StubModels(_response("Found"))
    adapter = GoogleGenAIAdapter(client=_client(models))

    await adapter.generate(ModelRequest(model="m", prompt="Research", use_search=True))

    (tool,) = models.calls[0]["config"].tools
    assert tool.google_search is not None


@pytest.mark.asyncio
async def test_gemini_replays_history():
    models = _StubModels(_response("Sure"))
    adapter = GoogleGenAIAdapter(client=_client(models))
    history = (ChatTurn("user", "Hi"), ChatTurn("model", "Hello! How can I help?"))

    await adapter.generate(ModelRequest(model="m", prompt="Summarize", history=history))

    contents = models.calls[0]["contents"]
    assert [c.role for c in contents] == ["user", "model", "user"]
    assert contents[-1].parts[0].text == "Summarize"


@pytest.mark.asyncio
async def test_gemini_tolerates_sparse_responses():
    adapter = GoogleGenAIAdapter(client=_client(_StubModels(_response(None))))
    reply = await adapter.generate(REQUEST)
    assert reply == ModelReply(text="", total_tokens=0, model="gemini-test")
    assert reply.is_empty


@pytest.mark.asyncio
async def test_gemini_wraps_provider_errors():
    boom = RuntimeError("503 UNAVAILABLE")
    adapter = GoogleGenAIAdapter(client=_client(_StubModels(error=boom)))

    with pytest.raises(TransportError, match="503 UNAVAILABLE") as excinfo:
        await adapter.generate(REQUEST)
    assert excinfo.value.__cause__ is boom


@pytest.mark.asyncio
async def test_gemini_stream_yields_chunks():
    models = _StubModels(
        chunks=[_response("Hel"), _response("lo"), _response(None, tokens=9)]
    )
    adapter = GoogleGenAIAdapter(client=_client(models))

    chunks = [c async for c in adapter.stream(REQUEST)]

    assert [c.text for c in chunks] == ["Hel", "lo", ""]
    assert chunks[-1].total_tokens == 9


@pytest.mark.asyncio
async def test_gemini_stream_errors_are_wrapped():
    start_failure = GoogleGenAIAdapter(client=_client(_StubModels(error=RuntimeError("denied"))))
    with pytest.raises(TransportError, match="failed to start"):
        [c async for c in start_failure.stream(REQUEST)]

    mid_failure = GoogleGenAIAdapter(
        client=_client(_StubModels(chunks=[_response("a"), RuntimeError("reset")]))
    )
    with pytest.raises(TransportError, match="interrupted"):
        [c async for c in mid_failure.stream(REQUEST)]
