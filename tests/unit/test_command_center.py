import asyncio

import pytest

from aura_engine.constants import (
    GENERIC_CONFIDENCE,
    LOCAL_MODEL_NAME,
    REMOTE_CONFIDENCE,
    TEMPLATE_CONFIDENCE,
)
from aura_engine.core.domain import AIMode
from aura_engine.core.types import ChatTurn, Outcome
from aura_engine.exceptions import TransportError
from aura_engine.pipeline.streaming import StreamCoordinator
from tests.helpers import FakeLedger, Hang, ScriptedAdapter

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_remote_answer_has_high_confidence(make_service, leads):
    adapter = ScriptedAdapter(["Your pipeline is healthy."])
    response = await make_service(adapter).command_center_reply(
        "How is my pipeline?", leads=leads
    )

    assert response.outcome is Outcome.SUCCESS
    assert response.confidence == REMOTE_CONFIDENCE
    assert response.prompt_name == "command_center_analyst"
    (request,) = adapter.requests
    assert request.prompt.startswith("PIPELINE STATS:\n- Total Leads: 3")
    assert "- Ada Park (Northwind) - Score: 92, Status: Qualified" in request.prompt
    assert request.prompt.endswith("USER REQUEST:\nHow is my pipeline?")
    assert "senior data analyst" in request.system_instruction


@pytest.mark.asyncio
async def test_history_is_trimmed_to_recent_turns(make_service, leads):
    adapter = ScriptedAdapter()
    history = [ChatTurn("user" if i % 2 == 0 else "model", f"turn {i}") for i in range(12)]

    await make_service(adapter).command_center_reply(
        "And now?", AIMode.STRATEGIST, leads, history
    )

    assert adapter.requests[0].history == tuple(history[-10:])


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", ["", "   \n\t"])
async def test_blank_prompt_is_answered_locally(prompt, make_service, leads):
    adapter = ScriptedAdapter()
    ledger = FakeLedger()
    response = await make_service(adapter, ledger=ledger).command_center_reply(
        prompt, AIMode.COACH, leads
    )

    assert response.outcome is Outcome.FALLBACK
    assert response.model_name == LOCAL_MODEL_NAME
    assert response.confidence == GENERIC_CONFIDENCE
    assert response.prompt_name == "command_center_coach"
    assert response.prompt_version == 0
    assert response.text.startswith("**Coach's Take:** ")
    assert response.error == "Prompt is blank"
    assert adapter.calls == 0
    assert ledger.charges == []


# --- Local fallback ---


@pytest.mark.asyncio
async def test_exhaustion_falls_back_to_local_answer(make_service, leads, recording_sleep):
    adapter = ScriptedAdapter([TransportError("provider down")])
    response = await make_service(adapter).command_center_reply("pipeline health", leads=leads)

    assert response.outcome is Outcome.FALLBACK
    assert not response.is_unavailable
    assert response.model_name == LOCAL_MODEL_NAME
    assert response.confidence == TEMPLATE_CONFIDENCE
    assert "Pipeline Health Report" in response.text
    assert "NEURAL TIMEOUT" not in response.text
    assert response.error == "COMMAND CENTER FAILED: provider down"
    assert adapter.calls == 3
    assert recording_sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_quota_denial_falls_back_without_calling(make_service, leads):
    adapter = ScriptedAdapter()
    service = make_service(adapter, ledger=FakeLedger(balance=0))

    response = await service.command_center_reply("who is stale?", leads=leads)

    assert response.outcome is Outcome.FALLBACK
    assert "Ben Ortiz" in response.text
    assert response.error == "COMMAND CENTER FAILED: Insufficient credits for this operation."
    assert adapter.calls == 0


@pytest.mark.asyncio
async def test_unmatched_question_gets_generic_local_answer(make_service):
    response = await make_service(ScriptedAdapter([TransportError("x")])).command_center_reply(
        "what's the weather?", AIMode.COACH
    )
    assert response.confidence == GENERIC_CONFIDENCE
    assert response.text.startswith("**Coach's Take:**")
    assert response.prompt_name == "command_center_coach"


# --- Streaming ---


@pytest.mark.asyncio
async def test_streamed_reply_reports_progress(make_service, leads):
    adapter = ScriptedAdapter(streams=[["Hot ", "leads: ", "Ada"]], tokens=21)
    seen: list[str] = []

    response = await make_service(adapter).command_center_reply(
        "hot leads?", leads=leads, on_chunk=seen.append
    )

    assert response.outcome is Outcome.SUCCESS
    assert response.text == "Hot leads: Ada"
    assert response.tokens_used == 21
    assert seen == ["Hot ", "Hot leads: ", "Hot leads: Ada"]
    assert adapter.requests == []
    assert len(adapter.stream_requests) == 1


@pytest.mark.asyncio
async def test_failed_stream_attempt_restarts_from_empty(make_service, leads):
    adapter = ScriptedAdapter(
        streams=[["par", TransportError("connection reset")], ["Full answer"]]
    )
    seen: list[str] = []

    response = await make_service(adapter).command_center_reply(
        "summary please", leads=leads, on_chunk=seen.append
    )

    assert response.text == "Full answer"
    assert seen == ["par", "Full answer"]
    assert len(adapter.stream_requests) == 2


@pytest.mark.asyncio
async def test_cancelled_stream_returns_partial_text(make_service, leads, recording_sleep):
    adapter = ScriptedAdapter(streams=[["Hot ", "leads: ", "Ada"]])
    coordinator = StreamCoordinator()

    def on_chunk(_text: str) -> None:
        coordinator.cancel()

    response = await make_service(adapter).command_center_reply(
        "hot leads?", leads=leads, on_chunk=on_chunk, coordinator=coordinator
    )

    assert response.outcome is Outcome.CANCELLED
    assert response.is_unavailable
    assert response.text == "Hot "
    assert response.confidence is None
    assert len(adapter.stream_requests) == 1
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_cancel_from_another_task(make_service, leads):
    adapter = ScriptedAdapter(streams=[["first words", Hang]])
    coordinator = StreamCoordinator()
    started = asyncio.Event()

    task = asyncio.create_task(
        make_service(adapter).command_center_reply(
            "hot leads?",
            leads=leads,
            on_chunk=lambda _text: started.set(),
            coordinator=coordinator,
        )
    )
    await started.wait()
    coordinator.cancel()
    response = await task

    assert response.outcome is Outcome.CANCELLED
    assert response.text == "first words"


@pytest.mark.asyncio
async def test_stream_without_callback_uses_coordinator(make_service, leads):
    adapter = ScriptedAdapter(streams=[["All ", "good"]])
    coordinator = StreamCoordinator()

    response = await make_service(adapter).command_center_reply(
        "status?", leads=leads, coordinator=coordinator
    )

    assert response.text == "All good"
    assert coordinator.partial_text == "All good"
