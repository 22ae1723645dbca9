import asyncio

import pytest

from aura_engine.core.types import Failure, ModelReply, ModelRequest, RetryPolicy, Success
from aura_engine.exceptions import (
    AttemptTimeoutError,
    EmptyReplyError,
    RetriesExhaustedError,
    StreamCancelledError,
    TransportError,
)
from aura_engine.pipeline.executor import RequestExecutor
from tests.helpers import Hang, RecordingSleep, ScriptedAdapter

pytestmark = pytest.mark.unit

REQUEST = ModelRequest(model="test-model", prompt="hello")


def _call(adapter: ScriptedAdapter):
    return lambda: adapter.generate(REQUEST)


@pytest.mark.asyncio
async def test_first_attempt_success_does_not_sleep():
    sleep = RecordingSleep()
    adapter = ScriptedAdapter(["hi there"])
    result = await RequestExecutor(sleep=sleep).execute(_call(adapter), RetryPolicy())

    assert isinstance(result, Success)
    assert result.value.text == "hi there"
    assert adapter.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_two_timeouts_then_success_reports_third_call_tokens():
    sleep = RecordingSleep()
    adapter = ScriptedAdapter(
        [Hang, Hang, ModelReply(text="third time lucky", total_tokens=77)]
    )
    policy = RetryPolicy(max_attempts=3, timeout_seconds=0.01)

    result = await RequestExecutor(sleep=sleep).execute(_call(adapter), policy)

    assert isinstance(result, Success)
    assert result.value.total_tokens == 77
    assert adapter.calls == 3
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_exhaustion_is_bounded_and_backoff_is_linear():
    sleep = RecordingSleep()
    adapter = ScriptedAdapter([TransportError("boom")])
    policy = RetryPolicy(max_attempts=4, timeout_seconds=1.0, backoff_step_seconds=0.5)

    result = await RequestExecutor(sleep=sleep).execute(_call(adapter), policy)

    assert isinstance(result, Failure)
    error = result.error
    assert isinstance(error, RetriesExhaustedError)
    assert error.attempts == 4
    assert str(error.last_error) == "boom"
    assert not error.timed_out
    assert adapter.calls == 4
    # Nothing is slept after the final attempt
    assert sleep.delays == [0.5, 1.0, 1.5]
    assert sum(sleep.delays) == pytest.approx(sum(policy.backoff_schedule()))


@pytest.mark.asyncio
async def test_empty_replies_are_retried_like_transport_failures():
    adapter = ScriptedAdapter(["", "   \n", "finally"])
    result = await RequestExecutor(sleep=RecordingSleep()).execute(
        _call(adapter), RetryPolicy()
    )

    assert isinstance(result, Success)
    assert result.value.text == "finally"
    assert adapter.calls == 3


@pytest.mark.asyncio
async def test_all_empty_replies_exhaust_with_empty_reply_error():
    adapter = ScriptedAdapter([""])
    result = await RequestExecutor(sleep=RecordingSleep()).execute(
        _call(adapter), RetryPolicy(max_attempts=2)
    )

    assert isinstance(result, Failure)
    assert isinstance(result.error.last_error, EmptyReplyError)


@pytest.mark.asyncio
async def test_timeout_exhaustion_is_flagged():
    adapter = ScriptedAdapter([Hang])
    result = await RequestExecutor(sleep=RecordingSleep()).execute(
        _call(adapter), RetryPolicy(max_attempts=2, timeout_seconds=0.01)
    )

    assert isinstance(result, Failure)
    assert result.error.timed_out
    assert isinstance(result.error.last_error, AttemptTimeoutError)


@pytest.mark.asyncio
async def test_single_attempt_policy_never_sleeps():
    sleep = RecordingSleep()
    adapter = ScriptedAdapter([TransportError("down")])
    result = await RequestExecutor(sleep=sleep).execute(
        _call(adapter), RetryPolicy(max_attempts=1)
    )

    assert isinstance(result, Failure)
    assert adapter.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_caller_cancellation_propagates_without_retry():
    adapter = ScriptedAdapter([Hang])
    executor = RequestExecutor(sleep=RecordingSleep())
    task = asyncio.create_task(
        executor.execute(_call(adapter), RetryPolicy(timeout_seconds=30))
    )
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert adapter.calls == 1


@pytest.mark.asyncio
async def test_stream_cancellation_is_not_retried():
    adapter = ScriptedAdapter([StreamCancelledError("stop")])
    with pytest.raises(StreamCancelledError):
        await RequestExecutor(sleep=RecordingSleep()).execute(
            _call(adapter), RetryPolicy()
        )
    assert adapter.calls == 1


def test_retry_policy_validates_bounds():
    with pytest.raises(ValueError, match="max_attempts"):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError, match="timeout_seconds"):
        RetryPolicy(timeout_seconds=0)
    assert RetryPolicy(max_attempts=3).backoff_schedule() == (1.0, 2.0)
    assert RetryPolicy().with_attempts(1).backoff_schedule() == ()
