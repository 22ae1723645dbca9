import logging

import pytest

from aura_engine.core.domain import ContentType, Lead
from aura_engine.exceptions import TransportError
from aura_engine.pipeline.executor import RequestExecutor
from aura_engine.telemetry import InMemoryReporter, TelemetryContext
from tests.helpers import ScriptedAdapter

pytestmark = pytest.mark.unit


@pytest.fixture
def enabled(monkeypatch):
    monkeypatch.setenv("AURA_TELEMETRY", "1")


def test_disabled_context_is_shared_no_op():
    ctx = TelemetryContext(InMemoryReporter())
    assert ctx is TelemetryContext()
    with ctx("anything") as scoped:
        scoped.count("noop")


def test_debug_flag_enables_telemetry(monkeypatch):
    monkeypatch.setenv("DEBUG", "1")
    assert TelemetryContext(InMemoryReporter()) is not TelemetryContext()


def test_enabled_context_without_reporters_is_no_op(enabled):
    assert TelemetryContext() is TelemetryContext()


def test_nested_scopes_record_dotted_paths(enabled):
    reporter = InMemoryReporter()
    tele = TelemetryContext(reporter)

    with tele("service"), tele("attempt", attempt=1):
        tele.count("failure")
        tele.count("failure", 2)

    assert set(reporter.timings) == {"service", "service.attempt"}
    _, metadata = reporter.timings["service.attempt"][0]
    assert metadata["depth"] == 1
    assert metadata["parent_scope"] == "service"
    assert metadata["attempt"] == 1
    assert reporter.total("service.attempt.failure") == 3


def test_blank_scope_name_is_rejected(enabled):
    tele = TelemetryContext(InMemoryReporter())
    with pytest.raises(ValueError), tele(""):
        pass


def test_failing_reporter_does_not_break_caller(enabled, caplog):
    class _Broken:
        def record_timing(self, scope, duration, **metadata):
            raise RuntimeError("sink down")

        def record_metric(self, scope, value, **metadata):
            raise RuntimeError("sink down")

    healthy = InMemoryReporter()
    tele = TelemetryContext(_Broken(), healthy)

    with caplog.at_level(logging.ERROR, logger="aura_engine.telemetry"), tele("op"):
        tele.gauge("depth", 0.5)

    assert "op" in healthy.timings
    assert "Telemetry reporter '_Broken' failed" in caplog.text


def test_report_lists_timings_and_totals(enabled):
    reporter = InMemoryReporter(max_entries_per_scope=2)
    tele = TelemetryContext(reporter)
    for _ in range(3):
        with tele("call"):
            tele.count("hits")

    assert len(reporter.timings["call"]) == 2
    report = reporter.get_report()
    assert report.startswith("=== Telemetry Report ===")
    assert "call.hits" in report


@pytest.mark.asyncio
async def test_service_reports_attempts_and_failures(enabled, make_service, recording_sleep):
    reporter = InMemoryReporter()
    tele = TelemetryContext(reporter)
    service = make_service(
        ScriptedAdapter([TransportError("flaky"), "Hello Ada"]),
        executor=RequestExecutor(sleep=recording_sleep, telemetry=tele),
        telemetry=tele,
    )

    lead = Lead(id="1", name="Ada Park", company="Northwind", score=70)
    response = await service.generate_outreach_message(lead, ContentType.EMAIL)

    assert response.ok
    assert "service.outreach_message" in reporter.timings
    assert len(reporter.timings["service.outreach_message.executor.attempt"]) == 2
    assert reporter.total("service.outreach_message.executor.failure") == 1
