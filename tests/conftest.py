"""
Global test configuration with support for different test types.
"""

from collections.abc import Callable
from contextlib import suppress
from datetime import UTC, datetime
import os
from typing import Any

import pytest

from aura_engine.config import FrozenConfig, resolve_config
from aura_engine.core.domain import Lead, LeadStatus
from aura_engine.pipeline.executor import RequestExecutor
from aura_engine.service import GenerationService
from tests.helpers import FIXED_NOW, RecordingSleep


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-in escape hatch: mark a test with @pytest.mark.allow_dotenv
    to permit .env loading for that specific test.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "aura_engine.config.api.load_dotenv",
            lambda *_args, **_kwargs: False,
            raising=False,
        )


@pytest.fixture(autouse=True)
def isolate_aura_env(request, monkeypatch):
    """Ensure a clean AURA_*/GEMINI_* environment for each test.

    Escape hatch: tests marked with @pytest.mark.api keep the real environment.
    """
    if "api" in request.node.keywords:
        return
    for key in list(os.environ.keys()):
        if key.startswith(("AURA_", "GEMINI_")):
            monkeypatch.delenv(key, raising=False)
    # Avoid DEBUG toggles enabling telemetry paths
    monkeypatch.delenv("DEBUG", raising=False)


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Protocol and invariant conformance tests",
        "integration: Component integration tests with mocked APIs",
        "api: Real API integration tests (requires API key)",
        "allow_dotenv: Permit .env loading for this test",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Automatically skip API tests when API key is unavailable."""
    if not (
        (os.getenv("AURA_API_KEY") or os.getenv("GEMINI_API_KEY"))
        and os.getenv("ENABLE_API_TESTS")
    ):
        skip_api = pytest.mark.skip(
            reason="API tests require AURA_API_KEY or GEMINI_API_KEY and ENABLE_API_TESTS=1",
        )
        for item in items:
            if "api" in item.keywords:
                item.add_marker(skip_api)


# --- Core Fixtures ---


@pytest.fixture
def frozen_config() -> FrozenConfig:
    """Fast configuration: tiny timeouts, default attempt bound and backoff step."""
    return resolve_config(
        {
            "model": "test-model",
            "timeout_seconds": 0.05,
            "multi_turn_timeout_seconds": 0.05,
            "extended_timeout_seconds": 0.05,
        }
    ).to_frozen()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_service(frozen_config, recording_sleep) -> Callable[..., GenerationService]:
    """Factory for services wired to instant backoff and a fixed clock."""

    def _make(adapter: Any, **kwargs: Any) -> GenerationService:
        kwargs.setdefault("executor", RequestExecutor(sleep=recording_sleep))
        kwargs.setdefault("clock", lambda: FIXED_NOW)
        return GenerationService(adapter, frozen_config, **kwargs)

    return _make


@pytest.fixture
def leads() -> tuple[Lead, ...]:
    return (
        Lead(
            id="l1",
            name="Ada Park",
            company="Northwind",
            score=92,
            status=LeadStatus.QUALIFIED,
            email="ada@northwind.io",
            insights="Expanding EU sales team",
            created_at=datetime(2026, 2, 28, tzinfo=UTC),
        ),
        Lead(
            id="l2",
            name="Ben Ortiz",
            company="Globex",
            score=64,
            status=LeadStatus.CONTACTED,
            insights="Evaluating CRMs",
            created_at=datetime(2026, 2, 1, tzinfo=UTC),
        ),
        Lead(
            id="l3",
            name="Cleo Nash",
            company="Initech",
            score=18,
            status=LeadStatus.NEW,
            created_at=datetime(2026, 1, 5, tzinfo=UTC),
        ),
    )
