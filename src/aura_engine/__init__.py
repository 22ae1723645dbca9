"""Generative-content orchestration for the Aura sales CRM."""

import importlib.metadata
import logging

from aura_engine.config import FrozenConfig, load_frozen_config, resolve_config
from aura_engine.core.types import (
    AIResponse,
    ChatTurn,
    Failure,
    ModelReply,
    ModelRequest,
    OperationKind,
    Outcome,
    Result,
    RetryPolicy,
    Success,
)
from aura_engine.exceptions import (
    AuraEngineError,
    ConfigurationError,
    QuotaDeniedError,
    RetriesExhaustedError,
    StreamCancelledError,
    TransportError,
)
from aura_engine.pipeline.adapters import GenerationAdapter, GoogleGenAIAdapter, MockAdapter
from aura_engine.pipeline.executor import RequestExecutor
from aura_engine.pipeline.fallback import PipelineStats, TemplateFallbackEngine
from aura_engine.pipeline.streaming import StreamCoordinator
from aura_engine.service import CreditLedger, GenerationService, QuotaCheck, create_service
from aura_engine.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("aura-engine")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Service
    "GenerationService",
    "create_service",
    "CreditLedger",
    "QuotaCheck",
    # Stages
    "RequestExecutor",
    "StreamCoordinator",
    "TemplateFallbackEngine",
    "PipelineStats",
    # Adapters
    "GenerationAdapter",
    "GoogleGenAIAdapter",
    "MockAdapter",
    # Configuration
    "FrozenConfig",
    "load_frozen_config",
    "resolve_config",
    # Types
    "AIResponse",
    "ChatTurn",
    "ModelReply",
    "ModelRequest",
    "OperationKind",
    "Outcome",
    "RetryPolicy",
    "Result",
    "Success",
    "Failure",
    # Exceptions
    "AuraEngineError",
    "ConfigurationError",
    "QuotaDeniedError",
    "RetriesExhaustedError",
    "StreamCancelledError",
    "TransportError",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
]
