"""Configuration management for the generation engine.

Key components:
- AuraSettings: Pydantic schema reading AURA_* environment variables
- ResolvedConfig: Post-resolution configuration with audit metadata
- FrozenConfig: Immutable configuration handed to the service
"""

from .api import load_frozen_config, resolve_config
from .schema import AuraSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "AuraSettings",
    "ConfigOrigin",
    "FrozenConfig",
    "ResolvedConfig",
    "SourceMap",
    "load_frozen_config",
    "resolve_config",
]
