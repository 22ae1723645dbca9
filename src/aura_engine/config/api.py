"""Public API for the configuration system.

``resolve_config()`` merges programmatic overrides over environment variables
and schema defaults, validates the result, and records where each value came
from.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from aura_engine.exceptions import ConfigurationError

from .schema import AuraSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig

log = logging.getLogger(__name__)

_ENV_NAMES: dict[str, tuple[str, ...]] = {
    "api_key": ("AURA_API_KEY", "GEMINI_API_KEY"),
}


def _env_names(field: str) -> tuple[str, ...]:
    return _ENV_NAMES.get(field, (f"AURA_{field.upper()}",))


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration with precedence Programmatic > Environment > Defaults.

    Args:
        programmatic: Overrides with the highest precedence. Unknown keys are
            ignored.
        use_env_file: Optional ``.env`` file loaded before reading the
            environment. Variables already set are not overridden.

    Returns:
        ResolvedConfig with merged values and per-field origin.

    Raises:
        ConfigurationError: If the env file is missing or validation fails.

    Example:
        config = resolve_config({"use_real_api": True, "api_key": "..."})
        frozen = config.to_frozen()
    """
    if use_env_file is not None:
        env_path = Path(use_env_file)
        if not env_path.exists():
            raise ConfigurationError(f"Environment file not found: {env_path}")
        load_dotenv(env_path, override=False)

    known = set(AuraSettings.model_fields)
    overrides = {k: v for k, v in (programmatic or {}).items() if k in known}
    ignored = set(programmatic or {}) - known
    if ignored:
        log.debug("Ignoring unknown configuration keys: %s", sorted(ignored))

    try:
        settings = AuraSettings(**overrides)
    except ValueError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e

    origin: dict[str, ConfigOrigin] = {}
    for field in known:
        if field in overrides:
            origin[field] = "programmatic"
        elif any(name in os.environ for name in _env_names(field)):
            origin[field] = "env"
        else:
            origin[field] = "default"

    return ResolvedConfig(**settings.to_dict(), origin=origin)


def load_frozen_config(
    programmatic: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
) -> FrozenConfig:
    """Resolve and freeze in one step."""
    return resolve_config(programmatic, use_env_file=use_env_file).to_frozen()
