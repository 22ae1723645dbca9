"""Versioned prompt lookup with hardcoded fallback.

A prompt store is an optional, read-only collaborator. Resolution prefers an
owner's active custom prompt, then the system default stored under the same
name, then the hardcoded template shipped with the engine (reported as
version 0). Store absence or failure is never an error.
"""

from __future__ import annotations

from collections.abc import Callable
import dataclasses
import logging
import time
from typing import Protocol, runtime_checkable

from aura_engine.constants import (
    CUSTOM_PROMPT_SUFFIX,
    FALLBACK_PROMPT_VERSION,
    PROMPT_CACHE_TTL_SECONDS,
)
from aura_engine.pipeline.prompts.catalog import PromptTemplate

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class StoredPrompt:
    """A prompt row as returned by the store."""

    template: str
    version: int
    system_instruction: str | None = None
    temperature: float | None = None
    top_p: float | None = None
    is_custom: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class ResolvedPrompt:
    """The effective prompt for one call, with the name/version to report."""

    name: str
    version: int
    template: str
    system_instruction: str
    temperature: float
    top_p: float | None
    top_k: int | None = None
    is_custom: bool = False

    @property
    def reported_name(self) -> str:
        return f"{self.name}{CUSTOM_PROMPT_SUFFIX}" if self.is_custom else self.name


@runtime_checkable
class PromptStore(Protocol):
    """Read-only lookup of versioned prompts by logical name.

    ``owner_id=None`` asks for the system default.
    """

    async def lookup(self, name: str, owner_id: str | None = None) -> StoredPrompt | None: ...


def _from_default(name: str, default: PromptTemplate) -> ResolvedPrompt:
    return ResolvedPrompt(
        name=name,
        version=FALLBACK_PROMPT_VERSION,
        template=default.template,
        system_instruction=default.system_instruction,
        temperature=default.temperature,
        top_p=default.top_p,
        top_k=default.top_k,
    )


def _merge(name: str, stored: StoredPrompt, default: PromptTemplate) -> ResolvedPrompt:
    return ResolvedPrompt(
        name=name,
        version=stored.version,
        template=stored.template,
        system_instruction=stored.system_instruction or default.system_instruction,
        temperature=(
            stored.temperature if stored.temperature is not None else default.temperature
        ),
        top_p=stored.top_p if stored.top_p is not None else default.top_p,
        top_k=default.top_k,
        is_custom=stored.is_custom,
    )


async def _safe_lookup(
    store: PromptStore, name: str, owner_id: str | None
) -> StoredPrompt | None:
    try:
        return await store.lookup(name, owner_id)
    except Exception as e:
        log.warning("Prompt store lookup for '%s' failed, using default: %s", name, e)
        return None


async def resolve_prompt(
    store: PromptStore | None,
    name: str,
    default: PromptTemplate,
    *,
    owner_id: str | None = None,
) -> ResolvedPrompt:
    """Resolve ``name``: owner custom, then system default, then hardcoded."""
    if store is None:
        return _from_default(name, default)

    if owner_id is not None:
        custom = await _safe_lookup(store, name, owner_id)
        if custom is not None:
            return _merge(name, dataclasses.replace(custom, is_custom=True), default)

    system = await _safe_lookup(store, name, None)
    if system is not None:
        return _merge(name, system, default)

    log.debug("No stored prompt for '%s'; using hardcoded default", name)
    return _from_default(name, default)


@dataclasses.dataclass(slots=True)
class _CacheEntry:
    prompt: StoredPrompt | None
    expires_at: float


class CachingPromptStore:
    """Memoizes another store's lookups (misses included) for a TTL.

    Args:
        inner: The store to wrap.
        ttl_seconds: Entry lifetime; 0 disables caching.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        inner: PromptStore,
        *,
        ttl_seconds: float = PROMPT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inner = inner
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str | None, str], _CacheEntry] = {}

    async def lookup(self, name: str, owner_id: str | None = None) -> StoredPrompt | None:
        key = (owner_id, name)
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at > now:
            return entry.prompt
        prompt = await self._inner.lookup(name, owner_id)
        if self._ttl > 0:
            self._entries[key] = _CacheEntry(prompt, now + self._ttl)
        return prompt

    def clear(self, owner_id: str | None = None, name: str | None = None) -> None:
        """Drop one entry, every entry of an owner, or everything."""
        if owner_id is None and name is None:
            self._entries.clear()
            return
        for key in list(self._entries):
            if (owner_id is None or key[0] == owner_id) and (name is None or key[1] == name):
                del self._entries[key]
