import pytest

from aura_engine.pipeline.prompts.catalog import PromptTemplate
from aura_engine.pipeline.prompts.store import (
    CachingPromptStore,
    StoredPrompt,
    resolve_prompt,
)
from tests.helpers import DictStore

pytestmark = pytest.mark.unit

DEFAULT = PromptTemplate(
    system_instruction="default system", template="default {{x}}", temperature=0.4, top_k=40
)


@pytest.mark.asyncio
async def test_no_store_uses_hardcoded_default_as_version_zero():
    resolved = await resolve_prompt(None, "sales_outreach", DEFAULT)
    assert resolved.version == 0
    assert resolved.template == "default {{x}}"
    assert resolved.system_instruction == "default system"
    assert resolved.reported_name == "sales_outreach"


@pytest.mark.asyncio
async def test_store_failure_falls_back_to_default():
    resolved = await resolve_prompt(DictStore(fail=True), "p", DEFAULT, owner_id="u1")
    assert resolved.version == 0
    assert resolved.template == DEFAULT.template


@pytest.mark.asyncio
async def test_owner_custom_prompt_wins_and_is_reported_as_custom():
    store = DictStore(
        {
            ("u1", "p"): StoredPrompt(template="custom", version=7),
            (None, "p"): StoredPrompt(template="system", version=3),
        }
    )
    resolved = await resolve_prompt(store, "p", DEFAULT, owner_id="u1")
    assert resolved.template == "custom"
    assert resolved.version == 7
    assert resolved.is_custom
    assert resolved.reported_name == "p_custom"


@pytest.mark.asyncio
async def test_system_prompt_used_when_owner_has_none():
    store = DictStore({(None, "p"): StoredPrompt(template="system", version=3, temperature=0.9)})
    resolved = await resolve_prompt(store, "p", DEFAULT, owner_id="u2")
    assert resolved.template == "system"
    assert resolved.version == 3
    assert resolved.temperature == 0.9
    # Unset stored fields inherit the default's
    assert resolved.system_instruction == "default system"
    assert resolved.top_k == 40
    assert store.lookups == [("p", "u2"), ("p", None)]


@pytest.mark.asyncio
async def test_anonymous_resolution_skips_owner_lookup():
    store = DictStore()
    resolved = await resolve_prompt(store, "p", DEFAULT)
    assert resolved.version == 0
    assert store.lookups == [("p", None)]


@pytest.mark.asyncio
async def test_caching_store_memoizes_hits_and_misses_until_ttl():
    now = [100.0]
    inner = DictStore({(None, "p"): StoredPrompt(template="system", version=1)})
    cache = CachingPromptStore(inner, ttl_seconds=300, clock=lambda: now[0])

    assert (await cache.lookup("p")).version == 1
    assert await cache.lookup("missing") is None
    assert (await cache.lookup("p")).version == 1
    assert await cache.lookup("missing") is None
    assert len(inner.lookups) == 2

    now[0] += 301
    await cache.lookup("p")
    assert len(inner.lookups) == 3


@pytest.mark.asyncio
async def test_caching_store_clear_by_owner():
    inner = DictStore()
    cache = CachingPromptStore(inner, ttl_seconds=300, clock=lambda: 0.0)
    await cache.lookup("p", "u1")
    await cache.lookup("p", "u2")
    cache.clear(owner_id="u1")
    await cache.lookup("p", "u1")
    await cache.lookup("p", "u2")
    assert inner.lookups == [("p", "u1"), ("p", "u2"), ("p", "u1")]


@pytest.mark.asyncio
async def test_zero_ttl_disables_caching():
    inner = DictStore()
    cache = CachingPromptStore(inner, ttl_seconds=0)
    await cache.lookup("p")
    await cache.lookup("p")
    assert len(inner.lookups) == 2
