import re

import pytest

from aura_engine.constants import CREDIT_COSTS
from aura_engine.core.domain import AIMode, BlogMode, ContentCategory, SocialPlatform
from aura_engine.core.types import OperationKind, ResilienceClass, TimeoutTier
from aura_engine.pipeline.prompts.catalog import (
    DEFAULT_PROMPTS,
    default_prompt,
    operation_spec,
    prompt_name_for,
)

pytestmark = pytest.mark.unit

_VARIANTS = {
    OperationKind.CATEGORY_CONTENT: list(ContentCategory),
    OperationKind.COMMAND_CENTER: list(AIMode),
    OperationKind.BLOG_CONTENT: list(BlogMode),
    OperationKind.SOCIAL_CAPTION: list(SocialPlatform),
}


def _all_prompt_names() -> list[str]:
    names = []
    for kind in OperationKind:
        for variant in _VARIANTS.get(kind, [None]):
            names.append(prompt_name_for(kind, variant))
    return names


@pytest.mark.parametrize("kind", list(OperationKind))
def test_every_operation_has_a_spec(kind):
    spec = operation_spec(kind)
    assert spec.kind is kind
    if spec.credit_key is not None:
        assert spec.credit_key in CREDIT_COSTS


def test_only_the_command_center_degrades_locally():
    local = [k for k in OperationKind if operation_spec(k).resilience is ResilienceClass.LOCAL_TEMPLATE]
    assert local == [OperationKind.COMMAND_CENTER]


def test_single_attempt_operations():
    single = {k for k in OperationKind if operation_spec(k).max_attempts == 1}
    assert single == {
        OperationKind.FOLLOW_UP_QUESTIONS,
        OperationKind.SOCIAL_CAPTION,
        OperationKind.DASHBOARD_INSIGHTS,
    }


def test_timeout_tiers_follow_call_shape():
    assert operation_spec(OperationKind.OUTREACH_MESSAGE).timeout_tier is TimeoutTier.STANDARD
    assert operation_spec(OperationKind.COMMAND_CENTER).timeout_tier is TimeoutTier.MULTI_TURN
    assert operation_spec(OperationKind.LEAD_RESEARCH).timeout_tier is TimeoutTier.EXTENDED


def test_every_prompt_name_has_a_default():
    names = _all_prompt_names()
    assert len(names) == len(set(names))
    for name in names:
        assert default_prompt(name).template
    assert set(names) == set(DEFAULT_PROMPTS)


def test_variant_prompt_names():
    assert prompt_name_for(OperationKind.OUTREACH_MESSAGE) == "sales_outreach"
    assert prompt_name_for(OperationKind.CATEGORY_CONTENT, ContentCategory.AD_COPY) == "content_ad"
    assert prompt_name_for(OperationKind.COMMAND_CENTER) == "command_center_analyst"
    assert prompt_name_for(OperationKind.COMMAND_CENTER, AIMode.COACH) == "command_center_coach"
    assert prompt_name_for(OperationKind.BLOG_CONTENT, BlogMode.OUTLINE_ONLY) == "blog_outline"
    assert prompt_name_for(OperationKind.SOCIAL_CAPTION, SocialPlatform.TWITTER) == "social_twitter"


def test_missing_variant_is_rejected():
    with pytest.raises(TypeError):
        prompt_name_for(OperationKind.CATEGORY_CONTENT)
    with pytest.raises(TypeError):
        prompt_name_for(OperationKind.BLOG_CONTENT, ContentCategory.REPORT)


def test_unknown_prompt_name():
    with pytest.raises(ValueError, match="no_such_prompt"):
        default_prompt("no_such_prompt")


def test_creative_mode_runs_hotter():
    creative = default_prompt("command_center_creative")
    analyst = default_prompt("command_center_analyst")
    assert creative.temperature > analyst.temperature


def test_sequence_template_keeps_personalization_tags():
    template = default_prompt("email_sequence").template
    placeholders = set(re.findall(r"\{\{(\w+)\}\}", template))
    assert {"first_name", "company", "ai_insight", "your_name"} <= placeholders
    assert "===EMAIL_START===" in template
