import pytest

from aura_engine.constants import GENERIC_CONFIDENCE, TEMPLATE_CONFIDENCE
from aura_engine.core.domain import AIMode
from aura_engine.pipeline.fallback import (
    FallbackRule,
    PipelineStats,
    ScoreBuckets,
    TemplateFallbackEngine,
    frame_for_mode,
)
from tests.helpers import FIXED_NOW

pytestmark = pytest.mark.unit


@pytest.fixture
def stats(leads) -> PipelineStats:
    return PipelineStats.from_leads(leads, now=FIXED_NOW)


def test_stats_from_leads(stats):
    assert stats.total == 3
    assert stats.avg_score == 58
    assert stats.hot == 1
    assert stats.qualified == 1
    assert stats.new_count == 1
    assert stats.conversion_rate == 33
    assert stats.status_breakdown == {"Qualified": 1, "Contacted": 1, "New": 1}
    assert stats.buckets == ScoreBuckets(hot=1, warm=1, cool=0, cold=1)
    assert [lead.score for lead in stats.leads] == [92, 64, 18]
    assert [(s.lead.id, s.days_idle) for s in stats.stale] == [("l2", 29), ("l3", 56)]
    assert [lead.id for lead in stats.recent] == ["l1"]


def test_empty_stats():
    stats = PipelineStats.from_leads((), now=FIXED_NOW)
    assert stats.total == 0
    assert stats.avg_score == 0
    assert stats.top_lead is None


def test_keyword_rule_renders_from_stats(stats):
    answer = TemplateFallbackEngine().answer("  What's my PIPELINE   health? ", stats)
    assert answer.rule == "pipeline_health"
    assert answer.confidence == TEMPLATE_CONFIDENCE
    assert "**3 leads**" in answer.text
    assert "58/100" in answer.text
    assert "**Health Score: Moderate**" in answer.text


def test_score_distribution_bars_scale_with_counts(stats):
    answer = TemplateFallbackEngine().answer("score distribution please", stats)
    assert answer.rule == "score_distribution"
    assert "| Cool (26-50) | 0 | 0% | " + "." * 20 + " |" in answer.text
    assert "| Hot (76-100) | 1 | 33% | " + "#" * 7 + "." * 13 + " |" in answer.text


def test_empty_pipeline_distribution_draws_empty_bars():
    empty = PipelineStats.from_leads((), now=FIXED_NOW)
    answer = TemplateFallbackEngine().answer("score breakdown", empty)
    assert "#" not in answer.text
    assert answer.text.count("." * 20) == 4


def test_stale_leads_listed_with_idle_days(stats):
    answer = TemplateFallbackEngine().answer("who is stale?", stats)
    assert answer.rule == "stale_leads"
    assert "Ben Ortiz" in answer.text
    assert "29 days idle" in answer.text


def test_unmatched_request_gets_generic_answer(stats):
    answer = TemplateFallbackEngine().answer("tell me a joke", stats)
    assert answer.rule == "generic"
    assert answer.confidence == GENERIC_CONFIDENCE
    assert "Ada Park" in answer.text


def test_mode_gated_rules(stats):
    engine = TemplateFallbackEngine()
    assert engine.answer("write an email template", stats, AIMode.ANALYST).rule == "generic"
    assert (
        engine.answer("write an email template", stats, AIMode.CREATIVE).rule
        == "email_templates"
    )


def test_call_prep_names_the_lead(stats):
    answer = TemplateFallbackEngine().answer("Prepare a call for Ada Park", stats)
    assert answer.rule == "call_prep"
    assert "Call Prep Sheet: Ada Park" in answer.text


@pytest.mark.parametrize("mode", list(AIMode))
@pytest.mark.parametrize("signal", ["", "score breakdown", "weekly summary", "anything"])
def test_answers_are_never_empty(mode, signal):
    stats = PipelineStats.from_leads((), now=FIXED_NOW)
    answer = TemplateFallbackEngine().answer(signal, stats, mode)
    assert answer.text.strip()


def test_answers_are_deterministic(stats):
    engine = TemplateFallbackEngine()
    first = engine.answer("prioritize my week", stats, AIMode.STRATEGIST)
    assert engine.answer("prioritize my week", stats, AIMode.STRATEGIST) == first
    assert first.rule == "prioritization"


def test_mode_framing():
    assert frame_for_mode("Plan.", AIMode.ANALYST) == "Plan."
    assert frame_for_mode("Plan.", AIMode.STRATEGIST).endswith(
        "**Next Step:** Want me to break this into a day-by-day action plan?"
    )
    assert frame_for_mode("Plan. **Next Step:** go", AIMode.STRATEGIST) == "Plan. **Next Step:** go"
    assert frame_for_mode("Plan.", AIMode.COACH).startswith("**Coach's Take:** Plan.")
    assert "personalize it for a specific lead?" in frame_for_mode("Plan.", AIMode.CREATIVE)


def test_custom_rules_fall_through_to_last(stats):
    never = FallbackRule("never", lambda s, m, st: False, lambda s, m, st: "unused")
    last = FallbackRule("last", lambda s, m, st: False, lambda s, m, st: "default reply")
    answer = TemplateFallbackEngine((never, last)).answer("hello", stats)
    assert answer.text == "default reply"
    assert answer.rule == "last"
    assert answer.confidence == GENERIC_CONFIDENCE


def test_engine_needs_rules():
    with pytest.raises(ValueError):
        TemplateFallbackEngine(())
