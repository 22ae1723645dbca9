"""Pure prompt assembly: placeholder substitution plus ordered context blocks.

Nothing here performs I/O or mutates its inputs. The same template,
substitutions and blocks always produce the same prompt text.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping, Sequence
import dataclasses
from enum import IntEnum
import re

from aura_engine.constants import HOT_LEAD_SCORE
from aura_engine.core.domain import AnsweredQuestion, BusinessProfile, Lead
from aura_engine.core.types import _require

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


class ContextKind(IntEnum):
    """Context block kinds; blocks are appended in ascending order."""

    PIPELINE = 10
    LEAD_KNOWLEDGE = 20
    CONVERSATION = 30
    EXTRA = 40
    BUSINESS_PROFILE = 50


@dataclasses.dataclass(frozen=True, slots=True)
class ContextBlock:
    """An optional section appended after the rendered template."""

    kind: ContextKind
    lines: tuple[str, ...]
    title: str | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.lines, tuple),
            message="must be a tuple[str, ...]",
            field_name="lines",
            exc=TypeError,
        )

    @property
    def is_empty(self) -> bool:
        return not any(line.strip() for line in self.lines)

    def render(self) -> str:
        if self.is_empty:
            return ""
        body = "\n".join(self.lines)
        return f"\n\n{self.title}:\n{body}" if self.title else f"\n\n{body}"


def render_template(
    template: str,
    substitutions: Mapping[str, str],
    replace_all: Collection[str] = (),
) -> str:
    """Replace ``{{key}}`` placeholders whose key has a substitution.

    Each key is replaced at its first occurrence only; later occurrences stay
    verbatim unless the key is listed in ``replace_all``. Substitution is a
    single pass: inserted values are never re-scanned, and placeholders
    without a substitution are left verbatim.
    """
    used: set[str] = set()

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in substitutions or (key in used and key not in replace_all):
            return match.group(0)
        used.add(key)
        return substitutions[key]

    return _PLACEHOLDER.sub(_replace, template)


def render_blocks(context_blocks: Iterable[ContextBlock]) -> str:
    """Render non-empty blocks in kind order (stable within a kind)."""
    ordered = sorted(context_blocks, key=lambda b: b.kind)
    return "".join(block.render() for block in ordered)


def build(
    template: str,
    substitutions: Mapping[str, str],
    context_blocks: Sequence[ContextBlock] = (),
    replace_all: Collection[str] = (),
) -> str:
    """Assemble the final prompt text."""
    return render_template(template, substitutions, replace_all) + render_blocks(context_blocks)


# --- Block factories ---


def business_context_block(profile: BusinessProfile | None) -> ContextBlock:
    """The caller's business profile as labelled lines; empty when absent."""
    if profile is None:
        return ContextBlock(ContextKind.BUSINESS_PROFILE, ())
    lines: list[str] = []

    def add(label: str, value: str | None) -> None:
        if value:
            lines.append(f"{label}: {value}")

    add("Company", profile.company_name)
    add("Industry", profile.industry)
    add("Website", profile.company_website)
    add("Products/Services", profile.products_services)
    add("Value Proposition", profile.value_prop)
    add("Target Audience", profile.target_audience)
    add("Pricing Model", profile.pricing_model)
    add("Sales Approach", profile.sales_approach)
    add("Business Description", profile.business_description)
    add("Phone", profile.phone)
    add("Contact Email", profile.business_email)
    add("Address", profile.address)
    socials = [f"{k}: {v}" for k, v in profile.social_links.items() if v]
    add("Social Media", ", ".join(socials))
    add(
        "Services",
        "; ".join(
            s.name + (f" - {s.description}" if s.description else "")
            for s in profile.services
        ),
    )
    add(
        "Pricing",
        "; ".join(
            f"{t.name} {t.price}"
            + (f" ({', '.join(t.features[:3])})" if t.features else "")
            for t in profile.pricing_tiers
        ),
    )
    add("Competitive Advantage", profile.competitive_advantage)
    add("Brand Tone", profile.content_tone)
    add("USPs", ", ".join(profile.unique_selling_points))
    return ContextBlock(
        ContextKind.BUSINESS_PROFILE, tuple(lines), title="YOUR BUSINESS CONTEXT"
    )


def extra_context_block(text: str | None) -> ContextBlock:
    return ContextBlock(ContextKind.EXTRA, (text,) if text else ())


def answered_questions_block(answers: Sequence[AnsweredQuestion]) -> ContextBlock:
    lines = tuple(
        f"- Q: {qa.question}\n  A: {qa.answer} (field: {qa.field})" for qa in answers
    )
    return ContextBlock(ContextKind.CONVERSATION, lines, title="ALREADY ANSWERED")


# --- Lead and pipeline context helpers ---


def lead_sequence_line(lead: Lead) -> str:
    """One audience line for sequence prompts, with knowledge-base links."""
    line = (
        f"- {lead.name} at {lead.company} (Score: {lead.score}, "
        f"Status: {lead.status.value}, Insights: {lead.insights})"
    )
    kb = lead.knowledge_base
    if kb is not None:
        parts = []
        if kb.website:
            parts.append(f"Website: {kb.website}")
        if kb.linkedin:
            parts.append(f"LinkedIn: {kb.linkedin}")
        if kb.extra_notes:
            parts.append(f"Notes: {kb.extra_notes}")
        if parts:
            line += f"\n  Knowledge: {', '.join(parts)}"
    return line


def lead_roster_block(leads: Sequence[Lead], limit: int) -> ContextBlock:
    """Top leads with insights, links and notes, for advisory prompts."""
    entries = []
    for lead in leads[:limit]:
        parts = [f"- {lead.name} ({lead.company}) - Score: {lead.score}, Status: {lead.status.value}"]
        if lead.insights:
            parts.append(f"  Insights: {lead.insights}")
        kb = lead.knowledge_base
        if kb is not None:
            links = [f"{k}: {v}" for k, v in kb.links().items()]
            if links:
                parts.append(f"  Links: {', '.join(links)}")
            if kb.extra_notes:
                parts.append(f"  Notes: {kb.extra_notes}")
        entries.append("\n".join(parts))
    lines = tuple(entries) or ("No leads in pipeline.",)
    return ContextBlock(ContextKind.LEAD_KNOWLEDGE, lines, title="TOP LEADS")


def status_breakdown(leads: Iterable[Lead]) -> dict[str, int]:
    """Lead counts per status, in order of first appearance."""
    counts: dict[str, int] = {}
    for lead in leads:
        counts[lead.status.value] = counts.get(lead.status.value, 0) + 1
    return counts


def format_breakdown(breakdown: Mapping[str, int]) -> str:
    return ", ".join(f"{k}: {v}" for k, v in breakdown.items())


def average_score(leads: Sequence[Lead]) -> int:
    if not leads:
        return 0
    return round(sum(lead.score for lead in leads) / len(leads))


def pipeline_stats_block(leads: Sequence[Lead]) -> ContextBlock:
    hot = sum(1 for lead in leads if lead.score > HOT_LEAD_SCORE)
    lines = (
        f"- Total Leads: {len(leads)}",
        f"- Average Score: {average_score(leads)}/100",
        f"- Hot Leads ({HOT_LEAD_SCORE}+): {hot}",
        f"- Status Breakdown: {format_breakdown(status_breakdown(leads))}",
    )
    return ContextBlock(ContextKind.PIPELINE, lines, title="PIPELINE STATS")
