"""Deterministic, network-free answers for the command center.

``TemplateFallbackEngine`` matches normalized keyword signals in the user's
request against an ordered rule table and renders a reply purely from
``PipelineStats``. The last rule always matches, so every request gets a
non-empty answer.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import dataclasses
from datetime import UTC, datetime, timedelta
import logging

from aura_engine.constants import (
    GENERIC_CONFIDENCE,
    HOT_LEAD_SCORE,
    RECENT_WITHIN_DAYS,
    STALE_AFTER_DAYS,
    TEMPLATE_CONFIDENCE,
)
from aura_engine.core.domain import AIMode, Lead, LeadStatus

log = logging.getLogger(__name__)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=UTC)


def _pct(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


@dataclasses.dataclass(frozen=True, slots=True)
class ScoreBuckets:
    hot: int = 0  # 76-100
    warm: int = 0  # 51-75
    cool: int = 0  # 26-50
    cold: int = 0  # 0-25


@dataclasses.dataclass(frozen=True, slots=True)
class StaleLead:
    lead: Lead
    days_idle: int


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineStats:
    """Aggregates of a lead list; leads are kept ordered by score."""

    leads: tuple[Lead, ...] = ()
    total: int = 0
    avg_score: int = 0
    hot: int = 0
    qualified: int = 0
    new_count: int = 0
    conversion_rate: int = 0
    status_breakdown: dict[str, int] = dataclasses.field(default_factory=dict)
    buckets: ScoreBuckets = ScoreBuckets()
    stale: tuple[StaleLead, ...] = ()
    recent: tuple[Lead, ...] = ()

    @classmethod
    def from_leads(cls, leads: Sequence[Lead], now: datetime | None = None) -> PipelineStats:
        now = _aware(now or datetime.now(UTC))
        ordered = tuple(sorted(leads, key=lambda lead: lead.score, reverse=True))
        total = len(ordered)
        breakdown: dict[str, int] = {}
        for lead in ordered:
            breakdown[lead.status.value] = breakdown.get(lead.status.value, 0) + 1
        qualified = breakdown.get(LeadStatus.QUALIFIED.value, 0)

        stale: list[StaleLead] = []
        recent: list[Lead] = []
        for lead in ordered:
            if lead.created_at is None:
                continue
            age = now - _aware(lead.created_at)
            if age.days > STALE_AFTER_DAYS and lead.status is not LeadStatus.QUALIFIED:
                stale.append(StaleLead(lead, age.days))
            if age < timedelta(days=RECENT_WITHIN_DAYS):
                recent.append(lead)

        scores = [lead.score for lead in ordered]
        return cls(
            leads=ordered,
            total=total,
            avg_score=round(sum(scores) / total) if total else 0,
            hot=sum(1 for s in scores if s > HOT_LEAD_SCORE),
            qualified=qualified,
            new_count=breakdown.get(LeadStatus.NEW.value, 0),
            conversion_rate=_pct(qualified, total),
            status_breakdown=breakdown,
            buckets=ScoreBuckets(
                hot=sum(1 for s in scores if s > 75),
                warm=sum(1 for s in scores if 50 < s <= 75),
                cool=sum(1 for s in scores if 25 < s <= 50),
                cold=sum(1 for s in scores if s <= 25),
            ),
            stale=tuple(stale),
            recent=tuple(recent),
        )

    @property
    def top_lead(self) -> Lead | None:
        return self.leads[0] if self.leads else None

    def scoring(self, low: int, high: int = 100) -> list[Lead]:
        """Leads with ``low < score <= high``."""
        return [lead for lead in self.leads if low < lead.score <= high]


@dataclasses.dataclass(frozen=True, slots=True)
class FallbackAnswer:
    text: str
    confidence: int
    rule: str


# --- Mode framing ---


def frame_for_mode(text: str, mode: AIMode) -> str:
    """Wrap a reply in the persona's closing line or prefix."""
    match mode:
        case AIMode.STRATEGIST:
            if "Next Step" in text:
                return text
            return text + "\n\n**Next Step:** Want me to break this into a day-by-day action plan?"
        case AIMode.COACH:
            prefix = "" if text.startswith("**Coach") else "**Coach's Take:** "
            tip = (
                "\n\n**Pro Tip:** Focus on progress, not perfection. "
                "Small consistent actions beat big sporadic ones."
            )
            return prefix + text + tip
        case AIMode.CREATIVE:
            return text + (
                "\n\nWant me to refine this, try a different tone, "
                "or personalize it for a specific lead?"
            )
        case _:
            return text


# --- Programmatic insights ---


def _insights(stats: PipelineStats) -> list[tuple[str, str]]:
    """Short (title, description) observations, most important first."""
    if not stats.total:
        return []
    out: list[tuple[str, str]] = []
    hot = stats.scoring(HOT_LEAD_SCORE)
    if hot:
        names = ", ".join(lead.name for lead in hot[:3])
        out.append(
            (
                f"{_pct(len(hot), stats.total)}% of leads are high-intent",
                f"{len(hot)} lead(s) scored above {HOT_LEAD_SCORE}. Prioritize outreach "
                f"to {names} for fastest conversion.",
            )
        )
    cold = [lead for lead in stats.leads if lead.score < 40]
    if len(cold) > stats.total * 0.3:
        out.append(
            (
                "High ratio of low-scoring leads detected",
                f"{len(cold)} leads score below 40. Enrich their profiles or remove "
                "stale entries to improve pipeline quality.",
            )
        )
    if stats.new_count > stats.total * 0.5:
        out.append(
            (
                f"{_pct(stats.new_count, stats.total)}% of leads haven't been contacted",
                f'{stats.new_count} leads are still in "New" status. Batch-generate '
                "outreach content to accelerate pipeline velocity.",
            )
        )
    if stats.qualified:
        verdict = (
            "Strong pipeline health."
            if stats.conversion_rate > 30
            else "Consider refining lead sourcing criteria to improve quality."
        )
        out.append(
            (
                f"Current qualification rate: {stats.conversion_rate}%",
                f"{stats.qualified} out of {stats.total} leads are qualified. {verdict}",
            )
        )
    return out[:5]


# --- Rules ---

type Matcher = Callable[[str, AIMode, PipelineStats], bool]
type Renderer = Callable[[str, AIMode, PipelineStats], str]


@dataclasses.dataclass(frozen=True, slots=True)
class FallbackRule:
    name: str
    matches: Matcher
    render: Renderer
    confidence: int = TEMPLATE_CONFIDENCE


def _any(signal: str, *needles: str) -> bool:
    return any(needle in signal for needle in needles)


def _bar(count: int, total: int) -> str:
    filled = max(1, round(count / total * 20)) if count > 0 else 0
    return "#" * filled + "." * (20 - filled)


def _score_distribution(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    b = stats.buckets
    total = stats.total or 1
    rows = [
        ("Hot (76-100)", b.hot),
        ("Warm (51-75)", b.warm),
        ("Cool (26-50)", b.cool),
        ("Cold (0-25)", b.cold),
    ]
    table = "\n".join(
        f"| {label} | {count} | {_pct(count, total)}% | {_bar(count, total)} |"
        for label, count in rows
    )
    median = stats.leads[len(stats.leads) // 2].score if stats.leads else 0
    if b.hot > b.warm:
        verdict = "Great pipeline quality: most leads are hot!"
    elif b.warm > b.hot:
        verdict = "Healthy pipeline with room to nurture warm leads into hot."
    else:
        verdict = "Pipeline needs attention: focus on enriching lead data."
    return (
        "**Lead Score Distribution**\n\n| Bucket | Count | % | Visual |\n"
        f"|--------|-------|---|--------|\n{table}\n\n"
        f"**Average Score:** {stats.avg_score}/100\n**Median Score:** {median}\n\n{verdict}"
    )


def _company_clusters(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    groups: dict[str, list[Lead]] = {}
    for lead in stats.leads:
        groups.setdefault(lead.company.strip(), []).append(lead)
    clusters = sorted(
        ((c, ls) for c, ls in groups.items() if len(ls) > 1), key=lambda item: -len(item[1])
    )
    if not clusters:
        return (
            "**No company clusters found.** Each lead is from a unique company. "
            "Consider expanding your reach within existing target accounts."
        )
    sections = []
    for i, (company, members) in enumerate(clusters[:5], start=1):
        avg = round(sum(m.score for m in members) / len(members))
        people = "\n".join(
            f"   - {m.name}: Score {m.score}, {m.status.value}" for m in members
        )
        sections.append(f"**{i}. {company}** ({len(members)} contacts, avg score {avg})\n{people}")
    return (
        f"**Company Clusters**\n\n{len(clusters)} companies have multiple contacts in "
        "your pipeline:\n\n" + "\n\n".join(sections) + "\n\n**Multi-threading Strategy:** "
        "Coordinate outreach across contacts at the same company."
    )


def _pipeline_health(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    if stats.avg_score > 65:
        health = "Strong"
    elif stats.avg_score > 45:
        health = "Moderate"
    else:
        health = "Needs Attention"
    insights = _insights(stats)
    top = f"**Top Insight:** {insights[0][0]} - {insights[0][1]}\n\n" if insights else ""
    action = (
        f"**Action Required:** {stats.new_count} leads haven't been contacted. "
        "Would you like me to suggest outreach priorities?"
        if stats.new_count
        else "All leads have been contacted. Focus on moving Contacted leads to Qualified."
    )
    return (
        f"**Pipeline Health Report**\n\nYour pipeline has **{stats.total} leads** with an "
        f"average AI score of **{stats.avg_score}/100**.\n\n**Distribution:**\n"
        f"- Hot leads ({HOT_LEAD_SCORE}+): **{stats.hot}** ({_pct(stats.hot, stats.total)}%)\n"
        f"- Qualified: **{stats.qualified}** ({stats.conversion_rate}% conversion)\n"
        f"- New/untouched: **{stats.new_count}** ({_pct(stats.new_count, stats.total)}%)\n\n"
        f"**Health Score: {health}**\n\n{top}{action}"
    )


def _hot_leads(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    hot = stats.scoring(HOT_LEAD_SCORE)
    if not hot:
        top = stats.top_lead
        return (
            f"No hot leads (score {HOT_LEAD_SCORE}+) detected yet. Your highest-scoring lead "
            f"is **{top.name if top else 'N/A'}** at {top.score if top else 0}. Consider "
            "enriching lead data or adjusting scoring weights."
        )
    actions = "\n\n".join(
        f"**{i}. {lead.name}** ({lead.company}), Score: {lead.score}\n"
        f"   Status: {lead.status.value} | {lead.insights or 'High-intent prospect'}"
        for i, lead in enumerate(hot[:5], start=1)
    )
    return (
        f"**Hot Lead Action Plan**\n\nYou have **{len(hot)} hot leads** that need attention "
        f"today:\n\n{actions}\n\n**Recommended Sequence:**\n"
        f"1. Call {hot[0].name} first (highest priority)\n"
        "2. Send personalized content to remaining hot leads\n"
        "3. Schedule demos for qualified prospects\n\n"
        "Want me to generate outreach content for any of these?"
    )


def _stale_leads(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    if not stats.stale:
        return (
            f"**No stale leads detected!** All leads have been active within the last "
            f"{STALE_AFTER_DAYS} days. Great pipeline management."
        )
    entries = "\n\n".join(
        f"**{i}. {s.lead.name}** ({s.lead.company})\n"
        f"   Score: {s.lead.score} | Status: {s.lead.status.value} | {s.days_idle} days idle\n"
        f"   -> {'Send case study or demo invite' if s.lead.score > 60 else 'Try value-first re-engagement email'}"
        for i, s in enumerate(stats.stale[:5], start=1)
    )
    advice = (
        "Consider a batch re-engagement campaign."
        if len(stats.stale) > 3
        else "Personalized follow-ups will be most effective."
    )
    return (
        f"**Stale Lead Report**\n\n{len(stats.stale)} lead(s) need re-engagement "
        f"(inactive {STALE_AFTER_DAYS}+ days):\n\n{entries}\n\n**Recommendation:** {advice}"
    )


def _best_time(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    return (
        "**Optimal Outreach Timing**\n\nBased on engagement patterns and industry "
        "benchmarks:\n\n**Best Days:** Tuesday & Thursday\n**Best Time Blocks:**\n"
        "- **9:00-11:00 AM**: highest open rates\n- **1:00-3:00 PM**: best for LinkedIn outreach\n"
        "- **4:00-5:00 PM**: good for follow-ups\n- **Before 8 AM / After 6 PM**: low engagement\n\n"
        "**Action:** Schedule your next batch of outreach for Tuesday at 10 AM."
    )


def _weekly_summary(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    highlights = []
    if stats.recent:
        avg = round(sum(lead.score for lead in stats.recent) / len(stats.recent))
        highlights.append(f"- {len(stats.recent)} new leads this week with avg score of {avg}")
    else:
        highlights.append("- No new leads added this week")
    highlights.append(
        f"- {stats.hot} hot leads ready for outreach"
        if stats.hot
        else "- No hot leads yet: focus on lead enrichment"
    )
    if stats.qualified:
        highlights.append(f"- {stats.qualified} leads are qualified and in conversion path")
    priority = (
        f"Contact {stats.new_count} untouched leads"
        if stats.new_count
        else "Follow up with contacted leads"
    )
    return (
        "**Weekly Activity Summary**\n\n**This Week's Metrics:**\n"
        f"- New leads added: **{len(stats.recent)}**\n- Total pipeline: **{stats.total}** leads\n"
        f"- Hot leads: **{stats.hot}** ({_pct(stats.hot, stats.total)}%)\n"
        f"- Qualification rate: **{stats.conversion_rate}%**\n"
        f"- Average AI score: **{stats.avg_score}/100**\n\n**Highlights:**\n"
        + "\n".join(highlights)
        + f"\n\n**Next Week Priority:**\n{priority}"
    )


def _email_templates(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    top = stats.scoring(60)[:3]
    if not top:
        return (
            "**Email Templates**\n\nNo high-scoring leads found to personalize. Here's a "
            "generic template:\n\n**Subject:** Quick question about [Company]\n\n"
            "Hi [First Name],\n\nI help companies like yours [value prop]. Would you be open "
            "to a quick 15-min chat?\n\nBest,\n[Your Name]"
        )
    drafts = []
    for i, lead in enumerate(top, start=1):
        momentum = "scaling rapidly" if lead.score > HOT_LEAD_SCORE else "making great strides"
        help_with = (
            "accelerate pipeline and close deals faster"
            if lead.score > 70
            else "build a more predictable revenue engine"
        )
        drafts.append(
            f"**{i}. Email for {lead.name} ({lead.company}), Score {lead.score}**\n\n"
            f"Subject: Quick question about {lead.company}'s growth\n\n"
            f"Hi {lead.first_name or 'there'},\n\nI noticed {lead.company} is {momentum} in "
            f"your space. I work with similar companies to help them {help_with}.\n\n"
            "Would you be open to a quick 15-min chat this week?\n\nBest,\n[Your Name]"
        )
    return "**Cold Outreach Templates**\n\nHere are personalized emails for your top leads:\n\n" + (
        "\n\n---\n\n".join(drafts)
    )


def _linkedin_messages(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    top = stats.scoring(60)[:3]
    if not top:
        return "**LinkedIn Connection Messages**\n\nAdd some leads first so I can personalize messages for you."
    msgs = "\n\n---\n\n".join(
        f"**{i}. LinkedIn for {lead.name} ({lead.company})**\n\n"
        f"Hi {lead.first_name or 'there'}, I came across your work at {lead.company} and was "
        f"impressed by what you're building. I work with "
        f"{'high-growth' if lead.score > HOT_LEAD_SCORE else 'ambitious'} teams in your space "
        "and thought it'd be great to connect. No pitch, just swapping notes. Cheers!"
        for i, lead in enumerate(top, start=1)
    )
    return f"**LinkedIn Connection Messages**\n\n{msgs}"


def _follow_up_sequence(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    return (
        "**3-Step Follow-up Sequence**\n\n**Email 1, Day 0 (Initial Touch)**\n"
        "Subject: Quick thought about [Company]\nBody: Short, value-first message that "
        "references something specific about their company. End with a soft CTA.\n\n"
        "**Email 2, Day 3 (Value Add)**\nSubject: Re: Quick thought about [Company]\n"
        "Body: Share a relevant case study, stat or resource. No hard ask.\n\n"
        "**Email 3, Day 7 (Breakup)**\nSubject: Should I close the loop?\nBody: Acknowledge "
        "they're busy and offer to reconnect later.\n\n**Timing:** Send Email 1 on Tuesday "
        "10am, Email 2 on Friday 1pm, Email 3 on the following Tuesday 10am."
    )


def _objection_handling(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    return (
        "**Objection Handling Playbook**\n\n"
        "**\"We're not interested right now\"**\n-> \"Understood. Is that because timing is "
        "off, or because this isn't a priority? Happy to reconnect when it makes sense.\"\n\n"
        "**\"We already use [competitor]\"**\n-> \"Great choice! Many of our clients switched "
        "because of [differentiator]. Would a quick side-by-side help?\"\n\n"
        "**\"Send me more info\"**\n-> \"Of course. What's your biggest challenge with "
        "[topic] right now, so I send the most relevant material?\"\n\n"
        "**\"It's too expensive\"**\n-> \"Our clients typically see [ROI metric] within "
        "[timeframe]. Would an ROI breakdown based on your numbers help?\"\n\n"
        "**\"I need to talk to my team\"**\n-> \"Would a one-pager your team can review help? "
        "I can also join a quick call to answer questions.\""
    )


def _grade(avg_score: int) -> tuple[str, str]:
    if avg_score > 65:
        return "A", "Excellent work. Stay consistent."
    if avg_score > 50:
        return "B", "Good foundation. Small tweaks will make a big difference."
    if avg_score > 35:
        return "C", "Room for growth. Focus on the basics: contact speed and lead quality."
    return "D", "Room for growth. Focus on the basics: contact speed and lead quality."


def _pipeline_review(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    hot_pct = _pct(stats.hot, stats.total)
    goods, fixes = [], []
    if hot_pct > 20:
        goods.append(f"Your hot lead percentage ({hot_pct}%) is above average")
    if stats.qualified:
        goods.append(f"You have {stats.qualified} qualified leads in the pipeline")
    if stats.avg_score > 55:
        goods.append(f"Average score of {stats.avg_score} shows a healthy pipeline")
    if not goods:
        goods.append("You have leads in your pipeline: that's the first step!")
    if stats.new_count > 3:
        fixes.append(f"{stats.new_count} leads are untouched: contact within 48hrs")
    if stats.avg_score < 50:
        fixes.append(f"Average score of {stats.avg_score} is below target. Enrich lead data or tighten your ICP")
    if hot_pct < 15:
        fixes.append(f"Only {hot_pct}% hot leads: nurture warm leads with targeted content")
    if not fixes:
        fixes.append("Keep up the momentum and track your conversion rates weekly")
    grade, verdict = _grade(stats.avg_score)
    return (
        "**Pipeline Review**\n\n**What you're doing well:**\n"
        + "\n".join(f"- {g}" for g in goods)
        + "\n\n**Where to improve:**\n"
        + "\n".join(f"- {f}" for f in fixes)
        + f"\n\n**Overall Grade: {grade}** ({verdict})"
    )


def _mistakes(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    return (
        "**Top B2B Pipeline Mistakes to Avoid**\n\n"
        "**1. Slow Response Time**\nEvery hour you wait, the odds of conversion drop sharply.\n\n"
        "**2. No Follow-up System**\nMost sales need 5+ touchpoints. Build a consistent sequence.\n\n"
        "**3. Treating All Leads the Same**\nA hot lead needs a different approach than a cold one.\n\n"
        "**4. Ignoring Lead Scoring**\nTrust the scores and prioritize accordingly.\n\n"
        "**5. Not Qualifying Early**\nQualify or disqualify fast to protect your time.\n\n"
        "**6. Skipping Discovery**\nAsk questions first, present solutions second.\n\n"
        "**7. No Pipeline Hygiene**\nArchive cold leads and keep statuses current every month."
    )


def _wants_call_prep(signal: str) -> bool:
    return (
        "call prep" in signal
        or "call script" in signal
        or ("call" in signal and _any(signal, "prep", "prepare"))
    )


def _call_prep(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    lead = next((ld for ld in stats.leads if ld.name and ld.name.lower() in signal), None)
    if lead is None:
        top = stats.scoring(60)[:3]
        listing = (
            "\n".join(
                f"**{i}. {ld.name}** ({ld.company}), Score: {ld.score}, Status: {ld.status.value}"
                for i, ld in enumerate(top, start=1)
            )
            or "No high-scoring leads available right now."
        )
        example = top[0].name if top else "[lead name]"
        return (
            "**Call Prep Assistant**\n\nTell me which lead you'd like to prep for and I'll "
            f"build a full call sheet.\n\n**Your Top Leads Ready for a Call:**\n{listing}\n\n"
            f'**Try saying:** "Prepare a call script for {example}"'
        )
    kb = lead.knowledge_base
    industry = (kb.industry if kb else None) or "their industry"
    points = (kb.talking_points if kb else ()) or (
        "Ask about their current priorities and challenges",
        "Discuss how your solution addresses their pain points",
        "Share a relevant success story from a similar company",
    )
    risks = (kb.risk_factors if kb else ()) or (
        "No specific risk factors identified: proceed with standard discovery",
    )
    angle = (kb.outreach_angle if kb else None) or (
        f"Value-first approach: lead with how you help companies like {lead.company}"
    )
    if lead.score > HOT_LEAD_SCORE:
        temperature = "Hot: high intent, move fast"
    elif lead.score > 55:
        temperature = "Warm: interested but needs nurturing"
    else:
        temperature = "Cool: requires more discovery"
    title_row = f"| Title | {kb.title} |\n" if kb and kb.title else ""
    first = lead.first_name or "there"
    return (
        f"**Call Prep Sheet: {lead.name}**\n\n**Lead Summary**\n| Field | Details |\n"
        f"|-------|--------|\n| Name | {lead.name} |\n| Company | {lead.company} |\n"
        f"{title_row}| Industry | {industry} |\n| AI Score | {lead.score}/100 ({temperature}) |\n"
        f"| Status | {lead.status.value} |\n\n**Suggested Opener**\n\"Hi {first}, this is "
        f"[Your Name]. I've been looking into what {lead.company} is doing in {industry} "
        "and had a quick thought on how we might help. Do you have a couple of minutes?\"\n\n"
        "**Talking Points**\n" + "\n".join(f"- {p}" for p in points)
        + f"\n\n**Outreach Angle**\n{angle}\n\n**Risk Factors to Watch**\n"
        + "\n".join(f"- {r}" for r in risks)
        + "\n\n**Discovery Questions**\n"
        f"1. \"What's your biggest priority at {lead.company} this quarter?\"\n"
        f"2. \"How are you currently handling [relevant challenge for {industry}]?\"\n"
        "3. \"What would an ideal solution look like for your team?\"\n"
        "4. \"Who else would be involved in evaluating a solution like this?\"\n\n"
        f"**Close the Call**\n\"Thanks for your time, {first}. Can I send you a calendar "
        "invite for [day/time]?\""
    )


def _call_coaching(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    text = (
        "**Phone Call Coaching**\n\n**Before the Call**\n- Research the lead's company, role "
        "and recent news\n- Prepare 2-3 talking points specific to their situation\n"
        "- Set a clear objective: discovery, qualification or demo scheduling\n\n"
        "**Opening (First 30 Seconds)**\n\"Hi [First Name], this is [Your Name] from "
        "[Company]. I noticed [specific observation] and had a quick idea that might be "
        "relevant. Do you have two minutes?\"\n\n**Discovery**\n"
        "1. \"What's your biggest challenge with [topic] right now?\"\n"
        "2. \"What would success look like for you this quarter?\"\n\n"
        "**Closing**\n- Summarize what you discussed\n- Propose a specific next step\n"
        "- Confirm the next action before hanging up"
    )
    top = stats.top_lead
    if top is not None:
        text += (
            f"\n\n**Quick Action:** Want me to prepare a call script for **{top.name}** "
            f'({top.company}, score {top.score})? Just ask: "Prep a call for {top.name}"'
        )
    return text


def _prioritization(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    tiers = (
        (
            "Tier 1: Act Now",
            [ld for ld in stats.scoring(HOT_LEAD_SCORE) if ld.status is not LeadStatus.QUALIFIED],
            "Call or send personalized demo invite today",
        ),
        ("Tier 2: Nurture This Week", stats.scoring(55, HOT_LEAD_SCORE), "Send case study or value-add content"),
        ("Tier 3: Re-engage Next Week", stats.scoring(30, 55), "Add to email nurture sequence"),
        ("Tier 4: Low Priority", stats.scoring(-1, 30), "Batch outreach or archive if stale"),
    )
    sections = []
    for label, members, action in tiers:
        listing = (
            "\n".join(f"  - {ld.name} ({ld.company}): {ld.score}" for ld in members[:3])
            or "  No leads in this tier"
        )
        sections.append(f"**{label}** ({len(members)} leads)\n{listing}\n  -> **Action:** {action}")
    return (
        "**Lead Prioritization Matrix**\n\n" + "\n\n".join(sections)
        + "\n\n**Rule of thumb:** Spend 60% of your time on Tier 1, 25% on Tier 2, "
        "10% on Tier 3, and batch Tier 4."
    )


def _game_plan(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    hot = stats.scoring(HOT_LEAD_SCORE)[:3]
    warm = stats.scoring(55, HOT_LEAD_SCORE)[:3]
    fresh = [ld for ld in stats.leads if ld.status is LeadStatus.NEW][:2]
    tuesday = "\n".join(f"- Call/email {ld.name} ({ld.company}, score {ld.score})" for ld in hot) or (
        "- No hot leads: focus on warm leads"
    )
    wednesday = "\n".join(f"- Send case study to {ld.name} ({ld.company})" for ld in warm) or (
        "- Prepare content for next batch"
    )
    thursday = "\n".join(f"- First touch: {ld.name} ({ld.company}, score {ld.score})" for ld in fresh) or (
        "- All new leads contacted: follow up instead"
    )
    return (
        "**Weekly Action Plan**\n\n**Monday: Pipeline Review**\n- Update stale lead statuses\n"
        "- Block 2 hours for outreach\n\n"
        f"**Tuesday: High-Priority Outreach**\n{tuesday}\n\n"
        f"**Wednesday: Content & Nurture**\n{wednesday}\n\n"
        f"**Thursday: New Lead Response**\n{thursday}\n\n"
        "**Friday: Review & Prep**\n- Update pipeline statuses\n- Prep next week's priority list"
    )


_MODE_LABELS = {
    AIMode.ANALYST: "Analyst",
    AIMode.STRATEGIST: "Strategist",
    AIMode.COACH: "Coach",
    AIMode.CREATIVE: "Creative",
}

_MODE_COMMANDS = {
    AIMode.ANALYST: ("Pipeline Health", "Score Breakdown", "Company Clusters", "Weekly Summary"),
    AIMode.STRATEGIST: ("Hot Lead Actions", "Best Outreach Time", "Prioritize Pipeline", "Weekly Game Plan"),
    AIMode.COACH: ("Pipeline Review", "Follow-up Tips", "Call Coaching", "Improve Conversion"),
    AIMode.CREATIVE: ("Email Templates", "LinkedIn Messages", "Follow-up Sequences", "Value Propositions"),
}


def _generic(signal: str, mode: AIMode, stats: PipelineStats) -> str:
    label = _MODE_LABELS.get(mode, "AI")
    insights = _insights(stats)[:2]
    found = (
        "\n\n".join(f"**{i}. {t}**\n{d}" for i, (t, d) in enumerate(insights, start=1))
        or "No specific insights match your query."
    )
    top = stats.top_lead
    quick = (
        f"\n\n**Quick Stat:** Your top lead is **{top.name}** ({top.company}) with a "
        f"score of {top.score}."
        if top
        else ""
    )
    commands = "\n".join(f'- "{c}"' for c in _MODE_COMMANDS.get(mode, ()))
    return (
        f"I analyzed your request as your **{label}**. Here's what I found:\n\n{found}{quick}"
        f"\n\nTry these {label} commands:\n{commands}"
    )


def _in_mode(mode: AIMode, *needles: str) -> Matcher:
    return lambda signal, current, stats: current is mode and _any(signal, *needles)


def _keywords(*needles: str) -> Matcher:
    return lambda signal, current, stats: _any(signal, *needles)


DEFAULT_RULES: tuple[FallbackRule, ...] = (
    FallbackRule("score_distribution", _keywords("score breakdown", "distribution"), _score_distribution),
    FallbackRule(
        "company_clusters",
        lambda s, m, st: "company" in s and _any(s, "cluster", "multi"),
        _company_clusters,
    ),
    FallbackRule("pipeline_health", _keywords("pipeline health", "overview"), _pipeline_health),
    FallbackRule("hot_leads", _keywords("hot lead", "priority"), _hot_leads),
    FallbackRule("stale_leads", _keywords("stale", "re-engage", "inactive"), _stale_leads),
    FallbackRule("best_time", _keywords("best time", "outreach time"), _best_time),
    FallbackRule("weekly_summary", _keywords("weekly summary", "summary"), _weekly_summary),
    FallbackRule("email_templates", _in_mode(AIMode.CREATIVE, "email", "outreach", "template"), _email_templates),
    FallbackRule("linkedin_messages", _in_mode(AIMode.CREATIVE, "linkedin", "connection"), _linkedin_messages),
    FallbackRule("follow_up_sequence", _in_mode(AIMode.CREATIVE, "sequence", "follow"), _follow_up_sequence),
    FallbackRule("objection_handling", _in_mode(AIMode.CREATIVE, "objection", "response"), _objection_handling),
    FallbackRule(
        "pipeline_review",
        _in_mode(AIMode.COACH, "coach", "review", "doing right", "doing wrong"),
        _pipeline_review,
    ),
    FallbackRule("mistakes", _in_mode(AIMode.COACH, "mistake", "avoid"), _mistakes),
    FallbackRule("call_prep", lambda s, m, st: bool(st.leads) and _wants_call_prep(s), _call_prep),
    FallbackRule("call_coaching", _in_mode(AIMode.COACH, "call", "phone"), _call_coaching),
    FallbackRule("prioritization", _in_mode(AIMode.STRATEGIST, "prioritize", "focus"), _prioritization),
    FallbackRule(
        "game_plan",
        _in_mode(AIMode.STRATEGIST, "game plan", "day-by-day", "action plan"),
        _game_plan,
    ),
    FallbackRule("generic", lambda s, m, st: True, _generic, confidence=GENERIC_CONFIDENCE),
)


class TemplateFallbackEngine:
    """Ordered keyword rules over local pipeline statistics.

    Args:
        rules: Rule table, tried in order. The final rule must always match.
    """

    def __init__(self, rules: Sequence[FallbackRule] = DEFAULT_RULES) -> None:
        if not rules:
            raise ValueError("TemplateFallbackEngine needs at least one rule")
        self._rules = tuple(rules)

    def answer(
        self, topic_signal: str, stats: PipelineStats, mode: AIMode = AIMode.ANALYST
    ) -> FallbackAnswer:
        signal = " ".join((topic_signal or "").lower().split())
        for rule in self._rules:
            if rule.matches(signal, mode, stats):
                log.debug("Fallback rule '%s' matched", rule.name)
                text = frame_for_mode(rule.render(signal, mode, stats), mode)
                return FallbackAnswer(text=text, confidence=rule.confidence, rule=rule.name)
        last = self._rules[-1]
        log.debug("No fallback rule matched; using '%s'", last.name)
        return FallbackAnswer(
            text=frame_for_mode(last.render(signal, mode, stats), mode),
            confidence=GENERIC_CONFIDENCE,
            rule=last.name,
        )

    def generate(
        self, topic_signal: str, stats: PipelineStats, mode: AIMode = AIMode.ANALYST
    ) -> str:
        return self.answer(topic_signal, stats, mode).text
