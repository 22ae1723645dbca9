"""Typed payload parsers, one per structured operation.

Each parser is pure and total: it accepts any reply text and returns a
(possibly empty) payload, setting a field only when its value was matched.
``parse_payload`` dispatches on ``OperationKind`` so every operation's
parser choice is declared in one exhaustive ``match``.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Any, assert_never

from aura_engine.constants import CADENCE_DAYS, DEFAULT_CADENCE_DAYS
from aura_engine.core.domain import EmailSequenceConfig
from aura_engine.core.payloads import (
    BusinessAnalysisResult,
    ContentSuggestion,
    EmailStep,
    FieldEstimate,
    FollowUpQuestion,
    GuestPostPitch,
    KnowledgeBaseFields,
    PersonalizedEmail,
    PipelineStrategyResult,
    SprintGoal,
)
from aura_engine.core.types import OperationKind
from aura_engine.pipeline.results.extraction import (
    BlockGrammar,
    DelimitedFieldGrammar,
    extract,
    extract_field,
    parse_json_with_repair,
    segment_prose,
    split_list,
)

log = logging.getLogger(__name__)

_NOT_FOUND = "not found"
_LEADING_INT = re.compile(r"-?\d+")
_LIST_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")
_SUBJECT_LINE = re.compile(r"SUBJECT:\s*(.+?)(?:\n|$)")
_BODY_REST = re.compile(r"BODY:\s*([\s\S]*?)$")

RESEARCH_GRAMMAR = DelimitedFieldGrammar(
    fields=(
        "TITLE",
        "INDUSTRY",
        "EMPLOYEE_COUNT",
        "LOCATION",
        "COMPANY_OVERVIEW",
        "TALKING_POINTS",
        "OUTREACH_ANGLE",
        "RISK_FACTORS",
        "MENTIONED_ON_WEBSITE",
        "RESEARCH_BRIEF",
    ),
    list_fields=frozenset({"TALKING_POINTS", "RISK_FACTORS"}),
)

EMAIL_GRAMMAR = BlockGrammar(
    start="===EMAIL_START===",
    end="===EMAIL_END===",
    fields=("STEP", "DELAY", "SUBJECT", "BODY"),
    required=("STEP", "SUBJECT", "BODY"),
    multiline=frozenset({"BODY"}),
)

SUGGESTION_GRAMMAR = BlockGrammar(
    start="===SUGGESTION===",
    end="===END_SUGGESTION===",
    fields=(
        "TYPE",
        "CATEGORY",
        "TITLE",
        "DESCRIPTION",
        "ORIGINAL_TEXT",
        "REPLACEMENT",
        "IMPACT_LABEL",
        "IMPACT_PERCENT",
    ),
    required=("TYPE", "TITLE", "REPLACEMENT"),
)


def _leading_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.search(value)
        if match:
            return int(match.group(0))
    return None


def _found(value: str | None) -> str | None:
    if value is None or value.strip().lower() == _NOT_FOUND:
        return None
    return value


# --- Lead research ---


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _research_from_json(data: Any) -> KnowledgeBaseFields:
    """Map the web-intelligence JSON schema onto knowledge-base fields."""
    if not isinstance(data, dict):
        return KnowledgeBaseFields()

    def section(source: dict[str, Any], name: str) -> dict[str, Any]:
        value = source.get(name)
        return value if isinstance(value, dict) else {}

    identity = section(data, "identity")
    industry = _text(section(data, "industry").get("primary_industry"))
    lead_ctx = section(data, "lead_context")
    hq = section(section(data, "locations"), "headquarters")

    parts = [_text(hq.get(k)) for k in ("city", "state_region", "country")]
    location = ", ".join(p for p in parts if p) or None

    def str_list(value: Any) -> tuple[str, ...]:
        if not isinstance(value, list):
            return ()
        return tuple(t for v in value if (t := _text(v)))

    brief: list[str] = []
    if name := _text(identity.get("business_name")):
        tagline = _text(identity.get("tagline"))
        brief.append(name + (f" - {tagline}" if tagline else ""))
    if long_description := _text(identity.get("long_description")):
        brief.append(long_description)
    if industry:
        brief.append(f"Industry: {industry}")

    return KnowledgeBaseFields(
        title=_text(lead_ctx.get("title")) or _text(identity.get("company_type")),
        industry=industry,
        location=location,
        company_overview=long_description or _text(identity.get("short_description")),
        talking_points=str_list(lead_ctx.get("talking_points")),
        outreach_angle=_text(lead_ctx.get("outreach_angle")),
        risk_factors=str_list(lead_ctx.get("risk_factors")),
        mentioned_on_website=_found(_text(lead_ctx.get("mentioned_on_website"))),
        research_brief="\n\n".join(brief) or None,
    )


def parse_lead_research(text: str) -> KnowledgeBaseFields:
    """Delimited fields first; the JSON research schema when none match."""
    fields = extract(text, RESEARCH_GRAMMAR)
    if fields:

        def scalar(name: str) -> str | None:
            value = fields.get(name)
            return _found(value) if isinstance(value, str) else None

        def items(name: str) -> tuple[str, ...]:
            value = fields.get(name)
            return tuple(v for v in value if _found(v)) if isinstance(value, tuple) else ()

        return KnowledgeBaseFields(
            title=scalar("TITLE"),
            industry=scalar("INDUSTRY"),
            employee_count=scalar("EMPLOYEE_COUNT"),
            location=scalar("LOCATION"),
            company_overview=scalar("COMPANY_OVERVIEW"),
            talking_points=items("TALKING_POINTS"),
            outreach_angle=scalar("OUTREACH_ANGLE"),
            risk_factors=items("RISK_FACTORS"),
            mentioned_on_website=scalar("MENTIONED_ON_WEBSITE"),
            research_brief=scalar("RESEARCH_BRIEF"),
        )
    return _research_from_json(parse_json_with_repair(text))


# --- Email sequences ---


def parse_email_sequence(text: str, config: EmailSequenceConfig) -> tuple[EmailStep, ...]:
    """Email blocks in reply order, or heuristic sections when none parse.

    Heuristic steps are capped at ``config.sequence_length`` and spaced by
    the configured cadence.
    """
    steps = []
    for record in extract(text, EMAIL_GRAMMAR):
        number = _leading_int(record["STEP"])
        if number is None:
            continue
        steps.append(
            EmailStep(
                id=f"step-{number}",
                step_number=number,
                subject=record["SUBJECT"],
                body=record["BODY"],
                delay=record.get("DELAY") or f"Day {number}",
                tone=config.tone,
            )
        )
    if steps:
        return tuple(steps)

    sections = segment_prose(text, config.sequence_length)
    if sections:
        log.info("No email blocks found; segmented prose into %d step(s)", len(sections))
    cadence = CADENCE_DAYS.get(config.cadence, DEFAULT_CADENCE_DAYS)
    return tuple(
        EmailStep(
            id=f"step-{i + 1}",
            step_number=i + 1,
            subject=f"Email {i + 1} - Follow Up",
            body=body,
            delay=f"Day {1 + i * cadence}",
            tone=config.tone,
        )
        for i, body in enumerate(sections)
    )


# --- Content suggestions ---

SUGGESTION_TYPES = frozenset({"word", "metric", "personalization", "structure", "cta"})
SUGGESTION_CATEGORIES = frozenset({"high", "medium", "style"})


def parse_content_suggestions(text: str) -> tuple[ContentSuggestion, ...]:
    """Suggestion blocks with a known type, a title and a replacement."""
    out = []
    for record in extract(text, SUGGESTION_GRAMMAR):
        kind = record["TYPE"].strip().lower()
        if kind not in SUGGESTION_TYPES:
            log.debug("Skipping suggestion with unknown type %r", kind)
            continue
        category = record.get("CATEGORY", "").strip().lower()
        out.append(
            ContentSuggestion(
                type=kind,
                title=record["TITLE"],
                replacement=record["REPLACEMENT"],
                category=category if category in SUGGESTION_CATEGORIES else None,
                description=record.get("DESCRIPTION"),
                original_text=record.get("ORIGINAL_TEXT"),
                impact_label=record.get("IMPACT_LABEL"),
                impact_percent=_leading_int(record.get("IMPACT_PERCENT")),
            )
        )
    return tuple(out)


# --- Pipeline strategy ---


def _sprint_goals(raw: str | None) -> tuple[SprintGoal, ...]:
    if not raw:
        return ()
    goals = []
    for line in raw.splitlines():
        parts = [p.strip() for p in line.split("|")]
        if len(parts) < 5 or not parts[0]:
            continue
        goals.append(
            SprintGoal(
                title=parts[0],
                target=_leading_int(parts[1]),
                current=_leading_int(parts[2]),
                unit=parts[3],
                deadline=parts[4],
            )
        )
    return tuple(goals)


def parse_pipeline_strategy(text: str) -> PipelineStrategyResult:
    return PipelineStrategyResult(
        recommendations=split_list(extract_field(text, "RECOMMENDATIONS")),
        sprint_goals=_sprint_goals(extract_field(text, "SPRINT_GOALS")),
        risks=split_list(extract_field(text, "RISKS")),
        priority_actions=split_list(extract_field(text, "PRIORITY_ACTIONS")),
    )


# --- Business analysis and follow-up questions ---

_ANALYSIS_META_KEYS = frozenset({"socialLinks", "followUpQuestions"})


def _confidence(value: Any) -> int:
    number = _leading_int(value)
    if number is None:
        return 0
    return max(0, min(100, number))


def parse_business_analysis(text: str) -> BusinessAnalysisResult | None:
    """Per-field estimates; ``None`` when the reply holds no JSON object."""
    data = parse_json_with_repair(text)
    if not isinstance(data, dict):
        return None

    fields: dict[str, FieldEstimate] = {}
    for key, raw in data.items():
        if key in _ANALYSIS_META_KEYS or raw is None:
            continue
        if isinstance(raw, dict):
            if "value" not in raw or raw["value"] in (None, "", []):
                continue
            fields[key] = FieldEstimate(raw["value"], _confidence(raw.get("confidence")))
        elif raw not in ("", []):
            fields[key] = FieldEstimate(raw, 0)

    socials_raw = data.get("socialLinks")
    socials = (
        {str(k): str(v) for k, v in socials_raw.items() if isinstance(v, str) and v.strip()}
        if isinstance(socials_raw, dict)
        else {}
    )
    questions_raw = data.get("followUpQuestions")
    questions = (
        tuple(str(q).strip() for q in questions_raw if isinstance(q, str) and q.strip())
        if isinstance(questions_raw, list)
        else ()
    )
    return BusinessAnalysisResult(
        fields=fields, social_links=socials, follow_up_questions=questions
    )


def parse_follow_up_questions(text: str) -> tuple[FollowUpQuestion, ...]:
    data = parse_json_with_repair(text)
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        return ()
    out = []
    for item in data:
        if not isinstance(item, dict):
            continue
        field, question = item.get("field"), item.get("question")
        if isinstance(field, str) and field and isinstance(question, str) and question:
            placeholder = item.get("placeholder")
            out.append(
                FollowUpQuestion(
                    field=field,
                    question=question,
                    placeholder=placeholder if isinstance(placeholder, str) else "",
                )
            )
    return tuple(out)


# --- Pitches, personalization and workflow suggestions ---


def parse_guest_post_pitch(text: str) -> GuestPostPitch:
    """Subject and body fields; the whole reply stands in for a missing body."""
    return GuestPostPitch(
        subject=extract_field(text, "SUBJECT") or "",
        body=extract_field(text, "BODY") or text,
    )


def parse_personalized_email(
    text: str, subject_template: str, body_template: str
) -> PersonalizedEmail:
    """Rewritten subject/body, or the originals when either is missing."""
    subject = _SUBJECT_LINE.search(text or "")
    body = _BODY_REST.search(text or "")
    if subject and body and subject.group(1).strip() and body.group(1).strip():
        return PersonalizedEmail(
            subject=subject.group(1).strip(),
            html_body=body.group(1).strip(),
            personalized=True,
        )
    log.info("Personalized email could not be parsed; keeping the original content")
    return PersonalizedEmail(
        subject=subject_template, html_body=body_template, personalized=False
    )


def parse_workflow_suggestions(text: str) -> tuple[str, ...]:
    """Bulleted or numbered lines, without their prefixes."""
    out = []
    for line in (text or "").splitlines():
        match = _LIST_PREFIX.match(line)
        if match:
            item = line[match.end() :].strip()
            if item:
                out.append(item)
    return tuple(out)


# --- Dispatch ---


@dataclasses.dataclass(frozen=True, slots=True)
class ParseContext:
    """Operation inputs some parsers need besides the reply text."""

    sequence_config: EmailSequenceConfig | None = None
    subject_template: str = ""
    body_template: str = ""


def parse_payload(
    kind: OperationKind, text: str, context: ParseContext | None = None
) -> Any | None:
    """Structured payload of ``kind`` recovered from ``text``.

    Operations whose output is free text have no payload and yield ``None``.
    """
    context = context or ParseContext()
    match kind:
        case OperationKind.EMAIL_SEQUENCE:
            if context.sequence_config is None:
                raise ValueError("email sequence parsing needs a sequence_config")
            return parse_email_sequence(text, context.sequence_config)
        case OperationKind.LEAD_RESEARCH:
            return parse_lead_research(text)
        case OperationKind.BUSINESS_ANALYSIS:
            return parse_business_analysis(text)
        case OperationKind.FOLLOW_UP_QUESTIONS:
            return parse_follow_up_questions(text)
        case OperationKind.PIPELINE_STRATEGY:
            return parse_pipeline_strategy(text)
        case OperationKind.CONTENT_SUGGESTIONS:
            return parse_content_suggestions(text)
        case OperationKind.WORKFLOW_OPTIMIZATION:
            return parse_workflow_suggestions(text)
        case OperationKind.GUEST_POST_PITCH:
            return parse_guest_post_pitch(text)
        case OperationKind.EMAIL_PERSONALIZATION:
            return parse_personalized_email(
                text, context.subject_template, context.body_template
            )
        case (
            OperationKind.OUTREACH_MESSAGE
            | OperationKind.CATEGORY_CONTENT
            | OperationKind.COMMAND_CENTER
            | OperationKind.BLOG_CONTENT
            | OperationKind.SOCIAL_CAPTION
            | OperationKind.DASHBOARD_INSIGHTS
        ):
            return None
        case _:
            assert_never(kind)
