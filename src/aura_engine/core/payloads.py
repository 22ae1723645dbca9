"""Structured payloads recovered from model replies.

Instances are produced only by the parsers in
``aura_engine.pipeline.results.parsers``. Optional fields stay ``None`` (or
empty) unless a value was positively matched in the reply text.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
import typing

from aura_engine.core.domain import ToneType


@dataclasses.dataclass(frozen=True, slots=True)
class EmailStep:
    id: str
    step_number: int
    subject: str
    body: str
    delay: str
    tone: ToneType


@dataclasses.dataclass(frozen=True, slots=True)
class KnowledgeBaseFields:
    title: str | None = None
    industry: str | None = None
    employee_count: str | None = None
    location: str | None = None
    company_overview: str | None = None
    talking_points: tuple[str, ...] = ()
    outreach_angle: str | None = None
    risk_factors: tuple[str, ...] = ()
    mentioned_on_website: str | None = None
    research_brief: str | None = None
    researched_at: datetime | None = None

    def is_empty(self) -> bool:
        return self == KnowledgeBaseFields(researched_at=self.researched_at)

    def stamped(self, when: datetime) -> KnowledgeBaseFields:
        return dataclasses.replace(self, researched_at=when)


@dataclasses.dataclass(frozen=True, slots=True)
class FieldEstimate:
    """A value with the model's 0-100 confidence in it."""

    value: typing.Any
    confidence: int = 0


@dataclasses.dataclass(frozen=True, slots=True)
class BusinessAnalysisResult:
    fields: typing.Mapping[str, FieldEstimate]
    social_links: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    follow_up_questions: tuple[str, ...] = ()

    def get(self, name: str) -> FieldEstimate | None:
        return self.fields.get(name)


SuggestionType = typing.Literal["word", "metric", "personalization", "structure", "cta"]
SuggestionCategory = typing.Literal["high", "medium", "style"]


@dataclasses.dataclass(frozen=True, slots=True)
class ContentSuggestion:
    type: SuggestionType
    title: str
    replacement: str
    category: SuggestionCategory | None = None
    description: str | None = None
    original_text: str | None = None
    impact_label: str | None = None
    impact_percent: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class SprintGoal:
    title: str
    unit: str
    deadline: str
    target: int | None = None
    current: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineStrategyResult:
    recommendations: tuple[str, ...] = ()
    sprint_goals: tuple[SprintGoal, ...] = ()
    risks: tuple[str, ...] = ()
    priority_actions: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (
            self.recommendations or self.sprint_goals or self.risks or self.priority_actions
        )


@dataclasses.dataclass(frozen=True, slots=True)
class FollowUpQuestion:
    field: str
    question: str
    placeholder: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class GuestPostPitch:
    subject: str
    body: str


@dataclasses.dataclass(frozen=True, slots=True)
class PersonalizedEmail:
    subject: str
    html_body: str
    personalized: bool
