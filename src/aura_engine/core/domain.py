"""Read-only domain records consumed by the generation operations.

Leads, business profiles and the per-operation request bundles are plain
frozen values supplied by the caller. Nothing in the engine mutates them.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import Enum
import typing

from aura_engine.core.types import ChatTurn, _is_tuple_of, _require


class LeadStatus(str, Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    CONVERTED = "Converted"
    LOST = "Lost"


class ContentType(str, Enum):
    EMAIL = "Cold Email"
    LINKEDIN = "LinkedIn Message"
    SMS = "SMS Text"
    PROPOSAL = "Follow-up Proposal"


class ContentCategory(str, Enum):
    EMAIL_SEQUENCE = "Email Sequences"
    LANDING_PAGE = "Landing Pages"
    SOCIAL_MEDIA = "Social Media Posts"
    BLOG_ARTICLE = "Blog Articles"
    REPORT = "Reports & Whitepapers"
    PROPOSAL = "Proposals & Pitches"
    AD_COPY = "Ad Copy"


class ToneType(str, Enum):
    PROFESSIONAL = "Professional"
    CONVERSATIONAL = "Conversational"
    TECHNICAL = "Technical"
    CASUAL = "Casual"
    PERSUASIVE = "Persuasive"
    EMPATHETIC = "Empathetic"


class AIMode(str, Enum):
    """Advisory persona used by the command center."""

    ANALYST = "analyst"
    STRATEGIST = "strategist"
    COACH = "coach"
    CREATIVE = "creative"


class BlogMode(str, Enum):
    FULL_DRAFT = "full_draft"
    OUTLINE_ONLY = "outline_only"
    IMPROVE = "improve"
    EXPAND = "expand"


class SocialPlatform(str, Enum):
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    FACEBOOK = "facebook"


class SuggestionMode(str, Enum):
    EMAIL = "email"
    LINKEDIN = "linkedin"
    PROPOSAL = "proposal"


SequenceGoal = typing.Literal[
    "book_meeting", "product_demo", "nurture", "re_engage", "upsell"
]
SequenceCadence = typing.Literal["daily", "every_2_days", "every_3_days", "weekly"]


# --- Leads ---


@dataclasses.dataclass(frozen=True, slots=True)
class KnowledgeBase:
    """Links, notes and previously researched facts attached to a lead."""

    website: str | None = None
    linkedin: str | None = None
    instagram: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    youtube: str | None = None
    extra_notes: str | None = None
    title: str | None = None
    industry: str | None = None
    company_overview: str | None = None
    talking_points: tuple[str, ...] = ()
    outreach_angle: str | None = None
    risk_factors: tuple[str, ...] = ()

    def links(self) -> dict[str, str]:
        """Non-empty link fields in declaration order."""
        names = ("website", "linkedin", "instagram", "facebook", "twitter", "youtube")
        return {n: v for n in names if (v := getattr(self, n))}


@dataclasses.dataclass(frozen=True, slots=True)
class Lead:
    id: str
    name: str
    company: str
    score: int = 0
    status: LeadStatus = LeadStatus.NEW
    email: str = ""
    insights: str = ""
    created_at: datetime | None = None
    knowledge_base: KnowledgeBase | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.score, int) and 0 <= self.score <= 100,
            message="must be an int in [0, 100]",
            field_name="score",
        )
        _require(
            condition=isinstance(self.status, LeadStatus),
            message="must be a LeadStatus",
            field_name="status",
            exc=TypeError,
        )

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ""

    @property
    def email_domain(self) -> str:
        return self.email.split("@", 1)[1] if "@" in self.email else ""


# --- Business profile ---


@dataclasses.dataclass(frozen=True, slots=True)
class ServiceOffering:
    name: str
    description: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class PricingTier:
    name: str
    price: str = ""
    description: str = ""
    features: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class BusinessProfile:
    """The caller's own company, appended as context to most prompts."""

    company_name: str | None = None
    industry: str | None = None
    company_website: str | None = None
    products_services: str | None = None
    target_audience: str | None = None
    value_prop: str | None = None
    pricing_model: str | None = None
    sales_approach: str | None = None
    business_description: str | None = None
    phone: str | None = None
    business_email: str | None = None
    address: str | None = None
    social_links: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    services: tuple[ServiceOffering, ...] = ()
    pricing_tiers: tuple[PricingTier, ...] = ()
    competitive_advantage: str | None = None
    content_tone: str | None = None
    unique_selling_points: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _require(
            condition=_is_tuple_of(self.services, ServiceOffering),
            message="must be a tuple[ServiceOffering, ...]",
            field_name="services",
            exc=TypeError,
        )
        _require(
            condition=_is_tuple_of(self.pricing_tiers, PricingTier),
            message="must be a tuple[PricingTier, ...]",
            field_name="pricing_tiers",
            exc=TypeError,
        )

    def filled_fields(self) -> dict[str, str]:
        """Scalar text fields that carry a value."""
        out: dict[str, str] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str) and value:
                out[f.name] = value
        return out


# --- Per-operation request bundles ---


@dataclasses.dataclass(frozen=True, slots=True)
class EmailSequenceConfig:
    audience_lead_ids: tuple[str, ...]
    goal: SequenceGoal
    sequence_length: int
    cadence: SequenceCadence
    tone: ToneType = ToneType.PROFESSIONAL

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.sequence_length, int)
            and self.sequence_length >= 1,
            message="must be an int >= 1",
            field_name="sequence_length",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineStrategyInput:
    total_leads: int
    avg_score: int
    status_breakdown: typing.Mapping[str, int]
    hot_leads: int
    recent_activity: str = ""
    emails_sent: int = 0
    emails_opened: int = 0
    conversion_rate: float = 0.0
    business_profile: BusinessProfile | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class BlogContentParams:
    mode: BlogMode
    topic: str
    tone: str | None = None
    category: str | None = None
    keywords: tuple[str, ...] = ()
    existing_content: str | None = None
    business_profile: BusinessProfile | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class SocialCaptionParams:
    platform: SocialPlatform
    post_title: str
    post_url: str
    post_excerpt: str | None = None
    business_profile: BusinessProfile | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class WorkflowNode:
    id: str
    type: str
    title: str
    description: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class WorkflowOptimizationInput:
    nodes: tuple[WorkflowNode, ...]
    leads_processed: int = 0
    conversion_rate: float = 0.0
    time_saved_hrs: float = 0.0
    roi: float = 0.0
    lead_count: int = 0


@dataclasses.dataclass(frozen=True, slots=True)
class GuestPostPitchParams:
    blog_name: str
    tone: str
    blog_url: str | None = None
    contact_name: str | None = None
    proposed_topics: str | None = None
    business_profile: BusinessProfile | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class PersonalizeEmailInput:
    subject_template: str
    body_template: str
    lead: Lead
    tone: ToneType = ToneType.PROFESSIONAL
    business_profile: BusinessProfile | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class AnsweredQuestion:
    field: str
    question: str
    answer: str


@dataclasses.dataclass(frozen=True, slots=True)
class ChatRequest:
    """Inputs of one command-center exchange."""

    prompt: str
    mode: AIMode = AIMode.ANALYST
    leads: tuple[Lead, ...] = ()
    history: tuple[ChatTurn, ...] = ()
    business_profile: BusinessProfile | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.prompt, str) and self.prompt.strip() != "",
            message="must be a non-empty str",
            field_name="prompt",
        )
        _require(
            condition=_is_tuple_of(self.history, ChatTurn),
            message="must be a tuple[ChatTurn, ...]",
            field_name="history",
            exc=TypeError,
        )
