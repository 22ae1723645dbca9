"""Hardcoded default prompts and the per-operation execution catalogue.

Defaults are used whenever the prompt store has nothing for a name. Each
operation's resilience class, timeout tier, credit key and failure label are
declared once in ``operation_spec``.
"""

from __future__ import annotations

import dataclasses
from typing import assert_never

from aura_engine.constants import ADVISORY_TEMPERATURE, CREATIVE_TEMPERATURE, DEFAULT_TOP_K
from aura_engine.core.domain import (
    AIMode,
    BlogMode,
    ContentCategory,
    SocialPlatform,
)
from aura_engine.core.types import OperationKind, ResilienceClass, TimeoutTier


@dataclasses.dataclass(frozen=True, slots=True)
class PromptTemplate:
    system_instruction: str
    template: str
    temperature: float
    top_p: float | None = 0.9
    top_k: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class OperationSpec:
    kind: OperationKind
    resilience: ResilienceClass
    timeout_tier: TimeoutTier
    credit_key: str | None
    failure_label: str | None  # None: bare sentinel text
    max_attempts: int | None = None  # None: use the configured bound


_EXPLAIN = ResilienceClass.EXPLANATORY


def operation_spec(kind: OperationKind) -> OperationSpec:
    """Execution policy of an operation."""
    match kind:
        case OperationKind.OUTREACH_MESSAGE:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "content_generation", None)
        case OperationKind.CATEGORY_CONTENT:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.MULTI_TURN, "content_generation", "GENERATION FAILED")
        case OperationKind.EMAIL_SEQUENCE:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.EXTENDED, "email_sequence", "SEQUENCE GENERATION FAILED")
        case OperationKind.LEAD_RESEARCH:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.EXTENDED, "lead_research", "RESEARCH FAILED")
        case OperationKind.BUSINESS_ANALYSIS:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "business_analysis", "ANALYSIS FAILED")
        case OperationKind.FOLLOW_UP_QUESTIONS:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "follow_up_questions", "QUESTIONS FAILED", max_attempts=1)
        case OperationKind.COMMAND_CENTER:
            return OperationSpec(kind, ResilienceClass.LOCAL_TEMPLATE, TimeoutTier.MULTI_TURN, "command_center", "COMMAND CENTER FAILED")
        case OperationKind.PIPELINE_STRATEGY:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.MULTI_TURN, "pipeline_strategy", "STRATEGY FAILED")
        case OperationKind.BLOG_CONTENT:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.EXTENDED, "blog_content", "GENERATION FAILED")
        case OperationKind.CONTENT_SUGGESTIONS:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "content_suggestions", "SUGGESTIONS FAILED")
        case OperationKind.SOCIAL_CAPTION:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "social_caption", "CAPTION GENERATION FAILED", max_attempts=1)
        case OperationKind.WORKFLOW_OPTIMIZATION:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "workflow_optimization", "OPTIMIZATION FAILED")
        case OperationKind.GUEST_POST_PITCH:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "guest_post_pitch", "PITCH GENERATION FAILED")
        case OperationKind.EMAIL_PERSONALIZATION:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, None, "PERSONALIZATION FAILED")
        case OperationKind.DASHBOARD_INSIGHTS:
            return OperationSpec(kind, _EXPLAIN, TimeoutTier.STANDARD, "dashboard_insights", "INSIGHTS FAILED", max_attempts=1)
        case _:
            assert_never(kind)


_CATEGORY_PROMPT_NAMES: dict[ContentCategory, str] = {
    ContentCategory.EMAIL_SEQUENCE: "content_email",
    ContentCategory.LANDING_PAGE: "content_landing_page",
    ContentCategory.SOCIAL_MEDIA: "content_social",
    ContentCategory.BLOG_ARTICLE: "content_blog",
    ContentCategory.REPORT: "content_report",
    ContentCategory.PROPOSAL: "content_proposal",
    ContentCategory.AD_COPY: "content_ad",
}

_BLOG_PROMPT_NAMES: dict[BlogMode, str] = {
    BlogMode.FULL_DRAFT: "blog_full_draft",
    BlogMode.OUTLINE_ONLY: "blog_outline",
    BlogMode.IMPROVE: "blog_improve",
    BlogMode.EXPAND: "blog_expand",
}

type PromptVariant = ContentCategory | BlogMode | SocialPlatform | AIMode | None


def prompt_name_for(kind: OperationKind, variant: PromptVariant = None) -> str:
    """Logical prompt name of an operation (and its variant, where it has one)."""
    match kind:
        case OperationKind.OUTREACH_MESSAGE:
            return "sales_outreach"
        case OperationKind.CATEGORY_CONTENT:
            if not isinstance(variant, ContentCategory):
                raise TypeError("category content needs a ContentCategory variant")
            return _CATEGORY_PROMPT_NAMES[variant]
        case OperationKind.COMMAND_CENTER:
            mode = variant if isinstance(variant, AIMode) else AIMode.ANALYST
            return f"command_center_{mode.value}"
        case OperationKind.BLOG_CONTENT:
            if not isinstance(variant, BlogMode):
                raise TypeError("blog content needs a BlogMode variant")
            return _BLOG_PROMPT_NAMES[variant]
        case OperationKind.SOCIAL_CAPTION:
            if not isinstance(variant, SocialPlatform):
                raise TypeError("social captions need a SocialPlatform variant")
            return f"social_{variant.value}"
        case (
            OperationKind.EMAIL_SEQUENCE
            | OperationKind.LEAD_RESEARCH
            | OperationKind.BUSINESS_ANALYSIS
            | OperationKind.FOLLOW_UP_QUESTIONS
            | OperationKind.PIPELINE_STRATEGY
            | OperationKind.CONTENT_SUGGESTIONS
            | OperationKind.WORKFLOW_OPTIMIZATION
            | OperationKind.GUEST_POST_PITCH
            | OperationKind.EMAIL_PERSONALIZATION
            | OperationKind.DASHBOARD_INSIGHTS
        ):
            return kind.value
        case _:
            assert_never(kind)


def default_prompt(name: str) -> PromptTemplate:
    """Hardcoded template for a logical prompt name."""
    try:
        return DEFAULT_PROMPTS[name]
    except KeyError:
        raise ValueError(f"No default prompt named '{name}'") from None


# --- Default templates ---

_CATEGORY_SYSTEMS: dict[str, tuple[str, str]] = {
    "content_email": (
        "You are an expert email copywriter.",
        "Write a compelling cold email for {{lead_name}} at {{company}}. Score: {{score}}. "
        "Insights: {{insights}}. Tone: {{tone}}. Use ONLY these placeholders: "
        "{{first_name}}, {{company}}, {{your_name}}. Write all other details as actual "
        "specific content. Under 200 words.",
    ),
    "content_landing_page": (
        "You are a conversion-focused landing page copywriter.",
        "Create landing page copy targeting {{company}} in their industry. Include:\n"
        "- Hero headline & subheadline\n- 3 benefit bullets\n- Social proof section placeholder\n"
        "- CTA section\nTone: {{tone}}. Lead insights: {{insights}}.",
    ),
    "content_social": (
        "You are a B2B social media strategist.",
        "Generate 3 LinkedIn posts targeting professionals like {{lead_name}} at {{company}}.\n"
        "Each post should hook in the first line, provide value and end with an engagement "
        "question or CTA. Tone: {{tone}}. Industry insights: {{insights}}.",
    ),
    "content_blog": (
        "You are a B2B content marketing expert.",
        "Write a blog article outline + intro targeting companies like {{company}}.\n"
        "- Title (SEO-optimized)\n- 5-section outline with key points\n"
        "- Full intro paragraph (150 words)\n- Meta description\n"
        "Tone: {{tone}}. Industry context: {{insights}}.",
    ),
    "content_report": (
        "You are a B2B research analyst and report writer.",
        "Create a whitepaper/report outline for {{company}}'s industry:\n- Executive Summary\n"
        "- 4-5 key sections with bullet points\n- Data points to include\n"
        "- Conclusion with CTA\nTone: {{tone}}. Context: {{insights}}.",
    ),
    "content_proposal": (
        "You are a senior sales proposal writer.",
        "Draft a business proposal for {{lead_name}} at {{company}}:\n- Opening\n"
        "- Problem Statement\n- Proposed Solution (3 key deliverables)\n- Timeline\n"
        "- Pricing placeholder\n- Next Steps / CTA\nTone: {{tone}}. Lead score: {{score}}. "
        "Insights: {{insights}}.",
    ),
    "content_ad": (
        "You are a performance marketing copywriter specializing in high-converting B2B ad copy.",
        "Create compelling ad copy targeting {{company}}'s industry:\n"
        "- Google Search Ad: 3 headlines (max 30 chars) + 2 descriptions (max 90 chars)\n"
        "- LinkedIn Sponsored Ad: headline + body (max 150 words) + CTA\n"
        "- A/B variant with a different angle\nTone: {{tone}}. Lead insights: {{insights}}.",
    ),
}

_MODE_SYSTEMS: dict[AIMode, str] = {
    AIMode.ANALYST: (
        "You are a senior data analyst for a B2B sales pipeline. Cite specific lead names, "
        "scores, and percentages. Use markdown tables when comparing data."
    ),
    AIMode.STRATEGIST: (
        "You are a sales strategist for a B2B pipeline. Create actionable plans and reference "
        "leads by name. Always end with a clear next step."
    ),
    AIMode.COACH: (
        "You are a sales coach reviewing a B2B pipeline. Give honest, constructive feedback "
        "grounded in the actual data. Be encouraging but direct."
    ),
    AIMode.CREATIVE: (
        "You are a content specialist for B2B sales outreach. Write personalized content "
        "referencing specific lead details. Never produce generic templates."
    ),
}

_BLOG_SYSTEM = (
    "You are an expert blog content writer specializing in B2B and technology topics. "
    "You write engaging, well-researched content in clean markdown format."
)
_BLOG_GUIDES = "{{tone_guide}}{{category_guide}}{{keyword_guide}}"

_SOCIAL_RULES: dict[SocialPlatform, str] = {
    SocialPlatform.LINKEDIN: (
        "Write a LinkedIn post with a scroll-stopping hook, 2-3 sentences on the key insight, "
        "a call to read the full post and 3-5 hashtags. Maximum 300 words."
    ),
    SocialPlatform.TWITTER: (
        "Write a tweet (max 280 characters including URL) with the key takeaway and 1-2 "
        "hashtags. Leave room for the URL (23 characters)."
    ),
    SocialPlatform.FACEBOOK: (
        "Write a Facebook post with an engaging opener, a brief summary of what readers "
        "will learn and a call to click through. Maximum 200 words."
    ),
}

DEFAULT_PROMPTS: dict[str, PromptTemplate] = {
    "sales_outreach": PromptTemplate(
        system_instruction=(
            "You are a world-class B2B sales development representative specializing in "
            "hyper-personalized outreach. Generate high-conversion {{type}} content that "
            "feels human, researched, and valuable. Avoid generic corporate jargon."
        ),
        template=(
            "TARGET PROSPECT DATA:\nName: {{lead_name}}\nCompany: {{company}}\n"
            "Intelligence Score: {{score}}/100\nAI-Detected Insights: {{insights}}\n\n"
            "CONTENT TYPE: {{type}}\n\nREQUIREMENTS:\n"
            "1. Reference the company name naturally.\n"
            "2. Leverage the intelligence insight to show deep research.\n"
            "3. Include a soft but clear Call to Action (CTA).\n"
            "4. Maintain a {{tone}} tone.\n5. Do not exceed 150 words."
        ),
        temperature=0.8,
        top_k=DEFAULT_TOP_K,
    ),
    **{
        name: PromptTemplate(system, template, temperature=0.8, top_k=DEFAULT_TOP_K)
        for name, (system, template) in _CATEGORY_SYSTEMS.items()
    },
    "email_sequence": PromptTemplate(
        system_instruction=(
            "You are an expert email sequence copywriter for B2B sales. Generate "
            "high-converting email sequences that feel human and personalized."
        ),
        template=(
            "Generate a {{sequence_length}}-email outreach sequence for B2B sales.\n\n"
            "TARGET AUDIENCE (sample leads):\n{{lead_context}}\n\nSEQUENCE CONFIG:\n"
            "- Goal: {{goal_label}}\n- Number of Emails: {{sequence_length}}\n"
            "- Cadence: Every {{cadence_days}} day(s)\n- Tone: {{tone}}\n"
            "- Total leads in audience: {{audience_count}}\n\nREQUIREMENTS:\n"
            "1. Each email must have a clear subject line and body.\n"
            "2. Use ONLY these personalization placeholders: {{first_name}}, {{company}}, "
            "{{ai_insight}}, {{your_name}}.\n"
            "3. Email 1 introduces the value proposition; the final email is a break-up email.\n"
            "4. Keep each email under 200 words.\n\n"
            "FORMAT YOUR RESPONSE EXACTLY LIKE THIS (repeat for each email):\n"
            "===EMAIL_START===\nSTEP: [number]\nDELAY: Day [number]\nSUBJECT: [subject line]\n"
            "BODY:\n[email body]\n===EMAIL_END==="
        ),
        temperature=0.85,
        top_k=DEFAULT_TOP_K,
    ),
    "lead_research": PromptTemplate(
        system_instruction=(
            "You are a Web Intelligence Agent. Extract only verified, publicly stated "
            "information about a prospect and their company. Do not guess. If a field "
            "cannot be verified, write 'Not found'."
        ),
        template=(
            "Research this prospect for B2B outreach.\n\nINPUT:\n"
            "- Root website URL: {{website_url}}\n- Lead Name: {{lead_name}}\n"
            "- Company: {{company}}\n{{email_domain}}\n{{insights}}\n\n"
            "SOCIAL / WEB PRESENCE:\n{{url_context}}\n\n"
            "Respond using EXACTLY this delimited format (lists separated by | pipes):\n"
            "===FIELD===TITLE: [prospect's role]===END===\n"
            "===FIELD===INDUSTRY: [industry]===END===\n"
            "===FIELD===EMPLOYEE_COUNT: [approximate headcount]===END===\n"
            "===FIELD===LOCATION: [city, region, country]===END===\n"
            "===FIELD===COMPANY_OVERVIEW: [2-3 sentences]===END===\n"
            "===FIELD===TALKING_POINTS: [3-5 items]===END===\n"
            "===FIELD===OUTREACH_ANGLE: [one recommended angle]===END===\n"
            "===FIELD===RISK_FACTORS: [1-3 items]===END===\n"
            "===FIELD===MENTIONED_ON_WEBSITE: [where the prospect appears, or Not found]===END===\n"
            "===FIELD===RESEARCH_BRIEF: [short narrative brief]===END==="
        ),
        temperature=0.3,
    ),
    "business_analysis": PromptTemplate(
        system_instruction=(
            "You are a Web Intelligence Agent. Extract only explicitly verifiable business "
            "information from a public website. Always respond with valid JSON only."
        ),
        template=(
            "Website URL: {{website_url}}\n{{social_context}}\n\n"
            "Crawl the homepage, navigation and about/services/pricing/contact pages on the "
            "same root domain. Do not hallucinate missing data.\n\n"
            "Return a JSON object. For each field use "
            '{ "value": "...", "confidence": 0-100 }:\n'
            "companyName, industry, productsServices, targetAudience, valueProp, "
            "pricingModel, salesApproach, phone, businessEmail, address, "
            "competitiveAdvantage, contentTone, uniqueSellingPoints (value is a list).\n"
            'Also include "socialLinks": {"linkedin": "...", ...} and '
            '"followUpQuestions": ["..."] with 2-4 questions for fields below 70 confidence.\n'
            "Return ONLY valid JSON."
        ),
        temperature=0.3,
    ),
    "follow_up_questions": PromptTemplate(
        system_instruction=(
            "You are a business strategy consultant. Ask insightful questions to understand "
            "a company. Always respond with valid JSON only."
        ),
        template=(
            "Based on this partially-filled business profile, generate 2-4 targeted "
            "follow-up questions to fill in the gaps.\n\nCURRENT PROFILE:\n{{profile_context}}\n\n"
            "EMPTY/MISSING FIELDS: {{empty_fields}}\n\n"
            'Return a JSON object: {"questions": [{"field": "...", "question": "...", '
            '"placeholder": "..."}]}\n'
            "Only ask about empty or vague fields and never repeat answered questions."
        ),
        temperature=0.5,
    ),
    **{
        f"command_center_{mode.value}": PromptTemplate(
            system_instruction=system,
            template="{{pipeline_context}}\n\nUSER REQUEST:\n{{user_prompt}}",
            temperature=(
                CREATIVE_TEMPERATURE if mode is AIMode.CREATIVE else ADVISORY_TEMPERATURE
            ),
            top_k=DEFAULT_TOP_K,
        )
        for mode, system in _MODE_SYSTEMS.items()
    },
    "pipeline_strategy": PromptTemplate(
        system_instruction=(
            "You are a senior B2B sales strategist. Analyze pipeline data and produce "
            "actionable strategy recommendations. Always use the exact delimited format requested."
        ),
        template=(
            "Analyze this B2B sales pipeline and generate strategic recommendations.\n\n"
            "PIPELINE DATA:\n- Total Leads: {{total_leads}}\n"
            "- Average Lead Score: {{avg_score}}/100\n- Status Breakdown: {{status_breakdown}}\n"
            "- Hot Leads (score > 80): {{hot_leads}}\n- Emails Sent: {{emails_sent}}\n"
            "- Emails Opened: {{emails_opened}}\n- Conversion Rate: {{conversion_rate}}%\n"
            "- Recent Activity: {{recent_activity}}\n\n"
            "Respond using EXACTLY this delimited format:\n\n"
            "===FIELD===RECOMMENDATIONS: [3-5 items separated by | pipes]===END===\n"
            "===FIELD===SPRINT_GOALS: [4 goals, one per line, format: "
            "title|target|current|unit|deadline]===END===\n"
            "===FIELD===RISKS: [2-4 items separated by | pipes]===END===\n"
            "===FIELD===PRIORITY_ACTIONS: [Top 3 items separated by | pipes]===END==="
        ),
        temperature=0.7,
    ),
    "blog_full_draft": PromptTemplate(
        _BLOG_SYSTEM,
        'Write a complete, publication-ready blog post about "{{topic}}" with an engaging '
        "title, a hooking introduction, 3-5 sections with ## headings, practical examples "
        "and a conclusion with a call to action. Target 600-1200 words in markdown."
        + _BLOG_GUIDES,
        temperature=0.85,
        top_k=DEFAULT_TOP_K,
    ),
    "blog_outline": PromptTemplate(
        _BLOG_SYSTEM,
        'Create a detailed blog post outline for "{{topic}}": a title suggestion, an '
        "introduction summary, 5-7 ## sections with 2-3 bullets each, a conclusion summary "
        "and 3 SEO keywords." + _BLOG_GUIDES,
        temperature=0.7,
        top_k=DEFAULT_TOP_K,
    ),
    "blog_improve": PromptTemplate(
        _BLOG_SYSTEM,
        'Rewrite and improve the following blog content about "{{topic}}" so it is more '
        "engaging, better structured and SEO-friendly.\n\nEXISTING CONTENT TO IMPROVE:\n"
        "{{existing_content}}" + _BLOG_GUIDES,
        temperature=0.85,
        top_k=DEFAULT_TOP_K,
    ),
    "blog_expand": PromptTemplate(
        _BLOG_SYSTEM,
        'Expand the following blog content about "{{topic}}" with more detail, examples, '
        "data points and transitions; each section at least 150 words.\n\n"
        "EXISTING CONTENT TO EXPAND:\n{{existing_content}}" + _BLOG_GUIDES,
        temperature=0.85,
        top_k=DEFAULT_TOP_K,
    ),
    "content_suggestions": PromptTemplate(
        system_instruction=(
            "You are a senior content optimization specialist for B2B sales. Provide specific, "
            "actionable improvement suggestions. Always use the exact delimited format requested."
        ),
        template=(
            "Analyze the following {{mode_label}} and return exactly 5 improvement suggestions.\n\n"
            "CONTENT TO ANALYZE:\n{{content}}\n\n"
            "For each suggestion, use this exact delimited format:\n\n"
            "===SUGGESTION===\nTYPE: [one of: word|metric|personalization|structure|cta]\n"
            "CATEGORY: [one of: high|medium|style]\nTITLE: [short actionable title]\n"
            "DESCRIPTION: [1-2 sentences]\nORIGINAL_TEXT: [exact quote to replace, or empty]\n"
            'REPLACEMENT: [improved text]\nIMPACT_LABEL: [e.g. "+12% opens"]\n'
            "IMPACT_PERCENT: [number only]\n===END_SUGGESTION==="
        ),
        temperature=0.7,
    ),
    **{
        f"social_{platform.value}": PromptTemplate(
            system_instruction=(
                "You are an expert social media copywriter for B2B brands. Write engaging, "
                "platform-native captions that drive clicks. Output only the caption text."
            ),
            template=(
                "Generate a social media caption for sharing this blog post:\n\n"
                "BLOG POST TITLE: {{post_title}}\n{{post_excerpt}}\nPOST URL: {{post_url}}\n\n"
                f"PLATFORM: {platform.value.upper()}\n\n{rules}\n\nOutput ONLY the caption text."
            ),
            temperature=0.85,
        )
        for platform, rules in _SOCIAL_RULES.items()
    },
    "workflow_optimization": PromptTemplate(
        system_instruction=(
            "You are a marketing automation expert. Analyze workflows and provide specific, "
            "data-driven optimization suggestions. Be concise and actionable."
        ),
        template=(
            "Analyze this automation workflow and suggest specific improvements.\n\n"
            "WORKFLOW NODES:\n{{nodes_summary}}\n\nPERFORMANCE STATS:\n"
            "- Leads Processed: {{leads_processed}}\n- Conversion Rate: {{conversion_rate}}%\n"
            "- Time Saved: {{time_saved_hrs}} hours\n- ROI: {{roi}}%\n"
            "- Available Leads: {{lead_count}}\n\n"
            "Provide 3-5 specific, actionable suggestions that reference nodes by name and "
            'state the expected impact. Return each suggestion on its own line, prefixed with "- ".'
        ),
        temperature=0.7,
    ),
    "guest_post_pitch": PromptTemplate(
        system_instruction=(
            "You are an expert guest post outreach specialist. Write compelling, personalized "
            "pitch emails that blog editors actually want to respond to."
        ),
        template=(
            "Write a guest post pitch email for the following blog.\n\nTARGET BLOG:\n"
            "- Blog Name: {{blog_name}}\n{{blog_url}}\n{{contact_name}}\n\nTONE: {{tone}}\n"
            "{{proposed_topics}}\n\nPropose 2-3 article ideas with working titles, include a "
            "brief author bio and keep the email under 300 words.\n\n"
            "Respond in EXACTLY this format:\n"
            "===FIELD===SUBJECT: [pitch email subject line]===END===\n"
            "===FIELD===BODY: [full email body in plain text]===END==="
        ),
        temperature=0.85,
        top_k=DEFAULT_TOP_K,
    ),
    "email_personalization": PromptTemplate(
        system_instruction=(
            "You are an expert B2B email copywriter. Rewrite emails to feel personally crafted "
            "for each recipient. Always use the exact output format requested."
        ),
        template=(
            "Rewrite the following email to feel natural and tailored to this prospect. Keep "
            "the structure and CTA intact and the body under 200 words. Output HTML for the body.\n\n"
            "PROSPECT CONTEXT:\n{{lead_context}}\n\nCURRENT SUBJECT:\n{{subject_template}}\n\n"
            "CURRENT BODY:\n{{body_template}}\n\nTONE: {{tone}}\n\n"
            "Respond in EXACTLY this format:\nSUBJECT: [rewritten subject line]\n"
            "BODY: [rewritten HTML email body]"
        ),
        temperature=0.8,
    ),
    "dashboard_insights": PromptTemplate(
        system_instruction=(
            "You are a senior B2B sales analytics AI. Provide actionable, data-driven "
            "insights. Be concise and specific."
        ),
        template=(
            "Provide 3-5 actionable insights for this B2B lead pipeline.\n\n"
            "PIPELINE SUMMARY:\n- Total Leads: {{total_leads}}\n- Average Score: {{avg_score}}/100\n"
            "- Status Breakdown: {{status_breakdown}}\n- Hot Leads (score > 80): {{hot_leads}}\n\n"
            "TOP LEADS:\n{{lead_summary}}\n\n"
            "Cover which leads to prioritize, pipeline health, next actions and timing. "
            "Keep the response under 300 words."
        ),
        temperature=0.7,
    ),
}
