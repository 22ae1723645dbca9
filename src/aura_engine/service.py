"""The public entry point: one coroutine per generative operation.

Every operation follows the same path: resolve the prompt (store, then
hardcoded default), build the prompt text, check the credit ledger, run the
call through ``RequestExecutor``, parse the reply once and wrap everything in
an ``AIResponse``. Operations never raise for provider, quota or parsing
problems; those are reported through the envelope's ``outcome``.

The command center is the one operation that degrades to a local answer
(``TemplateFallbackEngine``) instead of a failure text.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
import dataclasses
from datetime import UTC, datetime
import logging
from typing import Any, Protocol, runtime_checkable

from aura_engine.config import FrozenConfig, load_frozen_config
from aura_engine.constants import (
    CADENCE_DAYS,
    CHAT_HISTORY_TURNS,
    CHAT_LEAD_LIMIT,
    CREDIT_COSTS,
    CRITICAL_MESSAGE,
    DEFAULT_CADENCE_DAYS,
    FALLBACK_PROMPT_VERSION,
    GOAL_LABELS,
    HOT_LEAD_SCORE,
    LOCAL_MODEL_NAME,
    OVERLOADED_MESSAGE,
    QUOTA_DENIED_MESSAGE,
    REMOTE_CONFIDENCE,
)
from aura_engine.core.domain import (
    AIMode,
    AnsweredQuestion,
    BlogContentParams,
    BusinessProfile,
    ChatRequest,
    ContentCategory,
    ContentType,
    EmailSequenceConfig,
    GuestPostPitchParams,
    Lead,
    PersonalizeEmailInput,
    PipelineStrategyInput,
    SocialCaptionParams,
    SuggestionMode,
    ToneType,
    WorkflowOptimizationInput,
)
from aura_engine.core.payloads import (
    BusinessAnalysisResult,
    ContentSuggestion,
    EmailStep,
    FollowUpQuestion,
    GuestPostPitch,
    KnowledgeBaseFields,
    PersonalizedEmail,
    PipelineStrategyResult,
)
from aura_engine.core.types import (
    AIResponse,
    ChatTurn,
    Failure,
    ModelReply,
    ModelRequest,
    OperationKind,
    Outcome,
    SamplingParams,
    Success,
)
from aura_engine.exceptions import (
    QuotaDeniedError,
    RetriesExhaustedError,
    StreamCancelledError,
)
from aura_engine.pipeline.adapters import GenerationAdapter, GoogleGenAIAdapter, MockAdapter
from aura_engine.pipeline.executor import RequestExecutor
from aura_engine.pipeline.fallback import PipelineStats, TemplateFallbackEngine
from aura_engine.pipeline.prompts.builder import (
    ContextBlock,
    answered_questions_block,
    average_score,
    build,
    business_context_block,
    extra_context_block,
    format_breakdown,
    lead_roster_block,
    lead_sequence_line,
    pipeline_stats_block,
    render_blocks,
    render_template,
    status_breakdown,
)
from aura_engine.pipeline.prompts.catalog import (
    OperationSpec,
    PromptVariant,
    default_prompt,
    operation_spec,
    prompt_name_for,
)
from aura_engine.pipeline.prompts.store import (
    CachingPromptStore,
    PromptStore,
    ResolvedPrompt,
    resolve_prompt,
)
from aura_engine.pipeline.results.parsers import ParseContext, parse_payload
from aura_engine.pipeline.streaming import ChunkCallback, StreamCoordinator
from aura_engine.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)

type CallFactory = Callable[[ModelRequest], Awaitable[ModelReply]]
type Clock = Callable[[], datetime]

_PROFILE_GAP_FIELDS = (
    "company_name",
    "industry",
    "products_services",
    "target_audience",
    "value_prop",
    "pricing_model",
    "sales_approach",
)
_SUGGESTION_MODE_LABELS = {
    SuggestionMode.EMAIL: "cold email",
    SuggestionMode.LINKEDIN: "LinkedIn post",
    SuggestionMode.PROPOSAL: "sales proposal",
}
_SEQUENCE_SAMPLE_LEADS = 5
_DASHBOARD_LEADS = 20


# --- Credit ledger ---


@dataclasses.dataclass(frozen=True, slots=True)
class QuotaCheck:
    """Answer of the credit ledger for one operation."""

    success: bool
    message: str | None = None


@runtime_checkable
class CreditLedger(Protocol):
    """External credit balance consulted before any remote call.

    A ledger declines by returning an unsuccessful ``QuotaCheck`` or by
    raising ``QuotaDeniedError``.
    """

    async def consume(self, cost: int) -> QuotaCheck: ...


# --- Envelope helpers ---


def _failure_text(spec: OperationSpec, message: str) -> str:
    return f"{spec.failure_label}: {message}" if spec.failure_label else message


def _error_detail(spec: OperationSpec, detail: str) -> str:
    return f"{spec.failure_label or spec.kind.value}: {detail}"


def _now() -> datetime:
    return datetime.now(UTC)


@dataclasses.dataclass(frozen=True, slots=True)
class _Call:
    """Everything one operation needs to reach the executor."""

    kind: OperationKind
    substitutions: Mapping[str, str]
    blocks: Sequence[ContextBlock] = ()
    variant: PromptVariant = None
    history: tuple[ChatTurn, ...] = ()
    use_search: bool = False
    parse_context: ParseContext | None = None
    call_factory: CallFactory | None = None
    replace_all: frozenset[str] = frozenset()  # keys substituted at every occurrence


class GenerationService:
    """Runs the catalogue of generative operations against one adapter.

    Args:
        adapter: Provider adapter used for every remote call.
        config: Frozen configuration (model, timeouts, attempt bound).
        prompt_store: Optional versioned prompt store.
        ledger: Optional credit ledger; without one, nothing is charged.
        executor: Retry executor; one is built from ``telemetry`` if omitted.
        fallback: Local answer engine for the command center.
        telemetry: Telemetry context shared by the service and its executor.
        clock: Wall-clock source used for research stamps and lead ageing.
        owner_id: Owner whose custom prompts take precedence.
    """

    def __init__(
        self,
        adapter: GenerationAdapter,
        config: FrozenConfig,
        *,
        prompt_store: PromptStore | None = None,
        ledger: CreditLedger | None = None,
        executor: RequestExecutor | None = None,
        fallback: TemplateFallbackEngine | None = None,
        telemetry: TelemetryContextProtocol | None = None,
        clock: Clock | None = None,
        owner_id: str | None = None,
    ) -> None:
        self._adapter = adapter
        self._config = config
        self._prompt_store = prompt_store
        self._ledger = ledger
        self._telemetry = telemetry or TelemetryContext()
        self._executor = executor or RequestExecutor(telemetry=self._telemetry)
        self._fallback = fallback or TemplateFallbackEngine()
        self._clock = clock or _now
        self._owner_id = owner_id

    @property
    def config(self) -> FrozenConfig:
        return self._config

    @property
    def owner_id(self) -> str | None:
        return self._owner_id

    def for_owner(self, owner_id: str | None) -> GenerationService:
        """A service sharing every collaborator but resolving ``owner_id``'s prompts."""
        return GenerationService(
            self._adapter,
            self._config,
            prompt_store=self._prompt_store,
            ledger=self._ledger,
            executor=self._executor,
            fallback=self._fallback,
            telemetry=self._telemetry,
            clock=self._clock,
            owner_id=owner_id,
        )

    # --- Shared pipeline ---

    def _envelope(
        self,
        prompt_name: str,
        prompt_version: int,
        text: str,
        *,
        outcome: Outcome,
        tokens: int = 0,
        model: str | None = None,
        payload: Any = None,
        confidence: int | None = None,
        error: str | None = None,
    ) -> AIResponse[Any]:
        return AIResponse(
            text=text,
            tokens_used=tokens,
            model_name=model or self._config.model,
            prompt_name=prompt_name,
            prompt_version=prompt_version,
            outcome=outcome,
            payload=payload,
            confidence=confidence,
            error=error,
        )

    async def _check_credits(self, spec: OperationSpec) -> str | None:
        """Ledger message when the operation is declined, else None."""
        if self._ledger is None or spec.credit_key is None:
            return None
        cost = CREDIT_COSTS[spec.credit_key]
        try:
            check = await self._ledger.consume(cost)
        except QuotaDeniedError as e:
            check = QuotaCheck(success=False, message=e.message)
        if check.success:
            return None
        self._telemetry.count("service.quota_denied", operation=spec.kind.value)
        log.info("Credit ledger declined %s (cost %d)", spec.kind.value, cost)
        return check.message or QUOTA_DENIED_MESSAGE

    def _request(self, call: _Call, prompt: ResolvedPrompt) -> ModelRequest:
        return ModelRequest(
            model=self._config.model,
            prompt=build(prompt.template, call.substitutions, call.blocks, call.replace_all),
            system_instruction=render_template(
                prompt.system_instruction, call.substitutions, call.replace_all
            ),
            sampling=SamplingParams(
                temperature=prompt.temperature, top_p=prompt.top_p, top_k=prompt.top_k
            ),
            history=call.history,
            use_search=call.use_search,
        )

    async def _execute(self, call: _Call, spec: OperationSpec, name: str) -> AIResponse[Any]:
        prompt = await resolve_prompt(
            self._prompt_store, name, default_prompt(name), owner_id=self._owner_id
        )
        request = self._request(call, prompt)

        denied = await self._check_credits(spec)
        if denied is not None:
            return self._envelope(
                prompt.reported_name,
                prompt.version,
                denied,
                outcome=Outcome.QUOTA_DENIED,
                error=_error_detail(spec, denied),
            )

        factory = call.call_factory or self._adapter.generate
        policy = self._config.policy_for(spec.timeout_tier, max_attempts=spec.max_attempts)
        result = await self._executor.execute(lambda: factory(request), policy)

        match result:
            case Success(value=reply):
                return self._success(call, prompt, reply)
            case Failure(error=error):
                return self._exhausted(spec, prompt, error)

    def _success(
        self, call: _Call, prompt: ResolvedPrompt, reply: ModelReply
    ) -> AIResponse[Any]:
        payload = parse_payload(call.kind, reply.text, call.parse_context)
        return self._envelope(
            prompt.reported_name,
            prompt.version,
            reply.text,
            outcome=Outcome.SUCCESS,
            tokens=reply.total_tokens,
            model=reply.model,
            payload=payload,
        )

    def _exhausted(
        self, spec: OperationSpec, prompt: ResolvedPrompt, error: RetriesExhaustedError
    ) -> AIResponse[Any]:
        detail = str(error.last_error) if error.last_error is not None else str(error)
        return self._envelope(
            prompt.reported_name,
            prompt.version,
            _failure_text(spec, f"{OVERLOADED_MESSAGE} (Error: {detail})"),
            outcome=Outcome.FAILED,
            error=_error_detail(spec, detail),
        )

    async def _run(self, call: _Call) -> AIResponse[Any]:
        """Run one operation; unexpected errors become a critical envelope."""
        spec = operation_spec(call.kind)
        name = prompt_name_for(call.kind, call.variant)
        with self._telemetry(f"service.{call.kind.value}"):
            try:
                return await self._execute(call, spec, name)
            except StreamCancelledError:
                raise
            except Exception as e:
                self._telemetry.count("service.critical", operation=call.kind.value)
                log.error("%s failed unexpectedly: %s", call.kind.value, e, exc_info=True)
                return self._envelope(
                    name,
                    FALLBACK_PROMPT_VERSION,
                    _failure_text(spec, CRITICAL_MESSAGE),
                    outcome=Outcome.FAILED,
                    error=_error_detail(spec, str(e)),
                )

    # --- Content generation ---

    async def generate_outreach_message(
        self,
        lead: Lead,
        content_type: ContentType,
        business_profile: BusinessProfile | None = None,
    ) -> AIResponse[None]:
        """One-off outreach copy for a lead; urgency follows the lead score."""
        tone = (
            "high-priority and urgent"
            if lead.score > HOT_LEAD_SCORE
            else "helpful and consultative"
        )
        return await self._run(
            _Call(
                OperationKind.OUTREACH_MESSAGE,
                {
                    "lead_name": lead.name,
                    "company": lead.company,
                    "score": str(lead.score),
                    "insights": lead.insights,
                    "type": content_type.value,
                    "tone": tone,
                },
                (business_context_block(business_profile),),
            )
        )

    async def generate_content_by_category(
        self,
        lead: Lead,
        category: ContentCategory,
        tone: ToneType,
        additional_context: str | None = None,
        business_profile: BusinessProfile | None = None,
    ) -> AIResponse[None]:
        return await self._run(
            _Call(
                OperationKind.CATEGORY_CONTENT,
                {
                    "lead_name": lead.name,
                    "company": lead.company,
                    "score": str(lead.score),
                    "insights": lead.insights,
                    "tone": tone.value,
                    "first_name": lead.first_name,
                },
                (
                    extra_context_block(additional_context),
                    business_context_block(business_profile),
                ),
                variant=category,
                replace_all=frozenset(
                    {"lead_name", "company", "score", "insights", "tone", "first_name"}
                ),
            )
        )

    async def generate_email_sequence(
        self,
        leads: Sequence[Lead],
        config: EmailSequenceConfig,
        business_profile: BusinessProfile | None = None,
    ) -> AIResponse[tuple[EmailStep, ...]]:
        """A multi-step sequence; personalization tags are left for the sender.

        The payload always holds at least one step when the reply has any
        usable prose, even if the delimited format was ignored.
        """
        lead_context = "\n".join(
            lead_sequence_line(lead) for lead in leads[:_SEQUENCE_SAMPLE_LEADS]
        )
        return await self._run(
            _Call(
                OperationKind.EMAIL_SEQUENCE,
                {
                    "sequence_length": str(config.sequence_length),
                    "lead_context": lead_context,
                    "goal_label": GOAL_LABELS.get(config.goal, config.goal),
                    "cadence_days": str(CADENCE_DAYS.get(config.cadence, DEFAULT_CADENCE_DAYS)),
                    "tone": config.tone.value,
                    "audience_count": str(len(config.audience_lead_ids)),
                },
                (business_context_block(business_profile),),
                parse_context=ParseContext(sequence_config=config),
                replace_all=frozenset({"sequence_length", "tone"}),
            )
        )

    # --- Research ---

    async def research_lead(
        self,
        lead: Lead,
        social_urls: Mapping[str, str],
        business_profile: BusinessProfile | None = None,
    ) -> AIResponse[KnowledgeBaseFields]:
        """Search-grounded company research for a lead.

        Each attempt first asks for a grounded answer; if grounding errors or
        comes back empty, the same attempt retries without search.
        """
        urls = {k: v for k, v in social_urls.items() if v}
        domain = lead.email_domain
        website = urls.get("website") or (
            f"https://{domain}"
            if domain
            else f"https://{''.join(lead.company.lower().split())}.com"
        )
        response = await self._run(
            _Call(
                OperationKind.LEAD_RESEARCH,
                {
                    "website_url": website,
                    "lead_name": lead.name,
                    "company": lead.company,
                    "email_domain": f"- Email Domain: {domain}" if domain else "",
                    "insights": f"- Existing Insights: {lead.insights}" if lead.insights else "",
                    "url_context": "\n".join(f"- {k}: {v}" for k, v in urls.items())
                    or "None provided",
                },
                (business_context_block(business_profile),),
                use_search=True,
                call_factory=self._grounded_then_plain,
            )
        )
        if isinstance(response.payload, KnowledgeBaseFields):
            return dataclasses.replace(response, payload=response.payload.stamped(self._clock()))
        return response

    async def _grounded_then_plain(self, request: ModelRequest) -> ModelReply:
        try:
            reply = await self._adapter.generate(request)
        except Exception as e:
            log.warning("Search-grounded research failed, retrying without search: %s", e)
        else:
            if not reply.is_empty:
                return reply
            log.warning("Search-grounded research returned nothing, retrying without search")
        return await self._adapter.generate(request.without_search())

    async def analyze_business(
        self, website_url: str, social_urls: Mapping[str, str] | None = None
    ) -> AIResponse[BusinessAnalysisResult]:
        """Estimate business-profile fields (with confidences) from a website."""
        social = "\n".join(f"- {k}: {v}" for k, v in (social_urls or {}).items() if v)
        return await self._run(
            _Call(
                OperationKind.BUSINESS_ANALYSIS,
                {
                    "website_url": website_url,
                    "social_context": f"\nSOCIAL MEDIA PROFILES:\n{social}" if social else "",
                },
            )
        )

    async def generate_follow_up_questions(
        self,
        profile: BusinessProfile,
        previous_answers: Sequence[AnsweredQuestion] = (),
    ) -> AIResponse[tuple[FollowUpQuestion, ...]]:
        filled = profile.filled_fields()
        gaps = [name for name in _PROFILE_GAP_FIELDS if name not in filled]
        return await self._run(
            _Call(
                OperationKind.FOLLOW_UP_QUESTIONS,
                {
                    "profile_context": "\n".join(f"- {k}: {v}" for k, v in filled.items())
                    or "No fields filled yet",
                    "empty_fields": ", ".join(gaps) or "None",
                },
                (answered_questions_block(previous_answers),),
            )
        )

    # --- Command center ---

    async def command_center_reply(
        self,
        prompt: str,
        mode: AIMode = AIMode.ANALYST,
        leads: Sequence[Lead] = (),
        history: Sequence[ChatTurn] = (),
        business_profile: BusinessProfile | None = None,
        *,
        on_chunk: ChunkCallback | None = None,
        coordinator: StreamCoordinator | None = None,
    ) -> AIResponse[None]:
        """Answer a pipeline question in the given advisory mode.

        Streams through ``coordinator`` when ``on_chunk`` or a coordinator is
        given. If the remote call is declined, exhausted or fails, the answer
        is rendered locally from pipeline statistics (outcome ``FALLBACK``).
        Cancelling the coordinator ends the exchange with outcome
        ``CANCELLED`` and whatever text had arrived. A blank ``prompt`` is
        answered locally without a remote call.
        """
        if not isinstance(prompt, str) or not prompt.strip():
            log.info("Command center prompt is blank; answering locally")
            return self._local_answer(
                "",
                mode,
                leads,
                prompt_name_for(OperationKind.COMMAND_CENTER, mode),
                FALLBACK_PROMPT_VERSION,
                error="Prompt is blank",
            )
        chat = ChatRequest(
            prompt=prompt,
            mode=mode,
            leads=tuple(leads),
            history=tuple(history),
            business_profile=business_profile,
        )
        if on_chunk is not None and coordinator is None:
            coordinator = StreamCoordinator()

        factory = self._streamed(coordinator, on_chunk) if coordinator is not None else None
        pipeline_context = render_blocks(
            (
                pipeline_stats_block(chat.leads),
                lead_roster_block(chat.leads, CHAT_LEAD_LIMIT),
                business_context_block(chat.business_profile),
            )
        ).strip()
        call = _Call(
            OperationKind.COMMAND_CENTER,
            {"pipeline_context": pipeline_context, "user_prompt": chat.prompt},
            variant=chat.mode,
            history=chat.history[-CHAT_HISTORY_TURNS:],
            call_factory=factory,
        )
        try:
            response = await self._run(call)
        except StreamCancelledError:
            log.info("Command center stream cancelled by caller")
            return self._envelope(
                prompt_name_for(OperationKind.COMMAND_CENTER, chat.mode),
                FALLBACK_PROMPT_VERSION,
                coordinator.partial_text if coordinator is not None else "",
                outcome=Outcome.CANCELLED,
            )

        if response.outcome is Outcome.SUCCESS:
            return dataclasses.replace(response, confidence=REMOTE_CONFIDENCE)
        self._telemetry.count("service.fallback", outcome=response.outcome.value)
        log.info(
            "Command center answered locally after %s: %s", response.outcome.value, response.error
        )
        return self._local_answer(
            chat.prompt,
            chat.mode,
            chat.leads,
            response.prompt_name,
            response.prompt_version,
            error=response.error,
        )

    def _streamed(
        self, coordinator: StreamCoordinator, on_chunk: ChunkCallback | None
    ) -> CallFactory:
        async def call(request: ModelRequest) -> ModelReply:
            return await coordinator.run(lambda: self._adapter.stream(request), on_chunk)

        return call

    def _local_answer(
        self,
        prompt: str,
        mode: AIMode,
        leads: Sequence[Lead],
        prompt_name: str,
        prompt_version: int,
        *,
        error: str | None,
    ) -> AIResponse[None]:
        stats = PipelineStats.from_leads(leads, now=self._clock())
        answer = self._fallback.answer(prompt, stats, mode)
        return self._envelope(
            prompt_name,
            prompt_version,
            answer.text,
            outcome=Outcome.FALLBACK,
            model=LOCAL_MODEL_NAME,
            confidence=answer.confidence,
            error=error,
        )

    # --- Strategy and insights ---

    async def generate_pipeline_strategy(
        self, strategy_input: PipelineStrategyInput
    ) -> AIResponse[PipelineStrategyResult]:
        data = strategy_input
        return await self._run(
            _Call(
                OperationKind.PIPELINE_STRATEGY,
                {
                    "total_leads": str(data.total_leads),
                    "avg_score": str(data.avg_score),
                    "status_breakdown": format_breakdown(data.status_breakdown),
                    "hot_leads": str(data.hot_leads),
                    "emails_sent": str(data.emails_sent),
                    "emails_opened": str(data.emails_opened),
                    "conversion_rate": f"{data.conversion_rate:g}",
                    "recent_activity": data.recent_activity,
                },
                (business_context_block(data.business_profile),),
            )
        )

    async def generate_dashboard_insights(
        self, leads: Sequence[Lead], business_profile: BusinessProfile | None = None
    ) -> AIResponse[None]:
        lead_summary = "\n".join(
            f"{lead.name} ({lead.company}) - Score: {lead.score}, Status: {lead.status.value}"
            for lead in leads[:_DASHBOARD_LEADS]
        )
        return await self._run(
            _Call(
                OperationKind.DASHBOARD_INSIGHTS,
                {
                    "total_leads": str(len(leads)),
                    "avg_score": str(average_score(leads)),
                    "status_breakdown": format_breakdown(status_breakdown(leads)),
                    "hot_leads": str(sum(1 for lead in leads if lead.score > HOT_LEAD_SCORE)),
                    "lead_summary": lead_summary,
                },
                (business_context_block(business_profile),),
            )
        )

    async def generate_workflow_optimization(
        self,
        workflow: WorkflowOptimizationInput,
        business_profile: BusinessProfile | None = None,
    ) -> AIResponse[tuple[str, ...]]:
        nodes_summary = "\n".join(
            f"{i}. [{node.type.upper()}] {node.title} - {node.description}"
            for i, node in enumerate(workflow.nodes, start=1)
        )
        return await self._run(
            _Call(
                OperationKind.WORKFLOW_OPTIMIZATION,
                {
                    "nodes_summary": nodes_summary,
                    "leads_processed": str(workflow.leads_processed),
                    "conversion_rate": f"{workflow.conversion_rate:g}",
                    "time_saved_hrs": f"{workflow.time_saved_hrs:g}",
                    "roi": f"{workflow.roi:g}",
                    "lead_count": str(workflow.lead_count),
                },
                (business_context_block(business_profile),),
            )
        )

    # --- Marketing content ---

    async def generate_blog_content(self, params: BlogContentParams) -> AIResponse[None]:
        return await self._run(
            _Call(
                OperationKind.BLOG_CONTENT,
                {
                    "topic": params.topic,
                    "existing_content": params.existing_content or "(No content provided)",
                    "tone_guide": f"\nTONE: Write in a {params.tone} tone." if params.tone else "",
                    "category_guide": (
                        f"\nCATEGORY: This is a {params.category} post." if params.category else ""
                    ),
                    "keyword_guide": (
                        f"\nKEYWORDS TO INCLUDE: {', '.join(params.keywords)}"
                        if params.keywords
                        else ""
                    ),
                },
                (business_context_block(params.business_profile),),
                variant=params.mode,
            )
        )

    async def generate_content_suggestions(
        self,
        content: str,
        mode: SuggestionMode,
        business_profile: BusinessProfile | None = None,
    ) -> AIResponse[tuple[ContentSuggestion, ...]]:
        return await self._run(
            _Call(
                OperationKind.CONTENT_SUGGESTIONS,
                {"mode_label": _SUGGESTION_MODE_LABELS[mode], "content": content},
                (business_context_block(business_profile),),
            )
        )

    async def generate_social_caption(self, params: SocialCaptionParams) -> AIResponse[None]:
        return await self._run(
            _Call(
                OperationKind.SOCIAL_CAPTION,
                {
                    "post_title": params.post_title,
                    "post_excerpt": f"EXCERPT: {params.post_excerpt}" if params.post_excerpt else "",
                    "post_url": params.post_url,
                },
                (business_context_block(params.business_profile),),
                variant=params.platform,
            )
        )

    async def generate_guest_post_pitch(
        self, params: GuestPostPitchParams
    ) -> AIResponse[GuestPostPitch]:
        return await self._run(
            _Call(
                OperationKind.GUEST_POST_PITCH,
                {
                    "blog_name": params.blog_name,
                    "blog_url": f"- Blog URL: {params.blog_url}" if params.blog_url else "",
                    "contact_name": (
                        f"- Editor/Contact: {params.contact_name}" if params.contact_name else ""
                    ),
                    "tone": params.tone,
                    "proposed_topics": (
                        f"\nPROPOSED TOPICS:\n{params.proposed_topics}"
                        if params.proposed_topics
                        else ""
                    ),
                },
                (business_context_block(params.business_profile),),
            )
        )

    async def personalize_email(
        self, email: PersonalizeEmailInput
    ) -> AIResponse[PersonalizedEmail]:
        """Rewrite a resolved template for one lead.

        The payload is never empty: when the call fails or the reply cannot
        be parsed it carries the original subject and body with
        ``personalized=False``.
        """
        lead = email.lead
        kb = lead.knowledge_base
        facts = [
            f"Name: {lead.name}",
            f"Company: {lead.company}",
            f"Score: {lead.score}/100",
            f"Insights: {lead.insights}" if lead.insights else "",
        ]
        if kb is not None:
            facts += [
                f"Industry: {kb.industry}" if kb.industry else "",
                f"Company Overview: {kb.company_overview}" if kb.company_overview else "",
                f"Talking Points: {', '.join(kb.talking_points)}" if kb.talking_points else "",
                f"Outreach Angle: {kb.outreach_angle}" if kb.outreach_angle else "",
            ]
        response = await self._run(
            _Call(
                OperationKind.EMAIL_PERSONALIZATION,
                {
                    "lead_context": "\n".join(f for f in facts if f),
                    "subject_template": email.subject_template,
                    "body_template": email.body_template,
                    "tone": email.tone.value,
                },
                (business_context_block(email.business_profile),),
                parse_context=ParseContext(
                    subject_template=email.subject_template,
                    body_template=email.body_template,
                ),
            )
        )
        if response.payload is None:
            original = PersonalizedEmail(
                subject=email.subject_template,
                html_body=email.body_template,
                personalized=False,
            )
            return dataclasses.replace(response, payload=original)
        return response


def create_service(
    config: FrozenConfig | None = None,
    *,
    adapter: GenerationAdapter | None = None,
    prompt_store: PromptStore | None = None,
    ledger: CreditLedger | None = None,
    telemetry: TelemetryContextProtocol | None = None,
    owner_id: str | None = None,
) -> GenerationService:
    """Create a service with defaults resolved from the environment.

    The real Gemini adapter is used only when ``use_real_api`` is set;
    otherwise the deterministic mock adapter answers. A prompt store is
    wrapped in a TTL cache unless caching is disabled in configuration.
    """
    # This is the only place where ambient configuration is resolved.
    final_config = config if config is not None else load_frozen_config()
    if adapter is None:
        adapter = (
            GoogleGenAIAdapter(final_config.api_key)
            if final_config.use_real_api
            else MockAdapter()
        )
    if prompt_store is not None and final_config.prompt_cache_ttl_seconds > 0:
        prompt_store = CachingPromptStore(
            prompt_store, ttl_seconds=final_config.prompt_cache_ttl_seconds
        )
    return GenerationService(
        adapter,
        final_config,
        prompt_store=prompt_store,
        ledger=ledger,
        telemetry=telemetry,
        owner_id=owner_id,
    )
