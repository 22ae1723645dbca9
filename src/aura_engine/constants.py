"""
Project-wide constants for the Aura generation engine
"""  # noqa: D200, D212, D415

# ==============================================================================
# Model and Network Configuration
# ==============================================================================

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_TOP_K = 40

# Retry and timeout settings
MAX_ATTEMPTS = 3
BACKOFF_STEP_SECONDS = 1.0  # linear: attempt * step
TIMEOUT_SECONDS = 15.0  # single-shot generation
MULTI_TURN_TIMEOUT_SECONDS = 20.0  # chat, category content, strategy
EXTENDED_TIMEOUT_SECONDS = 30.0  # sequences, search-grounded research, blog

# ==============================================================================
# Prompt Store Configuration
# ==============================================================================

PROMPT_CACHE_TTL_SECONDS = 300  # 5 minutes
FALLBACK_PROMPT_VERSION = 0
CUSTOM_PROMPT_SUFFIX = "_custom"

# ==============================================================================
# Extraction Configuration
# ==============================================================================

MAX_EXTRACTION_CHARS = 1_000_000  # inputs are truncated before matching
MIN_HEURISTIC_TEXT_CHARS = 50  # below this, no segmentation fallback
MIN_HEURISTIC_SECTION_CHARS = 20

# ==============================================================================
# Failure Sentinels
# ==============================================================================

SENTINEL_OVERLOADED = "NEURAL TIMEOUT"
SENTINEL_CRITICAL = "CRITICAL FAILURE"
OVERLOADED_MESSAGE = (
    "NEURAL TIMEOUT: The intelligence engine is currently overloaded. "
    "Please try again in 30 seconds."
)
CRITICAL_MESSAGE = "CRITICAL FAILURE: Neural links disconnected."
QUOTA_DENIED_MESSAGE = "Insufficient credits for this operation."

# ==============================================================================
# Credit Costs (per operation)
# ==============================================================================

CREDIT_COSTS: dict[str, int] = {
    "email_sequence": 3,
    "content_generation": 2,
    "content_suggestions": 1,
    "lead_research": 2,
    "command_center": 2,
    "dashboard_insights": 1,
    "pipeline_strategy": 3,
    "blog_content": 3,
    "social_caption": 1,
    "business_analysis": 2,
    "workflow_optimization": 2,
    "guest_post_pitch": 2,
    "follow_up_questions": 1,
}

# ==============================================================================
# Email Sequence Configuration
# ==============================================================================

CADENCE_DAYS: dict[str, int] = {
    "daily": 1,
    "every_2_days": 2,
    "every_3_days": 3,
    "weekly": 7,
}
DEFAULT_CADENCE_DAYS = 2

GOAL_LABELS: dict[str, str] = {
    "book_meeting": "Book a Meeting",
    "product_demo": "Schedule a Product Demo",
    "nurture": "Nurture & Build Relationship",
    "re_engage": "Re-engage Cold Leads",
    "upsell": "Upsell Existing Customers",
}

# ==============================================================================
# Command Center Configuration
# ==============================================================================

CHAT_LEAD_LIMIT = 15
CHAT_HISTORY_TURNS = 10
CREATIVE_TEMPERATURE = 0.85
ADVISORY_TEMPERATURE = 0.7

# Lead heuristics shared by context builders and local fallback
HOT_LEAD_SCORE = 80
STALE_AFTER_DAYS = 14
RECENT_WITHIN_DAYS = 7

# Confidence markers attached to chat replies
REMOTE_CONFIDENCE = 90
TEMPLATE_CONFIDENCE = 85
GENERIC_CONFIDENCE = 60
LOCAL_MODEL_NAME = "local-template"  # reported on locally rendered answers
