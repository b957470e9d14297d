"""Action plans: parsing model output and dispatching skill calls."""

from .arguments import (
    optional_bool,
    optional_int,
    optional_string,
    optional_string_list,
    require_string,
)
from .confirmation import ConfirmationTracker, classify_confirmation_reply
from .dispatcher import SkillDispatcher, dedupe_calls
from .models import (
    ActionPlan,
    ArgumentKind,
    ArgumentValue,
    CallSkills,
    CallStatus,
    ConfirmationReply,
    ConfirmationResolution,
    DispatchResult,
    NeedsConfirmation,
    PendingConfirmation,
    Respond,
    SkillCall,
    SkillContext,
    SkillOutcome,
    SkillResult,
    SkillSummary,
    SummaryStatus,
)
from .parser import parse_action_plan
from .skills import Skill, SkillRegistry

__all__ = [
    "ActionPlan",
    "ArgumentKind",
    "ArgumentValue",
    "CallSkills",
    "CallStatus",
    "classify_confirmation_reply",
    "ConfirmationReply",
    "ConfirmationResolution",
    "ConfirmationTracker",
    "dedupe_calls",
    "DispatchResult",
    "NeedsConfirmation",
    "optional_bool",
    "optional_int",
    "optional_string",
    "optional_string_list",
    "parse_action_plan",
    "PendingConfirmation",
    "require_string",
    "Respond",
    "Skill",
    "SkillCall",
    "SkillContext",
    "SkillDispatcher",
    "SkillOutcome",
    "SkillRegistry",
    "SkillResult",
    "SkillSummary",
    "SummaryStatus",
]
