"""Configuration constants for action plans and skill dispatch."""

# Skill execution
DEFAULT_SKILL_TIMEOUT = 15.0  # seconds, per call

# Pending confirmations
DEFAULT_CONFIRMATION_EXPIRY = 30.0  # seconds

# Confirmation replies, matched against the whole normalized utterance
CONFIRMATION_IGNORED_TOKENS = frozenset({"please", "thanks", "thank", "you"})
CANCEL_PHRASES = frozenset({("cancel",), ("never", "mind"), ("nevermind",)})
AFFIRMATIVE_PHRASES = frozenset(
    {
        ("yes",),
        ("yeah",),
        ("yep",),
        ("sure",),
        ("ok",),
        ("okay",),
        ("do", "it"),
        ("go", "ahead"),
    }
)
NEGATIVE_PHRASES = frozenset({("no",), ("nope",), ("nah",), ("dont",), ("do", "not")})

# Fixed replies
DENIED_RESPONSE = "Okay, I won't do that."
CANCELLED_RESPONSE = "Okay, cancelled."
REPEATED_CONFIRMATION_MESSAGE = "Skill asked for confirmation again after it was confirmed"

# Manifest sent to the language model
NO_SKILLS_MANIFEST = (
    "No skills are currently enabled. "
    "You must respond with a single JSON object only, in the format: "
    '{"type":"respond","text":"<your response>"}\n'
)
MANIFEST_HEADER = (
    "You have access to the following skills (tools). "
    "You must respond with a single JSON object only. Do not wrap in code fences. "
    "Do not add extra text before or after the JSON. "
    "To use a skill, respond with JSON in the format: "
    '{"type":"call_skills","calls":[{"skillId":"<id>","arguments":{...}}]}\n'
    'If a user asks to perform multiple actions, include multiple calls in the "calls" array.\n'
    'To respond with text only, use: {"type":"respond","text":"<your response>"}\n'
    'Never put tool call JSON inside the "text" field.\n\n'
    "Available skills:\n\n"
)
MANIFEST_FOOTER = (
    "---\n"
    "IMPORTANT: Always respond with valid JSON. Choose 'respond' for conversational "
    "replies or 'call_skills' when the user's request matches an available skill.\n"
)
