"""Configuration constants for the assistant pipeline."""

# Wake phrase and conversation closing
DEFAULT_WAKE_PHRASE = "hey llama"
DEFAULT_CLOSING_PHRASES = (
    "thanks",
    "thank you",
    "thanks llama",
    "thank you llama",
    "that's all",
    "that is all",
    "that's it",
    "that is it",
    "goodbye",
    "bye",
    "stop",
    "stop listening",
    "cancel",
)

# Conversation history
DEFAULT_CONVERSATION_TIMEOUT_MINUTES = 5
DEFAULT_MAX_CONVERSATION_TURNS = 10
DEFAULT_FOLLOW_UP_WINDOW_SECONDS = 15.0

# LLM Configuration
DEFAULT_OLLAMA_MODEL = "llama3.2:3b"
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_OLLAMA_TIMEOUT = 60.0  # seconds
DEFAULT_OLLAMA_MAX_RETRIES = 3
DEFAULT_OLLAMA_TEMPERATURE = 0.2

# Speaker naming
GUEST_SPEAKER_NAME = "Guest"
SPEAKER_NAME_PLACEHOLDER = "{speaker_name}"

# Prompt Templates
# Placeholder: {speaker_name}
DEFAULT_SYSTEM_PROMPT = (
    "You are Llama, a helpful voice assistant. Keep responses concise "
    "and conversational, suitable for reading on a small UI display. "
    "The current user is {speaker_name}. Be friendly but brief. "
    "You must respond with a single JSON object only. Do not wrap in "
    "code fences or add extra text. Never put tool call JSON inside "
    'the "text" field.'
)

# Placeholder: {speaker_name}
RESPONSE_AGENT_SYSTEM_PROMPT = (
    "You are Llama, a friendly voice assistant. Your job is to take skill results "
    "and turn them into natural, conversational responses. Be concise and warm. "
    "The current user is {speaker_name}. "
    "IMPORTANT: Respond with plain text only. Do NOT use JSON format. "
    "Do NOT wrap your response in code blocks or quotes."
)

# Placeholder: {request}
RETRY_PROMPT_TEMPLATE = (
    "Return ONLY a single JSON action plan for the user request below.\n"
    "Do not add any extra text.\n"
    'To reply with text, use: {{"type":"respond","text":"<your response>"}}\n'
    "\n"
    "User request: {request}"
)

# Fixed replies
FALLBACK_RESPONSE = "Sorry, I didn't quite get that. Could you say it another way?"
LLM_UNAVAILABLE_RESPONSE = "Sorry, I can't reach my language model right now."
REPEAT_REQUEST_RESPONSE = "Sorry, I missed that. Please repeat."
