"""Assistant orchestration: conversation, language model and coordinator."""

from .command_processor import CommandProcessor
from .conversation import ConversationManager
from .coordinator import AssistantCoordinator
from .interfaces import LanguageModel
from .llm_client import OllamaLanguageModel
from .models import AssistantResponse, AssistantState, ConversationRole, ConversationTurn
from .response_agent import ResponseAgent

__all__ = [
    "AssistantCoordinator",
    "AssistantResponse",
    "AssistantState",
    "CommandProcessor",
    "ConversationManager",
    "ConversationRole",
    "ConversationTurn",
    "LanguageModel",
    "OllamaLanguageModel",
    "ResponseAgent",
]
