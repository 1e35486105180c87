from .state import ConversationLog, RollingSummary
from .context import ACTIVE_WINDOW_MESSAGES, MAX_FULL_EXCHANGES, build_context_window
from .summarizer import Summarizer
from .service import ConversationMemoryService

__all__ = [
    "ConversationLog",
    "RollingSummary",
    "ACTIVE_WINDOW_MESSAGES",
    "MAX_FULL_EXCHANGES",
    "build_context_window",
    "Summarizer",
    "ConversationMemoryService",
]
