from .llm_factory import LLMFactory
from .prompt_manager import PromptManager
from .llm_service import LLMService, to_langchain_messages

__all__ = [
    "LLMFactory",
    "PromptManager",
    "LLMService",
    "to_langchain_messages",
]
