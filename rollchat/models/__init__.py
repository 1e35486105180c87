from .chat_models import ChatMessage

__all__ = ["ChatMessage"]
