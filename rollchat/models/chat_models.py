from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single, immutable message exchanged with the chat service."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(
        ...,
        description="Who authored the message: the synthetic 'system', the human 'user' or the model 'assistant'.",
    )
    content: str = Field(..., description="The text of the message.")

    def as_line(self) -> str:
        """Renders the message as a `role: content` line, as used in prompts and dumps."""
        return f"{self.role}: {self.content}"
