from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from omegaconf import DictConfig

from rollchat.errors import EmptyResponseError, TransportOrRemoteError
from rollchat.llm.llm_factory import LLMFactory
from rollchat.llm.prompt_manager import PromptManager
from rollchat.models import ChatMessage

logger = logging.getLogger(__name__)

_MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: Sequence[ChatMessage]) -> List[BaseMessage]:
    """Converts conversation messages into the LangChain message objects clients expect."""
    return [_MESSAGE_TYPES[msg.role](content=msg.content) for msg in messages]


class LLMService:
    """
    A high-level interface for talking to one configured chat model.

    It either submits a ready-made message list (`complete`) or renders its
    prompt templates with variables first (`generate_text`). Client failures
    are translated into the application's error taxonomy.
    """

    def __init__(
        self,
        llm_client: BaseChatModel,
        system_prompt_template: Optional[str] = None,
        human_prompt_template: Optional[str] = None,
    ):
        self.llm_client = llm_client
        self.system_prompt_template = system_prompt_template
        self.human_prompt_template = human_prompt_template

    @classmethod
    def from_config(
        cls,
        provider_key: str,
        llm_config: DictConfig,
        prompts_base_path: Optional[Path] = None,
        agent_prompts_dir: Optional[str] = None,
        model_override: Optional[str] = None,
    ) -> LLMService:
        """Initializes the complete LLM stack for a specific provider and, optionally, a prompt set."""
        llm_factory = LLMFactory(llm_config=llm_config)
        llm_client = llm_factory.create_llm_client(provider_key, model=model_override)

        system_prompt_template, human_prompt_template = None, None
        if agent_prompts_dir is not None:
            if prompts_base_path is None:
                raise ValueError("A prompts_base_path is required when agent_prompts_dir is given.")
            prompt_manager = PromptManager(prompts_base_path=prompts_base_path)
            system_prompt_template, human_prompt_template = prompt_manager.get_standard_prompts(agent_prompts_dir)

        return cls(
            llm_client=llm_client,
            system_prompt_template=system_prompt_template,
            human_prompt_template=human_prompt_template,
        )

    def _build_messages(
        self,
        variables: Dict[str, Any],
        user_prompt_template_override: Optional[str] = None
    ) -> List[BaseMessage]:
        """Helper to build the list of messages for the LLM."""
        messages: List[BaseMessage] = []

        if self.system_prompt_template:
            system_content = self.system_prompt_template.format(**variables)
            messages.append(SystemMessage(content=system_content))

        human_template = user_prompt_template_override if user_prompt_template_override is not None else self.human_prompt_template

        if human_template is None:
            raise ValueError(
                "No user prompt template available. "
                "Provide a default 'user.prompt' or supply a 'user_prompt_template_override'."
            )

        human_content = human_template.format(**variables)
        messages.append(HumanMessage(content=human_content))
        return messages

    def _invoke(self, messages: List[BaseMessage]) -> str:
        try:
            response = self.llm_client.invoke(messages)
        except Exception as e:
            logger.debug("LLM client call failed", exc_info=True)
            raise TransportOrRemoteError(f"Request to the chat service failed: {e}") from e

        if not hasattr(response, 'content'):
            response_type = type(response).__name__
            raise EmptyResponseError(
                f"The response from the LLM client (type: {response_type}) does not have a 'content' attribute."
            )

        content = response.content if isinstance(response.content, str) else str(response.content or "")
        if not content.strip():
            raise EmptyResponseError("No response returned by the API.")
        return content

    def complete(self, messages: Sequence[ChatMessage]) -> str:
        """Submits the given conversation messages and returns the reply text."""
        return self._invoke(to_langchain_messages(messages))

    def generate_text(self, variables: Dict[str, Any], user_prompt_template_override: Optional[str] = None) -> str:
        """Generates a raw text response from the LLM using the prompt templates."""
        messages = self._build_messages(variables, user_prompt_template_override)
        return self._invoke(messages)
