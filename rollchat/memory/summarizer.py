from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from omegaconf import DictConfig

from rollchat.errors import EmptyResponseError, SummarizationError, TransportOrRemoteError
from rollchat.llm import LLMService, PromptManager
from rollchat.models import ChatMessage

logger = logging.getLogger(__name__)


def format_conversation(messages: Sequence[ChatMessage]) -> str:
    return "\n".join(msg.as_line() for msg in messages)


class Summarizer:
    """
    Compresses a slice of conversation into the rolling summary text.

    `summarize` is a pure (prior, new_messages) -> updated mapping on top of
    the remote service; it holds no conversation state of its own.
    """

    def __init__(self, llm_service: LLMService, update_prompt_template: str):
        """
        Args:
            llm_service: Service bound to the summarization model and its
                         system/user prompt templates (used for fresh digests).
            update_prompt_template: User prompt used to merge new messages into
                                    an existing summary.
        """
        self._llm = llm_service
        self._update_prompt_template = update_prompt_template

    @classmethod
    def from_config(cls, app_config: DictConfig, prompts_base_path: Path) -> Summarizer:
        summarizer_config = app_config.app.summarizer
        llm_service = LLMService.from_config(
            provider_key=summarizer_config.provider_key,
            llm_config=app_config.llms,
            prompts_base_path=prompts_base_path,
            agent_prompts_dir=summarizer_config.prompts_dir,
        )
        update_prompt = PromptManager(prompts_base_path).load_prompt(
            summarizer_config.prompts_dir, summarizer_config.update_prompt_file
        )
        return cls(llm_service=llm_service, update_prompt_template=update_prompt)

    def summarize(self, prior_summary: Optional[str], new_messages: Sequence[ChatMessage]) -> str:
        """
        Produces a fresh digest of `new_messages`, or merges them into `prior_summary`.

        Raises:
            SummarizationError: If the remote call fails or returns no text.
        """
        variables = {
            "previous_summary": prior_summary or "",
            "conversation_text": format_conversation(new_messages),
        }
        override = self._update_prompt_template if prior_summary is not None else None

        logger.info(
            f"{'Updating' if prior_summary is not None else 'Creating'} summary "
            f"from {len(new_messages)} message(s)."
        )
        try:
            return self._llm.generate_text(variables, user_prompt_template_override=override)
        except (TransportOrRemoteError, EmptyResponseError) as e:
            raise SummarizationError(f"Error summarizing: {e}") from e
