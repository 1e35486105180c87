import logging
from typing import List, Literal, Optional

from rollchat.memory.context import build_context_window, needs_compaction, window_start
from rollchat.memory.state import ConversationLog, RollingSummary
from rollchat.memory.summarizer import Summarizer
from rollchat.models import ChatMessage

logger = logging.getLogger(__name__)


class ConversationMemoryService:
    """
    A stateful service that owns a single conversation's memory: the full
    message log and the rolling summary of everything outside the active window.
    """

    def __init__(self, summarizer: Summarizer):
        self._log = ConversationLog()
        self._summary = RollingSummary()
        self._summarizer = summarizer

    @property
    def log(self) -> ConversationLog:
        return self._log

    @property
    def summary(self) -> RollingSummary:
        return self._summary

    def add_message(self, role: Literal["user", "assistant"], content: str) -> ChatMessage:
        """Appends a new message to the log."""
        if role not in ("user", "assistant"):
            raise ValueError("Role must be either 'user' or 'assistant'.")
        message = ChatMessage(role=role, content=content)
        self._log.append(message)
        return message

    def get_context_window(self) -> List[ChatMessage]:
        """The message list to submit for the next request."""
        return build_context_window(self._log, self._summary)

    def pending_summary_input(self) -> Optional[List[ChatMessage]]:
        """
        The messages that have left the active window but are not yet in the summary,
        or None if the summary is up to date.

        The first summary takes everything before the window; after that, the
        summary tracks how far it reaches, so messages missed by a failed turn or a
        failed summarization are picked up by the next update instead of being lost.
        """
        if not needs_compaction(self._log):
            return None
        start, stop = self._summary.covered, window_start(self._log)
        if stop <= start:
            return None
        return self._log.slice(start, stop)

    def update_summary_if_needed(self) -> bool:
        """
        Folds newly fallen-out messages into the rolling summary.

        Returns:
            True if the summary was created or replaced.

        Raises:
            SummarizationError: The summary is left at its previous value.
        """
        new_messages = self.pending_summary_input()
        if new_messages is None:
            return False

        covered = self._summary.covered + len(new_messages)
        updated = self._summarizer.summarize(self._summary.text, new_messages)
        self._summary.update(updated, covered=covered)
        logger.info(f"Summary now covers the first {covered} messages of the conversation.")
        return True
