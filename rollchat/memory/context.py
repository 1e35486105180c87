from typing import List

from rollchat.memory.state import ConversationLog, RollingSummary
from rollchat.models import ChatMessage

# Up to this many exchanges the full log is sent as-is.
MAX_FULL_EXCHANGES = 10
# The most recent messages that are always sent verbatim once compaction starts.
ACTIVE_WINDOW_MESSAGES = 2 * MAX_FULL_EXCHANGES


def needs_compaction(log: ConversationLog) -> bool:
    """True once the log holds more exchanges than can be sent in full."""
    return log.exchange_count > MAX_FULL_EXCHANGES


def window_start(log: ConversationLog) -> int:
    """Index of the first log message inside the active window."""
    return max(0, len(log) - ACTIVE_WINDOW_MESSAGES)


def build_context_window(log: ConversationLog, summary: RollingSummary) -> List[ChatMessage]:
    """
    Derives the exact message list to submit for the next request.

    While the log holds at most ten exchanges it is returned unmodified.
    Beyond that, only the active window is sent verbatim, preceded by the
    rolling summary as a single synthetic system message when one exists.
    """
    if not needs_compaction(log):
        return log.slice(0, len(log))

    context: List[ChatMessage] = []
    if summary.exists:
        context.append(ChatMessage(role="system", content=summary.text))
    context.extend(log.slice(window_start(log), len(log)))
    return context
