from typing import Iterator, List, Optional

from rollchat.models import ChatMessage


class ConversationLog:
    """
    The append-only record of the conversation.

    This is the "source of truth" for everything that was said. Only the
    context derived from it is ever compacted; the log itself never shrinks.
    """

    def __init__(self):
        self._messages: List[ChatMessage] = []

    def append(self, message: ChatMessage) -> None:
        self._messages.append(message)

    def slice(self, start: int, stop: int) -> List[ChatMessage]:
        """
        Returns a copy of `messages[start:stop]`.

        Raises:
            IndexError: If the range is inverted, negative, or runs past the end of the log.
        """
        if start < 0 or stop < start or stop > len(self._messages):
            raise IndexError(
                f"Slice [{start}:{stop}] is out of range for a log of {len(self._messages)} messages."
            )
        return self._messages[start:stop]

    def tail(self, count: int) -> List[ChatMessage]:
        """Returns the last `count` messages, or all of them if the log is shorter."""
        start = max(0, len(self._messages) - count)
        return self._messages[start:]

    @property
    def exchange_count(self) -> int:
        return len(self._messages) // 2

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._messages))


class RollingSummary:
    """
    The single rolling digest of every message older than the active window.

    `covered` is the number of leading log messages the text represents.
    Once set, the summary is only ever replaced through `update`, never cleared.
    """

    def __init__(self):
        self._text: Optional[str] = None
        self._covered: int = 0

    @property
    def text(self) -> Optional[str]:
        return self._text

    @property
    def covered(self) -> int:
        return self._covered

    @property
    def exists(self) -> bool:
        return self._text is not None

    def update(self, new_value: str, covered: int) -> None:
        if covered < self._covered:
            raise ValueError(
                f"A summary update cannot move backwards (covered {self._covered} -> {covered})."
            )
        self._text = new_value
        self._covered = covered
