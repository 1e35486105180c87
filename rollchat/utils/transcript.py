import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from rollchat.models import ChatMessage

logger = logging.getLogger(__name__)


def write_dump(path: Path, header: str, messages: Iterable[ChatMessage]) -> Path:
    """Writes a header line followed by one `role: content` line per message."""
    lines = [header] + [msg.as_line() for msg in messages]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class DebugDumpWriter:
    """
    Writes the plain-text debug files: a snapshot of the context that will be
    sent next, refreshed after every turn, and a timestamped full transcript at exit.
    """

    def __init__(self, output_dir: Path, context_file: str = "debug_context.txt", transcript_prefix: str = "chat_transcript"):
        self.output_dir = Path(output_dir)
        self.context_file = context_file
        self.transcript_prefix = transcript_prefix

    def write_context_snapshot(self, context: Iterable[ChatMessage]) -> Path:
        return write_dump(self.output_dir / self.context_file, "Context Prompt:", context)

    def write_transcript(self, conversation: Iterable[ChatMessage], now: Optional[datetime] = None) -> Path:
        timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
        path = self.output_dir / f"{self.transcript_prefix}_{timestamp}.txt"
        write_dump(path, "Conversation Transcript:", conversation)
        logger.info(f"Transcript written to {path}")
        return path
