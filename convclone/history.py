"""History index updates.

~/.claude/history.jsonl is the list `claude -r` offers for resuming. A clone
becomes resumable by appending one row that points at the new session. Rows
are only ever appended, each in a single write.
"""

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterable

from convclone.errors import TranscriptIOError
from convclone.log_config import get_logger
from convclone.records import ConversationRecord

log = get_logger("history")

# Display text used when the source has no user message to show
FALLBACK_DISPLAY = "[Cloned conversation]"


@dataclass
class HistoryEntry:
    """One row of the history index.

    Attributes:
        display: Text shown in the resume picker
        pastedContents: Pasted attachments (always empty for clones)
        timestamp: Epoch milliseconds
        project: Absolute project path
        sessionId: Session the row resumes
    """

    display: str
    timestamp: int
    project: str
    sessionId: str
    pastedContents: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary in the field order Claude Code writes."""
        data = asdict(self)
        return {
            "display": data["display"],
            "pastedContents": data["pastedContents"],
            "timestamp": data["timestamp"],
            "project": data["project"],
            "sessionId": data["sessionId"],
        }


def display_text(records: Iterable[ConversationRecord], clone_tag: str, max_length: int = 200) -> str:
    """Build the picker text from the first clean user message.

    Args:
        records: Decoded source records in order
        clone_tag: Tag prefixed to the text
        max_length: Max characters kept from the message

    Returns:
        "<tag> <message text>" with newlines collapsed
    """
    text = ""
    for record in records:
        if record.is_clean_user_message:
            text = record.text
            break
    text = " ".join(text.split())[:max_length] or FALLBACK_DISPLAY
    return f"{clone_tag} {text}"


class HistoryIndexer:
    """Appends rows to the shared history index."""

    def __init__(self, history_file: Path, timestamp_offset_ms: int = 1000):
        """Initialize indexer.

        Args:
            history_file: Path to history.jsonl
            timestamp_offset_ms: Added to the current time so the clone sorts
                after the conversation it was started from
        """
        self.history_file = Path(history_file)
        self.timestamp_offset_ms = timestamp_offset_ms

    def build_entry(self, display: str, session_id: str, project_path: str) -> HistoryEntry:
        return HistoryEntry(
            display=display,
            timestamp=int(time.time() * 1000) + self.timestamp_offset_ms,
            project=str(project_path),
            sessionId=session_id,
        )

    def append(self, entry: HistoryEntry) -> HistoryEntry:
        """Append one entry.

        Raises:
            TranscriptIOError: If the history file cannot be written
        """
        line = json.dumps(entry.to_dict(), ensure_ascii=False, separators=(",", ":")) + "\n"
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.history_file, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            raise TranscriptIOError(f"Could not update history file: {e}", self.history_file) from e
        log.info(f"History entry added for session {entry.sessionId}")
        return entry
