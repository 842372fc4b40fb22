"""Task-list snapshot copying.

Path pattern: ~/.claude/todos/<session-id>-agent-<session-id>.json

The file is opaque to convclone and is copied byte-for-byte under the new
session id.
"""

import shutil
from pathlib import Path

from convclone.errors import TranscriptIOError
from convclone.log_config import get_logger

log = get_logger("todos")


def todo_filename(session_id: str) -> str:
    """Name of the main-agent task-list file of a session."""
    return f"{session_id}-agent-{session_id}.json"


class TaskListCopier:
    """Duplicates a session's task list under a new session id."""

    def __init__(self, todos_dir: Path):
        self.todos_dir = Path(todos_dir)

    def copy(self, old_session_id: str, new_session_id: str) -> Path | None:
        """Copy the task list if the old session has one.

        Returns:
            Path of the new file, or None when there was nothing to copy

        Raises:
            TranscriptIOError: If the copy fails
        """
        source = self.todos_dir / todo_filename(old_session_id)
        if not source.is_file():
            log.debug(f"No todo file for {old_session_id}")
            return None

        target = self.todos_dir / todo_filename(new_session_id)
        log.info("Copying todo file...")
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            raise TranscriptIOError(f"Could not copy todo file: {e}", target) from e
        return target
