"""Transcript lookup under the Claude Code projects directory.

Claude Code keeps one directory per project under ~/.claude/projects/, named
by encoding the absolute project path ('/' -> '-', leading '-'), e.g.:
    /home/user/myproject -> -home-user-myproject
Each directory holds one <session-id>.jsonl transcript per conversation.
"""

import re
from pathlib import Path

from convclone.log_config import get_logger

log = get_logger("locator")

# Canonical session id: 8-4-4-4-12 lowercase hex groups
SESSION_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
)


def is_session_id(value: str) -> bool:
    """Check whether value is a canonical lowercase session UUID."""
    return bool(SESSION_ID_PATTERN.match(value or ""))


def encode_project_path(project_path: str | Path) -> str:
    """Encode a project path into its projects/ directory name.

    Examples:
        >>> encode_project_path("/home/user/myproject")
        '-home-user-myproject'
    """
    return "-" + str(project_path).lstrip("/").replace("/", "-")


def decode_project_dirname(dirname: str) -> str:
    """Turn a projects/ directory name back into a path.

    Hyphens inside directory names are indistinguishable from separators,
    so '-home-user-my-project' decodes to '/home/user/my/project'.

    Examples:
        >>> decode_project_dirname("-home-user-myproject")
        '/home/user/myproject'
    """
    if dirname.startswith("-"):
        dirname = "/" + dirname[1:]
    return dirname.replace("-", "/")


class TranscriptLocator:
    """Finds and lists session transcripts.

    Reads transcripts from ~/.claude/projects/ by default.
    """

    def __init__(self, projects_dir: Path | None = None):
        """Initialize locator.

        Args:
            projects_dir: Directory containing project directories
                (default: ~/.claude/projects)
        """
        self.projects_dir = projects_dir or Path.home() / ".claude" / "projects"
        log.debug(f"TranscriptLocator initialized: projects_dir={self.projects_dir}")

    def project_dir(self, project_path: str | Path) -> Path:
        """Directory holding the transcripts of project_path."""
        return self.projects_dir / encode_project_path(project_path)

    def target_path(self, project_path: str | Path, session_id: str) -> Path:
        """Path a transcript for session_id in project_path is written to."""
        return self.project_dir(project_path) / f"{session_id}.jsonl"

    def find_transcript(self, session_id: str, project_path: str | Path | None = None) -> Path | None:
        """Find the transcript of a session.

        Looks in the project's own directory first, then searches every
        project directory.

        Args:
            session_id: Session UUID
            project_path: Project the session is expected under (optional)

        Returns:
            Path to transcript if found
        """
        log.debug(f"find_transcript called: session_id={session_id}, project_path={project_path}")

        if project_path:
            candidate = self.target_path(project_path, session_id)
            log.trace(f"Checking: {candidate}")
            if candidate.is_file():
                return candidate

        if not self.projects_dir.exists():
            log.warning(f"Projects directory does not exist: {self.projects_dir}")
            return None

        for found in sorted(self.projects_dir.rglob(f"{session_id}.jsonl")):
            if found.is_file():
                log.info(f"Found session {session_id} outside its project at {found}")
                return found

        log.warning(f"Session {session_id} not found under {self.projects_dir}")
        return None

    def list_sessions(self) -> list[dict]:
        """List available sessions.

        Returns:
            List of session info dicts with session_id, project, path,
            size_kb, modified; newest first
        """
        sessions = []
        if not self.projects_dir.exists():
            log.warning(f"Projects directory does not exist: {self.projects_dir}")
            return sessions

        for trace_file in self.projects_dir.rglob("*.jsonl"):
            if not is_session_id(trace_file.stem):
                continue
            try:
                stat = trace_file.stat()
            except OSError as e:
                log.warning(f"Could not stat {trace_file}: {e}")
                continue
            sessions.append({
                "session_id": trace_file.stem,
                "project": decode_project_dirname(trace_file.parent.name),
                "path": str(trace_file),
                "size_kb": stat.st_size // 1024,
                "modified": stat.st_mtime,
            })

        log.debug(f"Found {len(sessions)} sessions")
        return sorted(sessions, key=lambda x: x["modified"], reverse=True)
