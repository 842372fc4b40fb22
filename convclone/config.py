"""Configuration for convclone.

Simple dataclass-based configuration with sensible defaults.
Override via environment variables with CONVCLONE_ prefix.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from convclone.log_config import get_logger

log = get_logger("config")

# Look for .env in the working directory and next to the package
_pkg_dir = Path(__file__).parent.parent
_env_loaded = load_dotenv(Path.cwd() / ".env") or load_dotenv(_pkg_dir / ".env")
log.debug(f"Loaded .env file: {_env_loaded}")


def _get_env(key: str, default: str) -> str:
    """Get environment variable with CONVCLONE_ prefix."""
    return os.getenv(f"CONVCLONE_{key}", default)


def _get_env_bool(key: str, default: bool) -> bool:
    """Get boolean environment variable."""
    val = os.getenv(f"CONVCLONE_{key}")
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


@dataclass
class Config:
    """convclone configuration.

    Attributes:
        claude_dir: Claude Code state directory (default: ~/.claude)
        display_max_length: Max characters of history display text (default: 200)
        history_timestamp_offset_ms: Added to "now" for the history row (default: 1000)
        copy_todos: Copy the task-list snapshot to the clone (default: True)
    """

    claude_dir: Path = field(
        default_factory=lambda: Path(_get_env("CLAUDE_DIR", str(Path.home() / ".claude")))
    )
    display_max_length: int = field(
        default_factory=lambda: int(_get_env("DISPLAY_MAX_LENGTH", "200"))
    )
    history_timestamp_offset_ms: int = field(
        default_factory=lambda: int(_get_env("HISTORY_OFFSET_MS", "1000"))
    )
    copy_todos: bool = field(
        default_factory=lambda: _get_env_bool("COPY_TODOS", True)
    )

    def __post_init__(self):
        """Ensure paths are Path objects."""
        if isinstance(self.claude_dir, str):
            self.claude_dir = Path(self.claude_dir)

        log.debug(f"HOME={os.environ.get('HOME', 'NOT SET')}")
        log.debug(f"claude_dir={self.claude_dir}")
        log.debug(f"claude_dir.exists={self.claude_dir.exists()}")
        log.debug(f"display_max_length={self.display_max_length}")
        log.debug(f"copy_todos={self.copy_todos}")

    @property
    def projects_dir(self) -> Path:
        """Directory holding one sub-directory of transcripts per project."""
        return self.claude_dir / "projects"

    @property
    def history_file(self) -> Path:
        """Append-only history index shown by `claude -r`."""
        return self.claude_dir / "history.jsonl"

    @property
    def todos_dir(self) -> Path:
        """Directory of per-session task-list snapshots."""
        return self.claude_dir / "todos"
