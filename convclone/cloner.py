"""Conversation cloning pipeline.

Locate -> detect cutoff -> rewrite -> update history and todos, strictly in
that order and on one thread. Nothing is written until the source has been
found and read; a target left half-written by a failed rewrite is removed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from pathlib import Path

from convclone.config import Config
from convclone.errors import (
    BaseDirectoryMissingError,
    CloneError,
    InvalidSessionIdError,
    TranscriptIOError,
    TranscriptNotFoundError,
)
from convclone.history import HistoryEntry, HistoryIndexer, display_text
from convclone.locator import TranscriptLocator, decode_project_dirname, is_session_id
from convclone.log_config import get_logger, log_timing
from convclone.records import IDENTIFIER_FIELDS, ConversationRecord, load_records
from convclone.remapper import (
    IdentifierRemapper,
    fresh_identifier,
    is_identifier,
    new_identifier,
)
from convclone.rewriter import RewriteStats, TranscriptRewriter
from convclone.todos import TaskListCopier
from convclone.truncation import find_cutoff

log = get_logger("cloner")


def make_clone_tag(now: datetime | None = None) -> str:
    """Build the clone tag, e.g. "[CLONED Jan 7 14:30]"."""
    now = now or datetime.now()
    return f"[CLONED {now:%b} {now.day} {now:%H:%M}]"


def validate_session_id(session_id: str) -> str:
    """Raise InvalidSessionIdError unless session_id is a canonical UUID."""
    if not is_session_id(session_id):
        raise InvalidSessionIdError(session_id)
    return session_id


def source_identifiers(records: list[ConversationRecord]) -> set[str]:
    """Every id the source uses, so none of them is handed out again."""
    ids = set()
    for record in records:
        for key in IDENTIFIER_FIELDS + ("sessionId",):
            value = record.data.get(key)
            if is_identifier(value):
                ids.add(value)
    return ids


@dataclass
class CloneOperation:
    """Everything fixed before the rewrite starts."""

    source_path: Path
    source_session_id: str
    new_session_id: str
    project_path: str
    target_path: Path
    clone_tag: str
    cutoff: int | None = None


@dataclass
class CloneResult:
    """Outcome of a successful clone."""

    operation: CloneOperation
    stats: RewriteStats
    history_entry: HistoryEntry | None = None
    todo_path: Path | None = None
    id_map: dict[str, str] = field(default_factory=dict)

    @property
    def new_session_id(self) -> str:
        return self.operation.new_session_id

    @property
    def target_path(self) -> Path:
        return self.operation.target_path


class ConversationCloner:
    """Clones transcripts under one Claude directory.

    Example:
        >>> cloner = ConversationCloner(Config())
        >>> result = cloner.clone("d96c899d-7501-4e81-a31b-e0095bb3b501", "/home/user/proj")
        >>> result.new_session_id  # doctest: +SKIP
    """

    def __init__(self, config: Config | None = None, id_generator=None):
        """Initialize cloner.

        Args:
            config: Paths and limits (default: Config())
            id_generator: Fresh id source (callable or iterator) shared by the
                session id and the remapper (default: random UUID4)
        """
        self.config = config or Config()
        if id_generator is None:
            id_generator = new_identifier
        elif not callable(id_generator):
            id_generator = partial(next, iter(id_generator))
        self.id_generator = id_generator
        self.locator = TranscriptLocator(self.config.projects_dir)
        self.history = HistoryIndexer(
            self.config.history_file, self.config.history_timestamp_offset_ms
        )
        self.todos = TaskListCopier(self.config.todos_dir)

    def clone(self, session_id: str, project_path: str | Path | None = None) -> CloneResult:
        """Clone a conversation.

        Args:
            session_id: Source session UUID
            project_path: Project the clone is filed under (default: the
                project the source transcript was found in)

        Returns:
            CloneResult describing the new session

        Raises:
            InvalidSessionIdError: Malformed session id (before any I/O)
            BaseDirectoryMissingError: Claude directory absent
            TranscriptNotFoundError: No transcript for session_id
            TranscriptIOError: Source unreadable or target unwritable
            IdentifierExhaustedError: Fresh id source failed
        """
        validate_session_id(session_id)
        if not self.config.claude_dir.is_dir():
            raise BaseDirectoryMissingError(self.config.claude_dir)

        source_path = self.locator.find_transcript(session_id, project_path)
        if source_path is None:
            available = [s["session_id"] for s in self.locator.list_sessions()]
            raise TranscriptNotFoundError(session_id, self.config.projects_dir, available)
        log.info(f"Found source conversation: {source_path}")

        if not project_path:
            project_path = decode_project_dirname(source_path.parent.name)

        try:
            with open(source_path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise TranscriptIOError(f"Could not read {source_path}: {e}", source_path) from e

        records = load_records(lines)
        cutoff = find_cutoff(records)
        reserved = source_identifiers(records) | {session_id}
        new_session_id = self._new_session_id(reserved)
        log.info(f"Generated new session ID: {new_session_id}")

        with IdentifierRemapper(self.id_generator, reserved=reserved | {new_session_id}) as remapper:
            operation = CloneOperation(
                source_path=source_path,
                source_session_id=session_id,
                new_session_id=new_session_id,
                project_path=str(project_path),
                target_path=self.locator.target_path(project_path, new_session_id),
                clone_tag=make_clone_tag(),
                cutoff=cutoff,
            )
            stats = self._write_target(operation, lines, remapper)
            id_map = remapper.mapping()

        result = CloneResult(operation=operation, stats=stats, id_map=id_map)
        log.success(f"Wrote {stats.records_emitted} lines to {operation.target_path}")

        log.info("Updating history file...")
        entry = self.history.build_entry(
            display_text(records, operation.clone_tag, self.config.display_max_length),
            new_session_id,
            operation.project_path,
        )
        result.history_entry = self.history.append(entry)

        if self.config.copy_todos:
            result.todo_path = self.todos.copy(session_id, new_session_id)

        log.success("Conversation cloned successfully!")
        return result

    def _new_session_id(self, reserved: set[str]) -> str:
        """Draw the new session id, distinct from every id in the source."""
        return fresh_identifier(self.id_generator, reserved.__contains__)

    def _write_target(
        self,
        operation: CloneOperation,
        lines: list[str],
        remapper: IdentifierRemapper,
    ) -> RewriteStats:
        """Rewrite the source into the target file, removing it on failure."""
        target = operation.target_path
        rewriter = TranscriptRewriter(
            operation.new_session_id, remapper, operation.clone_tag, operation.cutoff
        )
        log.info(f"Cloning conversation to: {target}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TranscriptIOError(f"Could not create {target.parent}: {e}", target.parent) from e

        try:
            with log_timing("rewrite transcript", log):
                with open(target, "w", encoding="utf-8") as out:
                    return rewriter.write(lines, out)
        except CloneError:
            target.unlink(missing_ok=True)
            raise
        except Exception as e:
            target.unlink(missing_ok=True)
            raise TranscriptIOError(f"Could not write {target}: {e}", target) from e


def clone_conversation(
    session_id: str,
    project_path: str | Path | None = None,
    config: Config | None = None,
) -> CloneResult:
    """Clone a conversation with default collaborators."""
    return ConversationCloner(config).clone(session_id, project_path)
