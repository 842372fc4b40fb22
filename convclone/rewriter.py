"""Streaming transcript rewriter.

Single forward pass over the source lines. Each retained record gets the new
session id, remapped message identifiers, and (for the first clean user
message only) the clone tag. Once the cutoff line is reached the rewriter
stops and discards the rest of the transcript.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import IO, Iterable, Iterator

from convclone.log_config import get_logger
from convclone.records import IDENTIFIER_FIELDS, ConversationRecord
from convclone.remapper import IdentifierRemapper, is_identifier

log = get_logger("rewriter")


class RewriterState(str, Enum):
    EMITTING = "emitting"
    STOPPED = "stopped"


@dataclass
class RewriteStats:
    """Counters for one rewrite pass."""

    lines_read: int = 0
    records_emitted: int = 0
    blank_lines: int = 0
    malformed_lines: int = 0
    lines_truncated: int = 0
    identifiers_remapped: int = 0
    tagged_line: int | None = None

    @property
    def tagged(self) -> bool:
        return self.tagged_line is not None

    def to_dict(self) -> dict:
        return asdict(self)


class TranscriptRewriter:
    """Rewrites one transcript into an independent copy.

    Attributes:
        new_session_id: Session id stamped on every emitted record
        remapper: Identifier map for this operation
        clone_tag: Marker prefixed to the first clean user message
        cutoff: 1-based line number to stop at (None keeps everything)
        state: EMITTING until the cutoff is reached, then STOPPED
        stats: Counters for the pass
    """

    def __init__(
        self,
        new_session_id: str,
        remapper: IdentifierRemapper,
        clone_tag: str,
        cutoff: int | None = None,
    ):
        self.new_session_id = new_session_id
        self.remapper = remapper
        self.clone_tag = clone_tag
        self.cutoff = cutoff
        self.state = RewriterState.EMITTING
        self.stats = RewriteStats()

    def rewrite(self, lines: Iterable[str]) -> Iterator[str]:
        """Yield rewritten lines (without trailing newlines).

        Args:
            lines: Source transcript lines in order
        """
        for line_no, raw in enumerate(lines, start=1):
            self.stats.lines_read += 1
            if self.cutoff is not None and line_no >= self.cutoff:
                self.state = RewriterState.STOPPED
            if self.state is RewriterState.STOPPED:
                self.stats.lines_truncated += 1
                continue

            line = raw.strip()
            if not line:
                self.stats.blank_lines += 1
                continue

            try:
                record = ConversationRecord.from_line(line_no, line)
            except (ValueError, RecursionError) as e:
                # json.JSONDecodeError is a ValueError; RecursionError on deep nesting
                self.stats.malformed_lines += 1
                log.warning(f"Dropping undecodable line {line_no}: {e}")
                continue

            self.rewrite_record(record)
            self.stats.records_emitted += 1
            yield record.to_line()

        if self.stats.lines_truncated:
            log.debug(f"Truncated {self.stats.lines_truncated} lines from line {self.cutoff}")

    def rewrite_record(self, record: ConversationRecord) -> ConversationRecord:
        """Apply session, identifier and tag substitution in place."""
        data = record.data
        if "sessionId" in data:
            data["sessionId"] = self.new_session_id

        for key in IDENTIFIER_FIELDS:
            value = data.get(key)
            if value is None:
                continue
            if is_identifier(value):
                data[key] = self.remapper.resolve(value)
                self.stats.identifiers_remapped += 1
            else:
                log.trace(f"Line {record.line_no}: leaving {key}={value!r} unchanged")

        if not self.stats.tagged and record.is_clean_user_message:
            record.prefix_text(f"{self.clone_tag} ")
            self.stats.tagged_line = record.line_no
            log.debug(f"Tagged first user message at line {record.line_no}")
        return record

    def write(self, lines: Iterable[str], out: IO[str]) -> RewriteStats:
        """Rewrite lines into an open text stream, one record per line."""
        for line in self.rewrite(lines):
            out.write(line)
            out.write("\n")
        return self.stats
