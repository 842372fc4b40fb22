"""Transcript record model.

A transcript is newline-delimited JSON, one event object per line. Records
are decoded into ConversationRecord, which exposes the handful of fields the
clone pipeline reads or rewrites and keeps every other key untouched, in
its original order, so re-encoding yields the same object shape.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

# Fields that jointly encode the message-linkage tree and share one id namespace
IDENTIFIER_FIELDS = ("uuid", "parentUuid", "messageId")

# Keys whose string values carry user-visible text
PAYLOAD_KEYS = ("content", "text")


@dataclass
class ConversationRecord:
    """One decoded transcript line.

    Attributes:
        line_no: 1-based line number in the source transcript
        data: Decoded JSON object (mutated in place by the rewriter)
    """

    line_no: int
    data: dict[str, Any]

    @classmethod
    def from_line(cls, line_no: int, line: str) -> "ConversationRecord":
        """Decode a transcript line.

        Raises:
            ValueError: If the line is not a JSON object
        """
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError(f"line {line_no} is not a JSON object")
        return cls(line_no=line_no, data=data)

    def to_line(self) -> str:
        """Encode back to a compact JSON line (no trailing newline).

        Non-ASCII text is kept as is unless the record holds an unpaired
        surrogate, which UTF-8 cannot carry; then the whole line is escaped.
        """
        line = json.dumps(self.data, ensure_ascii=False, separators=(",", ":"))
        try:
            line.encode("utf-8")
        except UnicodeEncodeError:
            return json.dumps(self.data, separators=(",", ":"))
        return line

    @property
    def type(self) -> str | None:
        return self.data.get("type")

    @property
    def session_id(self) -> str | None:
        return self.data.get("sessionId")

    @property
    def uuid(self) -> str | None:
        return self.data.get("uuid")

    @property
    def parent_uuid(self) -> str | None:
        return self.data.get("parentUuid")

    @property
    def message_id(self) -> str | None:
        return self.data.get("messageId")

    @property
    def is_meta(self) -> bool:
        return self.data.get("isMeta") is True

    def content_blocks(self) -> Iterator[dict]:
        """Yield structured content blocks (top level and inside `message`)."""
        containers = [self.data]
        message = self.data.get("message")
        if isinstance(message, dict):
            containers.append(message)
        for container in containers:
            content = container.get("content")
            if isinstance(content, list):
                for block in content:
                    if isinstance(block, dict):
                        yield block

    @property
    def is_tool_result(self) -> bool:
        """True for tool output echoed back under the user role."""
        if self.type == "tool_result":
            return True
        return any(block.get("type") == "tool_result" for block in self.content_blocks())

    @property
    def is_clean_user_message(self) -> bool:
        """True for user-authored, user-visible messages.

        Excludes meta records and tool results, which are also typed "user".
        """
        return self.type == "user" and not self.is_meta and not self.is_tool_result

    def text_slots(self) -> list[tuple[dict, str]]:
        """Locate every string text payload as (container, key) pairs.

        Covers top-level `content`/`text`, `message.content`/`message.text`
        and `text` of blocks in a `content` list.
        """
        slots: list[tuple[dict, str]] = []
        containers = [self.data]
        message = self.data.get("message")
        if isinstance(message, dict):
            containers.append(message)

        for container in containers:
            for key in PAYLOAD_KEYS:
                if isinstance(container.get(key), str):
                    slots.append((container, key))
        for block in self.content_blocks():
            if block.get("type", "text") == "text" and isinstance(block.get("text"), str):
                slots.append((block, "text"))
        return slots

    @property
    def text(self) -> str:
        """All text payloads joined by newlines ("" when there are none)."""
        return "\n".join(container[key] for container, key in self.text_slots())

    def prefix_text(self, prefix: str) -> int:
        """Prepend prefix to every text payload; return how many were changed."""
        slots = self.text_slots()
        for container, key in slots:
            container[key] = prefix + container[key]
        return len(slots)


def load_records(lines: Iterable[str]) -> list[ConversationRecord]:
    """Decode every well-formed record, keeping source line numbers.

    Blank and undecodable lines are skipped; the rewriter reports them.
    """
    records = []
    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        try:
            records.append(ConversationRecord.from_line(line_no, line))
        except (ValueError, RecursionError):
            continue
    return records
