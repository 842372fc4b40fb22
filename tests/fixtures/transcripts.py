"""Factory functions for creating transcript records.

Records mirror the shape Claude Code writes to ~/.claude/projects/*/<sid>.jsonl.
"""

from __future__ import annotations

import json
from typing import Any

SOURCE_SESSION = "d96c899d-7501-4e81-a31b-e0095bb3b501"
PROJECT_PATH = "/home/user/myproject"
CLONE_TAG = "[CLONED Jan 7 14:30]"


def uid(n: int) -> str:
    """Deterministic, well-formed identifier for test records."""
    return f"00000000-0000-4000-8000-{n:012x}"


def _base(record_type: str, uuid: str, parent: str | None, session_id: str) -> dict[str, Any]:
    return {
        "parentUuid": parent,
        "isSidechain": False,
        "cwd": PROJECT_PATH,
        "sessionId": session_id,
        "version": "1.0.0",
        "type": record_type,
    }


def user_message(
    text: str,
    uuid: str,
    parent: str | None = None,
    session_id: str = SOURCE_SESSION,
    **extra: Any,
) -> dict[str, Any]:
    """Create a plain user message with string content."""
    record = _base("user", uuid, parent, session_id)
    record["message"] = {"role": "user", "content": text}
    record["uuid"] = uuid
    record["timestamp"] = "2025-01-07T14:30:00.000Z"
    record.update(extra)
    return record


def user_blocks(texts: list[str], uuid: str, parent: str | None = None) -> dict[str, Any]:
    """Create a user message whose content is a list of text blocks."""
    record = user_message("", uuid, parent)
    record["message"]["content"] = [{"type": "text", "text": t} for t in texts]
    return record


def meta_message(text: str, uuid: str, parent: str | None = None) -> dict[str, Any]:
    """Create an internal (isMeta) user record."""
    return user_message(text, uuid, parent, isMeta=True)


def tool_result(uuid: str, parent: str | None = None, output: str = "ok") -> dict[str, Any]:
    """Create a tool result echoed back under the user role."""
    record = user_message("", uuid, parent)
    record["message"]["content"] = [
        {"type": "tool_result", "tool_use_id": "toolu_01ABC", "content": output}
    ]
    record["toolUseResult"] = {"stdout": output}
    return record


def assistant_message(text: str, uuid: str, parent: str | None = None) -> dict[str, Any]:
    """Create an assistant reply."""
    record = _base("assistant", uuid, parent, SOURCE_SESSION)
    record["message"] = {
        "id": "msg_01XYZ",
        "role": "assistant",
        "content": [{"type": "text", "text": text}],
    }
    record["uuid"] = uuid
    return record


def snapshot(message_id: str) -> dict[str, Any]:
    """Create a file-history snapshot record keyed by messageId."""
    return {
        "type": "file-history-snapshot",
        "messageId": message_id,
        "snapshot": {"messageId": message_id, "trackedFileBackups": {}},
        "isSnapshotUpdate": False,
    }


def summary(text: str, leaf: str) -> dict[str, Any]:
    """Create a summary record (no session id)."""
    return {"type": "summary", "summary": text, "leafUuid": leaf}


def clone_command(uuid: str, parent: str | None = None, name: str = "clone") -> dict[str, Any]:
    """Create the user message a /clone slash command leaves behind."""
    text = f"<command-message>{name}</command-message>\n<command-name>/{name}</command-name>"
    return user_message(text, uuid, parent)


def to_lines(records: list[dict[str, Any] | str]) -> list[str]:
    """Serialize records as transcript lines (strings are kept verbatim)."""
    return [r if isinstance(r, str) else json.dumps(r) + "\n" for r in records]


def parse_lines(text: str) -> list[dict[str, Any]]:
    """Parse a written transcript back into records."""
    return [json.loads(line) for line in text.splitlines() if line.strip()]
