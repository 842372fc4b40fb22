"""Clone-command truncation detection.

When a clone is started from inside a conversation, the transcript ends with
the user's clone command (and whatever the assistant did with it). Those
trailing records are dropped from the copy. Only the latest clean user
message is considered: a clone command further back in the history was
already acted upon and never truncates.
"""

import re
from typing import Iterable

from convclone.log_config import get_logger
from convclone.records import ConversationRecord

log = get_logger("truncation")

# <command-message>clone</command-message>, optionally namespaced (dx:clone)
CLONE_COMMAND_PATTERN = re.compile(
    r"<command-message>\s*(?:[\w.-]+:)?(?:half-)?clone\s*</command-message>",
    re.IGNORECASE,
)


def is_clone_command(text: str) -> bool:
    """Check whether a message payload carries a clone trigger marker."""
    return bool(text) and CLONE_COMMAND_PATTERN.search(text) is not None


def last_clean_user_message(
    records: Iterable[ConversationRecord],
) -> ConversationRecord | None:
    """Return the last clean user message, or None if there is none."""
    last = None
    for record in records:
        if record.is_clean_user_message:
            last = record
    return last


def find_cutoff(records: Iterable[ConversationRecord]) -> int | None:
    """Find the line at which the cloned transcript must stop.

    Args:
        records: Decoded records in source order

    Returns:
        Line number of the trailing clone command (it and everything after
        it are excluded), or None to keep the whole transcript
    """
    last = last_clean_user_message(records)
    if last is None:
        log.debug("No clean user message; keeping whole transcript")
        return None
    if not is_clone_command(last.text):
        return None
    log.info(f"Will exclude clone command and subsequent messages (line {last.line_no} onwards)")
    return last.line_no
