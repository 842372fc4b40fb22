"""convclone - Clone Claude Code conversations.

Copies a session transcript into a new, independent session with:
- Consistent remapping of message identifiers
- Truncation at a trailing /clone command
- A history entry and task-list copy for the new session
"""

__version__ = "0.1.0"

from convclone.cloner import CloneResult, ConversationCloner, clone_conversation
from convclone.config import Config
from convclone.remapper import IdentifierRemapper
from convclone.rewriter import TranscriptRewriter
from convclone.truncation import find_cutoff

__all__ = [
    "Config",
    "CloneResult",
    "ConversationCloner",
    "IdentifierRemapper",
    "TranscriptRewriter",
    "clone_conversation",
    "find_cutoff",
]
