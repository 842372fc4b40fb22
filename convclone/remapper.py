"""Per-operation identifier remapping.

An IdentifierRemapper maps each old message identifier to a freshly drawn
one, the same way every time it is asked within one clone operation. It
holds no process-wide state: create one per operation and let the context
manager discard the map when the operation ends.
"""

import re
import uuid
from functools import partial
from typing import Callable, Iterator

from convclone.errors import IdentifierExhaustedError
from convclone.log_config import get_logger

log = get_logger("remapper")

# Basic shape check for id-bearing fields: 36 chars of lowercase hex and dashes
IDENTIFIER_PATTERN = re.compile(r"^[0-9a-f-]{36}$")

# Redraws allowed when a fresh id collides with one already in play
MAX_DRAW_ATTEMPTS = 16


def is_identifier(value) -> bool:
    """Check whether a field value is safe to remap."""
    return isinstance(value, str) and bool(IDENTIFIER_PATTERN.match(value))


def new_identifier() -> str:
    """Draw a random UUID4 string from the OS CSPRNG."""
    return str(uuid.uuid4())


class IdentifierRemapper:
    """Lazily-built old -> new identifier map for one clone operation.

    Example:
        >>> with IdentifierRemapper() as remapper:
        ...     a = remapper.resolve("d96c899d-7501-4e81-a31b-e0095bb3b501")
        ...     a == remapper.resolve("d96c899d-7501-4e81-a31b-e0095bb3b501")
        True
    """

    def __init__(
        self,
        generator: Callable[[], str] | Iterator[str] | None = None,
        reserved: set[str] | None = None,
    ):
        """Initialize remapper.

        Args:
            generator: Fresh id source, either a callable or an iterator
                (default: new_identifier)
            reserved: Ids that must never be issued (e.g. the new session id)
        """
        if generator is None:
            generator = new_identifier
        if callable(generator):
            self._draw = generator
        else:
            self._draw = partial(next, iter(generator))
        self._map: dict[str, str] = {}
        self._issued: set[str] = set(reserved or ())

    def __enter__(self) -> "IdentifierRemapper":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        log.trace(f"Discarding identifier map ({len(self._map)} entries)")
        self.clear()

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, old_id: str) -> bool:
        return old_id in self._map

    def resolve(self, old_id: str) -> str:
        """Return the new identifier for old_id, drawing one on first sight.

        Raises:
            IdentifierExhaustedError: If the source stops producing usable ids
        """
        new_id = self._map.get(old_id)
        if new_id is None:
            new_id = self._fresh(old_id)
            self._map[old_id] = new_id
            self._issued.add(new_id)
        return new_id

    def mapping(self) -> dict[str, str]:
        """Snapshot of the current map."""
        return dict(self._map)

    def clear(self) -> None:
        self._map.clear()
        self._issued.clear()

    def _fresh(self, old_id: str) -> str:
        return fresh_identifier(
            self._draw,
            lambda c: c == old_id or c in self._issued or c in self._map,
            issued=len(self._map),
        )


def fresh_identifier(draw: Callable[[], str], is_taken: Callable[[str], bool], issued: int = 0) -> str:
    """Draw a well-formed identifier for which is_taken is false.

    Args:
        draw: Fresh id source
        is_taken: Rejects ids already in play
        issued: Ids drawn so far (for the error message)

    Raises:
        IdentifierExhaustedError: Source exhausted, malformed, or colliding
            MAX_DRAW_ATTEMPTS times in a row
    """
    for _ in range(MAX_DRAW_ATTEMPTS):
        try:
            candidate = draw()
        except StopIteration as e:
            raise IdentifierExhaustedError(
                f"Identifier source exhausted after {issued} ids"
            ) from e
        if not is_identifier(candidate):
            raise IdentifierExhaustedError(
                f"Identifier source produced a malformed id: {candidate!r}"
            )
        if not is_taken(candidate):
            return candidate
        log.warning(f"Fresh identifier collided, redrawing: {candidate}")
    raise IdentifierExhaustedError(
        f"No unique identifier after {MAX_DRAW_ATTEMPTS} attempts"
    )
