"""Tests for IdentifierRemapper."""

import pytest

from convclone.errors import IdentifierExhaustedError
from convclone.remapper import (
    MAX_DRAW_ATTEMPTS,
    IdentifierRemapper,
    fresh_identifier,
    is_identifier,
    new_identifier,
)
from fixtures.transcripts import uid


class TestIsIdentifier:
    """Test the basic identifier shape check."""

    def test_uuid_accepted(self):
        assert is_identifier("d96c899d-7501-4e81-a31b-e0095bb3b501")

    def test_uppercase_rejected(self):
        assert not is_identifier("D96C899D-7501-4E81-A31B-E0095BB3B501")

    def test_wrong_length_rejected(self):
        assert not is_identifier("d96c899d-7501")

    def test_non_string_rejected(self):
        assert not is_identifier(None)
        assert not is_identifier(42)

    def test_message_id_style_rejected(self):
        assert not is_identifier("msg_01XYZabcdefghijklmnopqrstuvw")

    def test_new_identifier_is_well_formed(self):
        assert is_identifier(new_identifier())


class TestResolve:
    """Test resolve()."""

    def test_idempotent(self):
        """Same old id should always map to the same new id."""
        remapper = IdentifierRemapper()

        first = remapper.resolve(uid(1))

        assert remapper.resolve(uid(1)) == first
        assert len(remapper) == 1

    def test_distinct_old_ids_get_distinct_new_ids(self):
        remapper = IdentifierRemapper()

        new_ids = {remapper.resolve(uid(n)) for n in range(50)}

        assert len(new_ids) == 50

    def test_new_id_differs_from_old(self):
        remapper = IdentifierRemapper()

        assert remapper.resolve(uid(1)) != uid(1)

    def test_uses_generator_in_order(self):
        remapper = IdentifierRemapper(iter([uid(100), uid(101)]))

        assert remapper.resolve(uid(1)) == uid(100)
        assert remapper.resolve(uid(2)) == uid(101)

    def test_reserved_ids_never_issued(self):
        """A reserved id drawn from the source should be skipped."""
        remapper = IdentifierRemapper(iter([uid(7), uid(8)]), reserved={uid(7)})

        assert remapper.resolve(uid(1)) == uid(8)

    def test_collision_with_issued_id_redrawn(self):
        remapper = IdentifierRemapper(iter([uid(100), uid(100), uid(101)]))

        remapper.resolve(uid(1))

        assert remapper.resolve(uid(2)) == uid(101)

    def test_exhausted_iterator_raises(self):
        remapper = IdentifierRemapper(iter([uid(100)]))
        remapper.resolve(uid(1))

        with pytest.raises(IdentifierExhaustedError, match="exhausted"):
            remapper.resolve(uid(2))

    def test_malformed_generated_id_raises(self):
        remapper = IdentifierRemapper(lambda: "not-an-id")

        with pytest.raises(IdentifierExhaustedError, match="malformed"):
            remapper.resolve(uid(1))

    def test_persistent_collisions_raise(self):
        remapper = IdentifierRemapper(lambda: uid(5), reserved={uid(5)})

        with pytest.raises(IdentifierExhaustedError, match=str(MAX_DRAW_ATTEMPTS)):
            remapper.resolve(uid(1))


class TestScope:
    """Test per-operation lifetime."""

    def test_context_manager_clears_map(self):
        with IdentifierRemapper() as remapper:
            remapper.resolve(uid(1))
            assert uid(1) in remapper

        assert len(remapper) == 0

    def test_context_manager_clears_on_error(self):
        with pytest.raises(RuntimeError):
            with IdentifierRemapper() as remapper:
                remapper.resolve(uid(1))
                raise RuntimeError("boom")

        assert len(remapper) == 0

    def test_separate_remappers_are_independent(self):
        """Two operations never share mappings."""
        a = IdentifierRemapper()
        b = IdentifierRemapper()

        assert a.resolve(uid(1)) != b.resolve(uid(1))

    def test_mapping_snapshot(self):
        remapper = IdentifierRemapper(iter([uid(100)]))
        remapper.resolve(uid(1))

        snapshot = remapper.mapping()
        snapshot[uid(2)] = uid(3)

        assert remapper.mapping() == {uid(1): uid(100)}


class TestFreshIdentifier:
    """Test fresh_identifier()."""

    def test_skips_taken(self):
        draws = iter([uid(1), uid(2)])

        assert fresh_identifier(lambda: next(draws), {uid(1)}.__contains__) == uid(2)
