from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from memory_companion.exceptions import DimensionMismatchError
from memory_companion.matching.resolver import (
    FACE_MATCH_THRESHOLD,
    IdentityResolver,
    resolve,
)
from memory_companion.models import Identity


def _identity(name: str, embedding: list[float] | None) -> Identity:
    return Identity(name=name, face_embedding=embedding)


@pytest.fixture()
def roster() -> list[Identity]:
    return [_identity("p1", [0.0, 0.0]), _identity("p2", [10.0, 10.0])]


def test_default_threshold():
    assert FACE_MATCH_THRESHOLD == 0.3


def test_close_embedding_matches_nearest(roster: list[Identity]):
    resolution = resolve([0.1, 0.1], roster, 0.3)
    assert resolution.matched is roster[0]
    assert resolution.distance == pytest.approx(0.1414, abs=1e-4)
    assert not resolution.is_new
    assert resolution.confidence == pytest.approx(1 - 0.1414, abs=1e-4)


def test_far_embedding_is_new(roster: list[Identity]):
    resolution = resolve([5.0, 5.0], roster, 0.3)
    assert resolution.matched is None
    assert resolution.distance is None
    assert resolution.is_new
    assert resolution.confidence is None


def test_empty_roster_is_new():
    assert resolve([1.0, 2.0], [], 0.3).is_new


def test_distance_equal_to_threshold_is_not_a_match():
    roster = [_identity("edge", [0.0, 0.0])]
    assert resolve([0.5, 0.0], roster, 0.5).is_new


def test_tie_keeps_first_record():
    first = _identity("first", [1.0, 0.0])
    second = _identity("second", [-1.0, 0.0])
    resolution = resolve([0.0, 0.0], [first, second], threshold=2.0)
    assert resolution.matched is first
    assert resolution.distance == 1.0


def test_nearest_wins_regardless_of_order():
    far = _identity("far", [0.25, 0.0])
    near = _identity("near", [0.05, 0.0])
    assert resolve([0.0, 0.0], [far, near], 0.3).matched is near


def test_records_without_embedding_are_skipped():
    blank = _identity("blank", None)
    real = _identity("real", [0.0, 0.0])
    assert resolve([0.0, 0.0], [blank, real], 0.3).matched is real


def test_resolve_is_idempotent(roster: list[Identity]):
    before = [(i.times_recognized, i.last_seen) for i in roster]
    a = resolve([0.1, 0.1], roster, 0.3)
    b = resolve([0.1, 0.1], roster, 0.3)
    assert a == b
    assert [(i.times_recognized, i.last_seen) for i in roster] == before


def test_dimension_mismatch_propagates(roster: list[Identity]):
    with pytest.raises(DimensionMismatchError):
        resolve([0.0, 0.0, 0.0], roster, 0.3)


class TestIdentityResolver:
    def test_uses_configured_threshold(self, roster: list[Identity]):
        assert IdentityResolver(threshold=0.1).resolve([0.1, 0.1], roster).is_new
        assert not IdentityResolver(threshold=0.2).resolve([0.1, 0.1], roster).is_new

    def test_new_identity_has_placeholder_and_counts(self):
        now = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
        identity = IdentityResolver.new_identity(
            [0.5, 0.5], profile_photo_key="screenshots/a.png", now=now
        )
        assert identity.name == f"Unknown-{int(now.timestamp() * 1000)}"
        assert identity.is_placeholder
        assert identity.id.startswith("person-")
        assert identity.times_recognized == 1
        assert identity.conversation_count == 0
        assert identity.first_seen == identity.last_seen == now
        assert identity.profile_photo_key == "screenshots/a.png"

    def test_new_identities_get_distinct_ids(self):
        a = IdentityResolver.new_identity([0.0])
        b = IdentityResolver.new_identity([0.0])
        assert a.id != b.id

    def test_record_match_bumps_count_and_last_seen(self):
        start = datetime(2025, 3, 1, tzinfo=UTC)
        identity = IdentityResolver.new_identity([0.0], now=start)
        later = start + timedelta(hours=2)

        IdentityResolver.record_match(identity, later)

        assert identity.times_recognized == 2
        assert identity.last_seen == later
        assert identity.first_seen == start

    def test_record_match_never_moves_last_seen_before_first_seen(self):
        start = datetime(2025, 3, 1, tzinfo=UTC)
        identity = IdentityResolver.new_identity([0.0], now=start)
        IdentityResolver.record_match(identity, start - timedelta(days=1))
        assert identity.last_seen == start


def test_exact_embedding_matches(roster: list[Identity]):
    resolution = resolve([0.0, 0.0], roster, 0.3)
    assert resolution.matched is roster[0]
    assert resolution.distance == 0.0


def test_second_resolution_matches_identity_created_by_first(roster: list[Identity]):
    embedding = [5.0, 5.0]
    assert resolve(embedding, roster, 0.3).is_new

    created = IdentityResolver.new_identity(embedding)
    roster.append(created)

    assert resolve(embedding, roster, 0.3).matched is created


def test_tie_break_is_stable_across_runs():
    a = _identity("a", [0.0, 1.0])
    b = _identity("b", [1.0, 0.0])
    winners = {resolve([0.0, 0.0], [a, b], 1.5).matched.id for _ in range(20)}
    assert winners == {a.id}
