"""
Unit Tests for the Guests, Music and Prequeue Domains

Tests for:
- Identity cooldown group keys and cooldown arithmetic
- AuthRequirements
- Track and LiveQueue helpers
- PrequeueEntry single-transition lifecycle
- UTC timestamp helpers
"""

from datetime import UTC, datetime, timedelta

import pytest

from party_queue.domain.guests.entities import Identity
from party_queue.domain.guests.value_objects import AuthRequirements, IdentityStatus
from party_queue.domain.music.entities import LiveQueue, Track
from party_queue.domain.prequeue.entities import PrequeueEntry
from party_queue.domain.prequeue.value_objects import PrequeueStatus
from party_queue.domain.shared.datetime_utils import (
    UtcDateTime,
    from_iso,
    seconds_until,
    to_iso,
)
from party_queue.domain.shared.exceptions import InvalidTransitionError

NOW = datetime(2026, 6, 1, 20, 0, tzinfo=UTC)


class TestIdentity:
    def test_group_key_for_unlinked_identity(self):
        assert Identity(id="abc").group_key == "identity:abc"

    def test_linked_identities_share_group_key(self):
        a = Identity(id="a", linked_account_id="github:1")
        b = Identity(id="b", linked_account_id="github:1")
        assert a.group_key == b.group_key == "account:github:1"

    def test_cooldown_remaining(self):
        identity = Identity(id="a", cooldown_expires_at=NOW + timedelta(seconds=10))

        assert identity.is_cooling_down(NOW) is True
        assert identity.cooldown_remaining(NOW) == 10
        assert identity.cooldown_remaining(NOW + timedelta(seconds=10)) == 0

    def test_blocked_status(self):
        assert Identity(id="a", status=IdentityStatus.BLOCKED).is_blocked is True
        assert Identity(id="a").is_blocked is False

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            Identity(id="")

    def test_overlong_token_rejected(self):
        with pytest.raises(ValueError):
            Identity(id="x" * 129)


class TestAuthRequirements:
    def test_nothing_missing(self):
        req = AuthRequirements()
        assert req.auth_required is False
        assert req.reasons == []

    def test_reasons_use_display_names(self):
        req = AuthRequirements(missing_providers=("github", "google"))
        assert req.auth_required is True
        assert req.reasons == ["GitHub", "Google"]


class TestTrack:
    def test_display_title(self):
        assert Track(id="t", uri="u", name="Hello", artists="Adele").display_title == (
            "Hello - Adele"
        )
        assert Track(id="t", uri="u", name="Hello").display_title == "Hello"

    def test_exceeds_duration(self):
        track = Track(id="t", uri="u", duration_ms=61_000)
        assert track.exceeds_duration(60) is True
        assert track.exceeds_duration(61) is False
        assert track.exceeds_duration(0) is False

    def test_live_queue_contains(self):
        current = Track(id="now", uri="u1")
        live = LiveQueue(currently_playing=current, queue=[Track(id="next", uri="u2")])

        assert live.contains("now")
        assert live.contains("next")
        assert not live.contains("other")
        assert set(live.track_ids) == {"now", "next"}

    def test_empty_live_queue(self):
        live = LiveQueue()
        assert live.track_ids == []
        assert not live.contains("anything")


class TestPrequeueEntry:
    @pytest.fixture
    def entry(self):
        track = Track(id="t1", uri="spotify:track:t1", name="Song", artists="Band")
        return PrequeueEntry.from_track("device-1", track)

    def test_from_track(self, entry):
        assert entry.is_pending
        assert entry.track_name == "Song"
        assert entry.artist_name == "Band"
        assert len(entry.id) == 16

    def test_approve_returns_new_entry(self, entry):
        approved = entry.approve("dj")

        assert approved.status is PrequeueStatus.APPROVED
        assert approved.approved_by == "dj"
        assert entry.is_pending

    def test_decline(self, entry):
        declined = entry.decline("dj")
        assert declined.status is PrequeueStatus.DECLINED

    @pytest.mark.parametrize("first", ["approve", "decline"])
    @pytest.mark.parametrize("second", ["approve", "decline"])
    def test_terminal_states_reject_transitions(self, entry, first, second):
        done = getattr(entry, first)("dj")
        with pytest.raises(InvalidTransitionError):
            getattr(done, second)("dj")

    def test_status_flags(self):
        assert not PrequeueStatus.PENDING.is_terminal
        assert PrequeueStatus.APPROVED.is_terminal
        assert PrequeueStatus.DECLINED.is_terminal


class TestDatetimeUtils:
    def test_iso_is_fixed_width(self):
        a = to_iso(datetime(2026, 1, 1, tzinfo=UTC))
        b = to_iso(datetime(2026, 1, 1, 0, 0, 0, 123456, tzinfo=UTC))
        assert len(a) == len(b)
        assert a < b

    def test_round_trip_z_suffix(self):
        assert from_iso("2026-01-01T00:00:00Z") == datetime(2026, 1, 1, tzinfo=UTC)

    def test_none_passthrough(self):
        assert to_iso(None) is None
        assert from_iso(None) is None

    def test_naive_datetime_rejected(self):
        with pytest.raises(ValueError):
            UtcDateTime(datetime(2026, 1, 1))

    def test_seconds_until_rounds_up_and_clamps(self):
        assert seconds_until(NOW + timedelta(milliseconds=100), NOW) == 1
        assert seconds_until(NOW - timedelta(seconds=5), NOW) == 0
