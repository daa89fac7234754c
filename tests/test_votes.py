"""
Tests for VoteLedger

Tests for:
- Toggle-off and flip semantics
- Net score consistency under arbitrary vote sequences
- Concurrent votes on one (track, identity) pair
- Feature switches and eligibility rules
- Snapshots and vote-driven queue ordering
"""

import asyncio
import random

import pytest
import pytest_asyncio

from party_queue.application.services.admission import SubmitTrackRequest
from party_queue.domain.shared.exceptions import (
    AuthRequiredError,
    BlockedError,
    FeatureDisabledError,
    ModerationRejectedError,
    ValidationError,
)
from party_queue.domain.voting.value_objects import VoteChange, VoteDirection


@pytest_asyncio.fixture
async def votable(coordinator, configuration, catalog):
    """Voting on, cooldown off, and three guest-queued tracks."""
    await configuration.set_value("voting_enabled", "true")
    await configuration.set_value("fingerprinting_enabled", "false")
    for track_id in ("t1", "t2", "t3"):
        catalog.add_track(track_id)
        await coordinator.submit_direct(
            SubmitTrackRequest(identity_token="submitter", track_id=track_id)
        )
    return catalog


@pytest.fixture
def ledger(container):
    return container.vote_ledger


class TestVoteSemantics:
    @pytest.mark.asyncio
    async def test_first_vote(self, ledger, votable):
        outcome = await ledger.vote("t1", "guest-a", 1)

        assert outcome.change is VoteChange.ADDED
        assert outcome.user_vote == 1
        assert outcome.net_votes == 1

    @pytest.mark.asyncio
    async def test_same_direction_toggles_off(self, ledger, votable):
        await ledger.vote("t1", "guest-a", 1)
        outcome = await ledger.vote("t1", "guest-a", 1)

        assert outcome.change is VoteChange.REMOVED
        assert outcome.user_vote is None
        assert outcome.net_votes == 0

    @pytest.mark.asyncio
    async def test_opposite_direction_flips(self, ledger, votable):
        await ledger.vote("t1", "guest-a", 1)
        await ledger.vote("t1", "guest-b", 1)
        outcome = await ledger.vote("t1", "guest-a", VoteDirection.DOWN)

        assert outcome.change is VoteChange.FLIPPED
        assert outcome.user_vote == -1
        assert outcome.net_votes == 0

    @pytest.mark.asyncio
    async def test_net_matches_sum_of_votes(self, ledger, votable):
        rng = random.Random(1234)
        guests = [f"guest-{i}" for i in range(6)]
        expected: dict[tuple[str, str], int] = {}

        for _ in range(60):
            track_id = rng.choice(["t1", "t2", "t3"])
            guest = rng.choice(guests)
            direction = rng.choice([1, -1])
            outcome = await ledger.vote(track_id, guest, direction)

            key = (track_id, guest)
            if expected.get(key) == direction:
                del expected[key]
            else:
                expected[key] = direction

            assert outcome.user_vote == expected.get(key)
            assert outcome.net_votes == sum(
                v for (t, _), v in expected.items() if t == track_id
            )


async def _stored_votes(container, track_id):
    return await container.database.fetch_all(
        "SELECT identity_id, direction FROM track_votes WHERE track_id = ?", (track_id,)
    )


class TestConcurrentVotes:
    @pytest.mark.asyncio
    async def test_double_clicks_toggle_one_at_a_time(self, ledger, container, votable):
        await ledger.vote("t1", "guest-b", 1)

        outcomes = await asyncio.gather(*(ledger.vote("t1", "guest-a", 1) for _ in range(4)))

        changes = sorted(o.change.value for o in outcomes)
        assert changes == sorted([VoteChange.ADDED.value] * 2 + [VoteChange.REMOVED.value] * 2)
        assert await _stored_votes(container, "t1") == [{"identity_id": "guest-b", "direction": 1}]

    @pytest.mark.asyncio
    async def test_mixed_directions_leave_one_row_per_pair(self, ledger, container, votable):
        directions = [1, -1, 1, 1, -1, -1, 1]

        outcomes = await asyncio.gather(*(ledger.vote("t2", "guest-a", d) for d in directions))

        rows = await _stored_votes(container, "t2")
        stored_net = sum(row["direction"] for row in rows)
        assert len(rows) <= 1
        assert stored_net in {o.net_votes for o in outcomes}
        assert (await ledger.votes_snapshot()).net_by_track.get("t2", 0) == stored_net


class TestEligibility:
    @pytest.mark.asyncio
    async def test_voting_disabled(self, ledger, catalog):
        with pytest.raises(FeatureDisabledError):
            await ledger.vote("t1", "guest-a", 1)

    @pytest.mark.asyncio
    async def test_downvote_disabled(self, ledger, configuration, votable):
        await configuration.set_value("voting_downvote_enabled", "false")

        with pytest.raises(FeatureDisabledError):
            await ledger.vote("t1", "guest-a", -1)
        assert (await ledger.vote("t1", "guest-a", 1)).net_votes == 1

    @pytest.mark.asyncio
    async def test_track_not_queued_by_guest(self, ledger, votable):
        with pytest.raises(ModerationRejectedError) as exc_info:
            await ledger.vote("host-track", "guest-a", 1)

        assert exc_info.value.code == "NOT_VOTABLE"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("direction", [0, 2, "up"])
    async def test_bad_direction(self, ledger, votable, direction):
        with pytest.raises(ValidationError) as exc_info:
            await ledger.vote("t1", "guest-a", direction)

        assert exc_info.value.field == "direction"

    @pytest.mark.asyncio
    async def test_empty_track_id(self, ledger, votable):
        with pytest.raises(ValidationError):
            await ledger.vote("  ", "guest-a", 1)

    @pytest.mark.asyncio
    async def test_blocked_voter(self, ledger, identity_ledger, votable):
        await identity_ledger.resolve("guest-a")
        await identity_ledger.block("guest-a")

        with pytest.raises(BlockedError):
            await ledger.vote("t1", "guest-a", 1)

    @pytest.mark.asyncio
    async def test_auth_required(self, ledger, configuration, votable):
        await configuration.set_value("require_google_auth", "true")

        with pytest.raises(AuthRequiredError) as exc_info:
            await ledger.vote("t1", "guest-a", 1)

        assert exc_info.value.providers == ["Google"]


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_snapshot_with_user_votes(self, ledger, votable):
        await ledger.vote("t1", "guest-a", 1)
        await ledger.vote("t1", "guest-b", 1)
        await ledger.vote("t2", "guest-a", -1)

        snapshot = await ledger.votes_snapshot("guest-a")

        assert snapshot.net_by_track == {"t1": 2, "t2": -1}
        assert snapshot.user_vote_by_track == {"t1": 1, "t2": -1}
        assert snapshot.voting_enabled is True
        assert snapshot.downvote_enabled is True

    @pytest.mark.asyncio
    async def test_snapshot_without_token(self, ledger, votable):
        await ledger.vote("t1", "guest-a", 1)

        snapshot = await ledger.votes_snapshot()
        assert snapshot.user_vote_by_track == {}


class TestAutoPromote:
    @pytest.mark.asyncio
    async def test_votes_reorder_queue(self, ledger, container, configuration, votable):
        host = votable.add_track("host")
        votable.queue.append(host)
        await configuration.set_value("voting_auto_promote", "true")

        await ledger.vote("t3", "guest-a", 1)
        await ledger.vote("t1", "guest-a", -1)

        snapshot = await container.queue_view.get()
        assert [item.track.id for item in snapshot.queue] == ["t3", "t2", "t1", "host"]
        assert [item.votable for item in snapshot.queue] == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_without_auto_promote_order_is_upstream(self, ledger, container, votable):
        await ledger.vote("t3", "guest-a", 1)

        snapshot = await container.queue_view.get()
        assert [item.track.id for item in snapshot.queue] == ["t1", "t2", "t3"]
        assert snapshot.queue[2].net_votes == 1
