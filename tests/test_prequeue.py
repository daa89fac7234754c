"""
Tests for PrequeueWorkflow

Tests for:
- Holding submissions for approval (nothing forwarded, nothing credited)
- Duplicate and already-live conflicts
- Approve and decline happen exactly once per entry
- Upstream failures keep the entry pending
"""

import asyncio

import pytest
import pytest_asyncio

from party_queue.application.services.admission import SubmitTrackRequest
from party_queue.domain.admission.value_objects import AttemptOutcome
from party_queue.domain.prequeue.value_objects import PrequeueStatus
from party_queue.domain.shared.exceptions import (
    AlreadyProcessedError,
    ConflictError,
    EntityNotFoundError,
    FeatureDisabledError,
    RateLimitedError,
    UpstreamFailureError,
)
from party_queue.domain.shared.messages import ErrorMessages


@pytest_asyncio.fixture
async def prequeue_enabled(configuration, catalog):
    await configuration.set_value("prequeue_enabled", "true")
    catalog.add_track("t1", name="Wonderwall", artists="Oasis")
    catalog.add_track("t2")


@pytest.fixture
def workflow(container):
    return container.prequeue_workflow


async def _hold(coordinator, track_id="t1", token="device-1"):
    return await coordinator.submit_to_prequeue(
        SubmitTrackRequest(identity_token=token, track_id=track_id)
    )


# ============================================================================
# Submission
# ============================================================================


class TestSubmit:
    @pytest.mark.asyncio
    async def test_holds_without_forwarding(
        self, coordinator, container, catalog, workflow, prequeue_enabled
    ):
        result = await _hold(coordinator)

        assert result.success is True
        assert result.message == "Track submitted for approval"
        assert catalog.enqueued == []
        assert await container.attempt_repository.count() == 0

        entry = await workflow.get(result.prequeue_id)
        assert entry.status is PrequeueStatus.PENDING
        assert entry.track_name == "Wonderwall"
        assert entry.artist_name == "Oasis"

    @pytest.mark.asyncio
    async def test_disabled_by_default(self, coordinator, catalog):
        catalog.add_track("t1")
        with pytest.raises(FeatureDisabledError):
            await _hold(coordinator)

    @pytest.mark.asyncio
    async def test_duplicate_pending(self, coordinator, container, prequeue_enabled):
        await _hold(coordinator, token="device-1")

        with pytest.raises(ConflictError) as exc_info:
            await _hold(coordinator, token="device-2")

        assert exc_info.value.message == ErrorMessages.ALREADY_PENDING
        attempts = await container.attempt_repository.list_for_identity("device-2")
        assert [a.outcome for a in attempts] == [AttemptOutcome.BLOCKED]

    @pytest.mark.asyncio
    async def test_already_live(self, coordinator, catalog, prequeue_enabled):
        catalog.queue.append(catalog.tracks["t1"])

        with pytest.raises(ConflictError) as exc_info:
            await _hold(coordinator)

        assert exc_info.value.message == ErrorMessages.ALREADY_IN_QUEUE

    @pytest.mark.asyncio
    async def test_currently_playing_counts_as_live(self, coordinator, catalog, prequeue_enabled):
        catalog.currently_playing = catalog.tracks["t1"]

        with pytest.raises(ConflictError):
            await _hold(coordinator)

    @pytest.mark.asyncio
    async def test_live_check_failure_is_not_fatal(self, coordinator, catalog, prequeue_enabled):
        catalog.fail_read = ConnectionError("player offline")

        result = await _hold(coordinator)
        assert result.success is True

    @pytest.mark.asyncio
    async def test_list_pending_newest_first(self, coordinator, workflow, prequeue_enabled, clock):
        await _hold(coordinator, "t1")
        clock.advance(5)
        await _hold(coordinator, "t2")

        pending = await workflow.list_pending()
        assert [e.track_id for e in pending] == ["t2", "t1"]


# ============================================================================
# Approval
# ============================================================================


class TestApprove:
    @pytest.mark.asyncio
    async def test_approve_forwards_and_credits(
        self, coordinator, container, catalog, workflow, prequeue_enabled, clock
    ):
        held = await _hold(coordinator)

        approved = await workflow.approve(held.prequeue_id, approved_by="dj")

        assert approved.status is PrequeueStatus.APPROVED
        assert approved.approved_by == "dj"
        assert catalog.enqueued == ["spotify:track:t1"]

        attempts = await container.attempt_repository.list_for_identity("device-1")
        assert [a.outcome for a in attempts] == [AttemptOutcome.SUCCESS]

        submitter = await container.identity_repository.get("device-1")
        assert submitter.last_submit_at == clock.now
        assert submitter.cooldown_expires_at is not None

    @pytest.mark.asyncio
    async def test_approved_submission_counts_toward_cooldown(
        self, coordinator, workflow, prequeue_enabled
    ):
        held = await _hold(coordinator, "t1")
        await workflow.approve(held.prequeue_id)

        with pytest.raises(RateLimitedError):
            await _hold(coordinator, "t2")

    @pytest.mark.asyncio
    async def test_second_approve_fails(self, coordinator, catalog, workflow, prequeue_enabled):
        held = await _hold(coordinator)
        await workflow.approve(held.prequeue_id)

        with pytest.raises(AlreadyProcessedError) as exc_info:
            await workflow.approve(held.prequeue_id)

        assert exc_info.value.code == "ALREADY_PROCESSED"
        assert catalog.enqueued == ["spotify:track:t1"]

    @pytest.mark.asyncio
    async def test_concurrent_approvals_forward_once(
        self, coordinator, container, catalog, workflow, prequeue_enabled
    ):
        held = await _hold(coordinator)

        results = await asyncio.gather(
            workflow.approve(held.prequeue_id),
            workflow.approve(held.prequeue_id),
            return_exceptions=True,
        )

        assert sum(isinstance(r, AlreadyProcessedError) for r in results) == 1
        assert catalog.enqueued == ["spotify:track:t1"]
        assert await container.attempt_repository.count(successful_only=True) == 1

    @pytest.mark.asyncio
    async def test_upstream_failure_keeps_entry_pending(
        self, coordinator, container, catalog, workflow, prequeue_enabled
    ):
        held = await _hold(coordinator)
        catalog.fail_enqueue = ConnectionError("player offline")

        with pytest.raises(UpstreamFailureError):
            await workflow.approve(held.prequeue_id)

        entry = await workflow.get(held.prequeue_id)
        assert entry.status is PrequeueStatus.PENDING
        attempts = await container.attempt_repository.list_for_identity("device-1")
        assert [a.outcome for a in attempts] == [AttemptOutcome.ERROR]

        catalog.fail_enqueue = None
        approved = await workflow.approve(held.prequeue_id)
        assert approved.status is PrequeueStatus.APPROVED

    @pytest.mark.asyncio
    async def test_unknown_entry(self, workflow):
        with pytest.raises(EntityNotFoundError):
            await workflow.approve("nope")


class TestDecline:
    @pytest.mark.asyncio
    async def test_decline_forwards_nothing(
        self, coordinator, container, catalog, workflow, prequeue_enabled
    ):
        held = await _hold(coordinator)

        declined = await workflow.decline(held.prequeue_id, approved_by="dj")

        assert declined.status is PrequeueStatus.DECLINED
        assert catalog.enqueued == []
        assert await container.attempt_repository.count() == 0

    @pytest.mark.asyncio
    async def test_approve_after_decline_fails(self, coordinator, workflow, prequeue_enabled):
        held = await _hold(coordinator)
        await workflow.decline(held.prequeue_id)

        with pytest.raises(AlreadyProcessedError):
            await workflow.approve(held.prequeue_id)

    @pytest.mark.asyncio
    async def test_declined_track_can_be_held_again(self, coordinator, workflow, prequeue_enabled):
        held = await _hold(coordinator)
        await workflow.decline(held.prequeue_id)

        again = await _hold(coordinator)
        assert again.prequeue_id != held.prequeue_id
