"""
Tests for CooldownEngine

Tests for:
- Threshold counting over the trailing window
- Cooldown groups spanning linked devices
- Concurrent submissions from one group
- Moderator resets and the disabled switch
"""

import asyncio

import pytest

from party_queue.application.services.admission import SubmitTrackRequest
from party_queue.domain.admission.value_objects import AttemptOutcome
from party_queue.domain.shared.exceptions import EntityNotFoundError, RateLimitedError


async def _submit(coordinator, track_id, token="device-1"):
    return await coordinator.submit_direct(
        SubmitTrackRequest(identity_token=token, track_id=track_id)
    )


@pytest.fixture
def tracks(catalog):
    for i in range(6):
        catalog.add_track(f"t{i}")
    return catalog


class TestThreshold:
    @pytest.mark.asyncio
    async def test_nth_submission_starts_cooldown(self, coordinator, configuration, tracks):
        await configuration.set_value("songs_before_cooldown", 3)

        for i in range(3):
            await _submit(coordinator, f"t{i}")

        with pytest.raises(RateLimitedError) as exc_info:
            await _submit(coordinator, "t3")
        assert exc_info.value.remaining_seconds == 300

    @pytest.mark.asyncio
    async def test_rate_limited_attempt_is_audited(self, coordinator, container, tracks):
        await _submit(coordinator, "t0")
        with pytest.raises(RateLimitedError):
            await _submit(coordinator, "t1")

        attempts = await container.attempt_repository.list_for_identity("device-1")
        outcomes = sorted(a.outcome.value for a in attempts)
        assert outcomes == [AttemptOutcome.RATE_LIMITED.value, AttemptOutcome.SUCCESS.value]

    @pytest.mark.asyncio
    async def test_expiry_allows_again(self, coordinator, configuration, tracks, clock):
        await configuration.set_value("cooldown_duration", 60)
        await _submit(coordinator, "t0")

        clock.advance(30)
        with pytest.raises(RateLimitedError) as exc_info:
            await _submit(coordinator, "t1")
        assert exc_info.value.remaining_seconds == 30

        clock.advance(31)
        result = await _submit(coordinator, "t1")
        assert result.success is True

    @pytest.mark.asyncio
    async def test_disabled(self, coordinator, configuration, tracks):
        await configuration.set_value("fingerprinting_enabled", "false")

        for i in range(4):
            assert (await _submit(coordinator, f"t{i}")).success is True

    @pytest.mark.asyncio
    async def test_devices_are_independent(self, coordinator, tracks):
        await _submit(coordinator, "t0", token="device-1")
        result = await _submit(coordinator, "t1", token="device-2")
        assert result.success is True


class TestLinkedGroups:
    @pytest.mark.asyncio
    async def test_sibling_shares_cooldown(self, coordinator, identity_ledger, tracks):
        phone = await identity_ledger.resolve("phone")
        laptop = await identity_ledger.resolve("laptop")
        await identity_ledger.link(phone, "github", "7")
        await identity_ledger.link(laptop, "github", "7")

        await _submit(coordinator, "t0", token="phone")

        with pytest.raises(RateLimitedError):
            await _submit(coordinator, "t1", token="laptop")

    @pytest.mark.asyncio
    async def test_sibling_successes_count_toward_threshold(
        self, coordinator, configuration, identity_ledger, tracks
    ):
        await configuration.set_value("songs_before_cooldown", 2)
        phone = await identity_ledger.resolve("phone")
        laptop = await identity_ledger.resolve("laptop")
        await identity_ledger.link(phone, "google", "g1")
        await identity_ledger.link(laptop, "google", "g1")

        await _submit(coordinator, "t0", token="phone")
        await _submit(coordinator, "t1", token="laptop")

        with pytest.raises(RateLimitedError):
            await _submit(coordinator, "t2", token="phone")

    @pytest.mark.asyncio
    async def test_resetting_one_sibling_keeps_the_others_successes(
        self, coordinator, container, configuration, identity_ledger, tracks
    ):
        await configuration.set_value("songs_before_cooldown", 2)
        phone = await identity_ledger.resolve("phone")
        laptop = await identity_ledger.resolve("laptop")
        await identity_ledger.link(phone, "github", "7")
        await identity_ledger.link(laptop, "github", "7")

        await _submit(coordinator, "t0", token="phone")
        await container.cooldown_engine.reset_cooldown("laptop")
        await _submit(coordinator, "t1", token="phone")

        with pytest.raises(RateLimitedError):
            await _submit(coordinator, "t2", token="phone")


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_submissions_respect_threshold(
        self, coordinator, configuration, tracks
    ):
        await configuration.set_value("songs_before_cooldown", 2)

        results = await asyncio.gather(
            *(_submit(coordinator, f"t{i}") for i in range(5)), return_exceptions=True
        )

        successes = [r for r in results if not isinstance(r, BaseException)]
        rejections = [r for r in results if isinstance(r, RateLimitedError)]
        assert len(successes) == 2
        assert len(rejections) == 3
        assert len(tracks.enqueued) == 2


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_cooldown(self, coordinator, container, tracks, clock):
        await _submit(coordinator, "t0")
        with pytest.raises(RateLimitedError):
            await _submit(coordinator, "t1")

        await container.cooldown_engine.reset_cooldown("device-1")
        clock.advance(1)

        assert (await _submit(coordinator, "t1")).success is True

    @pytest.mark.asyncio
    async def test_reset_discards_earlier_successes(
        self, coordinator, container, configuration, tracks, clock
    ):
        await configuration.set_value("songs_before_cooldown", 2)
        await _submit(coordinator, "t0")

        await container.cooldown_engine.reset_cooldown("device-1")
        clock.advance(1)

        # one success before the reset no longer counts
        await _submit(coordinator, "t1")
        assert (await _submit(coordinator, "t2")).success is True
        with pytest.raises(RateLimitedError):
            await _submit(coordinator, "t3")

    @pytest.mark.asyncio
    async def test_reset_all(self, coordinator, container, tracks, clock):
        await _submit(coordinator, "t0", token="a")
        await _submit(coordinator, "t1", token="b")

        assert await container.cooldown_engine.reset_all_cooldowns() == 2
        clock.advance(1)

        assert (await _submit(coordinator, "t2", token="a")).success is True
        assert (await _submit(coordinator, "t3", token="b")).success is True

    @pytest.mark.asyncio
    async def test_reset_unknown(self, container):
        with pytest.raises(EntityNotFoundError):
            await container.cooldown_engine.reset_cooldown("ghost")
