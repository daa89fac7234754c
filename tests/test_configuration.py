"""
Unit Tests for ConfigurationService and ConfigAuthGate

Tests for:
- Defaults and lenient parsing of stored values
- Validation and normalization on write
- Queue view invalidation hook
- Provider requirements
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from party_queue.application.services.auth_gate import ConfigAuthGate
from party_queue.application.services.configuration import ConfigurationService
from party_queue.domain.admission.value_objects import AdmissionConfig
from party_queue.domain.guests.entities import Identity
from party_queue.domain.shared.exceptions import ValidationError


@pytest.fixture
def mock_config_repo():
    repo = AsyncMock()
    repo.all.return_value = {}
    return repo


@pytest.fixture
def on_change():
    return MagicMock()


@pytest.fixture
def service(mock_config_repo, on_change):
    return ConfigurationService(config_repository=mock_config_repo, on_queue_view_change=on_change)


class TestAdmissionConfigParsing:
    @pytest.mark.asyncio
    async def test_defaults_when_unset(self, service):
        assert await service.admission_config() == AdmissionConfig()

    @pytest.mark.asyncio
    async def test_parses_stored_strings(self, service, mock_config_repo):
        mock_config_repo.all.return_value = {
            "queueing_enabled": "false",
            "prequeue_enabled": "on",
            "fingerprinting_enabled": "0",
            "cooldown_duration": "60",
            "songs_before_cooldown": "3",
            "voting_enabled": "YES",
            "max_song_duration": "600",
        }
        config = await service.admission_config()

        assert config.queueing_enabled is False
        assert config.prequeue_enabled is True
        assert config.cooldown_enabled is False
        assert config.cooldown_duration_seconds == 60
        assert config.songs_before_cooldown == 3
        assert config.voting_enabled is True
        assert config.max_song_duration_seconds == 600

    @pytest.mark.asyncio
    async def test_garbage_falls_back_to_defaults(self, service, mock_config_repo):
        mock_config_repo.all.return_value = {
            "queueing_enabled": "maybe",
            "cooldown_duration": "soon",
        }
        config = await service.admission_config()

        assert config.queueing_enabled is True
        assert config.cooldown_duration_seconds == 300

    @pytest.mark.asyncio
    async def test_out_of_range_values_are_clamped(self, service, mock_config_repo):
        mock_config_repo.all.return_value = {
            "cooldown_duration": "999999",
            "songs_before_cooldown": "0",
            "max_song_duration": "-5",
        }
        config = await service.admission_config()

        assert config.cooldown_duration_seconds == 86400
        assert config.songs_before_cooldown == 1
        assert config.max_song_duration_seconds == 0


class TestSetValue:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key, value, stored",
        [
            ("voting_enabled", True, "true"),
            ("voting_enabled", "Off", "false"),
            ("cooldown_duration", 120, "120"),
            ("songs_before_cooldown", " 2 ", "2"),
        ],
    )
    async def test_normalizes(self, service, mock_config_repo, key, value, stored):
        assert await service.set_value(key, value) == stored
        mock_config_repo.set.assert_awaited_once_with(key, stored)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key, value",
        [
            ("voting_enabled", "perhaps"),
            ("cooldown_duration", "-1"),
            ("cooldown_duration", "90000"),
            ("songs_before_cooldown", "0"),
            ("max_song_duration", True),
            ("max_song_duration", "long"),
        ],
    )
    async def test_rejects_bad_values(self, service, mock_config_repo, key, value):
        with pytest.raises(ValidationError) as exc_info:
            await service.set_value(key, value)

        assert exc_info.value.field == key
        mock_config_repo.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_unknown_key(self, service, mock_config_repo):
        with pytest.raises(ValidationError) as exc_info:
            await service.set_value("spotify_secret", "x")

        assert exc_info.value.field == "key"
        mock_config_repo.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_value_rejects_unknown_key(self, service):
        with pytest.raises(ValidationError):
            await service.get_value("nope")

    @pytest.mark.asyncio
    async def test_queue_keys_trigger_invalidation(self, service, on_change):
        await service.set_value("voting_auto_promote", "true")
        on_change.assert_called_once()

    @pytest.mark.asyncio
    async def test_other_keys_do_not_invalidate(self, service, on_change):
        await service.set_value("ban_explicit", "true")
        on_change.assert_not_called()

    @pytest.mark.asyncio
    async def test_round_trip_through_database(self, configuration):
        await configuration.set_value("songs_before_cooldown", 4)

        assert await configuration.get_value("songs_before_cooldown") == "4"
        assert (await configuration.admission_config()).songs_before_cooldown == 4
        assert await configuration.all_values() == {"songs_before_cooldown": "4"}


class TestConfigAuthGate:
    @pytest.fixture
    def gate(self):
        return ConfigAuthGate()

    def test_nothing_required(self, gate):
        assert gate.check(Identity(id="a"), AdmissionConfig()).auth_required is False

    def test_each_required_provider_is_needed(self, gate):
        config = AdmissionConfig(require_github_auth=True, require_google_auth=True)
        identity = Identity(id="a", auth_providers=frozenset({"github"}))

        result = gate.check(identity, config)
        assert result.missing_providers == ("google",)
        assert result.reasons == ["Google"]

    def test_satisfied(self, gate):
        config = AdmissionConfig(require_github_auth=True)
        identity = Identity(id="a", auth_providers=frozenset({"github"}))
        assert gate.check(identity, config).auth_required is False
