"""Configuration Service - typed access to the runtime key-value settings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.admission.value_objects import AdmissionConfig
from ...domain.shared.constants import ConfigKeys
from ...domain.shared.exceptions import ValidationError
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ..interfaces.config_store import ConfigRepository

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})

# Lower bounds for integer keys; values are clamped to these when read.
_INTEGER_MINIMUMS = {
    ConfigKeys.COOLDOWN_DURATION: 0,
    ConfigKeys.SONGS_BEFORE_COOLDOWN: 1,
    ConfigKeys.MAX_SONG_DURATION: 0,
}
_MAX_COOLDOWN_SECONDS = 86400


def _parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _parse_int(raw: str | None, default: int, minimum: int) -> int:
    if raw is None:
        return default
    try:
        return max(minimum, int(raw.strip()))
    except ValueError:
        return default


class ConfigurationService:
    """Reads and writes the admin-editable runtime settings.

    Unset keys fall back to the ``AdmissionConfig`` defaults. Writing a key that
    changes the guest-facing queue projection calls ``on_queue_view_change``.
    """

    def __init__(
        self,
        *,
        config_repository: ConfigRepository,
        on_queue_view_change: Callable[[], None] | None = None,
    ) -> None:
        self._repo = config_repository
        self._on_queue_view_change = on_queue_view_change

    async def admission_config(self) -> AdmissionConfig:
        raw = await self._repo.all()
        defaults = AdmissionConfig()

        def flag(key: str, default: bool) -> bool:
            return _parse_bool(raw.get(key), default)

        def number(key: str, default: int) -> int:
            return _parse_int(raw.get(key), default, _INTEGER_MINIMUMS[key])

        return AdmissionConfig(
            queueing_enabled=flag(ConfigKeys.QUEUEING_ENABLED, defaults.queueing_enabled),
            prequeue_enabled=flag(ConfigKeys.PREQUEUE_ENABLED, defaults.prequeue_enabled),
            cooldown_enabled=flag(ConfigKeys.FINGERPRINTING_ENABLED, defaults.cooldown_enabled),
            cooldown_duration_seconds=min(
                number(ConfigKeys.COOLDOWN_DURATION, defaults.cooldown_duration_seconds),
                _MAX_COOLDOWN_SECONDS,
            ),
            songs_before_cooldown=number(
                ConfigKeys.SONGS_BEFORE_COOLDOWN, defaults.songs_before_cooldown
            ),
            voting_enabled=flag(ConfigKeys.VOTING_ENABLED, defaults.voting_enabled),
            voting_downvote_enabled=flag(
                ConfigKeys.VOTING_DOWNVOTE_ENABLED, defaults.voting_downvote_enabled
            ),
            voting_auto_promote=flag(ConfigKeys.VOTING_AUTO_PROMOTE, defaults.voting_auto_promote),
            ban_explicit=flag(ConfigKeys.BAN_EXPLICIT, defaults.ban_explicit),
            max_song_duration_seconds=number(
                ConfigKeys.MAX_SONG_DURATION, defaults.max_song_duration_seconds
            ),
            require_username=flag(ConfigKeys.REQUIRE_USERNAME, defaults.require_username),
            require_github_auth=flag(ConfigKeys.REQUIRE_GITHUB_AUTH, defaults.require_github_auth),
            require_google_auth=flag(ConfigKeys.REQUIRE_GOOGLE_AUTH, defaults.require_google_auth),
        )

    async def get_value(self, key: str) -> str | None:
        self._ensure_known(key)
        return await self._repo.get(key)

    async def set_value(self, key: str, value: str | bool | int) -> str:
        """Validate, normalize and store one setting.

        Returns:
            The stored string form of ``value``.

        Raises:
            ValidationError: Unknown key, or a value of the wrong shape.
        """
        self._ensure_known(key)
        normalized = self._normalize(key, value)
        await self._repo.set(key, normalized)
        logger.info(LogTemplates.CONFIG_UPDATED, key, normalized)

        if key in ConfigKeys.QUEUE_VIEW_KEYS and self._on_queue_view_change is not None:
            self._on_queue_view_change()
        return normalized

    async def all_values(self) -> dict[str, str]:
        return await self._repo.all()

    @staticmethod
    def _ensure_known(key: str) -> None:
        if key not in ConfigKeys.ALL:
            raise ValidationError(ErrorMessages.UNKNOWN_CONFIG_KEY.format(key=key), field="key")

    @staticmethod
    def _normalize(key: str, value: str | bool | int) -> str:
        invalid = ValidationError(
            ErrorMessages.INVALID_CONFIG_VALUE.format(key=key, value=value), field=key
        )

        if key in ConfigKeys.BOOLEAN_KEYS:
            if isinstance(value, bool):
                return "true" if value else "false"
            text = str(value).strip().lower()
            if text in _TRUE_VALUES:
                return "true"
            if text in _FALSE_VALUES:
                return "false"
            raise invalid

        if isinstance(value, bool):
            raise invalid
        try:
            number = int(str(value).strip())
        except ValueError:
            raise invalid from None
        if number < _INTEGER_MINIMUMS[key]:
            raise invalid
        if key == ConfigKeys.COOLDOWN_DURATION and number > _MAX_COOLDOWN_SECONDS:
            raise invalid
        return str(number)
