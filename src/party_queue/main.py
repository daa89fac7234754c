#!/usr/bin/env python3
"""Admin console for the party queue.

Runs the moderator operations that need no music catalog against the
configured database and prints the result as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from party_queue.domain.shared.exceptions import DomainError
from party_queue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from party_queue.config.container import Container
    from party_queue.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logger.warning("Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH)
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            stream=sys.stderr,
        )

    logging.getLogger().setLevel(resolved_level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="party-queue", description="Moderate guest song requests."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("stats", help="Show device, attempt, prequeue and vote counts")
    sub.add_parser("devices", help="List every known device")
    device = sub.add_parser("device", help="Show one device with its recent attempts")
    device.add_argument("identity_id")

    sub.add_parser("pending", help="List prequeue entries awaiting approval")
    decline = sub.add_parser("decline", help="Decline a pending prequeue entry")
    decline.add_argument("entry_id")
    decline.add_argument("--by", dest="moderator", default=None)

    reset_cooldown = sub.add_parser("reset-cooldown", help="Clear one device's cooldown")
    reset_cooldown.add_argument("identity_id")
    sub.add_parser("reset-all-cooldowns", help="Clear every cooldown")

    for name in ("block", "unblock"):
        cmd = sub.add_parser(name, help=f"{name.capitalize()} a device")
        cmd.add_argument("identity_id")

    sub.add_parser("banned", help="List banned tracks")
    ban = sub.add_parser("ban", help="Ban a track")
    ban.add_argument("track_id")
    ban.add_argument("--artist", dest="artist_id", default=None)
    ban.add_argument("--reason", default=None)
    unban = sub.add_parser("unban", help="Lift a track ban")
    unban.add_argument("track_id")

    config_get = sub.add_parser("config-get", help="Show runtime config (one key or all)")
    config_get.add_argument("key", nargs="?")
    config_set = sub.add_parser("config-set", help="Change a runtime config key")
    config_set.add_argument("key")
    config_set.add_argument("value")

    reset_data = sub.add_parser("reset-data", help="Wipe all guest data; config is kept")
    reset_data.add_argument("--yes", action="store_true", help="Confirm the wipe")

    return parser


async def run_command(args: argparse.Namespace, container: Container) -> Any:
    """Dispatch one parsed command and return its JSON-ready result."""
    admin = container.admin_service
    config = container.configuration_service

    match args.command:
        case "stats":
            return await admin.stats()
        case "devices":
            return await admin.list_devices()
        case "device":
            return await admin.get_device(args.identity_id)
        case "pending":
            return await container.prequeue_workflow.list_pending()
        case "decline":
            moderator = args.moderator or container.settings.auth.moderator_name
            return await container.prequeue_workflow.decline(args.entry_id, moderator)
        case "reset-cooldown":
            await admin.reset_cooldown(args.identity_id)
            return {"reset": args.identity_id}
        case "reset-all-cooldowns":
            return {"reset": await admin.reset_all_cooldowns()}
        case "block":
            await admin.block(args.identity_id)
            return {"blocked": args.identity_id}
        case "unblock":
            await admin.unblock(args.identity_id)
            return {"unblocked": args.identity_id}
        case "banned":
            return await admin.list_banned_tracks()
        case "ban":
            return await admin.ban_track(args.track_id, args.artist_id, args.reason)
        case "unban":
            await admin.unban_track(args.track_id)
            return {"unbanned": args.track_id}
        case "config-get":
            if args.key is None:
                return await config.all_values()
            return {args.key: await config.get_value(args.key)}
        case "config-set":
            return {args.key: await config.set_value(args.key, args.value)}
        case "reset-data":
            if not args.yes:
                raise DomainError(
                    ErrorMessages.RESET_CONFIRMATION_REQUIRED, code="CONFIRMATION_REQUIRED"
                )
            return {"removed": await admin.reset_all_data()}
    raise ValueError(f"Unknown command: {args.command}")


def _jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [_jsonable(item) for item in result]
    if isinstance(result, dict):
        return {key: _jsonable(value) for key, value in result.items()}
    return result


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    from party_queue.config.container import create_container

    container = create_container(settings)
    await container.initialize()
    try:
        result = await run_command(args, container)
    except DomainError as e:
        logger.warning(LogTemplates.COMMAND_FAILED, args.command, e.message)
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1
    finally:
        await container.shutdown()

    print(json.dumps(_jsonable(result), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    from party_queue.config.settings import get_settings

    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level)
    logger.debug(LogTemplates.APP_STARTING.format(environment=settings.environment))

    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
