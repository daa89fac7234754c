"""Bounded calls into the external music catalog."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from ...domain.shared.exceptions import UpstreamFailureError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 10.0


async def call_upstream(
    operation: str,
    awaitable: Awaitable[T],
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> T:
    """Await a catalog call, converting timeouts and failures to ``UpstreamFailureError``.

    Args:
        operation: Short name of the catalog operation, used in the error.
        awaitable: The pending catalog call.
        timeout: Upper bound in seconds.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except UpstreamFailureError:
        raise
    except TimeoutError as exc:
        raise UpstreamFailureError(
            operation, f"Upstream call '{operation}' timed out after {timeout:g}s"
        ) from exc
    except Exception as exc:
        logger.debug("Upstream call %s failed", operation, exc_info=True)
        raise UpstreamFailureError(operation, str(exc) or None) from exc
