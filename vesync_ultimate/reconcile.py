"""Delayed state refreshes after eventually consistent commands."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .const import DEFAULT_RECONCILE_DELAY

_LOGGER = logging.getLogger(__name__)

_MAX_ATTEMPTS = 2


class ReconciliationScheduler:
    """Fire-and-forget detail refreshes with a single follow-up attempt."""

    def __init__(self, *, delay: float = DEFAULT_RECONCILE_DELAY) -> None:
        """Initialise the scheduler with the default refresh ``delay``."""

        self._delay = delay
        self._pending_tasks: set[asyncio.Task[Any]] = set()

    @property
    def delay(self) -> float:
        """Return the default refresh delay in seconds."""

        return self._delay

    @property
    def pending(self) -> int:
        """Return the number of refreshes still in flight."""

        return len(self._pending_tasks)

    def schedule_refresh(self, device: Any, delay: float | None = None) -> None:
        """Refresh ``device`` after ``delay`` seconds without blocking.

        ``device`` must provide ``async_get_details()``. Failures are logged
        and never reach the caller.
        """

        wait = self._delay if delay is None else delay
        task = asyncio.get_running_loop().create_task(
            self._async_refresh(device.async_get_details, _describe(device), wait)
        )
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)

    async def async_wait_idle(self) -> None:
        """Wait until every scheduled refresh has finished."""

        while self._pending_tasks:
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)

    def cancel_all(self) -> None:
        """Cancel every pending refresh."""

        for task in list(self._pending_tasks):
            task.cancel()

    async def _async_refresh(
        self,
        refresh: Callable[[], Awaitable[bool]],
        name: str,
        delay: float,
    ) -> bool:
        for attempt in range(1, _MAX_ATTEMPTS + 1):
            await asyncio.sleep(delay)
            try:
                if await refresh():
                    _LOGGER.debug("Reconciled state for %s", name)
                    return True
                _LOGGER.warning(
                    "Reconciliation refresh for %s failed (attempt %s)", name, attempt
                )
            except Exception as err:
                _LOGGER.warning(
                    "Reconciliation refresh for %s raised (attempt %s): %s",
                    name,
                    attempt,
                    err,
                )
        _LOGGER.error("Giving up reconciling state for %s", name)
        return False


def _describe(device: Any) -> str:
    return str(getattr(device, "device_name", None) or getattr(device, "cid", device))
