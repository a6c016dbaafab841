"""
Refresh Single-Flight

Collapses a burst of "access token rejected" responses into one refresh
call and fans the outcome out to every request that was waiting on it.

One coordinator belongs to one event loop. The check-and-set of the
in-flight state happens without an await in between, so no other task can
observe "nothing in flight" while a refresh is being started.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import httpx

logger = logging.getLogger(__name__)

RETRIED_EXTENSION = "session_refresh_retried"


class ReauthenticationRequired(Exception):
    """The session cannot be refreshed; the user has to log in again."""


class RefreshSingleFlight:
    """
    Single-flight coordinator for session refreshes.

    Every caller of on_unauthorized() parks a waiter in the queue. The
    first caller that finds no refresh in flight starts one; the others only
    enqueue. When the refresh settles, the whole queue is resolved (or
    rejected) before the in-flight flag is cleared, then each caller replays
    its own request once.

    Args:
        refresh: Coroutine function performing the refresh call; it raises
            on failure
        wait_timeout: Upper bound in seconds on how long a caller waits for
            the in-flight refresh; None waits indefinitely
        on_reauthenticate: Called once per failed refresh (e.g. to send the
            user back to the login page)
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[None]],
        wait_timeout: Optional[float] = None,
        on_reauthenticate: Optional[Callable[[BaseException], None]] = None,
    ):
        self._refresh = refresh
        self._wait_timeout = wait_timeout
        self._on_reauthenticate = on_reauthenticate
        self._in_flight = False
        self._queue: List[asyncio.Future] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def on_unauthorized(
        self,
        request: httpx.Request,
        replay: Callable[[httpx.Request], Awaitable[httpx.Response]],
        response: Optional[httpx.Response] = None,
    ) -> httpx.Response:
        """
        Handle a 401 for request and return the replayed response.

        A request that was already replayed once is never queued again: its
        401 response is returned as-is so a dead refresh token cannot loop.

        Raises:
            ReauthenticationRequired: the refresh failed or the wait timed out
        """
        if request.extensions.get(RETRIED_EXTENSION):
            if response is not None:
                return response
            raise ReauthenticationRequired("Request was already retried after a refresh")
        request.extensions[RETRIED_EXTENSION] = True

        waiter = asyncio.get_running_loop().create_future()
        self._queue.append(waiter)

        if not self._in_flight:
            self._in_flight = True
            self._task = asyncio.ensure_future(self._run_refresh())
        else:
            logger.debug(f"Refresh in flight, queued request ({len(self._queue)} waiting)")

        try:
            await asyncio.wait_for(waiter, timeout=self._wait_timeout)
        except asyncio.TimeoutError:
            logger.warning("Timed out waiting for session refresh")
            raise ReauthenticationRequired("Timed out waiting for session refresh")

        return await replay(request)

    async def _run_refresh(self) -> None:
        try:
            await self._refresh()
        except asyncio.CancelledError as exc:
            self._drain(exc)
            raise
        except Exception as exc:
            logger.warning(f"Session refresh failed, {len(self._queue)} request(s) rejected: {exc!r}")
            self._drain(exc)
            if self._on_reauthenticate is not None:
                self._on_reauthenticate(exc)
        else:
            logger.info(f"Session refreshed, replaying {len(self._queue)} request(s)")
            self._drain(None)

    def _drain(self, error: Optional[BaseException]) -> None:
        """Settle every queued waiter, then clear the in-flight flag"""
        queue, self._queue = self._queue, []
        for waiter in queue:
            # Abandoned callers cancelled their waiter; skip them
            if waiter.done():
                continue
            if error is None:
                waiter.set_result(None)
            else:
                failure = ReauthenticationRequired("Session refresh failed")
                failure.__cause__ = error
                waiter.set_exception(failure)
        self._in_flight = False
        self._task = None
