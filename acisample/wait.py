"""Readiness polling.

Fixed-interval polling used to wait for a container group to show up in
its resource group and then to reach the ``Running`` state. There is no
backoff or jitter. Every retry sleeps the same interval.

By default a poll has no bound and runs until the resource is ready.
Callers that cannot afford that pass ``timeout``, ``max_attempts`` or a
``cancel`` event.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Collection
from typing import TypeAlias, TypeVar

from acisample.core.exceptions import PollCancelledError, PollTimeoutError, ProvisioningError
from acisample.model import RUNNING, ContainerGroupHandle
from acisample.observability.logger import logger

T = TypeVar("T")

DEFAULT_INTERVAL = 1.0

log = logger.bind(component="poller")

Sleep: TypeAlias = Callable[[float], Awaitable[None]]
RetryPredicate: TypeAlias = Callable[[Exception], bool]


async def wait_for_ready(
    poll_fn: Callable[[], Awaitable[T | None]],
    ready_check: Callable[[T], bool],
    *,
    terminal_check: Callable[[T], bool] | None = None,
    timeout: float | None = None,
    max_attempts: int | None = None,
    interval: float = DEFAULT_INTERVAL,
    cancel: asyncio.Event | None = None,
    retry_on: RetryPredicate | None = None,
    on_attempt: Callable[[int, T | None], None] | None = None,
    sleep: Sleep = asyncio.sleep,
    clock: Callable[[], float] | None = None,
    description: str = "resource",
) -> T:
    """Wait until poll_fn returns something that passes ready_check.

    Args:
        poll_fn: Async lookup or refresh. ``None`` means the resource is
            not visible yet.
        ready_check: Returns True when the resource is ready.
        terminal_check: Returns True if the resource reached a state it
            will never leave (e.g. failed, stopped).
        timeout: Maximum time to wait in seconds. None waits forever.
        max_attempts: Maximum number of poll_fn calls. None means no limit.
        interval: Fixed time between polls in seconds.
        cancel: Event that aborts the wait once set. Checked before every
            attempt; setting it also cuts the current sleep short.
        retry_on: Predicate for exceptions raised by poll_fn that should
            count as "not ready yet". Anything else propagates.
        on_attempt: Called with the attempt number and result after each poll.
        sleep: Sleep function, injectable for tests.
        clock: Monotonic clock for the timeout. Defaults to the loop clock.
        description: Description for log and error messages.

    Returns:
        The first result that passed ready_check.

    Raises:
        PollTimeoutError: If timeout or max_attempts is exhausted.
        PollCancelledError: If cancel is set.
        ProvisioningError: If the resource reaches a terminal state.
    """
    if interval < 0:
        raise ValueError(f"interval must be >= 0, got {interval}")
    if max_attempts is not None and max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    now = clock or asyncio.get_running_loop().time
    start = now()
    attempt = 0
    last: T | None = None

    while True:
        if cancel is not None and cancel.is_set():
            raise PollCancelledError(description, attempt)

        attempt += 1
        try:
            result = await poll_fn()
        except Exception as e:
            if retry_on is None or not retry_on(e):
                raise
            log.warning(
                "Polling {what} failed ({err}: {msg}), retrying in {interval:.1f}s",
                what=description, err=type(e).__name__, msg=e, interval=interval,
            )
            result = None

        last = result
        if on_attempt is not None:
            on_attempt(attempt, result)

        if result is not None:
            if ready_check(result):
                log.info("{what} ready after {n} attempts", what=description, n=attempt)
                return result

            if terminal_check is not None and terminal_check(result):
                raise ProvisioningError(f"{description} reached terminal state: {result}")

        log.debug("{what} not ready (attempt {n})", what=description, n=attempt)

        if max_attempts is not None and attempt >= max_attempts:
            raise PollTimeoutError(description, attempt, last)

        if timeout is not None and now() - start > timeout:
            raise PollTimeoutError(description, attempt, last)

        await _pause(sleep, interval, cancel)


async def _pause(sleep: Sleep, interval: float, cancel: asyncio.Event | None) -> None:
    """Sleep for ``interval``, returning early once ``cancel`` is set."""
    if cancel is None:
        await sleep(interval)
        return

    sleeper = asyncio.ensure_future(sleep(interval))
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        sleeper.cancel()
        waiter.cancel()
    if sleeper.done() and not sleeper.cancelled():
        sleeper.result()


async def wait_for_existence(
    find: Callable[[], Awaitable[T | None]],
    **kwargs,
) -> T:
    """Wait until ``find`` returns anything other than None."""
    return await wait_for_ready(find, lambda _: True, **kwargs)


async def wait_for_state(
    refresh: Callable[[], Awaitable[ContainerGroupHandle | None]],
    states: Collection[str] = (RUNNING,),
    **kwargs,
) -> ContainerGroupHandle:
    """Wait until a container group's state is one of ``states``.

    Groups that report a terminal state (failed or stopped) raise
    ProvisioningError unless that state is itself one of ``states``.
    """
    expected = frozenset(states)
    kwargs.setdefault(
        "terminal_check", lambda h: h.is_terminal and h.state not in expected,
    )
    return await wait_for_ready(refresh, lambda h: h.state in expected, **kwargs)
