"""Single-flight request queue.

Serializes a class of requests (portrait generation) so that at most one is in
flight at a time, in strict FIFO order, with a fixed spacing delay before each
call to stay under the service's requests-per-minute ceiling.

The queue holds a single chain reference: the task for the most recently
enqueued work. Each new task first waits for its predecessor to settle
(success or failure, regardless of outcome), then waits the spacing delay,
then runs its thunk. All mutation happens synchronously inside ``enqueue`` on
the event loop thread, so no lock is needed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator
import logging
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]

DEFAULT_SPACING_S = 5.0


class QueueTicket(Generic[T]):
    """One caller's claim on the single-flight lane.

    Awaiting the ticket yields that call's own result (or raises its own
    exception). The await is shielded: abandoning it does not abort a call that
    is already queued or in flight.

    Attributes:
        sequence: 1-based position in enqueue order.
    """

    def __init__(self, sequence: int, task: asyncio.Task[T]) -> None:
        self.sequence = sequence
        self._task = task

    def done(self) -> bool:
        """Whether the ticket has settled."""
        return self._task.done()

    async def result(self) -> T:
        """Wait for and return the ticket's result."""
        return await asyncio.shield(self._task)

    def __await__(self) -> Generator[Any, None, T]:
        return self.result().__await__()

    def __repr__(self) -> str:
        state = "settled" if self.done() else "pending"
        return f"QueueTicket(sequence={self.sequence}, {state})"


class SingleFlightQueue:
    """FIFO queue executing at most one thunk at a time.

    Instances are independent; inject one per lane rather than sharing
    module-level state.

    Args:
        spacing_s: Delay before each scheduled call, in seconds.
        sleep: Awaitable sleep used for spacing (injected in tests).
        name: Lane name used in log messages.
    """

    def __init__(
        self,
        *,
        spacing_s: float = DEFAULT_SPACING_S,
        sleep: Sleep = asyncio.sleep,
        name: str = "portrait",
    ) -> None:
        if spacing_s < 0:
            raise ValueError("spacing_s must be >= 0")
        self.spacing_s = spacing_s
        self.name = name
        self._sleep = sleep
        self._tail: asyncio.Task[Any] | None = None
        self._sequence = 0
        self._pending = 0

    @property
    def pending(self) -> int:
        """Number of tickets that have not settled yet."""
        return self._pending

    def enqueue(self, thunk: Callable[[], Awaitable[T]]) -> QueueTicket[T]:
        """Append a deferred call to the chain.

        Must be called from a running event loop.

        Args:
            thunk: Zero-argument callable returning the awaitable to run

        Returns:
            QueueTicket resolving to the thunk's result
        """
        loop = asyncio.get_running_loop()
        previous = self._tail
        self._sequence += 1
        sequence = self._sequence

        task = loop.create_task(self._run(sequence, previous, thunk))
        task.add_done_callback(self._on_settled)
        self._tail = task
        self._pending += 1

        logger.debug("%s queue: ticket %d enqueued (pending=%d)", self.name, sequence, self._pending)
        return QueueTicket(sequence, task)

    async def _run(
        self,
        sequence: int,
        previous: asyncio.Task[Any] | None,
        thunk: Callable[[], Awaitable[T]],
    ) -> T:
        if previous is not None and not previous.done():
            # wait() never raises the predecessor's exception
            await asyncio.wait([previous])
        await self._sleep(self.spacing_s)
        logger.debug("%s queue: ticket %d started", self.name, sequence)
        return await thunk()

    def _on_settled(self, task: asyncio.Task[Any]) -> None:
        self._pending -= 1
        if self._tail is task:
            self._tail = None
        if task.cancelled():
            logger.warning("%s queue: ticket cancelled", self.name)
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("%s queue: ticket failed: %s", self.name, exc)
