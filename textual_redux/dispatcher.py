"""The dispatcher - runs dispatched values through the handler chain."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Coroutine, Generic, Iterable, TypeVar

from .handlers import DispatchHandler, HandlerOutcome
from .state import State
from .types import ErrorSink

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Dispatcher(Generic[T]):
    """
    Feeds dispatched values through an ordered chain of handlers.

    Every handler is consulted for every value, in chain order. When a
    handler reports a new state, it is written to the state cell and
    becomes the snapshot the following handlers see. Handlers of one
    dispatch run strictly one after another; separate dispatches may
    interleave at await points.

    Example:
        ```python
        state = State(AppState())
        dispatcher = Dispatcher(
            state, [EffectHandler(), ReducerHandler(CounterReducer())]
        )

        await dispatcher.dispatch_async(Increment())  # wait for completion
        dispatcher.dispatch(Increment())              # fire and forget
        ```
    """

    __slots__ = ("_state", "_handlers", "_on_error", "_pending")

    def __init__(
        self,
        state: State[T],
        handlers: Iterable[DispatchHandler[T]],
        *,
        on_error: ErrorSink | None = None,
    ) -> None:
        """
        Create a dispatcher over a fixed handler chain.

        Args:
            state: The state cell to read from and write to.
            handlers: The handler chain, in the order they are consulted.
            on_error: Receives failures of fire-and-forget dispatches.
                Defaults to logging them.
        """
        self._state = state
        self._handlers: tuple[DispatchHandler[T], ...] = tuple(handlers)
        self._on_error: ErrorSink = on_error or _log_failure
        self._pending: set[asyncio.Task[None]] = set()

        for handler in self._handlers:
            handler.attach(self)

    @property
    def state(self) -> State[T]:
        """Get the state cell."""
        return self._state

    @property
    def handlers(self) -> tuple[DispatchHandler[T], ...]:
        """Get the handler chain."""
        return self._handlers

    @property
    def pending(self) -> int:
        """Number of fire-and-forget dispatches still running."""
        return len(self._pending)

    def get_state(self) -> T:
        """Get the current state."""
        return self._state.read()

    async def dispatch_async(self, value: Any) -> None:
        """
        Dispatch a value and wait until every handler has run.

        Raises:
            Exception: Whatever a reducer or effect raised. The state cell
                keeps the last successfully written value.
        """
        logger.debug("Dispatching %s", type(value).__name__)
        await self._traverse(value, self._state.read(), 0)

    def dispatch(self, value: Any) -> None:
        """
        Dispatch a value without waiting for it.

        Handlers that complete synchronously run before this returns. From
        the first handler that suspends, the rest of the chain runs as a
        task on the running event loop, or to completion right here when no
        loop is running. Failures are sent to the error sink, never raised.
        """
        logger.debug("Dispatching %s (fire and forget)", type(value).__name__)
        snapshot = self._state.read()
        try:
            for index, handler in enumerate(self._handlers):
                outcome = handler.invoke(snapshot, value)
                if inspect.isawaitable(outcome):
                    self._detach(
                        value, self._traverse(value, snapshot, index + 1, outcome)
                    )
                    return
                snapshot = self._apply(outcome, snapshot)
        except Exception as error:
            self._report(value, error)

    async def join(self) -> None:
        """Wait for all fire-and-forget dispatches, including new ones."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _traverse(
        self,
        value: Any,
        snapshot: T,
        start: int,
        suspended: Awaitable[HandlerOutcome[T]] | None = None,
    ) -> None:
        if suspended is not None:
            snapshot = self._apply(await suspended, snapshot)

        for handler in self._handlers[start:]:
            outcome = handler.invoke(snapshot, value)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            snapshot = self._apply(outcome, snapshot)

    def _apply(self, outcome: HandlerOutcome[T], snapshot: T) -> T:
        if outcome.has_update:
            self._state.write(outcome.state)
            return outcome.state
        return snapshot

    def _detach(self, value: Any, traversal: Coroutine[Any, Any, None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                asyncio.run(self._run_to_completion(traversal))
            except Exception as error:
                self._report(value, error)
            return

        task = loop.create_task(traversal)
        self._pending.add(task)
        task.add_done_callback(lambda done: self._finish(value, done))

    async def _run_to_completion(self, traversal: Coroutine[Any, Any, None]) -> None:
        # Effects may have fired their own dispatches on this temporary loop
        try:
            await traversal
        finally:
            await self.join()

    def _finish(self, value: Any, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._report(value, error)

    def _report(self, value: Any, error: BaseException) -> None:
        try:
            self._on_error(value, error)
        except Exception:
            logger.exception("Error sink failed while reporting %r", error)

    def __repr__(self) -> str:
        chain = ", ".join(repr(handler) for handler in self._handlers)
        return f"Dispatcher([{chain}])"


def _log_failure(value: Any, error: BaseException) -> None:
    logger.error(
        "Dispatch of %s failed: %s",
        type(value).__name__,
        error,
        exc_info=(type(error), error, error.__traceback__),
    )
