"""Store - wires the state cell, handler chain and dispatcher together."""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, TypeVar

from pydantic import BaseModel, ConfigDict

from .dispatcher import Dispatcher
from .handlers import ActionLogger, DispatchHandler, EffectHandler, ReducerHandler
from .state import State
from .types import ErrorSink

T = TypeVar("T")

logger = logging.getLogger(__name__)


class StoreOptions(BaseModel):
    """
    Options controlling how a Store assembles its handler chain.

    Attributes:
        name: Optional name for debugging.
        effects_first: Put the effect handler before the reducers (the
            default) rather than after the custom handlers.
        log_actions: Append an ActionLogger to the end of the chain.
        log_level: Level the ActionLogger logs at.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    effects_first: bool = True
    log_actions: bool = False
    log_level: int = logging.DEBUG


class Store(Generic[T]):
    """
    A state cell plus the dispatcher that updates it.

    The handler chain is, in order: the effect handler (when
    ``effects_first``), one ReducerHandler per reducer in registration
    order, the custom ``handlers``, the effect handler (when not
    ``effects_first``) and finally the ActionLogger (when ``log_actions``).

    Usage:
        ```python
        class AppState(BaseModel):
            count: int = 0

        @dataclass
        class Increment:
            amount: int = 1

        class CounterReducer:
            @reduces(Increment)
            def increment(self, state: AppState, action: Increment) -> AppState:
                return state.model_copy(update={"count": state.count + action.amount})

        store = create_store(AppState(), CounterReducer())
        await store.dispatch_async(Increment())
        store.value  # AppState(count=1)
        ```
    """

    __slots__ = ("_state", "_dispatcher", "_options")

    def __init__(
        self,
        initial: T,
        *reducers: Any,
        handlers: Iterable[DispatchHandler[T]] = (),
        options: StoreOptions | None = None,
        on_error: ErrorSink | None = None,
    ) -> None:
        """
        Build the store.

        Args:
            initial: Initial state value.
            *reducers: Reducer instances or decorated reducer functions.
            handlers: Extra handlers placed after the reducers.
            options: Chain assembly options.
            on_error: Receives failures of fire-and-forget dispatches.

        Raises:
            ReducerConfigurationError: If a reducer declares an action type
                through more than one contract.
        """
        self._options = options or StoreOptions()
        self._state: State[T] = State(initial, name=self._options.name)

        chain: list[DispatchHandler[T]] = []
        effect_handler: EffectHandler[T] = EffectHandler()
        if self._options.effects_first:
            chain.append(effect_handler)
        chain.extend(ReducerHandler(reducer) for reducer in reducers)
        chain.extend(handlers)
        if not self._options.effects_first:
            chain.append(effect_handler)
        if self._options.log_actions:
            chain.append(ActionLogger(level=self._options.log_level))

        self._dispatcher: Dispatcher[T] = Dispatcher(
            self._state, chain, on_error=on_error
        )
        logger.debug("Created store %s with chain %r", self.name, self._dispatcher)

    @property
    def name(self) -> str | None:
        """Get store name."""
        return self._options.name

    @property
    def options(self) -> StoreOptions:
        """Get the options the store was built with."""
        return self._options

    @property
    def state(self) -> State[T]:
        """Get the state cell (for subscriptions and watchers)."""
        return self._state

    @property
    def value(self) -> T:
        """Get the current state value."""
        return self._state.read()

    @property
    def dispatcher(self) -> Dispatcher[T]:
        """Get the dispatcher."""
        return self._dispatcher

    @property
    def handlers(self) -> tuple[DispatchHandler[T], ...]:
        """Get the handler chain."""
        return self._dispatcher.handlers

    def dispatch(self, value: Any) -> None:
        """Dispatch a value without waiting for it."""
        self._dispatcher.dispatch(value)

    async def dispatch_async(self, value: Any) -> None:
        """Dispatch a value and wait for every handler to finish."""
        await self._dispatcher.dispatch_async(value)

    async def join(self) -> None:
        """Wait for outstanding fire-and-forget dispatches."""
        await self._dispatcher.join()

    def __call__(self) -> T:
        """Shorthand to get current value."""
        return self._state.read()

    def __repr__(self) -> str:
        name = f" name={self.name!r}" if self.name else ""
        return f"Store({self._state.read()!r}{name})"


def create_store(
    initial: T,
    *reducers: Any,
    handlers: Iterable[DispatchHandler[T]] = (),
    name: str | None = None,
    options: StoreOptions | None = None,
    on_error: ErrorSink | None = None,
) -> Store[T]:
    """
    Create a new store.

    Args:
        initial: Initial state value.
        *reducers: Reducer instances or decorated reducer functions.
        handlers: Extra handlers placed after the reducers.
        name: Optional name for debugging, shortcut for ``options.name``.
        options: Chain assembly options.
        on_error: Receives failures of fire-and-forget dispatches.

    Returns:
        A Store instance.
    """
    if options is None:
        options = StoreOptions(name=name)
    elif name is not None:
        options = options.model_copy(update={"name": name})
    return Store(
        initial, *reducers, handlers=handlers, options=options, on_error=on_error
    )
