"""Handlers - the links of the dispatch chain."""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, TypeVar

from .contracts import declared_action_types, find_contract, validate_contracts
from .effects import Effect
from .errors import DispatcherNotAttachedError, InvalidReducerResultError
from .resolution import NOT_APPLICABLE, Binding, TypeResolutionCache

if TYPE_CHECKING:
    from .types import DispatcherProtocol

T = TypeVar("T")

logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    """What a handler did with a dispatched value."""

    NOT_HANDLED = "not_handled"
    HANDLED = "handled"
    UPDATED = "updated"


@dataclass(frozen=True, slots=True)
class HandlerOutcome(Generic[T]):
    """
    The result of invoking one handler with one dispatched value.

    Only an ``UPDATED`` outcome carries a state, and it is never None.
    Use ``NOT_HANDLED``, ``HANDLED`` or ``HandlerOutcome.updated(state)``.
    """

    kind: OutcomeKind
    state: T | None = None

    def __post_init__(self) -> None:
        if self.kind is OutcomeKind.UPDATED and self.state is None:
            raise ValueError("An updated outcome must carry the new state")
        if self.kind is not OutcomeKind.UPDATED and self.state is not None:
            raise ValueError(f"A {self.kind.value} outcome cannot carry a state")

    @classmethod
    def updated(cls, state: T) -> HandlerOutcome[T]:
        """Create an outcome replacing the state with ``state``."""
        return cls(OutcomeKind.UPDATED, state)

    @property
    def handled(self) -> bool:
        """Whether the handler acted on the value."""
        return self.kind is not OutcomeKind.NOT_HANDLED

    @property
    def has_update(self) -> bool:
        """Whether the outcome carries a new state."""
        return self.kind is OutcomeKind.UPDATED


NOT_HANDLED: HandlerOutcome[Any] = HandlerOutcome(OutcomeKind.NOT_HANDLED)
HANDLED: HandlerOutcome[Any] = HandlerOutcome(OutcomeKind.HANDLED)


class DispatchHandler(ABC, Generic[T]):
    """
    Base class for everything that can sit in the dispatch chain.

    ``invoke`` returns an outcome directly when the handler works
    synchronously, or an awaitable outcome when it has to suspend. The
    dispatcher awaits it before moving on to the next handler.
    """

    __slots__ = ()

    def attach(self, dispatcher: DispatcherProtocol[T]) -> None:
        """Called once by the dispatcher that owns this handler."""

    @abstractmethod
    def handles(self, value_type: type) -> bool:
        """Whether values of ``value_type`` are processed by this handler."""

    @abstractmethod
    def invoke(
        self, state: T, value: Any
    ) -> HandlerOutcome[T] | Awaitable[HandlerOutcome[T]]:
        """Process ``value`` against the current ``state``."""


class ReducerHandler(DispatchHandler[T]):
    """
    Adapts a reducer (an object or function with @reduces contracts).

    Each runtime type is matched against the reducer's contracts once; the
    resulting call path is cached for the lifetime of the handler.

    Example:
        ```python
        handler = ReducerHandler(CounterReducer())
        outcome = handler.invoke(AppState(count=0), Increment())
        outcome.state  # AppState(count=1)
        ```
    """

    __slots__ = ("_reducer", "_cache")

    def __init__(self, reducer: Any) -> None:
        """
        Wrap a reducer.

        Args:
            reducer: A reducer instance or a decorated reducer function.

        Raises:
            ReducerConfigurationError: If an action type is declared twice.
        """
        validate_contracts(reducer)
        if not declared_action_types(reducer):
            logger.warning("Reducer %r declares no @reduces contracts", reducer)

        self._reducer = reducer
        self._cache = TypeResolutionCache(self._discover, owner=repr(self))

    @property
    def reducer(self) -> Any:
        """Get the wrapped reducer."""
        return self._reducer

    @property
    def cache(self) -> TypeResolutionCache:
        """Get the type resolution cache (for inspection)."""
        return self._cache

    def _discover(self, value_type: type) -> Binding:
        invoker = find_contract(self._reducer, value_type)
        if invoker is None:
            return NOT_APPLICABLE
        return Binding(applicable=True, invoker=invoker)

    def handles(self, value_type: type) -> bool:
        return self._cache.resolve(value_type).applicable

    def invoke(self, state: T, value: Any) -> HandlerOutcome[T]:
        binding = self._cache.resolve(type(value))
        if not binding.applicable:
            return NOT_HANDLED

        new_state = binding.invoker(self._reducer, state, value)
        if new_state is None:
            raise InvalidReducerResultError(self._reducer, value)
        return HandlerOutcome.updated(new_state)

    def __repr__(self) -> str:
        reducer = getattr(self._reducer, "__qualname__", None)
        if reducer is None:
            reducer = type(self._reducer).__qualname__
        return f"ReducerHandler({reducer})"


async def _run_effect(
    value: Effect[Any], dispatcher: DispatcherProtocol[Any]
) -> None:
    await value(dispatcher, dispatcher.get_state)


class EffectHandler(DispatchHandler[T]):
    """
    Runs dispatched Effect values.

    The effect receives the owning dispatcher and a state accessor. The
    handler itself never reports a state update: effects change state by
    dispatching further values. Errors raised by the effect propagate.
    """

    __slots__ = ("_dispatcher", "_cache")

    def __init__(self) -> None:
        self._dispatcher: DispatcherProtocol[T] | None = None
        self._cache = TypeResolutionCache(self._discover, owner="EffectHandler")

    @property
    def cache(self) -> TypeResolutionCache:
        """Get the type resolution cache (for inspection)."""
        return self._cache

    def attach(self, dispatcher: DispatcherProtocol[T]) -> None:
        self._dispatcher = dispatcher

    def _discover(self, value_type: type) -> Binding:
        if issubclass(value_type, Effect):
            return Binding(applicable=True, invoker=_run_effect)
        return NOT_APPLICABLE

    def handles(self, value_type: type) -> bool:
        return self._cache.resolve(value_type).applicable

    def invoke(
        self, state: T, value: Any
    ) -> HandlerOutcome[T] | Awaitable[HandlerOutcome[T]]:
        binding = self._cache.resolve(type(value))
        if not binding.applicable:
            return NOT_HANDLED
        if self._dispatcher is None:
            raise DispatcherNotAttachedError(self)
        return self._run(binding.invoker, value, self._dispatcher)

    async def _run(
        self,
        invoker: Callable[..., Awaitable[None]],
        value: Effect[T],
        dispatcher: DispatcherProtocol[T],
    ) -> HandlerOutcome[T]:
        logger.debug("Running effect %s", value.name)
        await invoker(value, dispatcher)
        return HANDLED

    def __repr__(self) -> str:
        return "EffectHandler()"


class ActionLogger(DispatchHandler[Any]):
    """
    Observes every dispatched value and logs it with the current state.

    Applies to every value type but always reports ``NOT_HANDLED``, so it
    never updates state. Place it last in the chain to log the state
    reducers produced.
    """

    __slots__ = ("_logger", "_level")

    def __init__(
        self, *, logger_name: str = "textual_redux.actions", level: int = logging.DEBUG
    ) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def handles(self, value_type: type) -> bool:
        return True

    def invoke(self, state: Any, value: Any) -> HandlerOutcome[Any]:
        if self._logger.isEnabledFor(self._level):
            self._logger.log(
                self._level, "%s: %r -> %r", type(value).__name__, value, state
            )
        return NOT_HANDLED

    def __repr__(self) -> str:
        return f"ActionLogger(level={logging.getLevelName(self._level)})"
