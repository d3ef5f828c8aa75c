"""Effects - asynchronous side effects that re-enter the dispatcher."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from .types import DispatcherProtocol, GetState

T = TypeVar("T")


def _is_async_callable(func: Any) -> bool:
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


_POSITIONAL = "positional"
_KEYWORD = "keyword"


def _state_mode(func: Callable[..., Any]) -> str | None:
    """
    How ``func`` takes the state accessor after the dispatcher.

    Returns ``"positional"`` for a second required positional parameter or
    ``*args``, ``"keyword"`` for a parameter named ``get_state`` that is
    not required positionally, and None when ``func`` takes the dispatcher
    only. Parameters with defaults keep their defaults.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return _POSITIONAL

    required = 0
    keyword = False
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return _POSITIONAL
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ) and param.default is inspect.Parameter.empty:
            required += 1
        if param.name == "get_state" and param.kind in (
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.KEYWORD_ONLY,
        ):
            keyword = True

    if required >= 2:
        return _POSITIONAL
    if keyword:
        return _KEYWORD
    return None


class Effect(Generic[T]):
    """
    A dispatchable asynchronous side effect.

    The wrapped coroutine function receives the dispatcher and, if it
    requires a second positional argument or declares ``get_state``, a
    function returning the current state. It changes state only by
    dispatching further values.

    Example:
        ```python
        class AppEffects:
            def increment_later(self, amount: int) -> Effect[AppState]:
                @effect
                async def run(dispatcher, get_state):
                    await asyncio.sleep(2)
                    await dispatcher.dispatch_async(Increment(amount))

                return run

        await store.dispatch_async(AppEffects().increment_later(5))
        ```
    """

    __slots__ = ("_func", "_state_mode")

    def __init__(self, func: Callable[..., Awaitable[None]]) -> None:
        if not _is_async_callable(func):
            raise TypeError(
                f"Effect expects an async callable, got {type(func).__name__}"
            )
        self._func = func
        self._state_mode = _state_mode(func)

    @property
    def name(self) -> str:
        """Get a readable name for the wrapped callable."""
        return getattr(self._func, "__qualname__", type(self._func).__qualname__)

    async def __call__(
        self, dispatcher: DispatcherProtocol[T], get_state: GetState[T]
    ) -> None:
        """Run the effect to completion."""
        if self._state_mode == _POSITIONAL:
            await self._func(dispatcher, get_state)
        elif self._state_mode == _KEYWORD:
            await self._func(dispatcher, get_state=get_state)
        else:
            await self._func(dispatcher)

    def __repr__(self) -> str:
        return f"Effect({self.name})"


def effect(func: Callable[..., Awaitable[None]]) -> Effect[Any]:
    """
    Decorator turning an async function into a dispatchable Effect.

    Args:
        func: ``async (dispatcher, get_state) -> None`` or
              ``async (dispatcher) -> None``.

    Example:
        ```python
        @effect
        async def load_items(dispatcher, get_state):
            items = await fetch_items(get_state().page)
            dispatcher.dispatch(ItemsLoaded(items))

        store.dispatch(load_items)
        ```
    """
    return Effect(func)
