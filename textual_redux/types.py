"""Type definitions for textual-redux."""

from typing import Any, Awaitable, Protocol, TypeVar

# Type variables
T = TypeVar("T")
S_co = TypeVar("S_co", covariant=True)


class GetState(Protocol[S_co]):
    """Protocol for state read accessors handed to effects."""

    def __call__(self) -> S_co:
        """Return the current state."""
        ...


class DispatcherProtocol(Protocol[T]):
    """Protocol for the dispatch entry points exposed to callers and effects."""

    def dispatch(self, value: Any) -> None:
        """Dispatch a value without waiting for it to complete."""
        ...

    async def dispatch_async(self, value: Any) -> None:
        """Dispatch a value and wait for every handler to finish."""
        ...

    def get_state(self) -> T:
        """Return the current state."""
        ...


class EffectDelegate(Protocol[T]):
    """Protocol for asynchronous side effects."""

    def __call__(
        self, dispatcher: DispatcherProtocol[T], get_state: GetState[T]
    ) -> Awaitable[None]:
        """Run the effect, optionally dispatching further values."""
        ...


class StateCallback(Protocol[T]):
    """Protocol for state change callbacks."""

    def __call__(self, old_value: T, new_value: T) -> None:
        """Called when state changes."""
        ...


class ErrorSink(Protocol):
    """Protocol for receivers of fire-and-forget dispatch failures."""

    def __call__(self, value: Any, error: BaseException) -> None:
        """Report a failed dispatch of ``value``."""
        ...
