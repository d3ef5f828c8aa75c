"""Exceptions raised by textual-redux."""

from __future__ import annotations

from typing import Any


class DispatchError(Exception):
    """Base class for all textual-redux errors."""


class ReducerConfigurationError(DispatchError):
    """Raised when a reducer declares the same action type more than once."""

    def __init__(self, reducer: Any, action_type: type, contracts: list[str]) -> None:
        self.reducer = reducer
        self.action_type = action_type
        self.contracts = contracts
        super().__init__(
            f"Reducer {_describe(reducer)} declares {action_type.__name__} "
            f"through more than one contract: {', '.join(contracts)}. "
            f"Each action type must map to exactly one reducer method."
        )


class InvalidReducerResultError(DispatchError):
    """Raised when a reducer contract returns None instead of a new state."""

    def __init__(self, reducer: Any, action: Any) -> None:
        self.reducer = reducer
        self.action = action
        super().__init__(
            f"Reducer {_describe(reducer)} returned None for "
            f"{type(action).__name__}. Reducers must return the new state."
        )


class DispatcherNotAttachedError(DispatchError):
    """Raised when an effect runs through a handler with no dispatcher."""

    def __init__(self, handler: Any) -> None:
        self.handler = handler
        super().__init__(
            f"{type(handler).__name__} is not attached to a dispatcher. "
            f"Pass it to a Dispatcher before dispatching effects."
        )


def _describe(reducer: Any) -> str:
    name = getattr(reducer, "__qualname__", None)
    if name is None:
        name = type(reducer).__qualname__
    return f"'{name}'"
