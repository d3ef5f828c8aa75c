"""Reducer contracts declared with the @reduces decorator."""

from __future__ import annotations

import inspect
from typing import Any, Callable, TypeVar

from .errors import ReducerConfigurationError

F = TypeVar("F", bound=Callable[..., Any])

# Attribute name to store contract metadata on reducer methods
CONTRACT_ATTR = "__textual_redux_contracts__"


class ContractRegistration:
    """Stores the action types a reducer method is declared for."""

    __slots__ = ("action_types",)

    def __init__(self) -> None:
        self.action_types: list[type] = []

    def add(self, action_type: type) -> None:
        if action_type not in self.action_types:
            self.action_types.append(action_type)


def get_contract_registration(func: Any) -> ContractRegistration | None:
    """Get contract registration from a function, if any."""
    if isinstance(func, (staticmethod, classmethod)):
        func = func.__func__
    return getattr(func, CONTRACT_ATTR, None)


def reduces(*action_types: type) -> Callable[[F], F]:
    """
    Decorator declaring a reducer contract ``(state, action) -> new_state``.

    Args:
        *action_types: The action types the decorated callable reduces.

    Example:
        ```python
        class CounterReducer:
            @reduces(Increment)
            def increment(self, state: AppState, action: Increment) -> AppState:
                return state.model_copy(update={"count": state.count + action.amount})

            @reduces(Decrement)
            def decrement(self, state: AppState, action: Decrement) -> AppState:
                return state.model_copy(update={"count": state.count - action.amount})

        # Plain functions work too
        @reduces(Reset)
        def reset(state: AppState, action: Reset) -> AppState:
            return AppState()
        ```
    """
    if not action_types:
        raise ValueError("@reduces requires at least one action type")
    for action_type in action_types:
        if not isinstance(action_type, type):
            raise TypeError(f"@reduces expects types, got {action_type!r}")

    def decorator(func: F) -> F:
        target = func
        if isinstance(target, (staticmethod, classmethod)):
            target = target.__func__

        registration = get_contract_registration(target)
        if registration is None:
            registration = ContractRegistration()
            setattr(target, CONTRACT_ATTR, registration)

        for action_type in action_types:
            registration.add(action_type)

        return func

    return decorator


def _iter_contracts(reducer: Any) -> list[tuple[str, type, Callable[..., Any]]]:
    """
    List ``(name, action_type, invoker)`` for every contract on a reducer.

    The invoker always takes ``(reducer, state, action)``.
    """
    contracts: list[tuple[str, type, Callable[..., Any]]] = []

    # A decorated function used directly as a reducer
    if inspect.isfunction(reducer):
        registration = get_contract_registration(reducer)
        if registration is not None:
            for action_type in registration.action_types:
                contracts.append(
                    (reducer.__name__, action_type, lambda r, state, action: r(state, action))
                )
        return contracts

    reducer_type = type(reducer)
    for attr_name in dir(reducer_type):
        if attr_name.startswith("__"):
            continue

        class_attr = inspect.getattr_static(reducer_type, attr_name, None)
        registration = get_contract_registration(class_attr)
        if registration is None:
            continue

        invoker = _make_invoker(class_attr, attr_name)
        for action_type in registration.action_types:
            contracts.append((attr_name, action_type, invoker))

    return contracts


def _make_invoker(class_attr: Any, attr_name: str) -> Callable[..., Any]:
    if isinstance(class_attr, staticmethod):
        func = class_attr.__func__
        return lambda reducer, state, action: func(state, action)
    if isinstance(class_attr, classmethod):
        func = class_attr.__func__
        return lambda reducer, state, action: func(type(reducer), state, action)
    if inspect.isfunction(class_attr):
        return class_attr
    # Anything else (descriptors, callable objects): go through the instance
    return lambda reducer, state, action: getattr(reducer, attr_name)(state, action)


def find_contract(reducer: Any, action_type: type) -> Callable[..., Any] | None:
    """
    Find the invoker for the contract ``reducer`` declares for ``action_type``.

    Matching is on the exact type: a contract for a base class does not
    apply to its subclasses.

    Args:
        reducer: The reducer instance or decorated function.
        action_type: The runtime type of a dispatched value.

    Returns:
        A callable ``(reducer, state, action) -> new_state``, or None.

    Raises:
        ReducerConfigurationError: If more than one contract matches.
    """
    matches = [
        (name, invoker)
        for name, declared, invoker in _iter_contracts(reducer)
        if declared is action_type
    ]
    if not matches:
        return None
    if len(matches) > 1:
        raise ReducerConfigurationError(
            reducer, action_type, [name for name, _ in matches]
        )
    return matches[0][1]


def declared_action_types(reducer: Any) -> list[type]:
    """List the action types a reducer declares, in declaration scan order."""
    seen: list[type] = []
    for _, action_type, _ in _iter_contracts(reducer):
        if action_type not in seen:
            seen.append(action_type)
    return seen


def validate_contracts(reducer: Any) -> None:
    """
    Check that each action type maps to exactly one contract on ``reducer``.

    Raises:
        ReducerConfigurationError: On the first duplicated action type.
    """
    by_type: dict[type, list[str]] = {}
    for name, action_type, _ in _iter_contracts(reducer):
        by_type.setdefault(action_type, []).append(name)

    for action_type, names in by_type.items():
        if len(names) > 1:
            raise ReducerConfigurationError(reducer, action_type, names)
