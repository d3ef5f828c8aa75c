"""
Textual Redux - Redux-style dispatching for Textual applications.

A single state cell is updated only by dispatching values through an
ordered chain of handlers. Reducers declare, per action type, how the state
changes; effects run asynchronous work and dispatch further values.

Key Features:
- @reduces: Declare reducer contracts per action type
- @effect: Asynchronous side effects that re-enter the dispatcher
- create_store: State cell, handler chain and dispatcher in one object
- State: Cell that notifies watchers and Textual widgets on change

Example:
    ```python
    import asyncio
    from dataclasses import dataclass

    from pydantic import BaseModel
    from textual_redux import create_store, effect, reduces

    class AppState(BaseModel):
        count: int = 0

    @dataclass
    class Increment:
        amount: int = 1

    class CounterReducer:
        @reduces(Increment)
        def increment(self, state: AppState, action: Increment) -> AppState:
            return state.model_copy(update={"count": state.count + action.amount})

    @effect
    async def increment_later(dispatcher, get_state):
        await asyncio.sleep(1)
        await dispatcher.dispatch_async(Increment(5))

    async def main():
        store = create_store(AppState(), CounterReducer())
        await store.dispatch_async(Increment())
        await store.dispatch_async(increment_later)
        print(store.value)  # count=6
    ```
"""

# State cell
from .state import (
    State,
    StateChanged,
)

# Reducer contracts
from .contracts import (
    reduces,
    find_contract,
    declared_action_types,
    validate_contracts,
)

# Effects
from .effects import (
    Effect,
    effect,
)

# Type resolution
from .resolution import (
    Binding,
    NOT_APPLICABLE,
    TypeResolutionCache,
)

# Handlers
from .handlers import (
    HandlerOutcome,
    OutcomeKind,
    NOT_HANDLED,
    HANDLED,
    DispatchHandler,
    ReducerHandler,
    EffectHandler,
    ActionLogger,
)

# Dispatcher
from .dispatcher import (
    Dispatcher,
)

# Store (state + chain + dispatcher combined)
from .store import (
    Store,
    StoreOptions,
    create_store,
)

# Errors
from .errors import (
    DispatchError,
    ReducerConfigurationError,
    InvalidReducerResultError,
    DispatcherNotAttachedError,
)

# Types
from .types import (
    DispatcherProtocol,
    EffectDelegate,
    GetState,
    StateCallback,
    ErrorSink,
)

__version__ = "0.1.0a1"

__all__ = [
    # State
    "State",
    "StateChanged",
    # Contracts
    "reduces",
    "find_contract",
    "declared_action_types",
    "validate_contracts",
    # Effects
    "Effect",
    "effect",
    # Resolution
    "Binding",
    "NOT_APPLICABLE",
    "TypeResolutionCache",
    # Handlers
    "HandlerOutcome",
    "OutcomeKind",
    "NOT_HANDLED",
    "HANDLED",
    "DispatchHandler",
    "ReducerHandler",
    "EffectHandler",
    "ActionLogger",
    # Dispatcher
    "Dispatcher",
    # Store
    "Store",
    "StoreOptions",
    "create_store",
    # Errors
    "DispatchError",
    "ReducerConfigurationError",
    "InvalidReducerResultError",
    "DispatcherNotAttachedError",
    # Types
    "DispatcherProtocol",
    "EffectDelegate",
    "GetState",
    "StateCallback",
    "ErrorSink",
]
