"""
Console Example - Dispatching actions and effects without a UI.

Registers a reducer with two contracts and an effect factory, then
dispatches from plain synchronous code.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from textual_redux import Effect, create_store, effect, reduces


# --- State ---


class AppState(BaseModel):
    """Application state."""

    count: int = 0


# --- Actions ---


@dataclass
class Increment:
    pass


@dataclass
class Decrement:
    pass


# --- Reducer ---


class Reducers:
    @reduces(Increment)
    def increment(self, state: AppState, action: Increment) -> AppState:
        return state.model_copy(update={"count": state.count + 1})

    @reduces(Decrement)
    def decrement(self, state: AppState, action: Decrement) -> AppState:
        return state.model_copy(update={"count": state.count - 1})


# --- Effects ---


class Effects:
    def increment_later(self) -> Effect[AppState]:
        @effect
        async def run(dispatcher, get_state):
            await asyncio.sleep(2)
            dispatcher.dispatch(Increment())

        return run


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    store = create_store(AppState(), Reducers(), name="app")
    store.state.watch(
        lambda old, new: print(
            f"{datetime.now():%Y-%m-%d %H:%M:%S}: Status was changed {new!r}."
        )
    )

    store.dispatch(Increment())
    store.dispatch(Increment())
    store.dispatch(Decrement())

    # No event loop is running here, so this returns once the effect is done
    store.dispatch(Effects().increment_later())


if __name__ == "__main__":
    main()
