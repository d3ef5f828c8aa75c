"""
Counter Example - A Textual app driven by a store.

The app subscribes to the store's state cell and re-renders on every
StateChanged message. Buttons dispatch actions; the delayed button
dispatches an effect that increments after two seconds.
"""

import asyncio
from dataclasses import dataclass

from pydantic import BaseModel
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input, Static

from textual_redux import Effect, StateChanged, create_store, effect, reduces


class AppState(BaseModel):
    """State for the counter."""

    count: int = 0
    pending: int = 0


@dataclass
class Increment:
    amount: int = 1


@dataclass
class Decrement:
    amount: int = 1


@dataclass
class Scheduled:
    """An increment was scheduled by an effect."""


class CounterReducer:
    @reduces(Increment)
    def increment(self, state: AppState, action: Increment) -> AppState:
        return state.model_copy(
            update={
                "count": state.count + action.amount,
                "pending": max(state.pending - 1, 0),
            }
        )

    @reduces(Decrement)
    def decrement(self, state: AppState, action: Decrement) -> AppState:
        return state.model_copy(update={"count": state.count - action.amount})

    @reduces(Scheduled)
    def scheduled(self, state: AppState, action: Scheduled) -> AppState:
        return state.model_copy(update={"pending": state.pending + 1})


class AppEffects:
    def increment_async(self, amount: int) -> Effect[AppState]:
        @effect
        async def run(dispatcher, get_state):
            dispatcher.dispatch(Scheduled())
            await asyncio.sleep(2)
            dispatcher.dispatch(Increment(amount))

        return run


class Counter(App):
    """Counter app dispatching actions and effects."""

    CSS = """
    Screen {
        align: center middle;
    }

    #counter {
        width: 100%;
        height: 3;
        text-align: center;
        text-style: bold;
        background: $primary;
        color: $text;
    }

    Horizontal {
        width: 100%;
        height: auto;
        align: center middle;
    }

    Button {
        margin: 1;
    }

    Input {
        width: 12;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.store = create_store(AppState(), CounterReducer(), name="counter")
        self.effects = AppEffects()

    def compose(self) -> ComposeResult:
        yield Static("Count: 0", id="counter")
        with Horizontal():
            yield Input(value="1", id="amount", type="integer")
            yield Button("+", id="inc", variant="success")
            yield Button("-", id="dec", variant="error")
            yield Button("+ in 2s", id="later")

    def on_mount(self) -> None:
        self.store.state.subscribe(self)
        self._update_display()

    @property
    def amount(self) -> int:
        try:
            return int(self.query_one("#amount", Input).value)
        except ValueError:
            return 1

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "inc":
                self.store.dispatch(Increment(self.amount))
            case "dec":
                self.store.dispatch(Decrement(self.amount))
            case "later":
                self.store.dispatch(self.effects.increment_async(self.amount))

    def on_state_changed(self, event: StateChanged[AppState]) -> None:
        self._update_display()

    def _update_display(self) -> None:
        state = self.store.value
        pending = f" ({state.pending} pending)" if state.pending else ""
        self.query_one("#counter", Static).update(f"Count: {state.count}{pending}")


if __name__ == "__main__":
    Counter().run()
