"""The state cell that the dispatcher reads from and writes to."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar
from weakref import WeakSet

from textual.message import Message
from textual.widget import Widget

T = TypeVar("T")


class StateChanged(Message, Generic[T]):
    """Message posted to subscribed widgets when the state is replaced."""

    def __init__(self, state: State[T], old_value: T, new_value: T) -> None:
        super().__init__()
        self.state = state
        self.old_value = old_value
        self.new_value = new_value


class State(Generic[T]):
    """
    The single cell holding the current application state.

    Values are replaced, never mutated in place. Each replacement calls the
    watcher callbacks with ``(old, new)`` and posts ``StateChanged`` to the
    subscribed Textual widgets.

    Example:
        ```python
        class CounterView(Static):
            def on_mount(self) -> None:
                self.app.store.state.subscribe(self)

            def on_state_changed(self, event: StateChanged[AppState]) -> None:
                self.update(f"Count: {event.new_value.count}")
        ```
    """

    __slots__ = ("_value", "_subscribers", "_watchers", "_name")

    def __init__(self, initial_value: T, *, name: str | None = None) -> None:
        self._value: T = initial_value
        self._subscribers: WeakSet[Widget] = WeakSet()
        self._watchers: list[Callable[[T, T], None]] = []
        self._name = name

    @property
    def name(self) -> str | None:
        """Name used in debugging output."""
        return self._name

    @property
    def value(self) -> T:
        """The current state (same as ``read()``)."""
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self.write(new_value)

    def read(self) -> T:
        """Return the current state."""
        return self._value

    def write(self, new_value: T) -> None:
        """
        Replace the current state.

        An equal replacement (``==``, which for Pydantic models covers the
        model type, every field and private attributes) keeps the existing
        value and notifies nobody.
        """
        old_value = self._value
        if new_value is old_value or new_value == old_value:
            return

        self._value = new_value
        self._notify(old_value, new_value)

    def _notify(self, old_value: T, new_value: T) -> None:
        # Copy so a watcher may unwatch itself
        for watcher in list(self._watchers):
            watcher(old_value, new_value)

        if self._subscribers:
            message = StateChanged(self, old_value, new_value)
            for widget in self._subscribers:
                widget.post_message(message)

    def subscribe(self, widget: Widget) -> None:
        """Post ``StateChanged`` to ``widget`` on every replacement."""
        self._subscribers.add(widget)

    def unsubscribe(self, widget: Widget) -> None:
        """Stop notifying ``widget``; unknown widgets are ignored."""
        self._subscribers.discard(widget)

    def watch(self, callback: Callable[[T, T], None]) -> Callable[[], None]:
        """
        Call ``callback(old, new)`` on every replacement.

        Returns:
            A function that removes the callback again.
        """
        self._watchers.append(callback)

        def unwatch() -> None:
            self._watchers.remove(callback)

        return unwatch

    def __repr__(self) -> str:
        name = f" name={self._name!r}" if self._name else ""
        return f"State({self._value!r}{name})"
